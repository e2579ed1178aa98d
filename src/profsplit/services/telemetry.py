"""Run telemetry for the verbose CLI mode.

Each ``@traced`` service call opens a root span. Chunks and per-order
planner passes open child spans under it with :func:`trace_span`. Counters
recorded on a child (``orders``, ``writes``) are summed into every
ancestor, so the root of a migration reports the run's totals.

With ``--verbose`` off every entry point returns after one ContextVar read.
"""

from __future__ import annotations

import functools
import time
from collections import Counter
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from profsplit.services.result import ServiceResult

_enabled: ContextVar[bool] = ContextVar("profsplit_telemetry", default=False)
_active: ContextVar[Span | None] = ContextVar("profsplit_span", default=None)

_P = ParamSpec("_P")
_R = TypeVar("_R")


@dataclass
class Span:
    """A timed section of a service call."""

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    counters: Counter[str] = field(default_factory=Counter)
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None

    @property
    def duration_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    def end(self) -> None:
        self.finished = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        """Attach a value to this span only."""
        self.annotations[key] = value

    def count(self, key: str, amount: int = 1) -> None:
        """Add *amount* to *key* here and on every enclosing span."""
        span: Span | None = self
        while span is not None:
            span.counters[key] += amount
            span = span.parent

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.counters:
            data["counters"] = dict(self.counters)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Open a child span under the active one.

    Yields None when telemetry is off or no ``@traced`` call is running,
    so callers guard with ``if span:``.
    """
    parent = _active.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    span = Span(name=name, parent=parent)
    parent.children.append(span)
    token = _active.set(span)
    try:
        yield span
    finally:
        span.end()
        _active.reset(token)


def _finish(span: Span, result: Any) -> None:
    """Record the outcome of a traced call on its root span and log it."""
    fields: dict[str, Any] = {"duration_ms": round(span.duration_ms, 2), **span.counters}
    if isinstance(result, ServiceResult):
        span.annotate("op", result.op)
        fields.update(op=result.op, ok=result.ok)
        if result.error is not None:
            span.annotate("error", result.error.code)
            fields["error"] = result.error.code
    elif isinstance(result, BaseException):
        span.annotate("error", type(result).__name__)
        fields.update(ok=False, error=type(result).__name__)
    structlog.get_logger("profsplit.telemetry").debug(span.name, **fields)


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Run a service method under a root span.

    A returned :class:`ServiceResult` gets the span tree under
    ``meta["telemetry"]``.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        span = Span(name=func.__qualname__)
        token = _active.set(span)
        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            span.end()
            _finish(span, exc)
            raise
        finally:
            _active.reset(token)

        span.end()
        _finish(span, result)
        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": span.to_dict()}
            result = result.model_copy(update={"meta": meta})  # type: ignore[assignment]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Turn span collection on for this context (``--verbose``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    """The innermost open span, or None when telemetry is off."""
    return _active.get() if _enabled.get() else None
