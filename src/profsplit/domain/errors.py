"""Error taxonomy for provisioning, planning, and reference resolution.

Every error carries a machine-readable ``code`` that ends up in
``ServiceError.code`` or in a failed-order entry of the migration report.
"""

from __future__ import annotations

from typing import Any


class ProfsplitError(Exception):
    """Base class for errors raised by the migration core."""

    default_code = "ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail = detail or {}


class ProvisionError(ProfsplitError):
    """Category, field, or display cloning failed. Fatal for the whole run."""

    default_code = "PROVISION_FAILED"


class PlanError(ProfsplitError):
    """An order's billing or shipment records failed to load or save."""

    default_code = "PLAN_FAILED"


class ResolverError(ProfsplitError):
    """The dataset-wide repoint for one fan-out event failed."""

    default_code = "RESOLVER_FAILED"


class ModeTransitionError(ProfsplitError):
    """An order type was asked to make a transition its lifecycle forbids."""

    default_code = "INVALID_TRANSITION"


class LockHeldError(ProfsplitError):
    """Another run holds the single-flight run lock."""

    default_code = "LOCKED"

    def __init__(self, name: str, holder: str | None, acquired: str | None) -> None:
        super().__init__(
            f"Run lock {name!r} is held by {holder or 'unknown'} since {acquired}",
            detail={"lock": name, "holder": holder, "acquired": acquired},
        )
        self.name = name
        self.holder = holder
        self.acquired = acquired
