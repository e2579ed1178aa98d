"""Shared service-layer helper functions."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from profsplit.domain.registry import OrderTypeContext

if TYPE_CHECKING:
    from profsplit.infrastructure.repositories import OrderTypeRow


def now_iso() -> str:
    """Current UTC time as standard ISO 8601 (for mode-change audit)."""
    return datetime.now(UTC).isoformat()


def chunked[T](items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of *items*, each at most *size* long.

    Examples:
        >>> list(chunked([1, 2, 3, 4, 5], 2))
        [[1, 2], [3, 4], [5]]
        >>> list(chunked([], 3))
        []
    """
    if size < 1:
        msg = f"chunk size must be positive, got {size}"
        raise ValueError(msg)
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def order_type_context(row: OrderTypeRow) -> OrderTypeContext:
    """Build the explicit mode context for a stored order type."""
    return OrderTypeContext(id=row.id, label=row.label, use_split_profiles=row.use_split_profiles)
