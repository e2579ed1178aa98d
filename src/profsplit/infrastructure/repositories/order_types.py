"""Order type persistence, including the split-profile mode flag."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select, update

from profsplit.infrastructure.database.schema import order_types

if TYPE_CHECKING:
    from sqlalchemy import Connection


@dataclass(frozen=True)
class OrderTypeRow:
    """One stored order type."""

    id: str
    label: str
    use_split_profiles: bool
    split_enabled_at: str | None = None


def _row(r: Any) -> OrderTypeRow:
    return OrderTypeRow(
        id=str(r.id),
        label=str(r.label),
        use_split_profiles=bool(r.use_split_profiles),
        split_enabled_at=r.split_enabled_at,
    )


class OrderTypeRepository:
    """SQL for the ``order_types`` table."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, type_id: str) -> OrderTypeRow | None:
        r = self._conn.execute(select(order_types).where(order_types.c.id == type_id)).first()
        return _row(r) if r is not None else None

    def list_all(self) -> list[OrderTypeRow]:
        return [_row(r) for r in self._conn.execute(select(order_types).order_by(order_types.c.id))]

    def create(self, type_id: str, label: str) -> None:
        self._conn.execute(insert(order_types).values(id=type_id, label=label))

    def set_split_profiles(self, type_id: str, enabled_at: str) -> bool:
        """Persist the split-profile flag.

        Only a type still in single mode is updated. Returns ``False`` when
        the row was missing or already split.
        """
        result = self._conn.execute(
            update(order_types)
            .where(order_types.c.id == type_id, order_types.c.use_split_profiles == 0)
            .values(use_split_profiles=1, split_enabled_at=enabled_at)
        )
        return result.rowcount == 1
