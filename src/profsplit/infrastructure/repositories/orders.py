"""Order and shipment persistence, including dataset-wide reference scans."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select, update

from profsplit.infrastructure.database.schema import orders, shipments

if TYPE_CHECKING:
    from sqlalchemy import Connection


@dataclass(frozen=True)
class OrderRow:
    """One stored order."""

    id: int
    type: str
    billing_profile_id: int | None


@dataclass(frozen=True)
class ShipmentRow:
    """One stored shipment."""

    id: int
    order_id: int
    shipping_profile_id: int | None


def _order(row: Any) -> OrderRow:
    return OrderRow(id=int(row.id), type=str(row.type), billing_profile_id=row.billing_profile_id)


def _shipment(row: Any) -> ShipmentRow:
    return ShipmentRow(
        id=int(row.id),
        order_id=int(row.order_id),
        shipping_profile_id=row.shipping_profile_id,
    )


class OrderRepository:
    """SQL for the ``orders`` and ``shipments`` tables."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def get(self, order_id: int) -> OrderRow | None:
        row = self._conn.execute(select(orders).where(orders.c.id == order_id)).first()
        if row is None:
            return None
        return _order(row)

    def create(self, order_type: str, billing_profile_id: int | None = None) -> int:
        result = self._conn.execute(
            insert(orders).values(
                type=order_type,
                billing_profile_id=billing_profile_id,
                created=datetime.now(UTC).isoformat(),
            )
        )
        return int(result.inserted_primary_key[0])

    def set_billing_profile(self, order_id: int, profile_id: int | None) -> None:
        self._conn.execute(
            update(orders).where(orders.c.id == order_id).values(billing_profile_id=profile_id)
        )

    def order_ids_for_type(self, order_type: str) -> list[int]:
        """All order ids of *order_type*, ascending."""
        stmt = select(orders.c.id).where(orders.c.type == order_type).order_by(orders.c.id)
        return [int(r.id) for r in self._conn.execute(stmt)]

    def count_for_type(self, order_type: str) -> int:
        stmt = select(func.count(orders.c.id)).where(orders.c.type == order_type)
        return int(self._conn.execute(stmt).scalar_one())

    def orders_billing_with(
        self,
        profile_id: int,
        *,
        exclude_order: int | None = None,
    ) -> list[int]:
        """Ids of orders whose billing reference is *profile_id*."""
        stmt = select(orders.c.id).where(orders.c.billing_profile_id == profile_id)
        if exclude_order is not None:
            stmt = stmt.where(orders.c.id != exclude_order)
        return [int(r.id) for r in self._conn.execute(stmt.order_by(orders.c.id))]

    def billing_references(self, order_type: str | None = None) -> list[OrderRow]:
        """Every order with its billing reference, optionally for one type."""
        stmt = select(orders).order_by(orders.c.id)
        if order_type is not None:
            stmt = stmt.where(orders.c.type == order_type)
        return [_order(r) for r in self._conn.execute(stmt)]

    # ------------------------------------------------------------------
    # Shipments
    # ------------------------------------------------------------------

    def add_shipment(self, order_id: int, shipping_profile_id: int | None = None) -> int:
        result = self._conn.execute(
            insert(shipments).values(order_id=order_id, shipping_profile_id=shipping_profile_id)
        )
        return int(result.inserted_primary_key[0])

    def get_shipment(self, shipment_id: int) -> ShipmentRow | None:
        row = self._conn.execute(select(shipments).where(shipments.c.id == shipment_id)).first()
        return _shipment(row) if row is not None else None

    def shipments_for_order(self, order_id: int) -> list[ShipmentRow]:
        """Shipments of *order_id* in ascending id order."""
        stmt = select(shipments).where(shipments.c.order_id == order_id).order_by(shipments.c.id)
        return [_shipment(r) for r in self._conn.execute(stmt)]

    def shipments_referencing(
        self,
        profile_id: int,
        *,
        exclude: int | None = None,
    ) -> list[ShipmentRow]:
        """Every shipment in the dataset whose shipping profile is *profile_id*."""
        stmt = select(shipments).where(shipments.c.shipping_profile_id == profile_id)
        if exclude is not None:
            stmt = stmt.where(shipments.c.id != exclude)
        return [_shipment(r) for r in self._conn.execute(stmt.order_by(shipments.c.id))]

    def count_shipments_referencing(self, profile_id: int) -> int:
        stmt = select(func.count(shipments.c.id)).where(
            shipments.c.shipping_profile_id == profile_id
        )
        return int(self._conn.execute(stmt).scalar_one())

    def set_shipping_profile(self, shipment_id: int, profile_id: int) -> None:
        result = self._conn.execute(
            update(shipments)
            .where(shipments.c.id == shipment_id)
            .values(shipping_profile_id=profile_id)
        )
        if result.rowcount != 1:
            msg = f"Shipment {shipment_id} not found"
            raise LookupError(msg)

    def shipping_references(self, order_type: str | None = None) -> list[ShipmentRow]:
        """Every shipment, optionally restricted to orders of one type."""
        stmt = select(shipments).order_by(shipments.c.id)
        if order_type is not None:
            stmt = stmt.join(orders, orders.c.id == shipments.c.order_id).where(
                orders.c.type == order_type
            )
        return [_shipment(r) for r in self._conn.execute(stmt)]
