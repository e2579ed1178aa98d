"""Reference resolver — dataset-wide repoint of a superseded shipping profile.

Bookkeeping scoped to one order or one chunk cannot see shipments of other
orders, so every fan-out event re-scans the whole ``shipments`` table.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from profsplit.domain.errors import ResolverError
from profsplit.infrastructure.repositories import OrderRepository

if TYPE_CHECKING:
    from sqlalchemy import Connection

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """Repoints every shipment still referencing a superseded profile."""

    def __init__(self, conn: Connection) -> None:
        self._orders = OrderRepository(conn)

    def repoint(
        self,
        original_id: int,
        replacement_id: int,
        *,
        exclude_shipment_id: int | None = None,
    ) -> list[int]:
        """Point every shipment referencing *original_id* at *replacement_id*.

        The shipment the planner already rewrote is passed as
        *exclude_shipment_id*. Returns the ids of the shipments repointed
        here. The original profile is left in place.

        Raises:
            ResolverError: If the scan or an update fails, or if any
                shipment still references *original_id* afterwards.
        """
        detail = {"original_id": original_id, "replacement_id": replacement_id}
        try:
            referencing = self._orders.shipments_referencing(
                original_id, exclude=exclude_shipment_id
            )
            for shipment in referencing:
                self._orders.set_shipping_profile(shipment.id, replacement_id)
            remaining = self._orders.count_shipments_referencing(original_id)
        except (SQLAlchemyError, LookupError) as exc:
            msg = f"Repointing shipments from profile {original_id} failed: {exc}"
            raise ResolverError(msg, detail=detail) from exc

        if remaining:
            msg = f"{remaining} shipment(s) still reference profile {original_id}"
            raise ResolverError(msg, detail={**detail, "remaining": remaining})

        repointed = [s.id for s in referencing]
        if repointed:
            logger.debug(
                "Repointed shipments %s from profile %d to %d",
                repointed,
                original_id,
                replacement_id,
            )
        return repointed
