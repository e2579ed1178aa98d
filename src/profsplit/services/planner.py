"""Migration planner — per-order plan and its application.

The planner works on one open connection; the caller owns the transaction
(and the SAVEPOINT around each order). Shipments are re-read from storage
when their step runs, so a shipment the Reference Resolver already
repointed to a duplicate is seen as a distinct, already-correct profile.
That is what guarantees one duplicate per shared identity per run.

Billing ownership wins: a profile that is the billing reference of any
order is never retyped to the shipping category. A shipment referencing
one gets a duplicate instead, whichever order is processed first.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from profsplit.domain.errors import PlanError
from profsplit.domain.labels import profile_label
from profsplit.domain.plan import MigrationPlan, PlanOutcome, ShipmentStep, StepOutcome
from profsplit.domain.registry import OrderTypeContext, ResolvedCategories, resolve
from profsplit.domain.types import PlanAction, ProfileCategory, parse_category
from profsplit.infrastructure.repositories import OrderRepository, ProfileRepository, ProfileRow
from profsplit.services.resolver import ReferenceResolver
from profsplit.services.telemetry import trace_span

if TYPE_CHECKING:
    from sqlalchemy import Connection

logger = logging.getLogger(__name__)


class MigrationPlanner:
    """Computes and applies the shared→split plan for one order at a time."""

    def __init__(self, conn: Connection) -> None:
        self._orders = OrderRepository(conn)
        self._profiles = ProfileRepository(conn)
        self._resolver = ReferenceResolver(conn)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def plan_for(self, order_id: int, ctx: OrderTypeContext) -> MigrationPlan:
        """Describe what :meth:`apply` would do to *order_id*, without writing.

        A later shipment that references an identity an earlier step
        duplicates is reported as a no-op: the resolver repoints it as part
        of that earlier step.

        Raises:
            PlanError: ``ORDER_NOT_FOUND``, ``UNKNOWN_CATEGORY`` or
                ``LOAD_FAILED``.
        """
        targets = resolve(ctx)
        with trace_span("plan_for") as span:
            try:
                order = self._orders.get(order_id)
                if order is None:
                    raise PlanError(f"Order {order_id} not found", code="ORDER_NOT_FOUND")

                billing = self._load_profile(order_id, order.billing_profile_id)
                billing_category = self._category(order_id, billing) if billing else None
                billing_action = PlanAction.NOOP
                if not targets.shared and billing_category not in (None, targets.billing):
                    billing_action = PlanAction.RETYPE

                steps: list[ShipmentStep] = []
                superseded: dict[int, int] = {}
                for shipment in self._orders.shipments_for_order(order_id):
                    pid = shipment.shipping_profile_id
                    if pid is not None and pid in superseded:
                        steps.append(
                            ShipmentStep(
                                shipment_id=shipment.id,
                                shipping_profile_id=pid,
                                action=PlanAction.NOOP,
                                target_category=targets.shipping,
                                reason=(
                                    f"repointed with shipment {superseded[pid]} "
                                    "to the same duplicate"
                                ),
                            )
                        )
                        continue

                    profile = self._load_profile(order_id, pid)
                    if profile is None:
                        steps.append(
                            ShipmentStep(
                                shipment_id=shipment.id,
                                shipping_profile_id=None,
                                action=PlanAction.NOOP,
                                target_category=targets.shipping,
                                reason="no shipping profile",
                            )
                        )
                        continue

                    action, reason = self._classify(order_id, profile, billing, targets)
                    if action == PlanAction.DUPLICATE_AND_REPOINT:
                        superseded[profile.id] = shipment.id
                    steps.append(
                        ShipmentStep(
                            shipment_id=shipment.id,
                            shipping_profile_id=profile.id,
                            action=action,
                            current_category=self._category(order_id, profile),
                            target_category=targets.shipping,
                            label=profile_label(profile.type, profile.address),
                            reason=reason,
                        )
                    )
            except SQLAlchemyError as exc:
                msg = f"Loading order {order_id} failed: {exc}"
                raise PlanError(msg, code="LOAD_FAILED") from exc

            plan = MigrationPlan(
                order_id=order_id,
                billing_profile_id=billing.id if billing else None,
                billing_action=billing_action,
                billing_category=billing_category,
                billing_label=profile_label(billing.type, billing.address) if billing else None,
                steps=steps,
            )
            if span:
                span.annotate("steps", len(steps))
            return plan

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def apply(self, order_id: int, ctx: OrderTypeContext) -> PlanOutcome:
        """Migrate one order's billing and shipping references.

        Retypes are skipped when the category is already correct, so
        applying an order twice writes nothing the second time.

        Raises:
            PlanError: Loading or persisting the order's records failed.
            ResolverError: The dataset-wide repoint for a duplicate failed.
        """
        targets = resolve(ctx)
        with trace_span("apply") as span:
            try:
                outcome = self._apply(order_id, targets)
            except (SQLAlchemyError, LookupError) as exc:
                msg = f"Persisting order {order_id} failed: {exc}"
                raise PlanError(msg, code="PERSIST_FAILED") from exc
            if span:
                span.annotate("order_id", order_id)
                span.count("writes", outcome.writes)
                span.count("duplicates", len(outcome.created_profiles))
            return outcome

    def _apply(self, order_id: int, targets: ResolvedCategories) -> PlanOutcome:
        order = self._orders.get(order_id)
        if order is None:
            raise PlanError(f"Order {order_id} not found", code="ORDER_NOT_FOUND")

        writes = 0
        billing = self._load_profile(order_id, order.billing_profile_id)
        billing_action = PlanAction.NOOP
        billing_category = self._category(order_id, billing) if billing else None
        if billing is not None and not targets.shared and billing_category != targets.billing:
            self._profiles.set_type(billing.id, targets.billing.value)
            billing_action = PlanAction.RETYPE
            writes += 1
            logger.debug("Order %d: retyped billing profile %d", order_id, billing.id)

        steps: list[StepOutcome] = []
        for listed in self._orders.shipments_for_order(order_id):
            # Re-read: an earlier step's resolver call may have repointed it.
            shipment = self._orders.get_shipment(listed.id)
            if shipment is None:
                continue
            profile = self._load_profile(order_id, shipment.shipping_profile_id)
            if profile is None:
                steps.append(
                    StepOutcome(
                        shipment_id=shipment.id,
                        action=PlanAction.NOOP,
                        shipping_profile_id=None,
                    )
                )
                continue

            action, _reason = self._classify(order_id, profile, billing, targets)
            if action == PlanAction.RETYPE:
                self._profiles.set_type(profile.id, targets.shipping.value)
                writes += 1
                steps.append(
                    StepOutcome(
                        shipment_id=shipment.id,
                        action=action,
                        shipping_profile_id=profile.id,
                    )
                )
            elif action == PlanAction.DUPLICATE_AND_REPOINT:
                duplicate_id = self._profiles.create_duplicate(profile.id, targets.shipping.value)
                self._orders.set_shipping_profile(shipment.id, duplicate_id)
                repointed = self._resolver.repoint(
                    profile.id, duplicate_id, exclude_shipment_id=shipment.id
                )
                writes += 2 + len(repointed)
                logger.debug(
                    "Order %d: shipment %d moved from profile %d to duplicate %d",
                    order_id,
                    shipment.id,
                    profile.id,
                    duplicate_id,
                )
                steps.append(
                    StepOutcome(
                        shipment_id=shipment.id,
                        action=action,
                        shipping_profile_id=duplicate_id,
                        created_profile_id=duplicate_id,
                        repointed_shipments=repointed,
                    )
                )
            else:
                steps.append(
                    StepOutcome(
                        shipment_id=shipment.id,
                        action=action,
                        shipping_profile_id=profile.id,
                    )
                )

        return PlanOutcome(
            order_id=order_id,
            billing_profile_id=billing.id if billing else None,
            billing_action=billing_action,
            steps=steps,
            writes=writes,
        )

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def _classify(
        self,
        order_id: int,
        profile: ProfileRow,
        billing: ProfileRow | None,
        targets: ResolvedCategories,
    ) -> tuple[PlanAction, str]:
        """Decide what to do with one shipment's shipping profile."""
        category = self._category(order_id, profile)
        if targets.shared:
            # Single mode never writes, whatever category the profile has now.
            return PlanAction.NOOP, "single profile mode"

        if billing is not None and profile.id == billing.id:
            return PlanAction.DUPLICATE_AND_REPOINT, "same record as the billing profile"
        owners = self._orders.orders_billing_with(profile.id, exclude_order=order_id)
        if owners:
            return (
                PlanAction.DUPLICATE_AND_REPOINT,
                f"billing profile of order {owners[0]}",
            )

        if category != targets.shipping:
            return PlanAction.RETYPE, f"{category.value} -> {targets.shipping.value}"
        return PlanAction.NOOP, "already correct"

    def _load_profile(self, order_id: int, profile_id: int | None) -> ProfileRow | None:
        if profile_id is None:
            return None
        profile = self._profiles.get(profile_id)
        if profile is None:
            msg = f"Order {order_id} references missing profile {profile_id}"
            raise PlanError(msg, code="LOAD_FAILED", detail={"profile_id": profile_id})
        return profile

    @staticmethod
    def _category(order_id: int, profile: ProfileRow) -> ProfileCategory:
        try:
            return parse_category(profile.type)
        except ValueError as exc:
            raise PlanError(
                f"Order {order_id}: {exc}",
                code="UNKNOWN_CATEGORY",
                detail={"profile_id": profile.id, "type": profile.type},
            ) from exc
