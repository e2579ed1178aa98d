"""Migration plans and outcomes.

A :class:`MigrationPlan` is computed per order and discarded; it is never
persisted. :class:`PlanOutcome` records what applying a plan actually did.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from profsplit.domain.types import PlanAction, ProfileCategory


class ShipmentStep(BaseModel):
    """Planned action for one shipment's shipping profile reference."""

    model_config = {"frozen": True}

    shipment_id: int
    shipping_profile_id: int | None
    action: PlanAction
    current_category: ProfileCategory | None = None
    target_category: ProfileCategory | None = None
    label: str | None = None
    reason: str = ""


class MigrationPlan(BaseModel):
    """Per-order plan: billing action plus one step per shipment."""

    model_config = {"frozen": True}

    order_id: int
    billing_profile_id: int | None
    billing_action: PlanAction = PlanAction.NOOP
    billing_category: ProfileCategory | None = None
    billing_label: str | None = None
    steps: list[ShipmentStep] = Field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        """True when applying the plan would write nothing."""
        if self.billing_action != PlanAction.NOOP:
            return False
        return all(step.action == PlanAction.NOOP for step in self.steps)

    @property
    def duplicates(self) -> list[ShipmentStep]:
        return [s for s in self.steps if s.action == PlanAction.DUPLICATE_AND_REPOINT]


class StepOutcome(BaseModel):
    """What happened to one shipment when the plan ran."""

    shipment_id: int
    action: PlanAction
    shipping_profile_id: int | None
    created_profile_id: int | None = None
    repointed_shipments: list[int] = Field(default_factory=list)


class PlanOutcome(BaseModel):
    """Result of applying one order's plan."""

    order_id: int
    billing_profile_id: int | None
    billing_action: PlanAction = PlanAction.NOOP
    steps: list[StepOutcome] = Field(default_factory=list)
    writes: int = 0

    @property
    def created_profiles(self) -> list[int]:
        return [s.created_profile_id for s in self.steps if s.created_profile_id is not None]

    @property
    def repointed_shipments(self) -> list[int]:
        return [sid for s in self.steps for sid in s.repointed_shipments]
