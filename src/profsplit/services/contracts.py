"""Typed payload contracts for service boundaries.

These models validate operation payload shapes before they leave the
service layer so key regressions (for example ``failed`` entries missing
a ``code``) fail fast in tests and during development.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


def dump_validated[T: BaseModel](model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


# ---------------------------------------------------------------------------
# Migration
# ---------------------------------------------------------------------------


class FailedOrder(BaseModel):
    """One order the batch could not migrate."""

    order_id: int
    code: str
    message: str


class MigrationReportData(BaseModel):
    """Payload contract for ``MigrationService.migrate``."""

    order_type: str
    succeeded: list[int] = Field(default_factory=list)
    failed: list[FailedOrder] = Field(default_factory=list)
    created_profiles: list[int] = Field(default_factory=list)
    repointed_shipments: list[int] = Field(default_factory=list)
    writes: int = 0
    chunks: int = 0
    dry_run: bool = False
    backup_path: str | None = None


class PlanStepData(BaseModel):
    """One shipment step of a migration plan."""

    shipment_id: int
    shipping_profile_id: int | None
    action: Literal["noop", "retype", "duplicate_and_repoint"]
    current_category: str | None = None
    target_category: str
    label: str | None = None
    reason: str = ""


class PlanData(BaseModel):
    """Payload contract for ``MigrationService.plan``."""

    order_id: int
    order_type: str
    billing_profile_id: int | None
    billing_action: Literal["noop", "retype", "duplicate_and_repoint"]
    billing_category: str | None = None
    billing_label: str | None = None
    target_billing: str
    target_shipping: str
    steps: list[PlanStepData]
    duplicates: int
    is_noop: bool


# ---------------------------------------------------------------------------
# Provisioning
# ---------------------------------------------------------------------------


class ProvisionedType(BaseModel):
    """What provisioning did for one split category."""

    profile_type: str
    label: str
    created: bool
    fields_copied: list[str] = Field(default_factory=list)
    displays_synced: list[str] = Field(default_factory=list)


class ProvisionData(BaseModel):
    """Payload contract for ``ProvisionService.provision``."""

    order_type: str
    source: str
    types: list[ProvisionedType]
    writes: int


# ---------------------------------------------------------------------------
# Order types
# ---------------------------------------------------------------------------


class OrderTypeData(BaseModel):
    """Payload contract for ``OrderTypeService.show``."""

    model_config = ConfigDict(extra="allow")

    id: str
    label: str
    mode: Literal["single", "split"]
    billing_category: str
    shipping_category: str
    order_count: int
    description: str
    can_enable_split: bool
    split_enabled_at: str | None = None


class OrderTypeListData(BaseModel):
    """Payload contract for ``OrderTypeService.list_types``."""

    count: int
    items: list[OrderTypeData]


# ---------------------------------------------------------------------------
# Analysis and verification
# ---------------------------------------------------------------------------


class OwnershipConflict(BaseModel):
    """A profile billed by one order and shipped to by another."""

    profile_id: int
    billing_orders: list[int]
    shipping_orders: list[int]


class AnalyzeData(BaseModel):
    """Payload contract for ``AnalyzeService.analyze``."""

    order_type: str
    order_count: int
    shared_identities: list[int]
    cross_order_profiles: list[int]
    ownership_conflicts: list[OwnershipConflict]
    groups: list[list[int]]
    group_count: int
    disjoint: bool
    expected_duplicates: int


class VerifyIssue(BaseModel):
    """One integrity finding returned by ``VerifyService.verify``."""

    model_config = ConfigDict(extra="allow")

    category: Literal["billing_category", "shipping_category", "dual_use", "missing_profile_type"]
    severity: Literal["warning", "error"]
    message: str
    order_id: int | None = None
    shipment_id: int | None = None
    profile_id: int | None = None


class VerifyResultData(BaseModel):
    """Payload contract for ``VerifyService.verify``."""

    order_types: list[str]
    issues: list[VerifyIssue]
    count: int
    error_count: int
    warning_count: int
    healthy: bool
