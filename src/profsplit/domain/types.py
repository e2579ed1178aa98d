"""Profile categories and plan actions.

Stored profile type ids are the enum values, so a row's ``type`` column
parses straight into :class:`ProfileCategory`.
"""

from __future__ import annotations

from enum import StrEnum


class ProfileCategory(StrEnum):
    """Closed set of profile categories handled by the migration."""

    SHARED = "customer"
    BILLING = "customer_billing"
    SHIPPING = "customer_shipping"


class PlanAction(StrEnum):
    """What the planner does to one profile reference."""

    NOOP = "noop"
    RETYPE = "retype"
    DUPLICATE_AND_REPOINT = "duplicate_and_repoint"


class DisplayKind(StrEnum):
    """Display definition kinds cloned by the provisioner."""

    VIEW = "view"
    FORM = "form"


SPLIT_CATEGORIES: tuple[ProfileCategory, ...] = (
    ProfileCategory.BILLING,
    ProfileCategory.SHIPPING,
)


def parse_category(value: str) -> ProfileCategory:
    """Parse a stored profile type id.

    Raises:
        ValueError: If *value* is not one of the known categories.
    """
    try:
        return ProfileCategory(value)
    except ValueError:
        known = [c.value for c in ProfileCategory]
        msg = f"Unknown profile category: {value!r}. Expected one of {known}"
        raise ValueError(msg) from None
