"""Profile type registry — which category an order type targets.

The mode flag travels as an explicit :class:`OrderTypeContext` value into
every call instead of being read from ambient state.
"""

from __future__ import annotations

from typing import NamedTuple

from pydantic import BaseModel

from profsplit.domain.lifecycle import ProfileMode, mode_for
from profsplit.domain.types import ProfileCategory


class OrderTypeContext(BaseModel):
    """Snapshot of an order type's identity and profile mode."""

    model_config = {"frozen": True}

    id: str
    label: str = ""
    use_split_profiles: bool = False

    @property
    def mode(self) -> ProfileMode:
        return mode_for(self.use_split_profiles)

    def targeting_split(self) -> OrderTypeContext:
        """Return a copy resolving to the split categories.

        The migration runs before the flag is persisted, so it works
        against the mode being transitioned into.
        """
        return self.model_copy(update={"use_split_profiles": True})


class ResolvedCategories(NamedTuple):
    """Target categories for an order's billing and shipping references."""

    billing: ProfileCategory
    shipping: ProfileCategory

    @property
    def shared(self) -> bool:
        """Whether one record may legally serve both roles."""
        return self.billing == self.shipping


def resolve(ctx: OrderTypeContext) -> ResolvedCategories:
    """Resolve billing/shipping categories for *ctx*.

    Both resolve to :attr:`ProfileCategory.SHARED` in single-profile mode,
    which turns every planner retype into a no-op.
    """
    if ctx.use_split_profiles:
        return ResolvedCategories(ProfileCategory.BILLING, ProfileCategory.SHIPPING)
    return ResolvedCategories(ProfileCategory.SHARED, ProfileCategory.SHARED)
