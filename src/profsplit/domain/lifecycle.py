"""Order-type profile mode lifecycle.

An order type starts in single-profile mode and can move to split-profile
mode exactly once. Split mode is terminal.
"""

from __future__ import annotations

from enum import StrEnum


class ProfileMode(StrEnum):
    """How an order type categorizes its customer profiles."""

    SINGLE = "single"
    SPLIT = "split"


MODE_TRANSITIONS: dict[str, list[str]] = {
    "single": ["split"],
    "split": [],
}


def mode_for(use_split_profiles: bool) -> ProfileMode:
    """Map the stored flag to a mode."""
    return ProfileMode.SPLIT if use_split_profiles else ProfileMode.SINGLE


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = MODE_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed
