"""Display labels for customer profiles.

A customer profile is labelled by its first address line. Profiles of other
types, and profiles without an address, get no label.
"""

from __future__ import annotations

from typing import Any

from profsplit.domain.types import ProfileCategory

_LABELLED_TYPES = frozenset(c.value for c in ProfileCategory)


def profile_label(profile_type: str, address: dict[str, Any] | None) -> str | None:
    """Return the label for a profile, or None if it has none.

    Examples:
        >>> profile_label("customer", {"address_line1": "1 Main St"})
        '1 Main St'
        >>> profile_label("customer", {}) is None
        True
    """
    if profile_type not in _LABELLED_TYPES:
        return None
    if not address:
        return None
    line = address.get("address_line1")
    if not line:
        return None
    return str(line)
