"""Repositories — SQL for orders, shipments, profiles, and their types.

Each repository wraps an open ``Connection`` supplied by the caller, so
all writes join the caller's transaction or savepoint.
"""

from profsplit.infrastructure.repositories.order_types import OrderTypeRepository, OrderTypeRow
from profsplit.infrastructure.repositories.orders import OrderRepository, OrderRow, ShipmentRow
from profsplit.infrastructure.repositories.profile_types import (
    DisplayComponent,
    FieldDefinition,
    ProfileTypeRepository,
)
from profsplit.infrastructure.repositories.profiles import ProfileRepository, ProfileRow

__all__ = [
    "DisplayComponent",
    "FieldDefinition",
    "OrderRepository",
    "OrderRow",
    "OrderTypeRepository",
    "OrderTypeRow",
    "ProfileRepository",
    "ProfileRow",
    "ProfileTypeRepository",
    "ShipmentRow",
]
