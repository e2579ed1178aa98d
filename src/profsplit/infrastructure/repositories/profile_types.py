"""Profile type, field definition, and display definition persistence.

Display components are ordered by ``position``. :meth:`set_component`
always appends, so removing then re-adding a set of components
reproduces the order they are re-added in.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, insert, select

from profsplit.infrastructure.database.schema import (
    display_components,
    profile_displays,
    profile_fields,
    profile_types,
)

if TYPE_CHECKING:
    from sqlalchemy import Connection


@dataclass(frozen=True)
class FieldDefinition:
    """One field attached to a profile type."""

    field_name: str
    field_type: str
    is_base: bool = False
    required: bool = False
    settings: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DisplayComponent:
    """One component of a view or form display, in display order."""

    name: str
    position: int
    settings: dict[str, Any] = field(default_factory=dict)


def _loads(raw: str | None) -> dict[str, Any]:
    return json.loads(raw) if raw else {}


class ProfileTypeRepository:
    """SQL for profile types and their field/display definitions."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def exists(self, type_id: str) -> bool:
        row = self._conn.execute(
            select(profile_types.c.id).where(profile_types.c.id == type_id)
        ).first()
        return row is not None

    def label(self, type_id: str) -> str | None:
        return self._conn.execute(
            select(profile_types.c.label).where(profile_types.c.id == type_id)
        ).scalar_one_or_none()

    def create(self, type_id: str, label: str) -> None:
        self._conn.execute(
            insert(profile_types).values(
                id=type_id, label=label, created=datetime.now(UTC).isoformat()
            )
        )

    def list_ids(self) -> list[str]:
        stmt = select(profile_types.c.id).order_by(profile_types.c.id)
        return [str(r.id) for r in self._conn.execute(stmt)]

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def fields(self, type_id: str, *, include_base: bool = True) -> list[FieldDefinition]:
        stmt = select(profile_fields).where(profile_fields.c.profile_type == type_id)
        if not include_base:
            stmt = stmt.where(profile_fields.c.is_base == 0)
        rows = self._conn.execute(stmt.order_by(profile_fields.c.field_name))
        return [
            FieldDefinition(
                field_name=r.field_name,
                field_type=r.field_type,
                is_base=bool(r.is_base),
                required=bool(r.required),
                settings=_loads(r.settings),
            )
            for r in rows
        ]

    def add_field(self, type_id: str, definition: FieldDefinition) -> None:
        self._conn.execute(
            insert(profile_fields).values(
                profile_type=type_id,
                field_name=definition.field_name,
                field_type=definition.field_type,
                is_base=int(definition.is_base),
                required=int(definition.required),
                settings=json.dumps(definition.settings, sort_keys=True),
            )
        )

    # ------------------------------------------------------------------
    # Displays
    # ------------------------------------------------------------------

    def display_modes(self, type_id: str, kind: str) -> list[str]:
        """Mode names of every *kind* display attached to *type_id*."""
        stmt = (
            select(profile_displays.c.mode)
            .where(profile_displays.c.profile_type == type_id, profile_displays.c.kind == kind)
            .order_by(profile_displays.c.mode)
        )
        return [str(r.mode) for r in self._conn.execute(stmt)]

    def display_exists(self, kind: str, type_id: str, mode: str) -> bool:
        row = self._conn.execute(
            select(profile_displays.c.mode).where(
                profile_displays.c.kind == kind,
                profile_displays.c.profile_type == type_id,
                profile_displays.c.mode == mode,
            )
        ).first()
        return row is not None

    def create_display(self, kind: str, type_id: str, mode: str) -> None:
        self._conn.execute(
            insert(profile_displays).values(kind=kind, profile_type=type_id, mode=mode, status=1)
        )

    def components(self, kind: str, type_id: str, mode: str) -> list[DisplayComponent]:
        """Components of one display in position order."""
        stmt = (
            select(display_components)
            .where(
                display_components.c.kind == kind,
                display_components.c.profile_type == type_id,
                display_components.c.mode == mode,
            )
            .order_by(display_components.c.position)
        )
        return [
            DisplayComponent(
                name=r.component,
                position=int(r.position),
                settings=_loads(r.settings),
            )
            for r in self._conn.execute(stmt)
        ]

    def remove_component(self, kind: str, type_id: str, mode: str, name: str) -> None:
        self._conn.execute(
            delete(display_components).where(
                display_components.c.kind == kind,
                display_components.c.profile_type == type_id,
                display_components.c.mode == mode,
                display_components.c.component == name,
            )
        )

    def set_component(
        self,
        kind: str,
        type_id: str,
        mode: str,
        name: str,
        settings: dict[str, Any],
    ) -> None:
        """Append *name* after the display's current last component."""
        last = self._conn.execute(
            select(func.max(display_components.c.position)).where(
                display_components.c.kind == kind,
                display_components.c.profile_type == type_id,
                display_components.c.mode == mode,
            )
        ).scalar_one_or_none()
        position = 0 if last is None else int(last) + 1
        self._conn.execute(
            insert(display_components).values(
                kind=kind,
                profile_type=type_id,
                mode=mode,
                component=name,
                position=position,
                settings=json.dumps(settings, sort_keys=True),
            )
        )
