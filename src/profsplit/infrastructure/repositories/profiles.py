"""Profile persistence: load, create, retype, and duplicate.

The caller owns the transaction — every repository is bound to an open
``Connection`` so its writes join the surrounding unit of work.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select, update

from profsplit.infrastructure.database.schema import profiles

if TYPE_CHECKING:
    from sqlalchemy import Connection


@dataclass(frozen=True)
class ProfileRow:
    """One stored profile."""

    id: int
    type: str
    uid: int | None = None
    address: dict[str, Any] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)

    def content(self) -> dict[str, Any]:
        """Address content compared when checking a duplicate against its source."""
        return {"address": self.address, "data": self.data}


def _loads(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    value = json.loads(raw)
    return value if isinstance(value, dict) else {}


def _now() -> str:
    return datetime.now(UTC).isoformat()


class ProfileRepository:
    """SQL for the ``profiles`` table."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, profile_id: int) -> ProfileRow | None:
        row = self._conn.execute(select(profiles).where(profiles.c.id == profile_id)).first()
        if row is None:
            return None
        return ProfileRow(
            id=int(row.id),
            type=str(row.type),
            uid=row.uid,
            address=_loads(row.address),
            data=_loads(row.data),
        )

    def create(
        self,
        profile_type: str,
        address: dict[str, Any] | None = None,
        *,
        data: dict[str, Any] | None = None,
        uid: int | None = None,
    ) -> int:
        """Insert a profile and return its new id."""
        now = _now()
        result = self._conn.execute(
            insert(profiles).values(
                type=profile_type,
                uid=uid,
                address=json.dumps(address or {}, sort_keys=True),
                data=json.dumps(data or {}, sort_keys=True),
                created=now,
                changed=now,
            )
        )
        return int(result.inserted_primary_key[0])

    def set_type(self, profile_id: int, profile_type: str) -> None:
        """Reassign a profile's category in place; identity and content stay."""
        result = self._conn.execute(
            update(profiles)
            .where(profiles.c.id == profile_id)
            .values(type=profile_type, changed=_now())
        )
        if result.rowcount != 1:
            msg = f"Profile {profile_id} not found"
            raise LookupError(msg)

    def create_duplicate(self, profile_id: int, profile_type: str) -> int:
        """Copy *profile_id* under a fresh identity with *profile_type*.

        Raises:
            LookupError: If the source profile does not exist.
        """
        row = self._conn.execute(select(profiles).where(profiles.c.id == profile_id)).first()
        if row is None:
            msg = f"Profile {profile_id} not found"
            raise LookupError(msg)

        now = _now()
        result = self._conn.execute(
            insert(profiles).values(
                type=profile_type,
                uid=row.uid,
                address=row.address,
                data=row.data,
                created=now,
                changed=now,
            )
        )
        return int(result.inserted_primary_key[0])

    def count(self) -> int:
        return int(self._conn.execute(select(func.count(profiles.c.id))).scalar_one())

    def count_by_type(self) -> dict[str, int]:
        stmt = select(profiles.c.type, func.count(profiles.c.id)).group_by(profiles.c.type)
        return {str(t): int(n) for t, n in self._conn.execute(stmt)}
