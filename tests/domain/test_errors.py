"""Tests for the error taxonomy."""

import pytest

from profsplit.domain.errors import (
    LockHeldError,
    ModeTransitionError,
    PlanError,
    ProfsplitError,
    ProvisionError,
    ResolverError,
)


class TestErrorCodes:
    @pytest.mark.parametrize(
        ("cls", "code"),
        [
            (ProvisionError, "PROVISION_FAILED"),
            (PlanError, "PLAN_FAILED"),
            (ResolverError, "RESOLVER_FAILED"),
            (ModeTransitionError, "INVALID_TRANSITION"),
        ],
    )
    def test_default_code(self, cls: type[ProfsplitError], code: str) -> None:
        exc = cls("boom")
        assert exc.code == code
        assert exc.message == "boom"
        assert exc.detail == {}
        assert isinstance(exc, ProfsplitError)

    def test_explicit_code_and_detail(self) -> None:
        exc = PlanError("missing", code="LOAD_FAILED", detail={"profile_id": 4})
        assert exc.code == "LOAD_FAILED"
        assert exc.detail == {"profile_id": 4}
        assert str(exc) == "missing"

    def test_lock_held(self) -> None:
        exc = LockHeldError("profile-migration", "host:42:migrate", "2026-10-19T00:00:00+00:00")
        assert isinstance(exc, ProfsplitError)
        assert exc.code == "LOCKED"
        assert exc.holder == "host:42:migrate"
        assert exc.detail == {
            "lock": "profile-migration",
            "holder": "host:42:migrate",
            "acquired": "2026-10-19T00:00:00+00:00",
        }
        assert "host:42:migrate" in exc.message
