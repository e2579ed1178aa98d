"""Shared pytest fixtures and test helpers for profsplit tests."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from profsplit.config.settings import ProfSettings
from profsplit.domain.registry import OrderTypeContext
from profsplit.infrastructure.database.engine import init_database
from profsplit.infrastructure.repositories import ProfileRow
from profsplit.infrastructure.store import Store
from profsplit.services.telemetry import disable_telemetry


@pytest.fixture(autouse=True)
def _isolated_process_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Undo what a CLI invocation leaves behind: telemetry and log handlers."""
    monkeypatch.delenv("PROFSPLIT_CONFIG", raising=False)
    root = logging.getLogger()
    handlers = list(root.handlers)
    yield
    disable_telemetry()
    root.handlers[:] = handlers


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Engine:
    """Initialized SQLite engine with all tables created and seeded."""
    engine = init_database(tmp_path)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def store_root(tmp_path: Path) -> Path:
    """Temporary store directory.

    All store fixtures (store, _isolated_store) build on this.
    """
    return tmp_path


@pytest.fixture
def store(store_root: Path) -> Store:
    """Initialized store on a temp directory with backups disabled."""
    settings = ProfSettings.from_cli(store_root=store_root)
    settings = settings.model_copy(
        update={"migration": settings.migration.model_copy(update={"backup_before_run": False})}
    )
    s = Store(settings)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def _isolated_store(store_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp store root so the CLI creates an isolated store.

    Use via ``@pytest.mark.usefixtures("_isolated_store")`` on command test
    classes.
    """
    monkeypatch.chdir(store_root)


@pytest.fixture
def cli_store(store_root: Path) -> Store:
    """Store on the same root the CLI opens under ``_isolated_store``.

    Used to seed orders before invoking a command and to inspect the
    result afterwards.
    """
    s = Store(ProfSettings.from_cli(store_root=store_root))
    try:
        yield s
    finally:
        s.close()


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------

SPLIT = OrderTypeContext(id="default", label="Default", use_split_profiles=True)
SINGLE = OrderTypeContext(id="default", label="Default", use_split_profiles=False)


def make_profile(
    store: Store,
    line: str = "1 Main St",
    *,
    category: str = "customer",
    **data: Any,
) -> int:
    """Insert a profile with one address line and return its id."""
    with store.transaction() as txn:
        return txn.profiles.create(category, {"address_line1": line}, data=data or None)


def make_order(
    store: Store,
    billing: int | None,
    *shipping: int | None,
    order_type: str = "default",
) -> tuple[int, list[int]]:
    """Insert an order with one shipment per *shipping* profile id."""
    with store.transaction() as txn:
        order_id = txn.orders.create(order_type, billing)
        shipment_ids = [txn.orders.add_shipment(order_id, pid) for pid in shipping]
    return order_id, shipment_ids


def get_profile(store: Store, profile_id: int) -> ProfileRow:
    with store.transaction() as txn:
        profile = txn.profiles.get(profile_id)
    assert profile is not None, profile_id
    return profile


def shipping_profile_of(store: Store, shipment_id: int) -> int | None:
    with store.transaction() as txn:
        shipment = txn.orders.get_shipment(shipment_id)
    assert shipment is not None, shipment_id
    return shipment.shipping_profile_id


def profile_count(store: Store) -> int:
    with store.transaction() as txn:
        return txn.profiles.count()


def provision(store: Store) -> dict[str, Any]:
    """Provision the split categories via ProvisionService, asserting success."""
    from profsplit.services.provision import ProvisionService

    result = ProvisionService(store).provision(SPLIT)
    assert result.ok, result.error
    return result.data


def migrate(store: Store, order_ids: list[int], **kwargs: Any) -> dict[str, Any]:
    """Run MigrationService.migrate in split mode, asserting the run completed."""
    from profsplit.services.migrate import MigrationService

    result = MigrationService(store).migrate(order_ids, SPLIT, **kwargs)
    assert result.ok, result.error
    return result.data
