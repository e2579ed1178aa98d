"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, profsplit.toml only contains
overrides. An empty file (or no file) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    name: str = "orders"


class MigrationConfig(BaseModel):
    """[migration] section."""

    model_config = {"frozen": True}

    chunk_size: int = Field(default=50, ge=1)
    backup_before_run: bool = True
    lock_name: str = "profile-migration"


class ProfileTypesConfig(BaseModel):
    """[profile_types] section — labels for provisioned categories."""

    model_config = {"frozen": True}

    billing_label: str = "Customer Billing"
    shipping_label: str = "Customer Shipping"


class BackupConfig(BaseModel):
    """[backup] section."""

    model_config = {"frozen": True}

    max_count: int = Field(default=10, ge=1)


class ProfsplitConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    store: StoreConfig = Field(default_factory=StoreConfig)
    migration: MigrationConfig = Field(default_factory=MigrationConfig)
    profile_types: ProfileTypesConfig = Field(default_factory=ProfileTypesConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)
