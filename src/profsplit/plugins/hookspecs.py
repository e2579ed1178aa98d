"""Pluggy hook specifications for profsplit lifecycle events.

Hooks are called synchronously after the corresponding work has been
committed. Dry runs fire no hooks.
"""

from __future__ import annotations

import pluggy

PROJECT_NAME = "profsplit"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class ProfsplitHookSpec:
    """Hook specifications for the profsplit plugin system."""

    @hookspec
    def post_provision(
        self,
        order_type: str,
        created_types: list[str],
        writes: int,
    ) -> None:
        """Called after provisioning wrote to the profile type definitions."""

    @hookspec
    def post_migrate_order(self, order_id: int, order_type: str) -> None:
        """Called for each order once the chunk containing it committed."""

    @hookspec
    def post_migrate_batch(
        self,
        order_type: str,
        succeeded: list[int],
        failed: list[int],
    ) -> None:
        """Called after a migration run finished."""

    @hookspec
    def post_mode_change(self, order_type: str, old_mode: str, new_mode: str) -> None:
        """Called after an order type's profile mode flag was written."""
