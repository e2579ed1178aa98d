"""BaseService — abstract foundation for all profsplit services.

Every service receives a :class:`Store` at construction time. The Store
provides transactional access to the database, the run lock, and the
reference graph. Services own their transaction boundaries via
``self._store.transaction()``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from profsplit.infrastructure.store import Store

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class ProvisionService(BaseService):
            def provision(self, ctx: OrderTypeContext) -> ServiceResult:
                with self._store.transaction() as txn:
                    ...
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Call a plugin hook synchronously. No-op if plugins are not loaded.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        plugins = self._store.plugins
        if plugins is None:
            return
        try:
            getattr(plugins.hook, hook_name)(**payload)
        except Exception:
            logger.debug("Hook dispatch failed for %s", hook_name, exc_info=True)
            warnings.append(f"Plugin hook {hook_name} failed")
