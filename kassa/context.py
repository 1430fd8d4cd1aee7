"""Process-wide context wiring the store, ledger and menu collaborators."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from kassa.config import AppConfig
from kassa.errors import PersistenceFailure
from kassa.ledger import CheckLedger
from kassa.menu_store import MenuManager
from kassa.menu_sync import MenuSync
from kassa.persistence import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    config: AppConfig
    store: KeyValueStore
    ledger: CheckLedger
    sync: MenuSync
    menu: MenuManager

    @classmethod
    def create(cls, config: AppConfig | None = None, transport: httpx.AsyncBaseTransport | None = None) -> "AppContext":
        """Build collaborators and load persisted checks."""
        config = config or AppConfig()
        store = KeyValueStore(config.db_path)
        try:
            store.bootstrap_schema()
        except PersistenceFailure as exc:
            logger.warning("Running without durable storage: %s", exc)

        ledger = CheckLedger(store)
        ledger.load()
        sync = MenuSync(config, store, transport=transport)
        return cls(config=config, store=store, ledger=ledger, sync=sync, menu=MenuManager(sync))

    def close(self) -> None:
        self.ledger.flush()
