"""Runtime configuration defaults for persistence and menu sync."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DB_PATH = os.getenv("KASSA_DB_PATH", "data/kassa.db")

# Remote menu store; the static document lives on the same origin.
MENU_API_BASE = os.getenv("KASSA_MENU_API_BASE", "http://127.0.0.1:3000")
MENU_API_PATH = os.getenv("KASSA_MENU_API_PATH", "/api/menu")
STATIC_MENU_PATH = os.getenv("KASSA_STATIC_MENU_PATH", "/menu.json")
MENU_FETCH_TIMEOUT_S = float(os.getenv("KASSA_MENU_FETCH_TIMEOUT_S", "2.2"))
MENU_CACHE_KEY = os.getenv("KASSA_MENU_CACHE_KEY", "kassa.menu.cache.v1")

CURRENCY_LABEL = os.getenv("KASSA_CURRENCY_LABEL", "руб.")
DEBUG_LOG_PATH = os.getenv("KASSA_DEBUG_LOG_PATH", "/tmp/kassa-debug.log")


@dataclass(frozen=True)
class AppConfig:
    """Immutable snapshot of the settings consumed by the core."""

    db_path: Path = Path(DB_PATH)
    menu_api_base: str = MENU_API_BASE
    menu_api_path: str = MENU_API_PATH
    static_menu_path: str = STATIC_MENU_PATH
    fetch_timeout_s: float = MENU_FETCH_TIMEOUT_S
    menu_cache_key: str = MENU_CACHE_KEY
    currency_label: str = CURRENCY_LABEL
    debug_log_path: Path = Path(DEBUG_LOG_PATH)

    @property
    def menu_url(self) -> str:
        return f"{self.menu_api_base.rstrip('/')}{self.menu_api_path}"

    @property
    def static_menu_url(self) -> str:
        return f"{self.menu_api_base.rstrip('/')}{self.static_menu_path}"
