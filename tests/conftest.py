from __future__ import annotations

from pathlib import Path

import pytest

from kassa.config import AppConfig
from kassa.persistence import KeyValueStore

MENU_BASE = "http://menu.test"


@pytest.fixture()
def config(tmp_path: Path) -> AppConfig:
    """Config pointing at a throwaway database and a fake menu host."""
    return AppConfig(
        db_path=tmp_path / "kassa.db",
        menu_api_base=MENU_BASE,
        fetch_timeout_s=0.2,
        debug_log_path=tmp_path / "debug.log",
    )


@pytest.fixture()
def store(config: AppConfig) -> KeyValueStore:
    kv = KeyValueStore(config.db_path)
    kv.bootstrap_schema()
    return kv


@pytest.fixture()
def broken_store(tmp_path: Path) -> KeyValueStore:
    """A store whose database path is a directory, so every operation fails."""
    return KeyValueStore(tmp_path)
