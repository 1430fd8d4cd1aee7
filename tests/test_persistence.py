from __future__ import annotations

import json

import pytest

from kassa.errors import PersistenceFailure
from kassa.models import MenuItem, MenuSnapshot
from kassa.persistence import (
    CHECKS_KEY,
    CHECKS_NAMESPACE,
    MENU_NAMESPACE,
    KeyValueStore,
    load_checks,
    read_cached_menu,
    write_cached_menu,
)

CACHE_KEY = "kassa.menu.cache.v1"
SNAPSHOT = MenuSnapshot(items=(MenuItem(id=1, name="Tea", price=100, show=True),), active_order=(1,))


def test_bootstrap_is_idempotent(store: KeyValueStore) -> None:
    store.bootstrap_schema()
    store.bootstrap_schema()
    assert store.get(MENU_NAMESPACE, CACHE_KEY) is None


def test_set_overwrites_existing_value(store: KeyValueStore) -> None:
    store.set("ns", "k", "v1")
    store.set("ns", "k", "v2")
    assert store.get("ns", "k") == "v2"
    assert store.get("ns", "missing") is None


def test_namespaces_are_independent(store: KeyValueStore) -> None:
    store.set(MENU_NAMESPACE, "k", "menu")
    store.set(CHECKS_NAMESPACE, "k", "checks")
    store.set(MENU_NAMESPACE, "k", "menu v2")
    assert store.get(MENU_NAMESPACE, "k") == "menu v2"
    assert store.get(CHECKS_NAMESPACE, "k") == "checks"


def test_broken_store_raises_persistence_failure(broken_store: KeyValueStore) -> None:
    with pytest.raises(PersistenceFailure):
        broken_store.get("ns", "k")
    with pytest.raises(PersistenceFailure):
        broken_store.set("ns", "k", "v")


def test_menu_cache_roundtrip(store: KeyValueStore) -> None:
    assert write_cached_menu(store, CACHE_KEY, SNAPSHOT) is True
    result = read_cached_menu(store, CACHE_KEY)
    assert result.is_ok
    assert result.value == SNAPSHOT


def test_missing_corrupt_or_empty_cache_is_a_failed_result(store: KeyValueStore) -> None:
    assert not read_cached_menu(store, CACHE_KEY).is_ok

    store.set(MENU_NAMESPACE, CACHE_KEY, "{oops")
    assert not read_cached_menu(store, CACHE_KEY).is_ok

    store.set(MENU_NAMESPACE, CACHE_KEY, json.dumps({"items": [], "activeOrder": []}))
    assert not read_cached_menu(store, CACHE_KEY).is_ok


def test_cache_helpers_swallow_storage_failures(broken_store: KeyValueStore) -> None:
    assert write_cached_menu(broken_store, CACHE_KEY, SNAPSHOT) is False
    result = read_cached_menu(broken_store, CACHE_KEY)
    assert isinstance(result.error, PersistenceFailure)


@pytest.mark.parametrize("raw", ["[]", "{}", "null", '[{"id": "x"}, 5]'])
def test_unusable_checks_fall_back_to_default(store: KeyValueStore, raw: str) -> None:
    store.set(CHECKS_NAMESPACE, CHECKS_KEY, raw)
    loaded = load_checks(store)
    assert [check.id for check in loaded.state.checks] == [1]
    assert loaded.state.active_check_id == 1


def test_deeply_nested_cache_is_a_failed_result(store: KeyValueStore) -> None:
    store.set(MENU_NAMESPACE, CACHE_KEY, "[" * 100000 + "]" * 100000)
    result = read_cached_menu(store, CACHE_KEY)
    assert isinstance(result.error, PersistenceFailure)
