"""SQLite key-value persistence for the menu cache and open checks."""

from __future__ import annotations

import json
import logging
import math
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from kassa.errors import PersistenceFailure, Result, ShapeValidationError
from kassa.models import CartLine, Check, LedgerState, MenuSnapshot
from kassa.normalizer import is_valid_id, is_valid_price, normalize

logger = logging.getLogger(__name__)

MENU_NAMESPACE = "menu"
CHECKS_NAMESPACE = "checks"
CHECKS_KEY = "checks"
ACTIVE_CHECK_ID_KEY = "activeCheckId"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def default_ledger_state() -> LedgerState:
    return LedgerState(checks=(Check(id=1),), active_check_id=1)


class KeyValueStore:
    """Namespaced string store; every failure surfaces as PersistenceFailure."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def bootstrap_schema(self) -> None:
        """Create persistence schema if it does not already exist."""
        try:
            with self._connect() as conn:
                conn.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS kv_store (
                        namespace TEXT NOT NULL,
                        key TEXT NOT NULL,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL,
                        PRIMARY KEY (namespace, key)
                    );
                    """
                )
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceFailure(f"Cannot bootstrap {self.db_path}: {exc}") from exc

    def get(self, namespace: str, key: str) -> str | None:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE namespace = ? AND key = ?",
                    (namespace, key),
                ).fetchone()
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceFailure(f"Cannot read {namespace}/{key}: {exc}") from exc
        return None if row is None else str(row[0])

    def set_many(self, namespace: str, values: dict[str, str]) -> None:
        """Write several keys of one namespace in a single transaction."""
        updated_at = _utc_now_iso()
        try:
            with self._connect() as conn:
                with conn:
                    conn.executemany(
                        """
                        INSERT INTO kv_store (namespace, key, value, updated_at)
                        VALUES (?, ?, ?, ?)
                        ON CONFLICT(namespace, key) DO UPDATE SET
                            value = excluded.value,
                            updated_at = excluded.updated_at
                        """,
                        [(namespace, key, value, updated_at) for key, value in values.items()],
                    )
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceFailure(f"Cannot write {namespace}: {exc}") from exc

    def set(self, namespace: str, key: str, value: str) -> None:
        self.set_many(namespace, {key: value})


# ---------------------------------------------------------------- menu cache


def read_cached_menu(store: KeyValueStore, cache_key: str) -> Result[MenuSnapshot]:
    """Return the last cached snapshot, failing when it is absent, corrupt or empty."""
    try:
        raw = store.get(MENU_NAMESPACE, cache_key)
    except PersistenceFailure as exc:
        logger.warning("Menu cache read failed: %s", exc)
        return Result.fail(exc)
    if not raw:
        return Result.fail(PersistenceFailure("No cached menu"))

    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        logger.warning("Menu cache holds corrupt JSON: %s", exc)
        return Result.fail(PersistenceFailure("Corrupt cached menu"))

    snapshot = normalize(payload)
    if not snapshot.items:
        return Result.fail(ShapeValidationError("Cached menu is empty"))
    return Result.ok(snapshot)


def write_cached_menu(store: KeyValueStore, cache_key: str, snapshot: MenuSnapshot) -> bool:
    """Best-effort cache write; returns False instead of raising."""
    try:
        store.set(MENU_NAMESPACE, cache_key, json.dumps(snapshot.to_dict(), ensure_ascii=False))
    except PersistenceFailure as exc:
        logger.warning("Menu cache write failed: %s", exc)
        return False
    return True


# -------------------------------------------------------------------- checks


@dataclass(frozen=True)
class LoadedChecks:
    """Persisted ledger state plus whether repairs were applied while reading it."""

    state: LedgerState
    repaired: bool = False


def _parse_line(raw: Any) -> CartLine | None:
    if not isinstance(raw, dict) or not is_valid_id(raw.get("id")):
        return None
    price = raw.get("price")
    if not is_valid_price(price):
        return None
    return CartLine(
        id=raw["id"],
        name=str(raw.get("name", "")),
        price=price,
        fulfilled=raw.get("fulfilled") is True,
    )


def _same_amount(stored: Any, total: float) -> bool:
    if not is_valid_price(stored):
        return False
    try:
        return math.isclose(stored, total, abs_tol=1e-6)
    except OverflowError:
        return False


def _parse_check(raw: Any) -> tuple[Check | None, bool]:
    if not isinstance(raw, dict):
        return None, True
    check_id = raw.get("id")
    if isinstance(check_id, bool) or not isinstance(check_id, int) or check_id < 1:
        return None, True

    raw_lines = raw.get("items")
    if not isinstance(raw_lines, list):
        raw_lines = []
    lines = [_parse_line(entry) for entry in raw_lines]
    repaired = any(line is None for line in lines)
    kept = tuple(line for line in lines if line is not None)

    total = sum(line.price for line in kept)
    price = raw.get("price")
    if not _same_amount(price, total):
        logger.warning("Check %s stored price %r differs from line sum %r; using line sum", check_id, price, total)
        repaired = True
    change = raw.get("change")
    if not is_valid_price(change):
        change = 0
        repaired = True
    return Check(id=check_id, lines=kept, price=total, change=change), repaired


def load_checks(store: KeyValueStore) -> LoadedChecks:
    """Read persisted checks; corrupt or missing data yields the default single check."""
    try:
        checks_raw = store.get(CHECKS_NAMESPACE, CHECKS_KEY)
        active_raw = store.get(CHECKS_NAMESPACE, ACTIVE_CHECK_ID_KEY)
    except PersistenceFailure as exc:
        logger.warning("Checks read failed, starting fresh: %s", exc)
        return LoadedChecks(default_ledger_state())

    if not checks_raw:
        return LoadedChecks(default_ledger_state())

    try:
        payload = json.loads(checks_raw)
    except (ValueError, RecursionError) as exc:
        logger.warning("Persisted checks are corrupt, starting fresh: %s", exc)
        return LoadedChecks(default_ledger_state(), repaired=True)
    if not isinstance(payload, list):
        logger.warning("Persisted checks are not a list, starting fresh")
        return LoadedChecks(default_ledger_state(), repaired=True)

    checks: list[Check] = []
    seen_ids: set[int] = set()
    repaired = False
    for raw in payload:
        check, check_repaired = _parse_check(raw)
        repaired = repaired or check_repaired
        if check is None or check.id in seen_ids:
            repaired = True
            continue
        seen_ids.add(check.id)
        checks.append(check)

    if not checks:
        return LoadedChecks(default_ledger_state(), repaired=True)

    try:
        active_id = int(active_raw) if active_raw else 1
    except ValueError:
        active_id = 1
    if active_id not in seen_ids:
        active_id = checks[-1].id
        repaired = True

    return LoadedChecks(LedgerState(checks=tuple(checks), active_check_id=active_id), repaired=repaired)


def save_checks(store: KeyValueStore, state: LedgerState) -> bool:
    """Persist the full collection and active id; failures are logged, not raised."""
    try:
        store.set_many(
            CHECKS_NAMESPACE,
            {
                CHECKS_KEY: json.dumps([check.to_dict() for check in state.checks], ensure_ascii=False),
                ACTIVE_CHECK_ID_KEY: str(state.active_check_id),
            },
        )
    except PersistenceFailure as exc:
        logger.warning("Checks write failed: %s", exc)
        return False
    return True
