"""Check ledger: the open receipts and which one is being edited."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable

from kassa.models import CartLine, Check, LedgerState, MenuItem
from kassa.persistence import KeyValueStore, default_ledger_state, load_checks, save_checks

logger = logging.getLogger(__name__)

LedgerListener = Callable[[LedgerState], None]


class CheckLedger:
    """
    State container over the check collection.

    Every command applies its change in memory, writes the whole collection
    through to the store, notifies listeners and returns the new state.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self._state = default_ledger_state()
        self._listeners: list[LedgerListener] = []

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def checks(self) -> tuple[Check, ...]:
        return self._state.checks

    @property
    def active_check_id(self) -> int:
        return self._state.active_check_id

    def active_check(self) -> Check | None:
        return self._state.active_check

    def subscribe(self, listener: LedgerListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------ lifecycle

    def load(self) -> LedgerState:
        """Replace in-memory state with the persisted one."""
        loaded = load_checks(self.store)
        self._state = loaded.state
        if loaded.repaired:
            save_checks(self.store, self._state)
        logger.info("Ledger loaded: checks=%d active=%d", len(self._state.checks), self._state.active_check_id)
        self._notify()
        return self._state

    def flush(self) -> bool:
        return save_checks(self.store, self._state)

    # ------------------------------------------------------------- commands

    def create_check(self) -> LedgerState:
        new_id = max((check.id for check in self.checks), default=0) + 1
        return self._commit(self.checks + (Check(id=new_id),), new_id)

    def select_check(self, check_id: int) -> LedgerState:
        if self._find(check_id) is None:
            return self._state
        return self._commit(self.checks, check_id)

    def add_line(self, item: MenuItem, check_id: int | None = None) -> LedgerState:
        line = CartLine(id=item.id, name=item.name, price=item.price, fulfilled=False)
        return self._update(
            check_id,
            lambda check: replace(check, lines=check.lines + (line,), price=check.price + item.price),
        )

    def remove_line(self, index: int, check_id: int | None = None) -> LedgerState:
        def remove(check: Check) -> Check:
            if not (0 <= index < len(check.lines)):
                return check
            removed = check.lines[index]
            lines = check.lines[:index] + check.lines[index + 1 :]
            return replace(check, lines=lines, price=check.price - removed.price)

        return self._update(check_id, remove)

    def set_fulfilled(self, indices: Iterable[int], fulfilled: bool, check_id: int | None = None) -> LedgerState:
        targets = set(indices)
        if not targets:
            return self._state

        def toggle(check: Check) -> Check:
            lines = tuple(
                replace(line, fulfilled=fulfilled) if idx in targets else line
                for idx, line in enumerate(check.lines)
            )
            return replace(check, lines=lines)

        return self._update(check_id, toggle)

    def set_change(self, given: float, check_id: int | None = None) -> LedgerState:
        return self._update(check_id, lambda check: replace(check, change=max(0, given - check.price)))

    def complete_check(self, check_id: int | None = None) -> LedgerState:
        target_id = self.active_check_id if check_id is None else check_id
        if self._find(target_id) is None:
            return self._state

        remaining = tuple(check for check in self.checks if check.id != target_id)
        if not remaining:
            return self._commit((Check(id=1),), 1)
        return self._commit(remaining, remaining[-1].id)

    # -------------------------------------------------------------- helpers

    def _find(self, check_id: int) -> Check | None:
        for check in self.checks:
            if check.id == check_id:
                return check
        return None

    def _update(self, check_id: int | None, change: Callable[[Check], Check]) -> LedgerState:
        target_id = self.active_check_id if check_id is None else check_id
        if self._find(target_id) is None:
            logger.debug("Ignoring change for unknown check %s", target_id)
            return self._state
        checks = tuple(change(check) if check.id == target_id else check for check in self.checks)
        return self._commit(checks, self.active_check_id)

    def _commit(self, checks: tuple[Check, ...], active_check_id: int) -> LedgerState:
        self._state = LedgerState(checks=checks, active_check_id=active_check_id)
        save_checks(self.store, self._state)
        self._notify()
        return self._state

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)
