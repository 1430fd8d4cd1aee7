from __future__ import annotations

import json
import random

from kassa.ledger import CheckLedger
from kassa.models import Check, MenuItem
from kassa.persistence import ACTIVE_CHECK_ID_KEY, CHECKS_KEY, CHECKS_NAMESPACE, KeyValueStore

LATTE = MenuItem(id=1, name="Latte", price=100, show=True)
COOKIE = MenuItem(id=2, name="Cookie", price=50, show=True)


def _ledger(store: KeyValueStore) -> CheckLedger:
    ledger = CheckLedger(store)
    ledger.load()
    return ledger


def _line_sum(check: Check) -> float:
    return sum(line.price for line in check.lines)


# ------------------------------ creation / defaults ----------------------------


def test_fresh_ledger_has_single_default_check(store: KeyValueStore) -> None:
    ledger = _ledger(store)
    assert ledger.checks == (Check(id=1),)
    assert ledger.active_check_id == 1


def test_create_check_uses_max_plus_one_and_activates(store: KeyValueStore) -> None:
    ledger = _ledger(store)
    ledger.create_check()
    state = ledger.create_check()
    assert [check.id for check in state.checks] == [1, 2, 3]
    assert state.active_check_id == 3


# ------------------------------ lines and price --------------------------------


def test_scenario_add_lines_keeps_running_price(store: KeyValueStore) -> None:
    ledger = _ledger(store)
    ledger.add_line(LATTE)
    ledger.add_line(LATTE)
    state = ledger.add_line(COOKIE)
    check = state.active_check
    assert check is not None
    assert check.price == 250
    assert [line.id for line in check.lines] == [1, 1, 2]
    assert all(line.fulfilled is False for line in check.lines)


def test_price_matches_line_sum_after_every_call(store: KeyValueStore) -> None:
    rng = random.Random(7)
    items = [MenuItem(id=i, name=f"item {i}", price=price) for i, price in enumerate([0, 15, 70, 120, 333])]
    ledger = _ledger(store)
    for _ in range(200):
        check = ledger.active_check()
        assert check is not None
        if check.lines and rng.random() < 0.4:
            ledger.remove_line(rng.randrange(len(check.lines) + 2))
        else:
            ledger.add_line(rng.choice(items))
        check = ledger.active_check()
        assert check is not None
        assert check.price == _line_sum(check)


def test_remove_line_preserves_order_and_ignores_bad_index(store: KeyValueStore) -> None:
    ledger = _ledger(store)
    ledger.add_line(LATTE)
    ledger.add_line(COOKIE)
    ledger.add_line(LATTE)

    before = ledger.state
    assert ledger.remove_line(10) == before
    assert ledger.remove_line(-1) == before

    state = ledger.remove_line(1)
    check = state.active_check
    assert check is not None
    assert [line.id for line in check.lines] == [1, 1]
    assert check.price == 200


def test_add_line_to_unknown_check_is_noop(store: KeyValueStore) -> None:
    ledger = _ledger(store)
    before = ledger.state
    assert ledger.add_line(LATTE, check_id=42) == before


# ------------------------------ fulfilment / change ----------------------------


def test_set_fulfilled_on_another_check(store: KeyValueStore) -> None:
    ledger = _ledger(store)
    ledger.add_line(LATTE)
    ledger.add_line(COOKIE)
    ledger.create_check()
    assert ledger.active_check_id == 2

    state = ledger.set_fulfilled([1], True, check_id=1)
    first = state.checks[0]
    assert [line.fulfilled for line in first.lines] == [False, True]
    assert state.active_check_id == 2


def test_set_fulfilled_with_no_indices_is_noop(store: KeyValueStore) -> None:
    ledger = _ledger(store)
    ledger.add_line(LATTE)
    before = ledger.state
    assert ledger.set_fulfilled([], True) is before


def test_scenario_change_is_clamped(store: KeyValueStore) -> None:
    ledger = _ledger(store)
    ledger.add_line(LATTE)
    ledger.add_line(LATTE)
    ledger.add_line(COOKIE)

    state = ledger.set_change(300)
    assert state.active_check is not None
    assert state.active_check.change == 50

    state = ledger.set_change(200)
    assert state.active_check is not None
    assert state.active_check.change == 0


# ------------------------------ completion -------------------------------------


def test_complete_sole_check_resets_to_default(store: KeyValueStore) -> None:
    ledger = _ledger(store)
    ledger.add_line(LATTE)
    ledger.set_change(500)
    state = ledger.complete_check()
    assert state.checks == (Check(id=1, lines=(), price=0, change=0),)
    assert state.active_check_id == 1


def test_scenario_complete_middle_check_selects_last_remaining(store: KeyValueStore) -> None:
    ledger = _ledger(store)
    ledger.create_check()
    ledger.create_check()
    ledger.select_check(2)

    state = ledger.complete_check(2)
    assert [check.id for check in state.checks] == [1, 3]
    assert state.active_check_id == 3


def test_ids_are_reused_after_completion(store: KeyValueStore) -> None:
    ledger = _ledger(store)
    ledger.create_check()
    ledger.complete_check()
    state = ledger.create_check()
    assert [check.id for check in state.checks] == [1, 2]


def test_select_unknown_check_keeps_active(store: KeyValueStore) -> None:
    ledger = _ledger(store)
    ledger.create_check()
    assert ledger.select_check(99).active_check_id == 2


# ------------------------------ persistence ------------------------------------


def test_every_mutation_is_visible_after_reload(store: KeyValueStore) -> None:
    ledger = _ledger(store)
    ledger.add_line(LATTE)
    ledger.create_check()
    ledger.add_line(COOKIE)
    ledger.set_fulfilled([0], True)

    reloaded = _ledger(store)
    assert reloaded.state == ledger.state


def test_listeners_receive_new_state(store: KeyValueStore) -> None:
    ledger = _ledger(store)
    received = []
    unsubscribe = ledger.subscribe(received.append)
    state = ledger.add_line(LATTE)
    assert received == [state]
    unsubscribe()
    ledger.add_line(LATTE)
    assert len(received) == 1


def test_corrupt_checks_fall_back_to_default(store: KeyValueStore) -> None:
    store.set(CHECKS_NAMESPACE, CHECKS_KEY, "{not json")
    ledger = _ledger(store)
    assert ledger.checks == (Check(id=1),)
    assert ledger.active_check_id == 1


def test_load_repairs_price_and_dangling_active_id(store: KeyValueStore) -> None:
    stored = [
        {"id": 1, "items": [{"id": 1, "name": "Latte", "price": 100, "fulfilled": False}], "price": 999, "change": 0},
        {"id": 4, "items": [], "price": 0, "change": 0},
    ]
    store.set_many(CHECKS_NAMESPACE, {CHECKS_KEY: json.dumps(stored), ACTIVE_CHECK_ID_KEY: "7"})

    ledger = _ledger(store)
    assert ledger.checks[0].price == 100
    assert ledger.active_check_id == 4


def test_ledger_keeps_working_when_storage_fails(broken_store: KeyValueStore) -> None:
    ledger = _ledger(broken_store)
    ledger.add_line(LATTE)
    state = ledger.create_check()
    assert [check.id for check in state.checks] == [1, 2]
    assert ledger.flush() is False


def test_deeply_nested_checks_fall_back_to_default(store: KeyValueStore) -> None:
    store.set(CHECKS_NAMESPACE, CHECKS_KEY, "[" * 100000 + "]" * 100000)
    ledger = _ledger(store)
    assert ledger.checks == (Check(id=1),)
    assert ledger.active_check_id == 1


def test_oversized_amounts_are_repaired_on_load(store: KeyValueStore) -> None:
    stored = [
        {"id": 1, "items": [], "price": 10**400, "change": 10**400},
        {
            "id": 2,
            "items": [
                {"id": 1, "name": "Latte", "price": 100, "fulfilled": False},
                {"id": 9, "name": "Broken", "price": 10**400, "fulfilled": False},
            ],
            "price": 100,
            "change": 0,
        },
    ]
    store.set_many(CHECKS_NAMESPACE, {CHECKS_KEY: json.dumps(stored), ACTIVE_CHECK_ID_KEY: "1"})

    ledger = _ledger(store)
    first, second = ledger.checks
    assert first == Check(id=1, lines=(), price=0, change=0)
    assert [line.id for line in second.lines] == [1]
    assert second.price == 100
    # the repaired collection is written back
    assert json.loads(store.get(CHECKS_NAMESPACE, CHECKS_KEY))[0]["price"] == 0
