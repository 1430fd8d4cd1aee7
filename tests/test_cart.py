from __future__ import annotations

import pytest

from kassa.cart import coffee_letter, fulfilment_entries, group_lines, is_coffee_item, item_counts, last_index
from kassa.models import CartLine, CartLineGroup, Check


def _lines() -> list[CartLine]:
    return [
        CartLine(id=1, name="Latte", price=100),
        CartLine(id=2, name="Cookie", price=50),
        CartLine(id=1, name="Latte", price=100, fulfilled=True),
        CartLine(id=3, name="Tea", price=80, fulfilled=True),
        CartLine(id=1, name="Latte", price=120),
    ]


def test_groups_follow_first_occurrence_order() -> None:
    groups = group_lines(_lines())
    assert [group.id for group in groups] == [1, 2, 3]
    assert groups[0].indices == [0, 2, 4]
    assert groups[1].indices == [1]


def test_quantities_sum_to_line_count_and_totals_are_literal_sums() -> None:
    lines = _lines()
    groups = group_lines(lines)
    assert sum(group.quantity for group in groups) == len(lines)
    for group in groups:
        assert group.total_price == sum(lines[idx].price for idx in group.indices)
    # non-uniform pricing of same-id lines is summed, not multiplied
    assert groups[0].total_price == 320
    assert groups[0].price == 100


def test_fulfilled_counts() -> None:
    groups = group_lines(_lines())
    assert groups[0].fulfilled_count == 1
    assert not groups[0].fully_fulfilled
    assert groups[2].fully_fulfilled
    assert not CartLineGroup(id=9, name="Empty", price=0).fully_fulfilled


def test_scenario_two_lattes_and_a_cookie() -> None:
    lines = [
        CartLine(id=1, name="A", price=100),
        CartLine(id=1, name="A", price=100),
        CartLine(id=2, name="B", price=50),
    ]
    groups = group_lines(lines)
    assert [(g.id, g.quantity, g.total_price) for g in groups] == [(1, 2, 200), (2, 1, 50)]


def test_empty_input() -> None:
    assert group_lines([]) == []
    assert item_counts([]) == {}


def test_item_counts_and_last_index() -> None:
    assert item_counts(_lines()) == {1: 3, 2: 1, 3: 1}
    groups = group_lines(_lines())
    assert last_index(groups[0]) == 4
    assert last_index(CartLineGroup(id=1, name="x", price=1)) is None


def test_fulfilment_entries_span_every_check() -> None:
    checks = [
        Check(id=1, lines=(CartLine(id=4, name="Latte", price=210), CartLine(id=12, name="Cookie", price=70))),
        Check(id=2, lines=()),
        Check(id=3, lines=(CartLine(id=20, name="Капучино", price=190, fulfilled=True),)),
    ]
    entries = fulfilment_entries(checks)
    assert [(entry.check_id, entry.index, entry.letter, entry.fulfilled) for entry in entries] == [
        (1, 0, "L", False),
        (3, 0, "К", True),
    ]


@pytest.mark.parametrize(
    "name, coffee, letter",
    [
        ("Flat White", True, "F"),
        ("Iced Americano", True, "A"),
        ("Craft Beer", False, "C"),
        ("Cocoa", False, "C"),
        ("Раф ванильный", True, "Р"),
    ],
)
def test_coffee_detection_and_letters(name: str, coffee: bool, letter: str) -> None:
    assert is_coffee_item(name) is coffee
    assert coffee_letter(name) == letter
