"""Read-only projections of check lines for display."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from kassa.constant import COFFEE_KEYWORDS, COFFEE_LETTERS
from kassa.models import CartLine, CartLineGroup, Check, ItemId


def group_lines(lines: Iterable[CartLine]) -> list[CartLineGroup]:
    """Group lines by catalog id, in first-occurrence order, keeping original indices."""
    groups: list[CartLineGroup] = []
    by_id: dict[ItemId, CartLineGroup] = {}

    for index, line in enumerate(lines):
        group = by_id.get(line.id)
        if group is None:
            group = CartLineGroup(id=line.id, name=line.name, price=line.price)
            by_id[line.id] = group
            groups.append(group)

        group.quantity += 1
        # Literal sum: same-id lines are not assumed to share a price.
        group.total_price += line.price
        group.indices.append(index)
        if line.fulfilled:
            group.fulfilled_count += 1

    return groups


def item_counts(lines: Iterable[CartLine]) -> dict[ItemId, int]:
    """Count registered units per catalog id."""
    counts: dict[ItemId, int] = {}
    for line in lines:
        counts[line.id] = counts.get(line.id, 0) + 1
    return counts


def last_index(group: CartLineGroup) -> int | None:
    """Line index to drop when one unit of a group is removed."""
    if not group.indices:
        return None
    return group.indices[-1]


@dataclass(frozen=True)
class FulfilmentEntry:
    """One barista line of some check, addressed by check id and line index."""

    check_id: int
    index: int
    name: str
    letter: str
    fulfilled: bool


def _words(name: str) -> list[str]:
    return name.lower().split()


def is_coffee_item(name: str) -> bool:
    return any(word.startswith(keyword) for word in _words(name) for keyword in COFFEE_KEYWORDS)


def coffee_letter(name: str) -> str:
    words = _words(name)
    for stem, letter in COFFEE_LETTERS:
        if any(word.startswith(stem) for word in words):
            return letter
    stripped = name.strip()
    return stripped[0].upper() if stripped else "?"


def fulfilment_entries(checks: Iterable[Check]) -> list[FulfilmentEntry]:
    """Coffee lines across every check, in check order then line order."""
    entries: list[FulfilmentEntry] = []
    for check in checks:
        for index, line in enumerate(check.lines):
            if not is_coffee_item(line.name):
                continue
            entries.append(
                FulfilmentEntry(
                    check_id=check.id,
                    index=index,
                    name=line.name,
                    letter=coffee_letter(line.name),
                    fulfilled=line.fulfilled,
                )
            )
    return entries
