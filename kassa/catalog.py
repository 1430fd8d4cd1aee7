"""Catalog browsing: visibility, search, category sections and display order."""

from __future__ import annotations

from dataclasses import dataclass

from kassa.constant import CATEGORY_ALIASES, CATEGORY_ORDER
from kassa.data import label_for_category
from kassa.models import MenuItem, MenuSnapshot


@dataclass(frozen=True)
class MenuSection:
    category: str
    label: str
    items: list[MenuItem]


def normalize_category(value: object) -> str:
    """Map a raw category spelling onto a known slug; unknown values fall into 'other'."""
    raw = "" if value is None else str(value).strip().lower()
    return CATEGORY_ALIASES.get(raw, "other")


def visible_items(snapshot: MenuSnapshot, query: str = "", category: str = "") -> list[MenuItem]:
    """Shown items matching the search, ordered by active order then by name."""
    needle = query.strip().lower()
    order_index = {item_id: idx for idx, item_id in enumerate(snapshot.active_order)}

    matches = [
        item
        for item in snapshot.items
        if item.show
        and (not needle or needle in item.name.lower())
        and (not category or normalize_category(item.category) == category)
    ]

    def sort_key(item: MenuItem) -> tuple[int, int, str]:
        position = order_index.get(item.id)
        if position is None:
            return (1, 0, item.name.casefold())
        return (0, position, "")

    return sorted(matches, key=sort_key)


def menu_sections(snapshot: MenuSnapshot, query: str = "", category: str = "") -> list[MenuSection]:
    """Group visible items by category in CATEGORY_ORDER."""
    grouped: dict[str, list[MenuItem]] = {}
    for item in visible_items(snapshot, query, category):
        grouped.setdefault(normalize_category(item.category), []).append(item)

    ordered = [slug for slug in CATEGORY_ORDER if slug in grouped]
    return [MenuSection(category=slug, label=label_for_category(slug), items=grouped[slug]) for slug in ordered]
