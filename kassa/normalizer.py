"""Canonicalization of arbitrary catalog payloads into menu snapshots."""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

from kassa.models import ItemId, MenuItem, MenuSnapshot

EMPTY_MENU = MenuSnapshot()


def is_valid_id(value: Any) -> bool:
    """Ids are ints or strings; bools are rejected even though they are ints."""
    return isinstance(value, (int, str)) and not isinstance(value, bool)


def is_valid_price(value: Any) -> bool:
    """Prices are finite numbers >= 0 that fit in a float."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value) and value >= 0
    except OverflowError:
        return False


def validate_menu_item(item: Any) -> bool:
    """Return True when a raw item has an id, a non-empty name and a price >= 0."""
    if isinstance(item, MenuItem):
        item = item.to_dict()
    if not isinstance(item, Mapping):
        return False
    name = item.get("name")
    return (
        is_valid_id(item.get("id"))
        and isinstance(name, str)
        and bool(name.strip())
        and is_valid_price(item.get("price"))
    )


def is_menu_payload(payload: Any) -> bool:
    """Check whether a response body looks like menu data at all."""
    if isinstance(payload, list):
        return True
    if not isinstance(payload, Mapping):
        return False
    return any(isinstance(payload.get(key), list) for key in ("items", "menu", "activeOrder"))


def ensure_active_order_consistency(items: Iterable[MenuItem], order: Iterable[Any]) -> tuple[ItemId, ...]:
    """
    Reconcile a display order against the catalog.

    Keeps the first occurrence of every visible item id from `order`, then
    appends the ids of visible items not listed yet, in catalog order. Hidden
    and unknown ids are dropped.
    """
    items = list(items)
    valid_ids = {item.id for item in items if item.show}
    seen: set[ItemId] = set()
    ordered: list[ItemId] = []

    for item_id in order:
        if not is_valid_id(item_id) or item_id not in valid_ids or item_id in seen:
            continue
        ordered.append(item_id)
        seen.add(item_id)

    for item in items:
        if item.show and item.id not in seen:
            ordered.append(item.id)
            seen.add(item.id)

    return tuple(ordered)


def _coerce_item(raw: Mapping[str, Any]) -> MenuItem:
    category = raw.get("category")
    return MenuItem(
        id=raw["id"],
        name=raw["name"],
        price=raw["price"],
        category="" if category is None else str(category),
        show=raw.get("show") is True,
    )


def _extract(payload: Any) -> tuple[list[Any], list[Any] | None]:
    if isinstance(payload, MenuSnapshot):
        payload = payload.to_dict()
    if isinstance(payload, list):
        return payload, None
    if not isinstance(payload, Mapping):
        return [], None

    raw_items = payload.get("items")
    if not isinstance(raw_items, list):
        raw_items = payload.get("menu")
    if not isinstance(raw_items, list):
        raw_items = []

    raw_order = payload.get("activeOrder")
    return raw_items, raw_order if isinstance(raw_order, list) else None


def normalize(payload: Any) -> MenuSnapshot:
    """
    Turn any menu-like payload into a consistent MenuSnapshot.

    Accepts a bare item list, ``{"items": [...]}`` or ``{"menu": [...]}``, with an
    optional ``activeOrder``. Never raises; unusable input yields an empty menu.
    """
    raw_items, raw_order = _extract(payload)

    items: list[MenuItem] = []
    seen_ids: set[ItemId] = set()
    for raw in raw_items:
        if not validate_menu_item(raw) or raw["id"] in seen_ids:
            continue
        seen_ids.add(raw["id"])
        items.append(_coerce_item(raw))

    active_order = ensure_active_order_consistency(items, raw_order or [])
    return MenuSnapshot(items=tuple(items), active_order=active_order)
