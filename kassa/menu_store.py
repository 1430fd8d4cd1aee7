"""Menu state container: guarded loading plus catalog management."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Mapping

from kassa.data import BUNDLED_MENU
from kassa.errors import ItemNotFoundError, ItemValidationError
from kassa.menu_sync import MenuSource, MenuSync, SaveResult
from kassa.models import ItemId, MenuItem, MenuSnapshot
from kassa.normalizer import ensure_active_order_consistency, validate_menu_item
from kassa.revision import RevisionGuard

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("name", "price", "category", "show")


@dataclass(frozen=True)
class MenuState:
    snapshot: MenuSnapshot = BUNDLED_MENU
    loading: bool = False
    error: str | None = None
    source: MenuSource = "bundled"
    local_only: bool = False

    @property
    def offline(self) -> bool:
        return self.source != "primary" or self.local_only


MenuListener = Callable[[MenuState], None]


def next_item_id(items: Iterable[MenuItem]) -> int:
    """Next numeric id after the largest one, or a millisecond timestamp when none is numeric."""
    numeric_ids: list[int] = []
    for item in items:
        try:
            value = float(item.id)
        except (TypeError, ValueError, OverflowError):
            continue
        if math.isfinite(value) and value >= 0 and value == int(value):
            numeric_ids.append(int(value))
    if not numeric_ids:
        return int(time.time() * 1000)
    return max(numeric_ids) + 1


def _merged_fields(base: Mapping[str, Any], changes: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    merged.update({key: value for key, value in changes.items() if key in _EDITABLE_FIELDS})
    return merged


def _build_item(fields: Mapping[str, Any]) -> MenuItem:
    if not validate_menu_item(fields):
        raise ItemValidationError("Invalid item data: name must be non-empty and price a number >= 0")
    category = fields.get("category")
    return MenuItem(
        id=fields["id"],
        name=fields["name"],
        price=fields["price"],
        category="" if category is None else str(category),
        show=fields.get("show") is True,
    )


class MenuManager:
    """Owns the catalog shown to operators and the admin edits applied to it."""

    def __init__(self, sync: MenuSync) -> None:
        self.sync = sync
        self.guard = RevisionGuard()
        self._state = MenuState()
        self._listeners: list[MenuListener] = []

    @property
    def state(self) -> MenuState:
        return self._state

    @property
    def snapshot(self) -> MenuSnapshot:
        return self._state.snapshot

    def subscribe(self, listener: MenuListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    # --------------------------------------------------------------- loading

    async def reload(self) -> bool:
        """Fetch the menu; returns False when a newer load or edit superseded this one."""
        token = self.guard.begin()
        self._set_state(loading=True, error=None)
        try:
            outcome = await self.sync.fetch()
        except Exception as exc:
            # fetch() is not expected to raise.
            if not token.is_current:
                return False
            logger.exception("Menu load failed, bundled menu is used")
            self._set_state(snapshot=BUNDLED_MENU, source="bundled", loading=False, error=str(exc))
            return True

        if not token.is_current:
            logger.info("Discarding stale menu load (revision %d)", token.revision)
            return False

        error = None if outcome.source == "primary" else "Menu server unreachable, showing offline menu"
        self._set_state(
            snapshot=outcome.snapshot,
            source=outcome.source,
            loading=False,
            error=error,
            local_only=False,
        )
        return True

    # ---------------------------------------------------------------- admin

    async def _persist(self, items: list[MenuItem], order: Iterable[ItemId]) -> SaveResult:
        consistent = ensure_active_order_consistency(items, order)
        self.guard.invalidate()
        result = await self.sync.save_menu(items, consistent)
        self._set_state(
            snapshot=result.snapshot,
            loading=False,
            local_only=result.local_only,
            error=result.message if result.local_only else None,
        )
        return result

    async def add_item(self, data: Mapping[str, Any]) -> MenuItem:
        items = list(self.snapshot.items)
        new_id = next_item_id(items)
        item = _build_item(_merged_fields({"id": new_id}, data))

        order = [item_id for item_id in self.snapshot.active_order if item_id != new_id]
        if item.show:
            order.append(new_id)

        await self._persist(items + [item], order)
        return item

    async def update_item(self, item_id: ItemId, data: Mapping[str, Any]) -> MenuItem:
        items = list(self.snapshot.items)
        index = next((idx for idx, item in enumerate(items) if item.id == item_id), None)
        if index is None:
            raise ItemNotFoundError(f"Item {item_id!r} not found")

        updated = _build_item(_merged_fields(items[index].to_dict(), data))
        items[index] = updated

        order = [existing for existing in self.snapshot.active_order if existing != item_id]
        if updated.show:
            order.append(item_id)

        await self._persist(items, order)
        return updated

    async def delete_item(self, item_id: ItemId) -> None:
        items = [item for item in self.snapshot.items if item.id != item_id]
        order = [existing for existing in self.snapshot.active_order if existing != item_id]
        await self._persist(items, order)

    async def toggle_item(self, item_id: ItemId) -> MenuItem | None:
        item = self.snapshot.find(item_id)
        if item is None:
            return None
        return await self.update_item(item_id, {"show": not item.show})
