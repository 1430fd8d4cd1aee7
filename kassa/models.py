"""Domain models for kassa."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

ItemId = int | str


@dataclass(frozen=True)
class MenuItem:
    """A catalog entry shared across devices."""

    id: ItemId
    name: str
    price: float
    category: str = ""
    show: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "category": self.category,
            "show": self.show,
        }


@dataclass(frozen=True)
class MenuSnapshot:
    """A validated catalog plus the display order of visible items."""

    items: tuple[MenuItem, ...] = ()
    active_order: tuple[ItemId, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "activeOrder": list(self.active_order),
        }

    def find(self, item_id: ItemId) -> MenuItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


@dataclass(frozen=True)
class CartLine:
    """One unit of a menu item registered on a check."""

    id: ItemId
    name: str
    price: float
    fulfilled: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "price": self.price, "fulfilled": self.fulfilled}


@dataclass(frozen=True)
class Check:
    """A draft receipt with its running price and recorded change."""

    id: int
    lines: tuple[CartLine, ...] = ()
    price: float = 0
    change: float = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "items": [line.to_dict() for line in self.lines],
            "price": self.price,
            "change": self.change,
        }


@dataclass(frozen=True)
class LedgerState:
    """All open checks plus the id of the one being edited."""

    checks: tuple[Check, ...]
    active_check_id: int

    @property
    def active_check(self) -> Check | None:
        for check in self.checks:
            if check.id == self.active_check_id:
                return check
        return None


@dataclass
class CartLineGroup:
    """Lines of one check sharing a catalog id, built for display only."""

    id: ItemId
    name: str
    price: float
    quantity: int = 0
    total_price: float = 0
    indices: list[int] = field(default_factory=list)
    fulfilled_count: int = 0

    @property
    def fully_fulfilled(self) -> bool:
        return self.quantity > 0 and self.fulfilled_count == self.quantity
