"""Rendering helpers for checks, cart groups and menu status."""

from __future__ import annotations

from rich.text import Text

from kassa.config import CURRENCY_LABEL
from kassa.menu_store import MenuState
from kassa.models import CartLineGroup, Check


def format_price(price: float, currency_label: str = CURRENCY_LABEL) -> str:
    """Render a price without a trailing .0 for whole amounts."""
    if isinstance(price, float) and price.is_integer():
        price = int(price)
    return f"{price} {currency_label}"


def format_group_label(group: CartLineGroup, currency_label: str = CURRENCY_LABEL) -> Text:
    """Render a grouped cart row; fully fulfilled groups are struck through."""
    style = "strike dim" if group.fully_fulfilled else ""
    text = Text(style=style)
    text.append(group.name)
    text.append(f" x{group.quantity}", style="bold")
    text.append(f"  {format_price(group.total_price, currency_label)}")
    if group.quantity > 1:
        text.append(f" ({format_price(group.price, currency_label)} each)", style="dim")
    return text


def format_check_tabs(checks: tuple[Check, ...], active_check_id: int) -> Text:
    """Render check ids as tabs with the active one highlighted."""
    text = Text()
    for idx, check in enumerate(checks):
        if idx > 0:
            text.append(" ")
        if check.id == active_check_id:
            text.append(f" #{check.id} ", style="bold #ffffff on #2f6db5")
        else:
            text.append(f" #{check.id} ", style="dim")
    return text


def source_badge(state: MenuState) -> Text:
    """Render the menu source with a visible offline indicator."""
    text = Text()
    if state.loading:
        text.append(" LOADING ", style="bold #0b1f0f on #e0c341")
    elif state.offline:
        text.append(" OFFLINE ", style="bold #ffffff on #b23a48")
    else:
        text.append(" ONLINE ", style="bold #0b1f0f on #5fbf72")
    text.append(f" {state.source}", style="dim")
    return text
