"""Menu item form modal screen."""

from __future__ import annotations

from typing import Any

from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Checkbox, Input, Static

from kassa.catalog import normalize_category
from kassa.change_modal import parse_given
from kassa.models import MenuItem


def item_form_data(name: str, price: str, category: str, show: bool) -> dict[str, Any]:
    """Turn raw form fields into item data; an unparseable price is passed as None."""
    return {
        "name": name.strip(),
        "price": parse_given(price.strip()) if price.strip() else None,
        "category": normalize_category(category),
        "show": show,
    }


class ItemModal(ModalScreen[dict[str, Any] | None]):
    """Create a menu item, or edit one when an item is given."""

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
        ("ctrl+s", "save", "Save"),
        ("tab", "app.focus_next", "Next field"),
        ("shift+tab", "app.focus_previous", "Previous field"),
    ]

    CSS = """
    ItemModal {
        align: center middle;
        background: $background 60%;
    }

    #item-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #item-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #item-dialog Input {
        margin-bottom: 1;
    }

    #item-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self, item: MenuItem | None = None) -> None:
        super().__init__()
        self.item = item

    def compose(self) -> ComposeResult:
        item = self.item
        title = f"Edit {item.name}" if item is not None else "New item"
        price = "" if item is None else str(item.price)
        with Container(id="item-dialog"):
            yield Static(title, id="item-title")
            yield Input(value="" if item is None else item.name, placeholder="Name", id="item-name")
            yield Input(value=price, placeholder="Price", id="item-price")
            yield Input(
                value="other" if item is None else normalize_category(item.category),
                placeholder="Category: drinks, food, alcohol, other",
                id="item-category",
            )
            yield Checkbox("Show in menu", value=True if item is None else item.show, id="item-show")
            yield Static("Tab next field. Enter or Ctrl+S save. Esc cancel.", id="item-help")

    def on_mount(self) -> None:
        self.query_one("#item-name", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.action_save()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def action_save(self) -> None:
        self.dismiss(
            item_form_data(
                self.query_one("#item-name", Input).value,
                self.query_one("#item-price", Input).value,
                self.query_one("#item-category", Input).value,
                self.query_one("#item-show", Checkbox).value,
            )
        )
