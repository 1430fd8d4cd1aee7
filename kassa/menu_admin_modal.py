"""Menu management modal screen."""

from __future__ import annotations

from typing import Any, Awaitable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from kassa.errors import ItemNotFoundError, ItemValidationError
from kassa.item_modal import ItemModal
from kassa.menu_store import MenuManager
from kassa.models import ItemId, MenuItem
from kassa.rendering import format_price


class MenuAdminModal(ModalScreen[None]):
    """Centered modal to show, hide, add, edit and delete catalog items."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "toggle_current", "Toggle"),
        ("a", "add_item", "Add"),
        ("e", "edit_item", "Edit"),
        ("d", "delete_item", "Delete"),
    ]

    CSS = """
    MenuAdminModal {
        align: center middle;
        background: $background 60%;
    }

    #admin-dialog {
        width: 64;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #admin-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #admin-body {
        color: white;
    }

    #admin-status {
        margin-top: 1;
        color: #ffb3b3;
    }

    #admin-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(self, menu: MenuManager) -> None:
        super().__init__()
        self.menu = menu
        self.status = ""
        self._pending_delete: ItemId | None = None

    def compose(self) -> ComposeResult:
        with Container(id="admin-dialog"):
            yield Static("Menu", id="admin-title")
            yield Static(id="admin-body")
            yield Static(id="admin-status")
            yield Static("J/K move, Enter show/hide, A add, E edit, D delete, Esc/q close", id="admin-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def action_close(self) -> None:
        self.dismiss()

    def action_move_cursor(self, delta: int) -> None:
        items = self.menu.snapshot.items
        if not items:
            return
        self._pending_delete = None
        self.cursor_index = (self.cursor_index + delta) % len(items)
        self._refresh_content()

    def _current_item(self) -> MenuItem | None:
        items = self.menu.snapshot.items
        if not items:
            return None
        return items[min(self.cursor_index, len(items) - 1)]

    async def action_toggle_current(self) -> None:
        item = self._current_item()
        if item is None:
            return
        await self.apply_edit(self.menu.toggle_item(item.id))

    def action_add_item(self) -> None:
        self._pending_delete = None
        self.app.push_screen(ItemModal(), callback=lambda data: self._on_item_form(None, data))

    def action_edit_item(self) -> None:
        item = self._current_item()
        if item is None:
            return
        self._pending_delete = None
        self.app.push_screen(ItemModal(item), callback=lambda data: self._on_item_form(item.id, data))

    async def action_delete_item(self) -> None:
        item = self._current_item()
        if item is None:
            return
        if self._pending_delete != item.id:
            self._pending_delete = item.id
            self.status = f"Press D again to delete {item.name}"
            self._refresh_content()
            return
        self._pending_delete = None
        await self.apply_edit(self.menu.delete_item(item.id))

    def _on_item_form(self, item_id: ItemId | None, data: dict[str, Any] | None) -> None:
        if data is None:
            return
        if item_id is None:
            self.run_worker(self.apply_edit(self.menu.add_item(data)), exit_on_error=False)
        else:
            self.run_worker(self.apply_edit(self.menu.update_item(item_id, data)), exit_on_error=False)

    async def apply_edit(self, edit: Awaitable[Any]) -> None:
        """Run one catalog command and show its outcome in the status line."""
        try:
            await edit
        except (ItemValidationError, ItemNotFoundError) as exc:
            self.status = str(exc)
        else:
            self.status = self.menu.state.error or ""
        self._refresh_content()

    def _refresh_content(self) -> None:
        body = self.query_one("#admin-body", Static)
        status = self.query_one("#admin-status", Static)

        items = self.menu.snapshot.items
        if self.cursor_index >= len(items):
            self.cursor_index = max(0, len(items) - 1)

        content = Text(style="white")
        if not items:
            content.append("(menu is empty)", style="dim")
        for idx, item in enumerate(items):
            if idx > 0:
                content.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            checked = "[x]" if item.show else "[ ]"
            style = "bold white" if item.show else "dim"
            content.append(f"{pointer}{checked} {item.name}  {format_price(item.price)}", style=style)

        body.update(content)
        status.update(self.status)
