"""Barista view: coffee lines of every open check."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from kassa.cart import FulfilmentEntry, fulfilment_entries
from kassa.ledger import CheckLedger


class FulfilmentModal(ModalScreen[None]):
    """Mark coffee lines made on any check, not only the active one."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "toggle_current", "Toggle"),
        ("space", "toggle_current", "Toggle"),
    ]

    CSS = """
    FulfilmentModal {
        align: center middle;
        background: $background 60%;
    }

    #fulfil-dialog {
        width: 64;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #fulfil-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #fulfil-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(self, ledger: CheckLedger) -> None:
        super().__init__()
        self.ledger = ledger

    def compose(self) -> ComposeResult:
        with Container(id="fulfil-dialog"):
            yield Static("Coffee across checks", id="fulfil-title")
            yield Static(id="fulfil-body")
            yield Static("J/K/↑/↓ move, Enter/Space made/not made, Esc/q/Ctrl+C close", id="fulfil-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def _entries(self) -> list[FulfilmentEntry]:
        return fulfilment_entries(self.ledger.checks)

    def action_close(self) -> None:
        self.dismiss()

    def action_move_cursor(self, delta: int) -> None:
        entries = self._entries()
        if not entries:
            return
        self.cursor_index = (self.cursor_index + delta) % len(entries)
        self._refresh_content()

    def action_toggle_current(self) -> None:
        entries = self._entries()
        if not entries:
            return
        entry = entries[min(self.cursor_index, len(entries) - 1)]
        self.ledger.set_fulfilled([entry.index], not entry.fulfilled, check_id=entry.check_id)
        self._refresh_content()

    def _refresh_content(self) -> None:
        body = self.query_one("#fulfil-body", Static)
        entries = self._entries()
        if self.cursor_index >= len(entries):
            self.cursor_index = max(0, len(entries) - 1)

        if not entries:
            body.update(Text("(no coffee on open checks)", style="dim"))
            return

        content = Text(style="white")
        current_check = None
        for idx, entry in enumerate(entries):
            if entry.check_id != current_check:
                if current_check is not None:
                    content.append("\n")
                marker = " *" if entry.check_id == self.ledger.active_check_id else ""
                content.append(f"Check #{entry.check_id}{marker}\n", style="bold")
                current_check = entry.check_id
            else:
                content.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            checked = "[x]" if entry.fulfilled else "[ ]"
            style = "strike dim" if entry.fulfilled else "bold white"
            content.append(f"{pointer}{checked} {entry.letter}  {entry.name}", style=style)

        body.update(content)
