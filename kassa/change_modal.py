"""Cash-given entry modal screen."""

from __future__ import annotations

import math

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from kassa.config import CURRENCY_LABEL
from kassa.rendering import format_price


def parse_given(value: str) -> float | None:
    """Parse the typed cash amount; None when it is not a number >= 0."""
    try:
        parsed = float(value.replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(parsed) or parsed < 0:
        return None
    return parsed


class ChangeModal(ModalScreen[float | None]):
    """Prompt for the cash handed over and preview the change due."""

    CSS = """
    ChangeModal {
        align: center middle;
        background: $background 60%;
    }

    #change-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #change-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #change-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #change-summary {
        color: white;
        margin-bottom: 1;
    }

    #change-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #change-help {
        color: #dddddd;
    }
    """

    def __init__(self, price: float, currency_label: str = CURRENCY_LABEL) -> None:
        super().__init__()
        self.price = price
        self.currency_label = currency_label
        self.value = ""
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="change-dialog"):
            yield Static("Change", id="change-title")
            yield Static(id="change-value")
            yield Static(id="change-summary")
            yield Static(id="change-error")
            yield Static("Digits and '.' only. Enter confirm. Backspace delete. Esc/q/Ctrl+C cancel.", id="change-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "q", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key == "backspace":
            if self.value:
                self.value = self.value[:-1]
                self.error = ""
                self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character and (event.character.isdigit() or event.character in ".,"):
            if len(self.value) < 10:
                self.value += event.character
            self.error = ""
            self._refresh_content()
            event.stop()

    def _confirm(self) -> None:
        given = parse_given(self.value)
        if given is None:
            self.error = "Enter the amount handed over."
            self._refresh_content()
            return
        if given < self.price:
            self.error = "Amount is less than the check total."
            self._refresh_content()
            return

        self.dismiss(given)

    def _refresh_content(self) -> None:
        value_widget = self.query_one("#change-value", Static)
        summary_widget = self.query_one("#change-summary", Static)
        error_widget = self.query_one("#change-error", Static)

        given = parse_given(self.value) if self.value else None
        safe_given = given or 0
        missing = max(0, self.price - safe_given)
        change = max(0, safe_given - self.price)

        value_widget.update(self.value or "")
        summary_lines = [f"Total: {format_price(self.price, self.currency_label)}"]
        if missing > 0:
            summary_lines.append(f"Missing: {format_price(missing, self.currency_label)}")
        else:
            summary_lines.append(f"Change: {format_price(change, self.currency_label)}")
        summary_widget.update("\n".join(summary_lines))
        error_widget.update(self.error or "")
