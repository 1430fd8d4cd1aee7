"""Main Textual app class."""

from __future__ import annotations

import logging

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from kassa.cart import group_lines, item_counts, last_index
from kassa.catalog import MenuSection, menu_sections
from kassa.change_modal import ChangeModal
from kassa.context import AppContext
from kassa.fulfilment_modal import FulfilmentModal
from kassa.ledger import CheckLedger
from kassa.menu_admin_modal import MenuAdminModal
from kassa.menu_store import MenuManager, MenuState
from kassa.models import CartLineGroup, LedgerState, MenuItem
from kassa.rendering import format_check_tabs, format_group_label, format_price, source_badge

logger = logging.getLogger(__name__)


class KassaApp(App):
    """A Textual app for ringing up menu items on several open checks."""

    TITLE = "Kassa"
    SUB_TITLE = "Checks / Menu"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #checks-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #search-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #check-tabs {
        height: 1;
        margin-bottom: 1;
    }

    #cart-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #check-summary {
        height: 2;
        margin-top: 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #results {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    input_state = reactive("normal")
    search_query = reactive("")
    selected_index = reactive(0)
    cart_selected_index = reactive(None)

    BINDINGS = [
        ("tab", "cycle_results(1)", "Next result"),
        ("up", "cycle_results(-1)", "Previous result"),
        ("down", "cycle_results(1)", "Next result"),
        ("enter", "register_selected", "Add item"),
        ("backspace", "backspace_query", "Delete query char"),
        ("ctrl+c", "cancel_active_mode", "Exit search"),
        ("escape", "cancel_active_mode", "Exit search"),
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    def __init__(self, context: AppContext | None = None) -> None:
        super().__init__()
        self.context = context or AppContext.create()
        self.system_status = ""
        self._menu_error = ""
        self._unsubscribers: list = []

    @property
    def ledger(self) -> CheckLedger:
        return self.context.ledger

    @property
    def menu(self) -> MenuManager:
        return self.context.menu

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="checks-pane"):
                yield Static("Checks", classes="pane-title")
                yield Static(id="check-tabs")
                yield Static("(check is empty)", id="cart-list")
                yield Static(id="check-summary")
            with Vertical(id="search-pane"):
                yield Static(id="search-bar")
                yield Static(id="results")

    def on_mount(self) -> None:
        self._unsubscribers = [
            self.ledger.subscribe(self._on_ledger_change),
            self.menu.subscribe(self._on_menu_change),
        ]
        self._refresh_all()
        self.action_reload_menu()

    def on_unmount(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()

    def _on_ledger_change(self, state: LedgerState) -> None:
        self._refresh_all()

    def _on_menu_change(self, state: MenuState) -> None:
        if state.error:
            self.system_status = state.error
        elif self.system_status == self._menu_error:
            self.system_status = ""
        self._menu_error = state.error or ""
        self._refresh_search()

    def _is_modal_open(self) -> bool:
        return isinstance(self.screen, ModalScreen)

    def on_key(self, event: Key) -> None:
        if self._is_modal_open():
            return

        logger.debug("on_key key=%r char=%r state=%r", event.key, event.character, self.input_state)

        if not event.is_printable or not event.character or len(event.character) != 1:
            return

        if self.input_state == "active":
            self.search_query += event.character
            self.selected_index = 0
            self._refresh_search()
            event.stop()
            return

        key = event.character.lower()
        handlers = {
            "/": self._enter_search,
            "n": self.ledger.create_check,
            "c": self._complete_active_check,
            "h": lambda: self._switch_check(-1),
            "l": lambda: self._switch_check(1),
            "j": lambda: self._move_cart_selection(1),
            "k": lambda: self._move_cart_selection(-1),
            "x": self._remove_selected_unit,
            "f": self._toggle_selected_group,
            "p": self._open_change_modal,
            "m": self._open_menu_admin,
            "b": self._open_fulfilment,
            "r": self.action_reload_menu,
        }
        handler = handlers.get(key)
        if handler is None:
            return
        handler()
        event.stop()

    # ------------------------------------------------------------- actions

    def action_reload_menu(self) -> None:
        self.run_worker(self.menu.reload(), group="menu", exit_on_error=False)

    def action_cancel_active_mode(self) -> None:
        if self._is_modal_open():
            return
        if self.input_state == "normal":
            return

        self.input_state = "normal"
        self.search_query = ""
        self.selected_index = 0
        self._refresh_search()

    def action_cycle_results(self, delta: int) -> None:
        if self._is_modal_open():
            return
        if self.input_state != "active":
            return

        sections = self._filtered_sections()
        total = sum(len(section.items) for section in sections)
        if not total:
            self.selected_index = 0
            self._refresh_results(sections)
            return
        self.selected_index = (self.selected_index + delta) % total
        self._refresh_results(sections)

    def action_register_selected(self) -> None:
        if self._is_modal_open():
            return
        if self.input_state != "active":
            return

        results = self._filtered_results()
        if not results:
            return

        item = results[min(self.selected_index, len(results) - 1)]
        self.ledger.add_line(item)

    def action_backspace_query(self) -> None:
        if self._is_modal_open():
            return
        if self.input_state != "active":
            return

        if not self.search_query:
            return
        self.search_query = self.search_query[:-1]
        self.selected_index = 0
        self._refresh_search()

    # ------------------------------------------------------------- helpers

    def _enter_search(self) -> None:
        self.input_state = "active"
        self.search_query = ""
        self.selected_index = 0
        self._refresh_search()

    def _filtered_sections(self) -> list[MenuSection]:
        return menu_sections(self.menu.snapshot, self.search_query)

    def _filtered_results(self) -> list[MenuItem]:
        return [item for section in self._filtered_sections() for item in section.items]

    def _groups(self) -> list[CartLineGroup]:
        check = self.ledger.active_check()
        if check is None:
            return []
        return group_lines(check.lines)

    def _selected_group(self) -> CartLineGroup | None:
        groups = self._groups()
        if self.cart_selected_index is None or not (0 <= self.cart_selected_index < len(groups)):
            return None
        return groups[self.cart_selected_index]

    def _switch_check(self, delta: int) -> None:
        ids = [check.id for check in self.ledger.checks]
        if len(ids) < 2:
            return
        position = ids.index(self.ledger.active_check_id) if self.ledger.active_check_id in ids else 0
        self.cart_selected_index = None
        self.ledger.select_check(ids[(position + delta) % len(ids)])

    def _move_cart_selection(self, delta: int) -> None:
        groups = self._groups()
        if not groups:
            return

        if self.cart_selected_index is None:
            self.cart_selected_index = 0 if delta > 0 else len(groups) - 1
        else:
            self.cart_selected_index = (self.cart_selected_index + delta) % len(groups)
        self._refresh_checks()

    def _remove_selected_unit(self) -> None:
        group = self._selected_group()
        if group is None:
            return
        index = last_index(group)
        if index is not None:
            self.ledger.remove_line(index)

    def _toggle_selected_group(self) -> None:
        group = self._selected_group()
        if group is None:
            return
        self.ledger.set_fulfilled(group.indices, not group.fully_fulfilled)

    def _complete_active_check(self) -> None:
        completed_id = self.ledger.active_check_id
        self.cart_selected_index = None
        self.ledger.complete_check()
        self.system_status = f"Check #{completed_id} completed"
        self._refresh_search_bar()

    def _open_change_modal(self) -> None:
        check = self.ledger.active_check()
        if check is None:
            return
        self.push_screen(ChangeModal(check.price, self.context.config.currency_label), callback=self._apply_change)

    def _apply_change(self, given: float | None) -> None:
        if given is None:
            return
        self.ledger.set_change(given)

    def _open_menu_admin(self) -> None:
        self.push_screen(MenuAdminModal(self.menu), callback=lambda _: self._refresh_search())

    def _open_fulfilment(self) -> None:
        self.push_screen(FulfilmentModal(self.ledger), callback=lambda _: self._refresh_all())

    def _refresh_all(self) -> None:
        self._refresh_checks()
        self._refresh_search()

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        if selected is None:
            start = 0
        else:
            start = max(0, selected - rows // 2)
            start = min(start, total - rows)

        return (start, start + rows)

    def _refresh_checks(self) -> None:
        try:
            tabs_widget = self.query_one("#check-tabs", Static)
            cart_widget = self.query_one("#cart-list", Static)
            summary_widget = self.query_one("#check-summary", Static)
        except NoMatches:
            return

        label = self.context.config.currency_label
        tabs_widget.update(format_check_tabs(self.ledger.checks, self.ledger.active_check_id))

        check = self.ledger.active_check()
        summary = Text()
        if check is not None:
            summary.append(f"Total: {format_price(check.price, label)}", style="bold")
            summary.append(f"\nChange: {format_price(check.change, label)}")
        summary_widget.update(summary)

        groups = self._groups()
        if not groups:
            self.cart_selected_index = None
            cart_widget.update("(check is empty)")
            return

        if self.cart_selected_index is not None and self.cart_selected_index >= len(groups):
            self.cart_selected_index = len(groups) - 1

        start, end = self._window_bounds(len(groups), self._visible_rows(cart_widget), self.cart_selected_index)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")

        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            pointer = "➤ " if idx == self.cart_selected_index else "  "
            lines.append(pointer)
            lines.append_text(format_group_label(groups[idx], label))

        if end < len(groups):
            lines.append("\n⋮", style="dim")

        cart_widget.update(lines)

    def _refresh_search(self) -> None:
        self._refresh_search_bar()
        if self.input_state == "normal":
            self._refresh_results([])
            return
        self._refresh_results(self._filtered_sections())

    def _refresh_search_bar(self) -> None:
        try:
            bar = self.query_one("#search-bar", Static)
        except NoMatches:
            return

        text = source_badge(self.menu.state)
        if self.input_state == "normal":
            status = self.system_status or "Ready"
            text.append("\nPress / to search. N new, C complete, P change, M menu, B coffee.")
            text.append(f"\n{status}", style="dim")
            bar.update(text)
            return

        text.append(f"\nSearch: {self.search_query}|")
        bar.update(text)

    def _refresh_results(self, sections: list[MenuSection]) -> None:
        try:
            results_widget = self.query_one("#results", Static)
        except NoMatches:
            return
        if self.input_state == "normal":
            results_widget.update("")
            return

        # One row per section header or item; item rows carry their result index.
        rows: list[tuple[str, MenuItem | None, int]] = []
        result_index = 0
        for section in sections:
            rows.append((section.label, None, -1))
            for item in section.items:
                rows.append((section.label, item, result_index))
                result_index += 1

        if not result_index:
            results_widget.update("No results" if self.search_query else "No items available")
            return

        if self.selected_index >= result_index:
            self.selected_index = 0
        selected_row = next(row for row, entry in enumerate(rows) if entry[2] == self.selected_index)

        check = self.ledger.active_check()
        counts = item_counts(check.lines) if check is not None else {}
        label = self.context.config.currency_label
        start, end = self._window_bounds(len(rows), self._visible_rows(results_widget), selected_row)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")

        for row in range(start, end):
            if row > start:
                lines.append("\n")
            section_label, item, idx = rows[row]
            if item is None:
                lines.append(section_label, style="bold underline")
                continue
            pointer = "➤ " if idx == self.selected_index else "  "
            lines.append(f"{pointer}{item.name}  {format_price(item.price, label)}")
            if counts.get(item.id):
                lines.append(f" x{counts[item.id]}", style="bold")

        if end < len(rows):
            lines.append("\n⋮", style="dim")

        results_widget.update(lines)
