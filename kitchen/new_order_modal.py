"""New order entry modal screen."""

from __future__ import annotations

from typing import Any

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

_FIELDS = ("customer_phone", "total_amount")
_LABELS = {"customer_phone": "Customer phone", "total_amount": "Total amount"}


class NewOrderModal(ModalScreen[dict[str, Any] | None]):
    """Prompt for a customer phone and total before placing an order."""

    CSS = """
    NewOrderModal {
        align: center middle;
        background: $background 60%;
    }

    #new-order-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #new-order-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #new-order-fields {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #new-order-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #new-order-help {
        color: #dddddd;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self.values = {name: "" for name in _FIELDS}
        self.active_field = _FIELDS[0]
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="new-order-dialog"):
            yield Static("New Order", id="new-order-title")
            yield Static(id="new-order-fields")
            yield Static(id="new-order-error")
            yield Static("Tab switch field. Enter place order. Backspace delete. Esc cancel.", id="new-order-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "tab":
            idx = _FIELDS.index(self.active_field)
            self.active_field = _FIELDS[(idx + 1) % len(_FIELDS)]
            self._refresh_content()
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key == "backspace":
            value = self.values[self.active_field]
            if value:
                self.values[self.active_field] = value[:-1]
                self.error = ""
                self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character and self._accepts(event.character):
            self.values[self.active_field] += event.character
            self.error = ""
            self._refresh_content()
            event.stop()

    def _accepts(self, char: str) -> bool:
        value = self.values[self.active_field]
        if self.active_field == "customer_phone":
            return char.isdigit() or (char == "+" and not value)
        if char == ".":
            return "." not in value
        if not char.isdigit():
            return False
        return "." not in value or len(value.split(".", 1)[1]) < 2

    def _confirm(self) -> None:
        raw_amount = self.values["total_amount"]
        amount: float | None = None
        if raw_amount:
            try:
                amount = float(raw_amount)
            except ValueError:
                self.error = "Total amount must be a number."
                self._refresh_content()
                return
        self.dismiss(
            {
                "customer_phone": self.values["customer_phone"] or None,
                "total_amount": amount,
            }
        )

    def _refresh_content(self) -> None:
        lines = []
        for name in _FIELDS:
            pointer = "➤ " if name == self.active_field else "  "
            cursor = "|" if name == self.active_field else ""
            lines.append(f"{pointer}{_LABELS[name]}: {self.values[name]}{cursor}")
        self.query_one("#new-order-fields", Static).update("\n".join(lines))
        self.query_one("#new-order-error", Static).update(self.error or "")
