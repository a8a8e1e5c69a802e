"""Order details modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from kitchen.models import Order
from kitchen.rendering import format_line_item, format_money, format_status_badge
from kitchen.viewmodels import order_line_total


class OrderDetailsModal(ModalScreen[None]):
    """Centered modal listing one order's line items and total."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
    ]

    CSS = """
    OrderDetailsModal {
        align: center middle;
        background: $background 60%;
    }

    #details-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #details-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #details-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self, order: Order) -> None:
        super().__init__()
        self.order = order

    def compose(self) -> ComposeResult:
        with Container(id="details-dialog"):
            yield Static(f"{self.order.id} Details", id="details-title")
            yield Static(id="details-body")
            yield Static("Esc / q / Ctrl+C to close", id="details-help")

    def on_mount(self) -> None:
        self.query_one("#details-body", Static).update(self._body())

    def _body(self) -> Text:
        content = Text(style="white")
        content.append_text(format_status_badge(self.order.status))
        content.append("\n\nLine Items\n", style="bold")
        if not self.order.line_items:
            content.append("(no line items)", style="dim")
        for idx, line in enumerate(self.order.line_items):
            if idx > 0:
                content.append("\n")
            content.append_text(format_line_item(line))
        content.append(f"\n\nLine items total  {format_money(order_line_total(self.order))}\n")
        content.append(f"Total Amount  {format_money(self.order.total_amount)}", style="bold")
        return content

    def action_close(self) -> None:
        self.dismiss()
