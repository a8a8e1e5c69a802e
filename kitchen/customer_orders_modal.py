"""Customer order history modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from kitchen.models import Customer, Order
from kitchen.rendering import format_order_label
from kitchen.viewmodels import orders_for_customer, parse_order_date

ORDERINGS = ("amount", "date")


class CustomerOrdersModal(ModalScreen[None]):
    """One customer's orders, by amount or by date."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("s", "toggle_order_by", "Sort"),
    ]

    CSS = """
    CustomerOrdersModal {
        align: center middle;
        background: $background 60%;
    }

    #history-dialog {
        width: 72;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #history-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #history-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    order_by = reactive("amount")

    def __init__(self, customer: Customer, orders: list[Order]) -> None:
        super().__init__()
        self.customer = customer
        self.orders = orders

    def compose(self) -> ComposeResult:
        title = self.customer.customer_name or self.customer.phone
        with Container(id="history-dialog"):
            yield Static(f"{title} Orders", id="history-title")
            yield Static(id="history-body")
            yield Static("S amount/date, Esc / q / Ctrl+C to close", id="history-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def listed_orders(self) -> list[Order]:
        return orders_for_customer(self.orders, self.customer.phone, by=self.order_by)

    def action_toggle_order_by(self) -> None:
        self.order_by = ORDERINGS[(ORDERINGS.index(self.order_by) + 1) % len(ORDERINGS)]
        self._refresh_content()

    def action_close(self) -> None:
        self.dismiss()

    def _refresh_content(self) -> None:
        content = Text(style="white")
        content.append(f"By {self.order_by}\n\n", style="#94a3b8")
        listed = self.listed_orders()
        if not listed:
            content.append("(no orders)", style="dim")
        for idx, order in enumerate(listed):
            if idx > 0:
                content.append("\n")
            content.append_text(format_order_label(order))
            placed = parse_order_date(order.order_date)
            content.append(f"  {placed:%Y-%m-%d %H:%M}" if placed else "  (no date)", style="dim")
        self.query_one("#history-body", Static).update(content)
