"""Assign delivery modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from kitchen.models import DeliveryAgent, Order
from kitchen.viewmodels import default_delivery_selection

DeliveryChoice = tuple[str, list[str]]


class AssignDeliveryModal(ModalScreen[DeliveryChoice | None]):
    """Pick an agent and the prepared orders to hand over."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("space", "toggle_current", "Toggle"),
        ("tab", "cycle_agent(1)", "Next agent"),
        ("enter", "confirm", "Assign"),
    ]

    CSS = """
    AssignDeliveryModal {
        align: center middle;
        background: $background 60%;
    }

    #assign-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #assign-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #assign-body {
        margin-bottom: 1;
        color: white;
    }

    #assign-error {
        color: #ffb3b3;
    }

    #assign-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)
    agent_index = reactive(0)

    def __init__(self, agents: list[DeliveryAgent], orders: list[Order]) -> None:
        super().__init__()
        self.agents = agents
        self.orders = orders
        self.selected_ids: set[str] = set(default_delivery_selection(orders))
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="assign-dialog"):
            yield Static("Assign Delivery", id="assign-title")
            yield Static(id="assign-body")
            yield Static(id="assign-error")
            yield Static("Tab agent, J/K/↑/↓ move, Space toggle, Enter assign, Esc close", id="assign-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def selected_agent(self) -> DeliveryAgent | None:
        if not self.agents:
            return None
        return self.agents[self.agent_index % len(self.agents)]

    def selected_orders(self) -> list[str]:
        return [order.id for order in self.orders if order.id in self.selected_ids]

    def action_close(self) -> None:
        self.dismiss(None)

    def action_move_cursor(self, delta: int) -> None:
        if not self.orders:
            return
        self.cursor_index = (self.cursor_index + delta) % len(self.orders)
        self._refresh_content()

    def action_cycle_agent(self, delta: int) -> None:
        if not self.agents:
            return
        self.agent_index = (self.agent_index + delta) % len(self.agents)
        self._refresh_content()

    def action_toggle_current(self) -> None:
        if not self.orders:
            return
        order_id = self.orders[self.cursor_index].id
        if order_id in self.selected_ids:
            self.selected_ids.remove(order_id)
        else:
            self.selected_ids.add(order_id)
        self.error = ""
        self._refresh_content()

    def action_confirm(self) -> None:
        agent = self.selected_agent()
        chosen = self.selected_orders()
        if agent is None:
            self.error = "No delivery agent available."
            self._refresh_content()
            return
        if not chosen:
            self.error = "Select at least one order."
            self._refresh_content()
            return
        self.dismiss((agent.id, chosen))

    def _refresh_content(self) -> None:
        body = self.query_one("#assign-body", Static)
        error_widget = self.query_one("#assign-error", Static)

        content = Text(style="white")
        agent = self.selected_agent()
        content.append("Agent: ", style="bold")
        content.append(agent.name if agent else "(none)")
        content.append("\n\nSelect Orders to Assign\n", style="bold")
        if not self.orders:
            content.append("(no prepared orders)", style="dim")
        for idx, order in enumerate(self.orders):
            if idx > 0:
                content.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            checked = "[x]" if order.id in self.selected_ids else "[ ]"
            count = order.items_number if order.items_number is not None else len(order.line_items)
            content.append(f"{pointer}{checked} {order.id[:8]} ({count} items)")

        content.append(f"\n\nAssign {len(self.selected_orders())} Orders", style="bold")
        body.update(content)
        error_widget.update(self.error)
