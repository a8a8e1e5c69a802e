"""Main Textual app class."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from kitchen.actions import advance_order, assign_delivery, create_order, refresh_customer_totals
from kitchen.assign_delivery_modal import AssignDeliveryModal, DeliveryChoice
from kitchen.client import DataClient, LiveQuery
from kitchen.config import BUSINESS_NAME
from kitchen.constant import ITEM_RECORD_TYPE, ORDER_TABS, PREPARED
from kitchen.customer_orders_modal import CustomerOrdersModal
from kitchen.errors import DataAccessError
from kitchen.models import Customer, DeliveryAgent, Item, Order
from kitchen.new_order_modal import NewOrderModal
from kitchen.order_details_modal import OrderDetailsModal
from kitchen.rendering import (
    format_bar_chart,
    format_customer_label,
    format_item_label,
    format_money,
    format_order_label,
)
from kitchen.viewmodels import (
    catalog_listing,
    dashboard_summary,
    filter_orders,
    sort_orders_by_status,
    todays_orders,
    with_derived_totals,
)

logger = logging.getLogger(__name__)

VIEWS = {
    "dashboard": "Dashboard",
    "orders": "Orders",
    "customers": "Customers",
    "catalog": "Catalog",
}


def greeting_for(now: datetime) -> str:
    if now.hour < 12:
        return "Good Morning"
    if now.hour < 18:
        return "Good Afternoon"
    return "Good Evening"


class KitchenApp(App):
    """A Textual dashboard for a cloud kitchen's orders, customers and catalog."""

    TITLE = "Cloud Kitchen"
    SUB_TITLE = "Orders / Delivery"

    CSS = """
    Screen {
        layout: vertical;
    }

    #nav-bar {
        height: 1;
        padding: 0 1;
        background: $panel;
    }

    #main-pane {
        height: 1fr;
        border: round $primary;
        padding: 1;
    }

    #view-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #view-body {
        height: 1fr;
        padding: 0 1;
    }

    #status-bar {
        border: heavy $secondary;
        padding: 0 1;
        height: 4;
    }
    """

    active_view = reactive("dashboard")
    order_tab = reactive("all")
    order_selected_index = reactive(None)
    customer_selected_index = reactive(None)
    catalog_sort = reactive("price")
    catalog_descending = reactive(False)

    BINDINGS = [
        ("d", "show_view('dashboard')", "Dashboard"),
        ("o", "show_view('orders')", "Orders"),
        ("c", "show_view('customers')", "Customers"),
        ("i", "show_view('catalog')", "Catalog"),
        ("j", "move_selection(1)", "Next"),
        ("k", "move_selection(-1)", "Previous"),
        ("down", "move_selection(1)", "Next"),
        ("up", "move_selection(-1)", "Previous"),
        ("t", "cycle_tab", "Next tab"),
        ("enter", "open_details", "Details"),
        ("p", "advance_selected", "Advance status"),
        ("a", "assign_delivery", "Assign delivery"),
        ("n", "new_order", "New order"),
        ("s", "toggle_catalog_sort", "Sort catalog"),
        ("r", "reverse_catalog", "Reverse catalog"),
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    def __init__(self, client: DataClient | None = None) -> None:
        super().__init__()
        self.client = client or DataClient()
        self.orders: list[Order] = []
        self.orders_synced = False
        self.customers: list[Customer] = []
        self.agents: list[DeliveryAgent] = []
        self.items: list[Item] = []
        self.business_phone: str | None = None
        self.system_status = ""
        self._orders_query: LiveQuery | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="nav-bar")
        with Vertical(id="main-pane"):
            yield Static(id="view-title")
            yield Static(id="view-body")
        yield Static(id="status-bar")

    def on_mount(self) -> None:
        try:
            self.client.bootstrap()
        except DataAccessError as exc:
            logger.error("bootstrap_failed error=%r", exc)
            self.system_status = f"Store unavailable: {exc}"
        self._orders_query = self.client.observe_query("Order")
        self.run_worker(self._consume_orders(), name="orders-feed", group="feeds")
        self.run_worker(self._load_reference_data(), name="reference-data")
        logger.debug("on_mount db=%s", self.client.db_path)
        self._refresh_all()

    def on_unmount(self) -> None:
        if self._orders_query is not None:
            self._orders_query.unsubscribe()
            self._orders_query = None

    # -------------------- data feeds --------------------

    async def _consume_orders(self) -> None:
        query = self._orders_query
        if query is None:
            return
        try:
            async for snapshot in query:
                self.orders = list(snapshot.items)
                self.orders_synced = snapshot.is_synced
                logger.debug("orders_snapshot rows=%d synced=%s", len(self.orders), snapshot.is_synced)
                self._refresh_all()
        except DataAccessError as exc:
            logger.error("orders_feed_failed error=%r", exc)
            self.system_status = f"Order feed failed: {exc}"
            self._refresh_status()

    async def _load_reference_data(self) -> None:
        try:
            self.customers = await self.client.list("Customer")
            self.agents = await self.client.list("DeliveryAgent")
            businesses = await self.client.list("Business")
            self.business_phone = businesses[0].phone if businesses else None
            await self._load_catalog()
        except DataAccessError as exc:
            logger.error("reference_data_failed error=%r", exc)
            self.system_status = f"Load failed: {exc}"
        self._refresh_all()

    async def _load_catalog(self) -> None:
        self.items = await self.client.list_by_index("Item", "record_type", ITEM_RECORD_TYPE, self.catalog_sort)

    async def _reload_catalog(self) -> None:
        try:
            await self._load_catalog()
        except DataAccessError as exc:
            logger.error("catalog_failed error=%r", exc)
            self.system_status = f"Catalog failed: {exc}"
        self._refresh_all()

    # -------------------- actions --------------------

    def _modal_open(self) -> bool:
        return isinstance(self.screen, ModalScreen)

    def action_show_view(self, view: str) -> None:
        if self._modal_open() or view not in VIEWS:
            return
        self.active_view = view
        self._refresh_all()

    def action_cycle_tab(self) -> None:
        if self._modal_open() or self.active_view != "orders":
            return
        tabs = list(ORDER_TABS)
        self.order_tab = tabs[(tabs.index(self.order_tab) + 1) % len(tabs)]
        self.order_selected_index = 0 if self._visible_orders() else None
        self._refresh_all()

    def action_move_selection(self, delta: int) -> None:
        if self._modal_open():
            return
        if self.active_view == "customers":
            self._move_customer_selection(delta)
            return
        if self.active_view != "orders":
            return
        visible = self._visible_orders()
        if not visible:
            return
        if self.order_selected_index is None:
            self.order_selected_index = 0 if delta > 0 else len(visible) - 1
        else:
            self.order_selected_index = (self.order_selected_index + delta) % len(visible)
        self._refresh_all()

    def _move_customer_selection(self, delta: int) -> None:
        if not self.customers:
            return
        if self.customer_selected_index is None:
            self.customer_selected_index = 0 if delta > 0 else len(self.customers) - 1
        else:
            self.customer_selected_index = (self.customer_selected_index + delta) % len(self.customers)
        self._refresh_all()

    def action_open_details(self) -> None:
        if self._modal_open():
            return
        if self.active_view == "customers":
            customer = self._selected_customer()
            if customer is not None:
                self.push_screen(CustomerOrdersModal(customer, self.orders))
            return
        if self.active_view != "orders":
            return
        order = self._selected_order()
        if order is None:
            return
        self.push_screen(OrderDetailsModal(order))

    def action_advance_selected(self) -> None:
        if self._modal_open() or self.active_view != "orders":
            return
        order = self._selected_order()
        if order is None:
            return
        self.run_worker(self._advance(order), group="writes")

    def action_assign_delivery(self) -> None:
        if self._modal_open():
            return
        prepared = [order for order in todays_orders(self.orders) if order.status == PREPARED]
        self.push_screen(AssignDeliveryModal(self.agents, prepared), callback=self._on_delivery_chosen)

    def action_new_order(self) -> None:
        if self._modal_open():
            return
        self.push_screen(NewOrderModal(), callback=self._on_new_order)

    def action_toggle_catalog_sort(self) -> None:
        if self._modal_open() or self.active_view != "catalog":
            return
        self.catalog_sort = "quantity" if self.catalog_sort == "price" else "price"
        self.run_worker(self._reload_catalog(), group="reads")

    def action_reverse_catalog(self) -> None:
        if self._modal_open() or self.active_view != "catalog":
            return
        self.catalog_descending = not self.catalog_descending
        self._refresh_all()

    def _on_delivery_chosen(self, choice: DeliveryChoice | None) -> None:
        if choice is None:
            return
        agent_id, order_ids = choice
        self.run_worker(self._assign(agent_id, order_ids), group="writes")

    def _on_new_order(self, values: dict[str, Any] | None) -> None:
        if values is None:
            return
        self.run_worker(self._create(values), group="writes")

    async def _assign(self, agent_id: str, order_ids: list[str]) -> None:
        logger.debug("assign_enter agent=%s orders=%s", agent_id, order_ids)
        try:
            result = await assign_delivery(self.client, agent_id, order_ids)
        except DataAccessError as exc:
            self.system_status = f"Assign failed: {exc}"
            self._refresh_status()
            return
        if result.ok:
            self.system_status = f"Assigned {len(result.updated)} orders to {agent_id}"
        else:
            self.system_status = (
                f"Assigned {len(result.updated)}, stopped at {result.failed_order_id}: {result.error}"
            )
        self._refresh_status()

    async def _create(self, values: dict[str, Any]) -> None:
        phone = values.get("customer_phone")
        known = {customer.phone: customer for customer in self.customers}
        try:
            order = await create_order(
                self.client,
                order_date=datetime.now().astimezone().isoformat(),
                total_amount=values.get("total_amount"),
                business_phone=self.business_phone,
                customer_phone=phone,
                customer_name=known[phone].customer_name if phone in known else None,
            )
        except DataAccessError as exc:
            logger.error("create_order_failed error=%r", exc)
            self.system_status = f"Order not placed: {exc}"
            self._refresh_status()
            return
        self.system_status = f"Placed order {order.id[:8]} ({format_money(order.total_amount)})"
        if phone in known:
            try:
                await refresh_customer_totals(self.client, phone)
                self.customers = await self.client.list("Customer")
            except DataAccessError as exc:
                # The order is stored; only the customer's counters are stale.
                logger.error("customer_totals_failed phone=%s order=%s error=%r", phone, order.id, exc)
                self.system_status = f"Placed order {order.id[:8]}; customer totals not updated: {exc}"
        self._refresh_all()

    async def _advance(self, order: Order) -> None:
        try:
            updated = await advance_order(self.client, order)
        except DataAccessError as exc:
            logger.error("advance_failed order=%s error=%r", order.id, exc)
            self.system_status = f"Update failed: {exc}"
            self._refresh_status()
            return
        if updated is None:
            self.system_status = f"{order.id[:8]} is already {order.status or 'unknown'}"
        else:
            self.system_status = f"{updated.id[:8]} is now {updated.status}"
        self._refresh_status()

    # -------------------- derived state --------------------

    def _visible_orders(self) -> list[Order]:
        return filter_orders(sort_orders_by_status(self.orders), self.order_tab)

    def _selected_order(self) -> Order | None:
        visible = self._visible_orders()
        if self.order_selected_index is None:
            return None
        if not (0 <= self.order_selected_index < len(visible)):
            return None
        return visible[self.order_selected_index]

    def _selected_customer(self) -> Customer | None:
        if self.customer_selected_index is None:
            return None
        if not (0 <= self.customer_selected_index < len(self.customers)):
            return None
        return self.customers[self.customer_selected_index]

    # -------------------- rendering --------------------

    def _refresh_all(self) -> None:
        self._refresh_nav()
        self._refresh_view()
        self._refresh_status()

    def _refresh_nav(self) -> None:
        try:
            nav = self.query_one("#nav-bar", Static)
        except NoMatches:
            return
        text = Text()
        for idx, (view, label) in enumerate(VIEWS.items()):
            if idx > 0:
                text.append("  ")
            style = "bold #38bdf8" if view == self.active_view else "#94a3b8"
            text.append(f"[{label[0]}]{label[1:]}", style=style)
        nav.update(text)

    def _refresh_view(self) -> None:
        try:
            title = self.query_one("#view-title", Static)
            body = self.query_one("#view-body", Static)
        except NoMatches:
            return
        if self.active_view == "dashboard":
            now = datetime.now()
            title.update(f"{greeting_for(now)}, {BUSINESS_NAME}")
            body.update(self._render_dashboard(now))
        elif self.active_view == "orders":
            title.update("Order Management")
            body.update(self._render_orders(body))
        elif self.active_view == "customers":
            title.update("Customers")
            body.update(self._render_customers())
        else:
            title.update("Catalog")
            body.update(self._render_catalog())

    def _refresh_status(self) -> None:
        try:
            bar = self.query_one("#status-bar", Static)
        except NoMatches:
            return
        sync = "synced" if self.orders_synced else "syncing"
        help_line = "D/O/C/I views. N new order. A assign delivery. Ctrl+Q quit."
        if self.active_view == "orders":
            help_line = "J/K move. Enter details. P advance. T tab. N new. A assign."
        elif self.active_view == "customers":
            help_line = "J/K move. Enter customer orders. D/O/I views."
        elif self.active_view == "catalog":
            help_line = "S sort by price/quantity. R reverse. D/O/C views."
        bar.update(f"{help_line}\n[{sync}] {self.system_status or 'Ready'}")

    def _render_dashboard(self, now: datetime) -> Text:
        summary = dashboard_summary(self.orders, now)
        text = Text()
        text.append(f"{now:%A}, {now:%B} {now.day}, {now.year}\n\n", style="#94a3b8")
        text.append("Total Orders  ", style="#94a3b8")
        text.append(f"{summary.total_orders}", style="bold")
        text.append("    Revenue Today  ", style="#94a3b8")
        text.append(format_money(summary.revenue), style="bold")
        text.append("\nIn Progress  ", style="#fcd34d")
        text.append(f"{summary.in_progress}", style="bold")
        text.append("    Ready for Delivery  ", style="#86efac")
        text.append(f"{summary.ready_for_delivery}", style="bold")
        text.append("\n\nToday's Order Status\n", style="bold")
        text.append_text(format_bar_chart(summary.chart))
        text.append("\n\nPress A to assign delivery", style="dim")
        return text

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
            half = rows // 2
            start = selected - half
            start = max(0, start)
            start = min(start, total - rows)

        return (start, start + rows)

    def _render_orders(self, widget: Static) -> Text:
        lines = Text()
        for idx, (tab, (label, _)) in enumerate(ORDER_TABS.items()):
            if idx > 0:
                lines.append(" ")
            style = "bold #ffffff on #0284c7" if tab == self.order_tab else "#ffffff on #334155"
            lines.append(f" {label} ", style=style)
        lines.append("\n\n")

        visible = self._visible_orders()
        if not visible:
            self.order_selected_index = None
            lines.append("(no orders)", style="dim")
            return lines

        if self.order_selected_index is None:
            self.order_selected_index = 0
        elif self.order_selected_index >= len(visible):
            self.order_selected_index = len(visible) - 1

        # Two rows go to the tab strip.
        rows = max(1, self._visible_rows(widget) - 2)
        start, end = self._window_bounds(len(visible), rows, self.order_selected_index)
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            pointer = "➤ " if idx == self.order_selected_index else "  "
            lines.append(pointer)
            lines.append_text(format_order_label(visible[idx]))
        if end < len(visible):
            lines.append("\n⋮", style="dim")
        return lines

    def _render_customers(self) -> Text:
        text = Text()
        if not self.customers:
            self.customer_selected_index = None
            text.append("(no customers)", style="dim")
            return text
        if self.customer_selected_index is None:
            self.customer_selected_index = 0
        elif self.customer_selected_index >= len(self.customers):
            self.customer_selected_index = len(self.customers) - 1
        for idx, customer in enumerate(with_derived_totals(self.customers, self.orders)):
            if idx > 0:
                text.append("\n")
            text.append("➤ " if idx == self.customer_selected_index else "  ")
            text.append_text(format_customer_label(customer))
        return text

    def _render_catalog(self) -> Text:
        text = Text()
        direction = "descending" if self.catalog_descending else "ascending"
        text.append(f"By {self.catalog_sort}, {direction}\n\n", style="#94a3b8")
        items = catalog_listing(self.items, descending=self.catalog_descending)
        if not items:
            text.append("(no items)", style="dim")
        for idx, item in enumerate(items):
            if idx > 0:
                text.append("\n")
            text.append_text(format_item_label(item))
        return text
