"""Rendering helpers for orders, money and the status chart."""

from __future__ import annotations

from rich.text import Text

from kitchen.constant import STATUS_BADGE_STYLES
from kitchen.models import Customer, Item, LineItem, Order
from kitchen.viewmodels import amount_or_zero


def badge_style(status: str | None) -> str:
    """Return a consistent badge style for status tags."""
    return STATUS_BADGE_STYLES.get(status or "", "bold #ffffff on #444444")


def format_money(value: float | None) -> str:
    return f"${amount_or_zero(value):.2f}"


def format_status_badge(status: str | None) -> Text:
    return Text(f" {status or 'unknown'} ", style=badge_style(status))


def format_order_label(order: Order) -> Text:
    """Render an order row: id, customer, total and status badge."""
    text = Text()
    text.append(order.id[:8], style="bold")
    who = order.customer_name or order.customer_phone
    if who:
        text.append(f"  {who}", style="dim")
    text.append(f"  {format_money(order.total_amount)}  ")
    text.append_text(format_status_badge(order.status))
    return text


def format_line_item(line: LineItem) -> Text:
    text = Text()
    text.append(f"{line.quantity} x {line.item_name or line.item_id}")
    text.append(f"  {format_money(line.unit_price)}", style="dim")
    return text


def format_customer_label(customer: Customer) -> Text:
    text = Text()
    text.append(customer.customer_name or "(no name)", style="bold")
    text.append(f"  {customer.phone}", style="dim")
    text.append(f"  orders {customer.total_orders}  spent {format_money(customer.total_spent)}")
    return text


def format_item_label(item: Item) -> Text:
    text = Text()
    text.append(item.name, style="bold" if item.in_stock else "dim strike")
    text.append(f"  {format_money(item.price)}  qty {item.quantity}")
    return text


def format_bar_chart(chart: list[tuple[str, int]], width: int = 24) -> Text:
    """Horizontal text bars scaled to the largest bucket."""
    text = Text()
    label_width = max((len(label) for label, _ in chart), default=0)
    peak = max((value for _, value in chart), default=0)
    for idx, (label, value) in enumerate(chart):
        if idx > 0:
            text.append("\n")
        bar = round(width * value / peak) if peak else 0
        text.append(f"{label.ljust(label_width)} ")
        text.append("█" * bar, style="#38bdf8")
        text.append(f" {value}")
    return text
