"""
View-model derivations for the dashboard.

Pure functions over record lists. Nothing here touches the store or the
widgets, so every derived value can be recomputed on each snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

from kitchen.constant import (
    CHART_BUCKETS,
    IN_PREPARATION,
    ORDER_TABS,
    PREPARED,
    STATUS_FLOW,
    STATUS_PRECEDENCE,
)
from kitchen.models import Customer, Item, Order

_UNKNOWN_STATUS_RANK = len(STATUS_PRECEDENCE)


@dataclass(frozen=True)
class DashboardSummary:
    total_orders: int
    revenue: float
    in_progress: int
    ready_for_delivery: int
    chart: list[tuple[str, int]]


def amount_or_zero(value: float | None) -> float:
    """Missing monetary amounts count as zero wherever they are aggregated."""
    return 0.0 if value is None else float(value)


def status_rank(status: str | None) -> int:
    """Precedence index; unknown or missing statuses rank after every known one."""
    if status in STATUS_PRECEDENCE:
        return STATUS_PRECEDENCE.index(status)
    return _UNKNOWN_STATUS_RANK


def sort_orders_by_status(orders: Iterable[Order]) -> list[Order]:
    # sorted() is stable, so orders with equal status keep their arrival order.
    return sorted(orders, key=lambda order: status_rank(order.status))


def parse_order_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def is_today(order: Order, now: datetime | None = None) -> bool:
    """Calendar-day match in local time, not a rolling 24 hour window."""
    placed = parse_order_date(order.order_date)
    if placed is None:
        return False
    current = now or datetime.now()
    return placed.astimezone().date() == current.astimezone().date()


def todays_orders(orders: Iterable[Order], now: datetime | None = None) -> list[Order]:
    return [order for order in orders if is_today(order, now)]


def revenue(orders: Iterable[Order]) -> float:
    return sum((amount_or_zero(order.total_amount) for order in orders), 0.0)


def count_by_status(orders: Iterable[Order], statuses: Iterable[str]) -> dict[str, int]:
    counts = {status: 0 for status in statuses}
    for order in orders:
        if order.status in counts:
            counts[order.status] += 1
    return counts


def chart_data(orders: Sequence[Order]) -> list[tuple[str, int]]:
    """Bar chart buckets (label, count) for the dashboard."""
    counts = count_by_status(orders, [status for _, status in CHART_BUCKETS])
    return [(label, counts[status]) for label, status in CHART_BUCKETS]


def dashboard_summary(orders: Iterable[Order], now: datetime | None = None) -> DashboardSummary:
    """Aggregate today's orders for the dashboard cards."""
    today = sort_orders_by_status(todays_orders(orders, now))
    counts = count_by_status(today, [IN_PREPARATION, PREPARED])
    return DashboardSummary(
        total_orders=len(today),
        revenue=revenue(today),
        in_progress=counts[IN_PREPARATION],
        ready_for_delivery=counts[PREPARED],
        chart=chart_data(today),
    )


def filter_orders(orders: Iterable[Order], tab: str) -> list[Order]:
    """Apply an Orders view tab (active / prepared / all)."""
    _, statuses = ORDER_TABS[tab]
    if statuses is None:
        return list(orders)
    return [order for order in orders if order.status in statuses]


def catalog_listing(items: Sequence[Item], descending: bool = False) -> list[Item]:
    """Index reads come back ascending; invert for descending display."""
    return list(reversed(items)) if descending else list(items)


def _newest_first_key(order: Order) -> tuple[bool, float]:
    placed = parse_order_date(order.order_date)
    if placed is None:
        return (True, 0.0)
    return (False, -placed.astimezone().timestamp())


def orders_for_customer(orders: Iterable[Order], phone: str, by: str = "amount") -> list[Order]:
    """A customer's orders, largest total first or newest first; undated orders go last."""
    mine = [order for order in orders if order.customer_phone == phone]
    if by == "amount":
        return sorted(mine, key=lambda order: amount_or_zero(order.total_amount), reverse=True)
    if by == "date":
        return sorted(mine, key=_newest_first_key)
    raise ValueError(f"Unknown ordering: {by!r}")


def customer_totals(phone: str, orders: Iterable[Order]) -> tuple[int, float]:
    """Recompute (total_orders, total_spent) from the order history."""
    mine = [order for order in orders if order.customer_phone == phone]
    return len(mine), revenue(mine)


def with_derived_totals(customers: Iterable[Customer], orders: Sequence[Order]) -> list[Customer]:
    """Copies of customers whose counters reflect the given orders."""
    result = []
    for customer in customers:
        total_orders, total_spent = customer_totals(customer.phone, orders)
        result.append(
            Customer(
                phone=customer.phone,
                customer_name=customer.customer_name,
                address=customer.address,
                total_orders=total_orders,
                total_spent=total_spent,
            )
        )
    return result


def default_delivery_selection(orders: Iterable[Order]) -> list[str]:
    return [order.id for order in orders if order.status == PREPARED]


def next_status(status: str | None) -> str | None:
    if status is None:
        return None
    return STATUS_FLOW.get(status)


def order_line_total(order: Order) -> float:
    return sum((line.quantity * amount_or_zero(line.unit_price) for line in order.line_items), 0.0)
