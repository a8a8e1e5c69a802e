from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from kitchen.constant import CANCELLED, DELIVERED, IN_PREPARATION, ORDERED, PREPARED, STATUS_PRECEDENCE
from kitchen.models import Customer, Item, LineItem, Order
from kitchen.viewmodels import (
    amount_or_zero,
    catalog_listing,
    chart_data,
    count_by_status,
    customer_totals,
    dashboard_summary,
    default_delivery_selection,
    filter_orders,
    is_today,
    next_status,
    order_line_total,
    orders_for_customer,
    revenue,
    sort_orders_by_status,
    status_rank,
    todays_orders,
    with_derived_totals,
)

NOW = datetime(2026, 10, 19, 15, 30).astimezone()
MIDNIGHT = NOW.replace(hour=0, minute=0, second=0, microsecond=0)


def _order(order_id: str, status: str | None = ORDERED, total: float | None = 10.0, when: datetime = NOW, phone=None):
    return Order(id=order_id, status=status, total_amount=total, order_date=when.isoformat(), customer_phone=phone)


def test_sort_by_status_is_non_decreasing_in_precedence():
    orders = [
        _order("a", DELIVERED),
        _order("b", ORDERED),
        _order("c", PREPARED),
        _order("d", IN_PREPARATION),
        _order("e", ORDERED),
    ]

    ranks = [STATUS_PRECEDENCE.index(order.status) for order in sort_orders_by_status(orders)]

    assert ranks == sorted(ranks)


def test_sort_by_status_is_stable_and_puts_unknown_last():
    orders = [
        _order("x", None),
        _order("a", PREPARED),
        _order("y", CANCELLED),
        _order("b", ORDERED),
        _order("c", PREPARED),
        _order("z", "lost"),
    ]

    assert [order.id for order in sort_orders_by_status(orders)] == ["b", "a", "c", "x", "y", "z"]
    assert status_rank(None) == status_rank("lost") == len(STATUS_PRECEDENCE)


def test_revenue_treats_missing_totals_as_zero():
    orders = [_order("a", total=10.5), _order("b", total=None), _order("c", total=20.25)]

    assert revenue(orders) == pytest.approx(30.75)
    assert amount_or_zero(None) == 0.0


def test_today_is_a_local_calendar_day():
    midnight_today = _order("today", when=MIDNIGHT)
    late_yesterday = _order("yesterday", when=MIDNIGHT - timedelta(minutes=1))

    assert is_today(midnight_today, NOW)
    assert not is_today(late_yesterday, NOW)
    assert [order.id for order in todays_orders([late_yesterday, midnight_today], NOW)] == ["today"]


def test_today_compares_in_local_time_whatever_the_stored_offset():
    stored_in_utc = Order(id="utc", order_date=MIDNIGHT.astimezone(timezone.utc).isoformat())
    zulu = Order(id="z", order_date=MIDNIGHT.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"))

    assert is_today(stored_in_utc, NOW)
    assert is_today(zulu, NOW)


def test_orders_without_a_parsable_date_are_never_today():
    assert not is_today(Order(id="none"), NOW)
    assert not is_today(Order(id="bad", order_date="yesterday-ish"), NOW)


def test_count_by_status_and_chart_buckets():
    orders = [_order("a", ORDERED), _order("b", PREPARED), _order("c", PREPARED), _order("d", CANCELLED)]

    assert count_by_status(orders, [PREPARED, DELIVERED]) == {PREPARED: 2, DELIVERED: 0}
    assert chart_data(orders) == [("Ordered", 1), ("In Progress", 0), ("Ready", 2), ("Delivered", 0)]


def test_dashboard_summary_only_counts_today():
    orders = [
        _order("a", IN_PREPARATION, total=12.0),
        _order("b", PREPARED, total=None),
        _order("c", PREPARED, total=8.5, when=MIDNIGHT - timedelta(hours=2)),
    ]

    summary = dashboard_summary(orders, NOW)

    assert summary.total_orders == 2
    assert summary.revenue == pytest.approx(12.0)
    assert summary.in_progress == 1
    assert summary.ready_for_delivery == 1
    assert dict(summary.chart)["Ready"] == 1


def test_filter_orders_by_tab():
    orders = [_order("a", ORDERED), _order("b", IN_PREPARATION), _order("c", PREPARED), _order("d", DELIVERED)]

    assert [o.id for o in filter_orders(orders, "active")] == ["a", "b"]
    assert [o.id for o in filter_orders(orders, "prepared")] == ["c"]
    assert len(filter_orders(orders, "all")) == 4


def test_catalog_listing_inverts_for_descending_display():
    items = [Item(id="1", name="Tea", price=3.0), Item(id="2", name="Fries", price=6.5)]

    assert [item.id for item in catalog_listing(items)] == ["1", "2"]
    assert [item.id for item in catalog_listing(items, descending=True)] == ["2", "1"]


def test_orders_for_customer_by_amount_and_date():
    orders = [
        _order("small", total=5.0, when=NOW - timedelta(days=2), phone="+1"),
        _order("big", total=50.0, when=NOW - timedelta(days=5), phone="+1"),
        _order("unknown", total=None, when=NOW, phone="+1"),
        _order("other", total=99.0, phone="+2"),
    ]

    assert [o.id for o in orders_for_customer(orders, "+1")] == ["big", "small", "unknown"]
    assert [o.id for o in orders_for_customer(orders, "+1", by="date")] == ["unknown", "small", "big"]
    with pytest.raises(ValueError):
        orders_for_customer(orders, "+1", by="name")


def test_orders_for_customer_by_date_compares_instants_not_text():
    orders = [
        Order(id="undated", customer_phone="+1", order_date=None),
        Order(id="older", customer_phone="+1", order_date="2026-10-19T10:00:00+02:00"),
        Order(id="newer", customer_phone="+1", order_date="2026-10-19T09:00:00+00:00"),
        Order(id="garbled", customer_phone="+1", order_date="yesterday-ish"),
    ]

    listed = [o.id for o in orders_for_customer(orders, "+1", by="date")]

    assert listed == ["newer", "older", "undated", "garbled"]


def test_customer_totals_are_derived_from_orders():
    orders = [_order("a", total=10.0, phone="+1"), _order("b", total=None, phone="+1"), _order("c", phone="+2")]
    customers = [Customer(phone="+1", customer_name="Ada", total_orders=99, total_spent=1000.0)]

    assert customer_totals("+1", orders) == (2, 10.0)
    derived = with_derived_totals(customers, orders)
    assert (derived[0].total_orders, derived[0].total_spent) == (2, 10.0)
    assert customers[0].total_orders == 99


def test_default_delivery_selection_is_prepared_orders():
    orders = [_order("a", ORDERED), _order("b", PREPARED), _order("c", PREPARED)]

    assert default_delivery_selection(orders) == ["b", "c"]


def test_next_status_follows_the_kitchen_flow():
    assert next_status(ORDERED) == IN_PREPARATION
    assert next_status(IN_PREPARATION) == PREPARED
    assert next_status(PREPARED) == DELIVERED
    assert next_status(DELIVERED) is None
    assert next_status(CANCELLED) is None
    assert next_status(None) is None


def test_order_line_total():
    order = Order(
        id="o",
        line_items=[
            LineItem(id="l1", order_id="o", item_id="i1", quantity=2, unit_price=4.5),
            LineItem(id="l2", order_id="o", item_id="i2", quantity=1, unit_price=None),
        ],
    )

    assert order_line_total(order) == pytest.approx(9.0)
