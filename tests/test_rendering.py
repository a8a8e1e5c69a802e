from __future__ import annotations

from datetime import datetime

from kitchen.constant import PREPARED, STATUS_BADGE_STYLES
from kitchen.kitchen_app import greeting_for
from kitchen.models import LineItem, Order
from kitchen.rendering import badge_style, format_bar_chart, format_line_item, format_money, format_order_label


def test_format_money_defaults_missing_to_zero():
    assert format_money(None) == "$0.00"
    assert format_money(12.5) == "$12.50"


def test_badge_style_falls_back_for_unknown_status():
    assert badge_style(PREPARED) == STATUS_BADGE_STYLES[PREPARED]
    assert badge_style("lost") == badge_style(None)


def test_order_label_shows_customer_total_and_status():
    order = Order(id="abcdef123456", customer_name="Ada", total_amount=None, status=PREPARED)

    assert format_order_label(order).plain == "abcdef12  Ada  $0.00   prepared "


def test_line_item_label():
    line = LineItem(id="l", order_id="o", item_id="i", item_name="Tofu Bowl", quantity=2, unit_price=10.25)

    assert format_line_item(line).plain == "2 x Tofu Bowl  $10.25"


def test_bar_chart_scales_to_largest_bucket():
    chart = format_bar_chart([("Ordered", 2), ("Ready", 4), ("Delivered", 0)], width=8)

    assert chart.plain.splitlines() == [
        "Ordered   ████ 2",
        "Ready     ████████ 4",
        "Delivered  0",
    ]


def test_bar_chart_with_no_orders():
    assert format_bar_chart([("Ordered", 0)]).plain == "Ordered  0"


def test_greeting_by_hour():
    assert greeting_for(datetime(2026, 1, 1, 8)) == "Good Morning"
    assert greeting_for(datetime(2026, 1, 1, 13)) == "Good Afternoon"
    assert greeting_for(datetime(2026, 1, 1, 20)) == "Good Evening"
