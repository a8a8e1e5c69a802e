"""Editable status vocabulary, view labels and demo seed data."""

from __future__ import annotations

ORDERED = "ordered"
IN_PREPARATION = "in preparation"
PREPARED = "prepared"
DELIVERED = "delivered"
CANCELLED = "cancelled"

ORDER_STATUSES: tuple[str, ...] = (ORDERED, IN_PREPARATION, PREPARED, DELIVERED, CANCELLED)

# Sort precedence for the order lists. Statuses missing here sort last.
STATUS_PRECEDENCE: tuple[str, ...] = (ORDERED, IN_PREPARATION, PREPARED, DELIVERED)

# Kitchen flow used by the "advance" action. Terminal statuses have no successor.
STATUS_FLOW: dict[str, str] = {
    ORDERED: IN_PREPARATION,
    IN_PREPARATION: PREPARED,
    PREPARED: DELIVERED,
}

TERMINAL_STATUSES: frozenset[str] = frozenset({DELIVERED, CANCELLED})

# Dashboard chart buckets: (label, status).
CHART_BUCKETS: tuple[tuple[str, str], ...] = (
    ("Ordered", ORDERED),
    ("In Progress", IN_PREPARATION),
    ("Ready", PREPARED),
    ("Delivered", DELIVERED),
)

STATUS_BADGE_STYLES: dict[str, str] = {
    ORDERED: "bold #ffffff on #2f6db5",
    IN_PREPARATION: "bold #0b1f0f on #e0b23a",
    PREPARED: "bold #0b1f0f on #5fbf72",
    DELIVERED: "bold #ffffff on #6b7280",
    CANCELLED: "bold #ffffff on #b23a48",
}

# Orders view tabs: tab id -> (label, statuses shown; None means every status).
ORDER_TABS: dict[str, tuple[str, frozenset[str] | None]] = {
    "active": ("Active", frozenset({ORDERED, IN_PREPARATION})),
    "prepared": ("Prepared", frozenset({PREPARED})),
    "all": ("All Orders", None),
}

# Static partition value for catalog items; the secondary index is keyed on it.
ITEM_RECORD_TYPE = "ITEM"

DEMO_BUSINESS: dict[str, str] = {
    "phone": "+15550100",
    "address": "12 Harbour Road",
    "description": "Cloud kitchen serving bowls and wraps",
}

DEMO_ITEMS: list[dict[str, object]] = [
    {"id": "item-bibimbap", "name": "Bibimbap Bowl", "description": "Rice, vegetables, egg", "price": 11.5, "quantity": 24},
    {"id": "item-bulgogi-wrap", "name": "Bulgogi Wrap", "description": "Beef, slaw, gochujang mayo", "price": 9.75, "quantity": 18},
    {"id": "item-tofu-bowl", "name": "Tofu Bowl", "description": "Crispy tofu, greens", "price": 10.25, "quantity": 12},
    {"id": "item-kimchi-fries", "name": "Kimchi Fries", "description": "Fries, kimchi, cheese", "price": 6.5, "quantity": 30},
    {"id": "item-iced-tea", "name": "Barley Iced Tea", "description": "", "price": 3.0, "quantity": 0},
]

DEMO_AGENTS: list[dict[str, str]] = [
    {"id": "agent-1", "name": "Mina"},
    {"id": "agent-2", "name": "Joon"},
]

DEMO_CUSTOMERS: list[dict[str, object]] = [
    {"phone": "+15550111", "customer_name": "Ada", "address": "3 Mill Lane"},
    {"phone": "+15550122", "customer_name": "Ben", "address": "41 Quay Street"},
]
