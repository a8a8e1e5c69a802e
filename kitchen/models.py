"""Record models for the cloud kitchen."""

from __future__ import annotations

from dataclasses import dataclass, field

from kitchen.constant import ITEM_RECORD_TYPE


@dataclass
class LineItem:
    """One line of an order; unit_price is frozen at order time."""

    id: str
    order_id: str
    item_id: str
    item_name: str = ""
    quantity: int = 1
    unit_price: float | None = None


@dataclass
class Order:
    """A placed order with its line items."""

    id: str
    order_date: str | None = None
    total_amount: float | None = None
    status: str | None = None
    tax: float | None = None
    discount: float | None = None
    customer_phone: str | None = None
    customer_name: str | None = None
    business_phone: str | None = None
    items_number: int | None = None
    delivery_agent_id: str | None = None
    line_items: list[LineItem] = field(default_factory=list)


@dataclass
class Customer:
    """A customer keyed by phone number."""

    phone: str
    customer_name: str | None = None
    address: str | None = None
    total_orders: int = 0
    total_spent: float = 0.0


@dataclass
class Business:
    phone: str
    address: str | None = None
    description: str | None = None


@dataclass
class Item:
    """A catalog item."""

    id: str
    name: str
    description: str | None = None
    price: float | None = None
    quantity: int = 0
    in_stock: bool = False
    record_type: str = ITEM_RECORD_TYPE
    business_phone: str | None = None


@dataclass
class DeliveryAgent:
    id: str
    name: str


Record = Order | LineItem | Customer | Business | Item | DeliveryAgent
