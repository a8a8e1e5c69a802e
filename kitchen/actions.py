"""User actions that write back through the data access facade."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from kitchen.client import DataClient
from kitchen.constant import DELIVERED, ORDERED
from kitchen.errors import DataAccessError, ValidationError
from kitchen.models import Customer, Order
from kitchen.viewmodels import customer_totals, next_status

logger = logging.getLogger(__name__)


@dataclass
class DeliveryAssignment:
    """Outcome of a delivery assignment; updates already applied are never reverted."""

    agent_id: str
    updated: list[str] = field(default_factory=list)
    failed_order_id: str | None = None
    error: DataAccessError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def create_order(
    client: DataClient,
    *,
    order_date: str | None = None,
    status: str = ORDERED,
    total_amount: float | None = None,
    business_phone: str | None = None,
    customer_phone: str | None = None,
    customer_name: str | None = None,
    line_items: Iterable[Mapping[str, Any]] = (),
) -> Order:
    """Place a new order. A missing total is stored as 0.0."""
    fields: dict[str, Any] = {
        "order_date": order_date,
        "status": status,
        "total_amount": 0.0 if total_amount is None else total_amount,
        "business_phone": business_phone,
        "customer_phone": customer_phone,
        "customer_name": customer_name,
    }
    lines = [dict(line) for line in line_items]
    if lines:
        fields["line_items"] = lines
    order = await client.create("Order", fields)
    logger.info("order_created id=%s customer=%s total=%.2f", order.id, customer_phone, order.total_amount or 0.0)
    return order


async def assign_delivery(client: DataClient, agent_id: str, order_ids: Iterable[str]) -> DeliveryAssignment:
    """Mark the selected orders delivered one at a time, stopping at the first failure."""
    if not agent_id:
        raise ValidationError("A delivery agent is required")

    result = DeliveryAssignment(agent_id=agent_id)
    for order_id in order_ids:
        try:
            await client.update("Order", order_id, {"status": DELIVERED, "delivery_agent_id": agent_id})
        except DataAccessError as exc:
            result.failed_order_id = order_id
            result.error = exc
            logger.error(
                "assign_delivery_failed agent=%s order=%s applied=%d error=%r",
                agent_id,
                order_id,
                len(result.updated),
                exc,
            )
            return result
        result.updated.append(order_id)

    logger.info("assign_delivery_done agent=%s orders=%s", agent_id, result.updated)
    return result


async def advance_order(client: DataClient, order: Order) -> Order | None:
    """Move an order one step along the kitchen flow; terminal orders are left alone."""
    target = next_status(order.status)
    if target is None:
        return None
    updated = await client.update("Order", order.id, {"status": target})
    logger.info("order_advanced id=%s %s->%s", order.id, order.status, target)
    return updated


async def refresh_customer_totals(client: DataClient, phone: str) -> Customer:
    """Recompute a customer's counters from their orders and store them."""
    orders = await client.list("Order", {"customer_phone": phone})
    total_orders, total_spent = customer_totals(phone, orders)
    return await client.update("Customer", phone, {"total_orders": total_orders, "total_spent": total_spent})
