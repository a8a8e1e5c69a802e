"""Demo catalog, agents and customers for a fresh database."""

from __future__ import annotations

import logging

from kitchen.client import DataClient
from kitchen.constant import DEMO_AGENTS, DEMO_BUSINESS, DEMO_CUSTOMERS, DEMO_ITEMS

logger = logging.getLogger(__name__)


async def seed_demo_data(client: DataClient) -> int:
    """Insert demo records that are not present yet; return how many were created."""
    created = 0
    business_phone = DEMO_BUSINESS["phone"]

    if not await client.list("Business", {"phone": business_phone}):
        await client.create("Business", DEMO_BUSINESS)
        created += 1

    known_items = {item.id for item in await client.list("Item")}
    for item in DEMO_ITEMS:
        if item["id"] in known_items:
            continue
        await client.create("Item", {**item, "business_phone": business_phone})
        created += 1

    known_agents = {agent.id for agent in await client.list("DeliveryAgent")}
    for agent in DEMO_AGENTS:
        if agent["id"] not in known_agents:
            await client.create("DeliveryAgent", agent)
            created += 1

    known_customers = {customer.phone for customer in await client.list("Customer")}
    for customer in DEMO_CUSTOMERS:
        if customer["phone"] not in known_customers:
            await client.create("Customer", customer)
            created += 1

    logger.info("seed_done created=%d", created)
    return created
