from __future__ import annotations

import asyncio

import pytest

from kitchen.client import DataClient
from kitchen.constant import ITEM_RECORD_TYPE, ORDERED, PREPARED
from kitchen.errors import DataAccessError, NotFoundError, ValidationError
from kitchen.viewmodels import catalog_listing


async def test_create_order_applies_defaults(client):
    order = await client.create("Order", {"customer_phone": "+15550111"})

    assert order.total_amount == 0.0
    assert order.status == ORDERED
    assert order.order_date
    assert order.id
    assert order.line_items == []


async def test_create_rejects_unknown_fields_and_kinds(client):
    with pytest.raises(ValidationError):
        await client.create("Order", {"colour": "blue"})
    with pytest.raises(ValidationError):
        await client.create("Invoice", {})
    with pytest.raises(ValidationError):
        await client.create("Order", {"total_amount": "a lot"})


async def test_phone_keyed_kinds_require_their_identifier(client):
    with pytest.raises(ValidationError):
        await client.create("Customer", {"customer_name": "Nobody"})


async def test_update_missing_record_raises_not_found(client):
    with pytest.raises(NotFoundError) as excinfo:
        await client.update("Order", "missing", {"status": PREPARED})

    assert excinfo.value.record_id == "missing"
    assert isinstance(excinfo.value, DataAccessError)


async def test_update_changes_only_given_fields(client):
    order = await client.create("Order", {"total_amount": 12.5, "customer_phone": "+1"})

    updated = await client.update("Order", order.id, {"status": PREPARED})

    assert updated.status == PREPARED
    assert updated.total_amount == 12.5
    assert (await client.get("Order", order.id)).status == PREPARED


async def test_line_items_capture_catalog_price(seeded):
    order = await seeded.create(
        "Order",
        {"line_items": [{"item_id": "item-bibimbap", "quantity": 2}, {"item_id": "item-kimchi-fries"}]},
    )

    await seeded.update("Item", "item-bibimbap", {"price": 99.0})
    reloaded = await seeded.get("Order", order.id)

    assert [(line.item_name, line.quantity, line.unit_price) for line in reloaded.line_items] == [
        ("Bibimbap Bowl", 2, 11.5),
        ("Kimchi Fries", 1, 6.5),
    ]
    assert reloaded.items_number == 3


async def test_line_item_for_unknown_item_rolls_back_the_order(seeded):
    with pytest.raises(ValidationError):
        await seeded.create("Order", {"id": "broken", "line_items": [{"item_id": "nope"}]})

    assert await seeded.list("Order", {"id": "broken"}) == []


async def test_list_filters_by_field(client):
    await client.create("Order", {"customer_phone": "+1", "total_amount": 5})
    await client.create("Order", {"customer_phone": "+2", "total_amount": 7})

    orders = await client.list("Order", {"customer_phone": "+2"})

    assert [order.total_amount for order in orders] == [7.0]


async def test_list_by_index_orders_ascending(seeded):
    by_price = await seeded.list_by_index("Item", "record_type", ITEM_RECORD_TYPE, "price")
    by_quantity = await seeded.list_by_index("Item", "record_type", ITEM_RECORD_TYPE, "quantity")

    prices = [item.price for item in by_price]
    assert prices == sorted(prices)
    assert [item.quantity for item in by_quantity] == sorted(item.quantity for item in by_quantity)
    assert [item.price for item in catalog_listing(by_price, descending=True)] == sorted(prices, reverse=True)


async def test_item_stock_flag_follows_quantity(seeded):
    tea = await seeded.get("Item", "item-iced-tea")
    assert tea.in_stock is False

    restocked = await seeded.update("Item", "item-iced-tea", {"quantity": 5})
    assert restocked.in_stock is True


async def test_live_query_pages_backlog_then_marks_synced(client):
    for total in (1, 2, 3):
        await client.create("Order", {"total_amount": total})

    query = client.observe_query("Order")
    first = await anext(query)
    second = await anext(query)

    assert (len(first.items), first.is_synced) == (2, False)
    assert (len(second.items), second.is_synced) == (3, True)
    assert query.is_synced
    query.unsubscribe()


async def test_live_query_empty_backlog_is_synced(client):
    query = client.observe_query("Order")

    snapshot = await anext(query)

    assert snapshot.items == ()
    assert snapshot.is_synced
    query.unsubscribe()


async def test_live_query_delivers_changes(client):
    query = client.observe_query("Order", {"customer_phone": "+1"})
    await anext(query)

    order = await client.create("Order", {"customer_phone": "+1"})
    created = await anext(query)
    await client.create("Order", {"customer_phone": "+2"})
    ignored = await anext(query)
    await client.update("Order", order.id, {"status": PREPARED})
    updated = await anext(query)

    assert [o.id for o in created.items] == [order.id]
    assert len(ignored.items) == 1
    assert updated.items[0].status == PREPARED
    query.unsubscribe()


async def test_slow_consumer_only_gets_the_latest_snapshot(client):
    query = client.observe_query("Order")
    await anext(query)

    for total in (1, 2, 3):
        await client.create("Order", {"total_amount": total})

    latest = await anext(query)

    assert [o.total_amount for o in latest.items] == [1.0, 2.0, 3.0]
    assert latest.is_synced
    assert query._queue.empty()
    query.unsubscribe()


async def test_backlog_pages_are_not_coalesced(client):
    for total in (1, 2, 3, 4, 5):
        await client.create("Order", {"total_amount": total})

    query = client.observe_query("Order")
    sizes = [len((await anext(query)).items) for _ in range(3)]

    assert sizes == [2, 4, 5]
    query.unsubscribe()


async def test_unsubscribed_query_delivers_nothing(client):
    query = client.observe_query("Order")
    await anext(query)
    query.unsubscribe()

    await client.create("Order", {"total_amount": 4})

    assert [snapshot async for snapshot in query] == []
    assert query.closed
    query.unsubscribe()


async def test_unsubscribe_wakes_a_waiting_consumer(client):
    query = client.observe_query("Order")
    await anext(query)

    async def consume():
        return [snapshot async for snapshot in query]

    consumer = asyncio.create_task(consume())
    await asyncio.sleep(0)
    query.unsubscribe()

    assert await asyncio.wait_for(consumer, timeout=1) == []


async def test_live_query_context_manager_unsubscribes(client):
    async with client.observe_query("Order") as query:
        await anext(query)

    assert query.closed


async def test_store_failures_surface_as_data_access_errors(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    broken = DataClient(db_path=blocker / "kitchen.db")

    with pytest.raises(DataAccessError):
        await broken.list("Order")


async def test_integer_fields_reject_fractional_values(client):
    with pytest.raises(ValidationError):
        await client.create("Item", {"name": "Half Dumpling", "quantity": 2.7})
    with pytest.raises(ValidationError):
        await client.create("Item", {"name": "Half Dumpling", "quantity": "2.7"})

    whole = await client.create("Item", {"name": "Dumplings", "quantity": 4.0, "price": 5})
    assert whole.quantity == 4
    assert whole.in_stock is True
    assert await client.list("Item", {"name": "Half Dumpling"}) == []


async def test_boolean_fields_only_accept_booleans(client):
    with pytest.raises(ValidationError):
        await client.create("Item", {"name": "Mochi", "quantity": 3, "in_stock": "false"})
    with pytest.raises(ValidationError):
        await client.create("Item", {"name": "Mochi", "quantity": 3, "in_stock": 2})

    hidden = await client.create("Item", {"name": "Mochi", "quantity": 3, "in_stock": False})
    flagged = await client.create("Item", {"name": "Yuzu Soda", "quantity": 0, "in_stock": 1})
    assert (hidden.in_stock, flagged.in_stock) == (False, True)
