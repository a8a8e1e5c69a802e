from __future__ import annotations

import pytest

from kitchen.client import DataClient
from kitchen.data import seed_demo_data


@pytest.fixture
def client(tmp_path):
    data_client = DataClient(db_path=tmp_path / "kitchen.db", page_size=2)
    data_client.bootstrap()
    return data_client


@pytest.fixture
async def seeded(client):
    await seed_demo_data(client)
    return client
