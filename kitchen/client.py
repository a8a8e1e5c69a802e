"""Data access facade: list, create, update and live queries over the record store."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from kitchen import persistence
from kitchen.config import DB_PATH, SNAPSHOT_PAGE_SIZE
from kitchen.errors import DataAccessError
from kitchen.models import Record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Full result set of a live query at one point in time."""

    items: tuple[Record, ...]
    is_synced: bool


class LiveQuery:
    """
    Cancellable stream of snapshots for one kind and filter.

    The initial backlog arrives as cumulative pages; only the last page is
    marked synced. Every later change to the kind produces a fresh full
    snapshot; a newer snapshot replaces any unread one, so a slow consumer
    skips straight to the latest state. Iterate with ``async for`` and call
    ``unsubscribe()`` when the consuming view goes away; nothing is delivered
    after that.
    """

    def __init__(self, client: DataClient, kind: str, filter: Mapping[str, Any] | None, page_size: int) -> None:
        self.kind = kind
        self.filter = dict(filter or {})
        self._client = client
        self._page_size = max(1, page_size)
        self._queue: asyncio.Queue[Snapshot | DataAccessError | None] = asyncio.Queue()
        self._lock = asyncio.Lock()
        self._closed = False
        self._synced = False
        self._task: asyncio.Task[None] | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_synced(self) -> bool:
        return self._synced

    def _start(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self._load_initial())

    async def _load_initial(self) -> None:
        async with self._lock:
            try:
                records = await self._client.list(self.kind, self.filter)
            except DataAccessError as exc:
                logger.error("live_query_initial_failed kind=%s error=%r", self.kind, exc)
                self._push(exc)
                return
            if not records:
                self._push(Snapshot(items=(), is_synced=True))
            for end in range(self._page_size, len(records) + self._page_size, self._page_size):
                self._push(Snapshot(items=tuple(records[:end]), is_synced=end >= len(records)))
            self._synced = True
            logger.debug("live_query_synced kind=%s rows=%d", self.kind, len(records))

    async def refresh(self) -> None:
        """Re-read the query and deliver a new snapshot."""
        if self._closed:
            return
        async with self._lock:
            if self._closed:
                return
            try:
                records = await self._client.list(self.kind, self.filter)
            except DataAccessError as exc:
                logger.error("live_query_refresh_failed kind=%s error=%r", self.kind, exc)
                self._push(exc)
                return
            self._push(Snapshot(items=tuple(records), is_synced=self._synced))

    def _push(self, item: Snapshot | DataAccessError) -> None:
        if self._closed:
            return
        if self._synced and isinstance(item, Snapshot):
            # A full snapshot supersedes any still unread ones.
            self._drop_pending_snapshots()
        self._queue.put_nowait(item)

    def _drop_pending_snapshots(self) -> None:
        kept = []
        while not self._queue.empty():
            pending = self._queue.get_nowait()
            if not isinstance(pending, Snapshot):
                kept.append(pending)
        for pending in kept:
            self._queue.put_nowait(pending)

    def unsubscribe(self) -> None:
        """Stop the stream. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._client._detach(self)
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._queue.put_nowait(None)
        logger.debug("live_query_unsubscribed kind=%s", self.kind)

    def __aiter__(self) -> LiveQuery:
        return self

    async def __anext__(self) -> Snapshot:
        if self._closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is None or self._closed:
            raise StopAsyncIteration
        if isinstance(item, DataAccessError):
            raise item
        return item

    async def __aenter__(self) -> LiveQuery:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.unsubscribe()


class DataClient:
    """
    Facade over the record store.

    Store calls run in a worker thread so the event loop stays responsive.
    Failures surface as ``DataAccessError`` subclasses and are never retried.
    """

    def __init__(self, db_path: str | Path = DB_PATH, page_size: int = SNAPSHOT_PAGE_SIZE) -> None:
        self.db_path = db_path
        self.page_size = page_size
        self._queries: list[LiveQuery] = []

    def bootstrap(self) -> None:
        persistence.bootstrap_schema(self.db_path)

    async def list(self, kind: str, filter: Mapping[str, Any] | None = None) -> list[Record]:
        return await asyncio.to_thread(persistence.select_records, kind, filter, db_path=self.db_path)

    async def list_by_index(
        self,
        kind: str,
        index_field: str,
        index_value: Any,
        sort_field: str,
        descending: bool = False,
    ) -> list[Record]:
        """Read every record in one static partition, ordered by sort_field."""
        return await asyncio.to_thread(
            persistence.select_records,
            kind,
            {index_field: index_value},
            order_by=sort_field,
            descending=descending,
            db_path=self.db_path,
        )

    async def get(self, kind: str, record_id: str) -> Record:
        return await asyncio.to_thread(persistence.get_record, kind, record_id, db_path=self.db_path)

    async def create(self, kind: str, fields: Mapping[str, Any]) -> Record:
        record = await asyncio.to_thread(persistence.insert_record, kind, fields, db_path=self.db_path)
        await self._notify(kind)
        return record

    async def update(self, kind: str, record_id: str, fields: Mapping[str, Any]) -> Record:
        record = await asyncio.to_thread(persistence.update_record, kind, record_id, fields, db_path=self.db_path)
        await self._notify(kind)
        return record

    def observe_query(self, kind: str, filter: Mapping[str, Any] | None = None) -> LiveQuery:
        """Open a live query. Must be called from a running event loop."""
        persistence.kind_spec(kind)
        query = LiveQuery(self, kind, filter, self.page_size)
        self._queries.append(query)
        query._start()
        logger.debug("live_query_open kind=%s filter=%s", kind, query.filter)
        return query

    def close(self) -> None:
        """Unsubscribe every open live query."""
        for query in list(self._queries):
            query.unsubscribe()

    def _detach(self, query: LiveQuery) -> None:
        if query in self._queries:
            self._queries.remove(query)

    async def _notify(self, kind: str) -> None:
        affected = {kind, "Order"} if kind == "LineItem" else {kind}
        for query in [q for q in self._queries if q.kind in affected]:
            await query.refresh()
