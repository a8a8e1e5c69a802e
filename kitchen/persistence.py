"""SQLite persistence for kitchen records."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping
from uuid import uuid4

from kitchen.config import DB_PATH
from kitchen.constant import ITEM_RECORD_TYPE, ORDERED
from kitchen.errors import DataAccessError, NotFoundError, ValidationError
from kitchen.models import Business, Customer, DeliveryAgent, Item, LineItem, Order, Record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KindSpec:
    """How one record kind maps onto a table."""

    name: str
    table: str
    model: type
    id_field: str
    columns: dict[str, type]
    generated_id: bool = True
    defaults: Callable[[], dict[str, Any]] | None = None


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _order_defaults() -> dict[str, Any]:
    return {"status": ORDERED, "total_amount": 0.0, "order_date": _utc_now_iso()}


KINDS: dict[str, KindSpec] = {
    "Order": KindSpec(
        name="Order",
        table="orders",
        model=Order,
        id_field="id",
        columns={
            "id": str,
            "order_date": str,
            "total_amount": float,
            "status": str,
            "tax": float,
            "discount": float,
            "customer_phone": str,
            "customer_name": str,
            "business_phone": str,
            "items_number": int,
            "delivery_agent_id": str,
        },
        defaults=_order_defaults,
    ),
    "LineItem": KindSpec(
        name="LineItem",
        table="order_items",
        model=LineItem,
        id_field="id",
        columns={
            "id": str,
            "order_id": str,
            "item_id": str,
            "item_name": str,
            "quantity": int,
            "unit_price": float,
        },
    ),
    "Customer": KindSpec(
        name="Customer",
        table="customers",
        model=Customer,
        id_field="phone",
        columns={
            "phone": str,
            "customer_name": str,
            "address": str,
            "total_orders": int,
            "total_spent": float,
        },
        generated_id=False,
    ),
    "Business": KindSpec(
        name="Business",
        table="businesses",
        model=Business,
        id_field="phone",
        columns={"phone": str, "address": str, "description": str},
        generated_id=False,
    ),
    "Item": KindSpec(
        name="Item",
        table="items",
        model=Item,
        id_field="id",
        columns={
            "id": str,
            "name": str,
            "description": str,
            "price": float,
            "quantity": int,
            "in_stock": bool,
            "record_type": str,
            "business_phone": str,
        },
        defaults=lambda: {"record_type": ITEM_RECORD_TYPE},
    ),
    "DeliveryAgent": KindSpec(
        name="DeliveryAgent",
        table="delivery_agents",
        model=DeliveryAgent,
        id_field="id",
        columns={"id": str, "name": str},
    ),
}


def kind_spec(kind: str) -> KindSpec:
    """Look up a record kind, rejecting names that are not declared."""
    spec = KINDS.get(kind)
    if spec is None:
        raise ValidationError(f"Unknown record kind: {kind!r}")
    return spec


def _connect(db_path: str | Path) -> sqlite3.Connection:
    db_file = Path(db_path)
    db_file.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_file)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


_SCHEMA = """
CREATE TABLE IF NOT EXISTS businesses (
    phone TEXT PRIMARY KEY,
    address TEXT,
    description TEXT
);

CREATE TABLE IF NOT EXISTS customers (
    phone TEXT PRIMARY KEY,
    customer_name TEXT,
    address TEXT,
    total_orders INTEGER NOT NULL DEFAULT 0,
    total_spent REAL NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS items (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    price REAL,
    quantity INTEGER NOT NULL DEFAULT 0 CHECK (quantity >= 0),
    in_stock INTEGER NOT NULL DEFAULT 0,
    record_type TEXT NOT NULL DEFAULT 'ITEM',
    business_phone TEXT
);

CREATE TABLE IF NOT EXISTS delivery_agents (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS orders (
    id TEXT PRIMARY KEY,
    order_date TEXT,
    total_amount REAL,
    status TEXT,
    tax REAL,
    discount REAL,
    customer_phone TEXT,
    customer_name TEXT,
    business_phone TEXT,
    items_number INTEGER,
    delivery_agent_id TEXT
);

CREATE TABLE IF NOT EXISTS order_items (
    id TEXT PRIMARY KEY,
    order_id TEXT NOT NULL,
    line_index INTEGER NOT NULL DEFAULT 0,
    item_id TEXT NOT NULL,
    item_name TEXT,
    quantity INTEGER NOT NULL CHECK (quantity > 0),
    unit_price REAL,
    FOREIGN KEY(order_id) REFERENCES orders(id) ON DELETE CASCADE,
    FOREIGN KEY(item_id) REFERENCES items(id)
);

CREATE INDEX IF NOT EXISTS idx_order_items_order_id_line
    ON order_items(order_id, line_index);

CREATE INDEX IF NOT EXISTS idx_orders_customer_phone
    ON orders(customer_phone, order_date);

CREATE INDEX IF NOT EXISTS idx_items_record_type_price
    ON items(record_type, price);

CREATE INDEX IF NOT EXISTS idx_items_record_type_quantity
    ON items(record_type, quantity);
"""


def bootstrap_schema(db_path: str | Path = DB_PATH) -> None:
    """Create persistence schema if it does not already exist."""
    _run(lambda conn: conn.executescript(_SCHEMA), db_path)
    logger.debug("schema_ready db=%s", db_path)


def _coerce_value(column_type: type, value: Any) -> Any:
    if column_type is bool:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, (int, float)) and value in (0, 1):
            return int(value)
        raise ValueError(f"expected a boolean, got {value!r}")
    if column_type is int:
        if isinstance(value, bool):
            raise ValueError(f"expected an integer, got {value!r}")
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"expected an integer, got {value!r}")
        return int(value)
    if column_type is str:
        return str(value)
    return column_type(value)


def _coerce(spec: KindSpec, fields: Mapping[str, Any]) -> dict[str, Any]:
    unknown = sorted(set(fields) - set(spec.columns))
    if unknown:
        raise ValidationError(f"{spec.name} has no field(s): {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for name, value in fields.items():
        if value is None:
            values[name] = None
            continue
        try:
            values[name] = _coerce_value(spec.columns[name], value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"{spec.name}.{name}: {exc}") from exc
    return values


def _to_record(spec: KindSpec, row: sqlite3.Row) -> Record:
    data = {name: row[name] for name in spec.columns}
    for name, column_type in spec.columns.items():
        if column_type is bool:
            data[name] = bool(data[name])
    return spec.model(**data)


def _attach_line_items(conn: sqlite3.Connection, orders: list[Order]) -> None:
    if not orders:
        return
    by_id = {order.id: order for order in orders}
    placeholders = ", ".join("?" for _ in by_id)
    rows = conn.execute(
        f"SELECT * FROM order_items WHERE order_id IN ({placeholders}) ORDER BY order_id, line_index",
        tuple(by_id),
    )
    spec = KINDS["LineItem"]
    for row in rows:
        by_id[row["order_id"]].line_items.append(_to_record(spec, row))


def _run(action: Callable[[sqlite3.Connection], Any], db_path: str | Path) -> Any:
    try:
        conn = _connect(db_path)
    except (sqlite3.Error, OSError) as exc:
        raise DataAccessError(f"Cannot open store {db_path}: {exc}") from exc
    try:
        with conn:
            return action(conn)
    except sqlite3.IntegrityError as exc:
        raise ValidationError(str(exc)) from exc
    except sqlite3.Error as exc:
        raise DataAccessError(str(exc)) from exc
    finally:
        conn.close()


def select_records(
    kind: str,
    filter: Mapping[str, Any] | None = None,
    *,
    order_by: str | None = None,
    descending: bool = False,
    db_path: str | Path = DB_PATH,
) -> list[Record]:
    """Read records of a kind matching an equality filter."""
    spec = kind_spec(kind)
    where = _coerce(spec, filter or {})
    if order_by is not None and order_by not in spec.columns:
        raise ValidationError(f"{spec.name} cannot be ordered by {order_by!r}")

    sql = f"SELECT * FROM {spec.table}"
    params: list[Any] = []
    if where:
        clauses = []
        for name, value in where.items():
            if value is None:
                clauses.append(f"{name} IS NULL")
            else:
                clauses.append(f"{name} = ?")
                params.append(value)
        sql += " WHERE " + " AND ".join(clauses)
    if order_by is not None:
        direction = "DESC" if descending else "ASC"
        sql += f" ORDER BY {order_by} {direction}, rowid"
    else:
        sql += " ORDER BY rowid"

    def action(conn: sqlite3.Connection) -> list[Record]:
        records = [_to_record(spec, row) for row in conn.execute(sql, params)]
        if spec.model is Order:
            _attach_line_items(conn, records)
        return records

    return _run(action, db_path)


def get_record(kind: str, record_id: str, *, db_path: str | Path = DB_PATH) -> Record:
    """Read one record by identifier."""
    spec = kind_spec(kind)
    records = select_records(kind, {spec.id_field: record_id}, db_path=db_path)
    if not records:
        raise NotFoundError(kind, record_id)
    return records[0]


def _prepare_insert(spec: KindSpec, fields: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(spec.defaults() if spec.defaults else {})
    merged.update({name: value for name, value in fields.items() if value is not None})
    if spec.generated_id:
        merged.setdefault(spec.id_field, uuid4().hex)
    elif not merged.get(spec.id_field):
        raise ValidationError(f"{spec.name}.{spec.id_field} is required")
    values = _coerce(spec, merged)
    if spec.model is Item and "in_stock" not in values:
        values["in_stock"] = 1 if (values.get("quantity") or 0) > 0 else 0
    return values


def _insert_row(conn: sqlite3.Connection, table: str, values: Mapping[str, Any]) -> None:
    columns = ", ".join(values)
    placeholders = ", ".join("?" for _ in values)
    conn.execute(f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", tuple(values.values()))


def _prepare_line_items(
    conn: sqlite3.Connection, order_id: str, line_items: Iterable[Mapping[str, Any]]
) -> list[dict[str, Any]]:
    spec = KINDS["LineItem"]
    prepared = []
    for idx, line in enumerate(line_items):
        item_id = line.get("item_id")
        row = conn.execute("SELECT name, price FROM items WHERE id = ?", (item_id,)).fetchone()
        if row is None:
            raise ValidationError(f"Item {item_id!r} not found")
        unit_price = line.get("unit_price")
        values = _prepare_insert(
            spec,
            {
                **line,
                "order_id": order_id,
                "item_name": line.get("item_name") or row["name"],
                "quantity": line.get("quantity", 1),
                # Captured now so later catalog price changes leave the order untouched.
                "unit_price": row["price"] if unit_price is None else unit_price,
            },
        )
        values["line_index"] = idx
        prepared.append(values)
    return prepared


def insert_record(kind: str, fields: Mapping[str, Any], *, db_path: str | Path = DB_PATH) -> Record:
    """Insert a record, applying the kind's defaults; Orders may carry line_items."""
    spec = kind_spec(kind)
    fields = dict(fields)
    line_items = fields.pop("line_items", None) if spec.model is Order else None
    values = _prepare_insert(spec, fields)
    record_id = values[spec.id_field]

    def action(conn: sqlite3.Connection) -> None:
        lines = _prepare_line_items(conn, record_id, line_items or [])
        if lines and values.get("items_number") is None:
            values["items_number"] = sum(line["quantity"] for line in lines)
        _insert_row(conn, spec.table, values)
        for line in lines:
            _insert_row(conn, KINDS["LineItem"].table, line)

    _run(action, db_path)
    logger.debug("insert kind=%s id=%s", kind, record_id)
    return get_record(kind, record_id, db_path=db_path)


def update_record(
    kind: str, record_id: str, fields: Mapping[str, Any], *, db_path: str | Path = DB_PATH
) -> Record:
    """Update the given fields of one record."""
    spec = kind_spec(kind)
    if spec.id_field in fields and fields[spec.id_field] != record_id:
        raise ValidationError(f"{spec.name}.{spec.id_field} cannot be changed")
    values = _coerce(spec, {name: value for name, value in fields.items() if name != spec.id_field})
    if spec.model is Item and "quantity" in values and "in_stock" not in values:
        values["in_stock"] = 1 if (values["quantity"] or 0) > 0 else 0

    def action(conn: sqlite3.Connection) -> int:
        if not values:
            row = conn.execute(f"SELECT 1 FROM {spec.table} WHERE {spec.id_field} = ?", (record_id,)).fetchone()
            return 0 if row is None else 1
        assignments = ", ".join(f"{name} = ?" for name in values)
        cur = conn.execute(
            f"UPDATE {spec.table} SET {assignments} WHERE {spec.id_field} = ?",
            (*values.values(), record_id),
        )
        return cur.rowcount

    if _run(action, db_path) == 0:
        raise NotFoundError(kind, record_id)
    logger.debug("update kind=%s id=%s fields=%s", kind, record_id, sorted(values))
    return get_record(kind, record_id, db_path=db_path)
