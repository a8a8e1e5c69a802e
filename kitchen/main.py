"""Entry point for the cloud kitchen Textual app."""

from __future__ import annotations

import argparse
import asyncio
import logging

from kitchen.client import DataClient
from kitchen.config import DB_PATH, configure_logging
from kitchen.data import seed_demo_data
from kitchen.kitchen_app import KitchenApp

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="cloud-kitchen", description="Cloud kitchen order dashboard")
    parser.add_argument("--db", default=DB_PATH, help="SQLite database path")
    parser.add_argument("--seed", action="store_true", help="load the demo catalog, agents and customers first")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Run the Textual application."""
    args = _parse_args(argv)
    configure_logging()
    client = DataClient(db_path=args.db)
    client.bootstrap()
    if args.seed:
        asyncio.run(seed_demo_data(client))
    logger.info("app_start db=%s", args.db)
    KitchenApp(client).run()


if __name__ == "__main__":
    main()
