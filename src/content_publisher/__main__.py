from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from .config import ConfigError, load_config
from .logging_utils import setup_logging
from .mappings.registry import iter_content_types
from .models import AppConfig
from .publisher import (PublishError, PublishResult, SyncStatus,
                        publish_or_update_content, reconcile_content)
from .store import create_store

console = Console()
LOGGER = logging.getLogger("content_publisher.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="content-publisher",
        description="Publish staging content into the live collections.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("publish", "insert or update the production item for a staging item"),
        ("reconcile", "re-run URL backfill and lite sync for a published item"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("staging_item_id")
        cmd.add_argument("content_type_id")

    sub.add_parser("types", help="list registered content types")
    return parser


def print_content_types() -> None:
    table = Table(title="Content types")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Production collection")
    table.add_column("URL field")
    for config in iter_content_types():
        table.add_row(
            config.kind.value,
            config.name,
            config.production_collection,
            config.url_field_key,
        )
    console.print(table)


async def run_command(args: argparse.Namespace, config: AppConfig) -> PublishResult:
    async with create_store(config) as store:
        if args.command == "reconcile":
            return await reconcile_content(
                store, args.staging_item_id, args.content_type_id, config.publisher
            )
        return await publish_or_update_content(
            store, args.staging_item_id, args.content_type_id, config.publisher
        )


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))

    if args.command == "types":
        print_content_types()
        return

    try:
        config = load_config()
    except ConfigError as exc:
        LOGGER.error("Configuration error: %s", exc)
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)

    try:
        result = asyncio.run(run_command(args, config))
    except PublishError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(2)
    except Exception as exc:  # pragma: no cover - guard for CLI usage
        LOGGER.exception("Publisher failed")
        print(f"Publisher failed: {exc}", file=sys.stderr)
        sys.exit(3)

    console.print(result.message)
    if result.status is SyncStatus.DEGRADED:
        console.print(f"[yellow]Degraded side effects:[/] {', '.join(result.degraded)}")


if __name__ == "__main__":
    main()
