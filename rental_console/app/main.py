from __future__ import annotations

import argparse
import asyncio
import os
import sys

from clients.rental_api_sdk.config import ConfigError, SDKConfig
from clients.rental_api_sdk.errors import ApiError
from clients.rental_api_sdk.http_client import HttpClient

from rental_console.app.admin_console import AdminConsole
from rental_console.app.config import AppConfig
from rental_console.app.query_state import Section, SortDirection
from rental_console.app.ui.components.confirm_dialog import terminal_confirmer
from rental_console.app.ui.filters import parse_filter_args
from rental_console.app.ui.table_printer import print_table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rental-console", description="Rental marketplace admin console")
    commands = parser.add_subparsers(dest="command", required=True)

    listing = commands.add_parser("list", help="Print one page of a section")
    listing.add_argument("section", choices=[section.value for section in Section])
    listing.add_argument("--search", default="")
    listing.add_argument("--sort", default=None, help="Field to sort by (default created_at)")
    listing.add_argument("--order", choices=["asc", "desc"], default=None)
    listing.add_argument("--page", type=int, default=1)
    listing.add_argument("--limit", type=int, default=None)
    listing.add_argument("--filter", action="append", default=[], metavar="KEY=VALUE")
    return parser


async def run_list(console: AdminConsole, args: argparse.Namespace) -> int:
    section = Section(args.section)
    console.state.activate(section)
    query = console.query
    query.search = args.search
    if args.sort:
        query.sort.field = args.sort
    if args.order:
        query.sort.direction = SortDirection(args.order)
    if args.limit:
        query.pagination.limit = max(1, args.limit)
    query.pagination.page = max(1, args.page)
    query.filters.update(parse_filter_args(args.filter))

    result = await console.retry()
    view = console.view_model()
    if not result.ok:
        message = result.error.message if result.error else "Failed to load data"
        print(f"[error] {message}", file=sys.stderr)
        return 1

    print_table(f"{section.value} (page {view.page}/{max(1, view.total_pages)}, total {view.total})", view.rows, view.columns)
    return 0


async def _main(args: argparse.Namespace) -> int:
    sdk_config = SDKConfig.from_env()
    app_config = AppConfig.from_env()
    token = os.getenv("RENTAL_API_TOKEN")
    http_client = HttpClient(sdk_config, token_provider=lambda: token)

    def _on_unauthorized(error: ApiError) -> None:
        print(f"[auth] session rejected: {error.message}", file=sys.stderr)

    console = AdminConsole.from_http_client(
        http_client,
        config=app_config,
        confirm=terminal_confirmer,
        on_unauthorized=_on_unauthorized,
    )
    try:
        return await run_list(console, args)
    finally:
        console.close()
        await http_client.aclose()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(_main(args))
    except (ConfigError, ValueError) as exc:
        print(f"[config] {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
