from __future__ import annotations

import argparse
import asyncio
from typing import Optional, Sequence

from pokedex_tracker.connector.catalog_client import CatalogClient, CatalogConfig
from pokedex_tracker.display.coordinator import DisplayCoordinator, Renderer
from pokedex_tracker.display.render import render_view
from pokedex_tracker.knowledge.resolver import Resolver
from pokedex_tracker.knowledge.suggestions import SuggestionEngine
from pokedex_tracker.knowledge.type_filter import POKEMON_TYPES, TypeFilterEngine
from pokedex_tracker.state.display_state import DisplayView
from pokedex_tracker.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def build_coordinator(client: CatalogClient, renderer: Optional[Renderer] = None) -> DisplayCoordinator:
    """Wire one shared resolver into both engines and the coordinator."""
    resolver = Resolver(client)
    limit = client.config.limit
    return DisplayCoordinator(
        resolver=resolver,
        suggestions=SuggestionEngine(resolver, client, limit=limit),
        type_filter=TypeFilterEngine(resolver, client, limit=limit),
        renderer=renderer,
    )


async def run_command(args: argparse.Namespace, client: CatalogClient) -> DisplayView:
    coordinator = build_coordinator(client)
    if args.command == "search":
        return await coordinator.on_submit(args.key)
    if args.command == "suggest":
        return await coordinator.on_keystroke(args.query)
    if args.command == "type":
        return await coordinator.on_type_click(args.type_name)
    raise ValueError(f"Unknown command: {args.command}")


async def _main_async(args: argparse.Namespace) -> DisplayView:
    config = CatalogConfig.resolve(base_url=args.base_url, timeout=args.timeout)
    async with CatalogClient(config) as client:
        return await run_command(args, client)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Look up first-generation Pokémon from PokeAPI.")
    parser.add_argument("--base-url", help="Catalog base URL (default: POKEDEX_API_URL or PokeAPI v2).")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds.")
    parser.add_argument("--log-level", default="WARNING", help="Log level for structured logs.")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Resolve a single Pokémon by name or id.")
    search.add_argument("key", nargs="?", default="", help="Name or numeric id.")

    suggest = sub.add_parser("suggest", help="List Pokémon whose name contains the query.")
    suggest.add_argument("query", help="Partial name.")

    type_cmd = sub.add_parser("type", help="List Pokémon of a type.")
    type_cmd.add_argument("type_name", choices=POKEMON_TYPES, help="Type label.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    view = asyncio.run(_main_async(args))
    output = render_view(view)
    print(output if output else "(nothing to show)")


if __name__ == "__main__":
    main()
