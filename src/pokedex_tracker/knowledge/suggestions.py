from __future__ import annotations

from typing import List, Protocol

from pokedex_tracker.connector.catalog_client import TOTAL_POKEMON
from pokedex_tracker.connector.errors import BatchFailure, CatalogError
from pokedex_tracker.knowledge.resolver import Resolver
from pokedex_tracker.state.pokemon import Pokemon
from pokedex_tracker.utils.logger import get_logger

logger = get_logger(__name__)


class NameIndexSource(Protocol):
    async def list_names(self, limit: int = TOTAL_POKEMON, offset: int = 0) -> List[str]:
        ...


def match_names(names: List[str], query: str) -> List[str]:
    """Case-insensitive substring filter that keeps index order."""
    needle = query.lower()
    return [name for name in names if needle in name.lower()]


class SuggestionEngine:
    """Turns a partial query into resolved Pokemon drawn from the first-generation index."""

    def __init__(self, resolver: Resolver, index_source: NameIndexSource, limit: int = TOTAL_POKEMON) -> None:
        self.resolver = resolver
        self.index_source = index_source
        self.limit = limit

    async def suggest(self, query: str) -> List[Pokemon]:
        if not query:
            return []

        try:
            names = await self.index_source.list_names(limit=self.limit, offset=0)
        except CatalogError as exc:
            logger.error("suggestion_index_failed", query=query, error=str(exc))
            raise BatchFailure("Could not load the suggestion index", cause=exc) from exc

        matches = match_names(names[: self.limit], query)
        if not matches:
            logger.debug("suggestions_none", query=query, index_size=len(names))
            return []

        batch = await self.resolver.resolve_many(matches)
        logger.info(
            "suggestions_resolved",
            query=query,
            matches=len(matches),
            resolved=len(batch.entities),
            dropped=len(batch.failed_keys),
        )
        return batch.entities
