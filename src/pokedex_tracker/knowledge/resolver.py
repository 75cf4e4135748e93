from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol

from pokedex_tracker.connector.errors import BatchPartialFailure
from pokedex_tracker.state.pokemon import Pokemon
from pokedex_tracker.utils.format import normalize_key
from pokedex_tracker.utils.logger import get_logger

logger = get_logger(__name__)


class PokemonSource(Protocol):
    async def fetch_pokemon(self, key: str) -> Dict[str, object]:
        ...


@dataclass(frozen=True)
class BatchResult:
    """Fulfilled resolutions of one batch, in input order."""

    entities: List[Pokemon] = field(default_factory=list)
    partial_failure: Optional[BatchPartialFailure] = None

    @property
    def empty(self) -> bool:
        return not self.entities

    @property
    def failed_keys(self) -> List[str]:
        return self.partial_failure.keys if self.partial_failure else []


class Resolver:
    """Resolves ids or names to Pokemon and memoizes every success for the process lifetime.

    Each distinct key string gets its own slot, so ``"25"`` and ``"pikachu"`` are
    cached separately. Failures are never cached, and concurrent first lookups of the
    same key are not coalesced: each may hit the catalog, and the last write wins
    with an equal value.
    """

    def __init__(self, source: PokemonSource) -> None:
        self.source = source
        self._cache: Dict[str, Pokemon] = {}

    def __contains__(self, key: object) -> bool:
        return normalize_key(key) in self._cache

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def cached(self, key: object) -> Optional[Pokemon]:
        return self._cache.get(normalize_key(key))

    async def resolve(self, key: object) -> Pokemon:
        normalized = normalize_key(key)
        hit = self._cache.get(normalized)
        if hit is not None:
            logger.debug("pokemon_cache_hit", key=normalized)
            return hit

        data = await self.source.fetch_pokemon(normalized)
        pokemon = Pokemon.from_payload(data)
        self._cache[normalized] = pokemon
        logger.info("pokemon_cached", key=normalized, id=pokemon.id, name=pokemon.name)
        return pokemon

    async def resolve_many(self, keys: Iterable[object]) -> BatchResult:
        """Resolve all keys concurrently, wait for every one to settle, keep the successes."""
        key_list = list(keys)
        if not key_list:
            return BatchResult()

        outcomes = await asyncio.gather(*(self.resolve(key) for key in key_list), return_exceptions=True)

        entities: List[Pokemon] = []
        failures: Dict[str, BaseException] = {}
        for key, outcome in zip(key_list, outcomes):
            if isinstance(outcome, Pokemon):
                entities.append(outcome)
            elif isinstance(outcome, Exception):
                failures[normalize_key(key)] = outcome
                logger.debug("batch_member_failed", key=normalize_key(key), error=str(outcome))
            else:
                raise outcome

        partial = BatchPartialFailure(failures) if failures else None
        if partial:
            logger.warning("batch_partial_failure", requested=len(key_list), failed=len(failures))
        return BatchResult(entities=entities, partial_failure=partial)
