from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple

from pokedex_tracker.connector.catalog_client import TOTAL_POKEMON
from pokedex_tracker.connector.errors import BatchFailure, BatchPartialFailure, CatalogError, UnknownCategory
from pokedex_tracker.knowledge.resolver import Resolver
from pokedex_tracker.state.pokemon import Pokemon
from pokedex_tracker.utils.logger import get_logger

logger = get_logger(__name__)


POKEMON_TYPES: Tuple[str, ...] = (
    "normal",
    "fire",
    "water",
    "electric",
    "grass",
    "ice",
    "fighting",
    "poison",
    "ground",
    "flying",
    "psychic",
    "bug",
    "rock",
    "ghost",
    "dragon",
    "dark",
    "steel",
    "fairy",
)


class TypeMembershipSource(Protocol):
    async def fetch_type_members(self, type_name: str) -> List[str]:
        ...


@dataclass(frozen=True)
class TypeFilterResult:
    type_name: str
    entities: List[Pokemon] = field(default_factory=list)
    requested: int = 0
    partial_failure: Optional[BatchPartialFailure] = None

    @property
    def empty(self) -> bool:
        return not self.entities


def normalize_type(label: str) -> str:
    type_name = label.strip().lower()
    if type_name not in POKEMON_TYPES:
        raise UnknownCategory(label)
    return type_name


class TypeFilterEngine:
    """Resolves the first members of a type, in the catalog's membership order."""

    def __init__(self, resolver: Resolver, membership_source: TypeMembershipSource, limit: int = TOTAL_POKEMON) -> None:
        self.resolver = resolver
        self.membership_source = membership_source
        self.limit = limit

    async def filter(self, label: str) -> TypeFilterResult:
        type_name = normalize_type(label)

        try:
            members = await self.membership_source.fetch_type_members(type_name)
        except CatalogError as exc:
            logger.error("type_membership_failed", type=type_name, error=str(exc))
            raise BatchFailure(f"Could not load members of type {type_name!r}", cause=exc) from exc

        # Truncate, never sample: members past the limit are not requested.
        retained = members[: self.limit]
        batch = await self.resolver.resolve_many(retained)
        logger.info(
            "type_filter_resolved",
            type=type_name,
            members=len(members),
            requested=len(retained),
            resolved=len(batch.entities),
        )
        return TypeFilterResult(
            type_name=type_name,
            entities=batch.entities,
            requested=len(retained),
            partial_failure=batch.partial_failure,
        )
