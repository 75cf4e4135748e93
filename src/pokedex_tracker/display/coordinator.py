from __future__ import annotations

from dataclasses import replace
from typing import Callable, Optional

from pokedex_tracker.connector.errors import BatchFailure, CatalogError, UserInputEmpty
from pokedex_tracker.knowledge.resolver import Resolver
from pokedex_tracker.knowledge.suggestions import SuggestionEngine
from pokedex_tracker.knowledge.type_filter import TypeFilterEngine, normalize_type
from pokedex_tracker.state.display_state import (
    DisplayEvent,
    DisplayView,
    FilterFailed,
    FilterResolved,
    InputChanged,
    ResetRequested,
    SearchFailed,
    SearchPromptRequired,
    SearchResolved,
    SuggestionsFailed,
    SuggestionsReady,
    transition,
)
from pokedex_tracker.state.pokemon import Pokemon
from pokedex_tracker.utils.logger import get_logger

logger = get_logger(__name__)

Renderer = Callable[[DisplayView], None]


def validate_search(raw: str) -> str:
    key = raw.strip().lower()
    if not key:
        raise UserInputEmpty()
    return key


class DisplayCoordinator:
    """Single owner of the visible surface.

    Every user action takes a new generation number. Results that come back
    after a newer action has started are dropped instead of being applied, so
    a slow batch can never overwrite what a later keystroke or click produced.
    """

    def __init__(
        self,
        resolver: Resolver,
        suggestions: SuggestionEngine,
        type_filter: TypeFilterEngine,
        renderer: Optional[Renderer] = None,
    ) -> None:
        self.resolver = resolver
        self.suggestions = suggestions
        self.type_filter = type_filter
        self.renderer = renderer
        self.view = DisplayView()
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def on_keystroke(self, text: str) -> DisplayView:
        generation = self._begin("keystroke")
        self._apply(InputChanged(text), generation)
        query = text.strip()
        try:
            entities = await self.suggestions.suggest(query)
        except BatchFailure as exc:
            logger.warning("suggestions_unavailable", query=query, error=str(exc))
            return self._apply(SuggestionsFailed(), generation)
        return self._apply(SuggestionsReady(tuple(entities)), generation)

    async def on_submit(self, query: Optional[str] = None) -> DisplayView:
        generation = self._begin("submit")
        raw = self.view.search_input if query is None else query
        try:
            key = validate_search(raw)
        except UserInputEmpty:
            return self._apply(SearchPromptRequired(), generation)
        try:
            pokemon = await self.resolver.resolve(key)
        except CatalogError as exc:
            logger.info("search_failed", key=key, error_type=type(exc).__name__)
            return self._apply(SearchFailed(exc), generation)
        return self._apply(SearchResolved(pokemon), generation)

    async def on_select(self, pokemon: Pokemon) -> DisplayView:
        self._apply(InputChanged(pokemon.name), self._generation)
        return await self.on_submit(pokemon.name)

    async def on_type_click(self, label: str) -> DisplayView:
        # Rejected labels raise before the action touches the view or the generation.
        type_name = normalize_type(label)
        generation = self._begin("type_click")
        self._apply(InputChanged(""), generation)
        try:
            result = await self.type_filter.filter(type_name)
        except BatchFailure as exc:
            logger.warning("type_filter_unavailable", type=type_name, error=str(exc))
            return self._apply(FilterFailed(type_name), generation)
        return self._apply(FilterResolved(result.type_name, tuple(result.entities)), generation)

    def reset(self) -> DisplayView:
        """Clear input and every surface. The resolver cache is left intact."""
        generation = self._begin("reset")
        return self._apply(ResetRequested(), generation)

    def _begin(self, action: str) -> int:
        self._generation += 1
        logger.debug("action_started", action=action, generation=self._generation)
        return self._generation

    def _apply(self, event: DisplayEvent, generation: int) -> DisplayView:
        if generation != self._generation:
            logger.info(
                "stale_result_discarded",
                event_type=type(event).__name__,
                generation=generation,
                current=self._generation,
            )
            return self.view
        previous = self.view
        self.view = replace(transition(previous, event), generation=generation)
        if self.view.state != previous.state:
            logger.info("display_transition", surface=self.view.surface, generation=generation)
        if self.renderer:
            self.renderer(self.view)
        return self.view
