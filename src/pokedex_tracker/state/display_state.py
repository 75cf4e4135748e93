from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Sequence, Tuple, Union

from pokedex_tracker.connector.errors import NotFound
from pokedex_tracker.state.pokemon import Pokemon


SEARCH_PROMPT = "Please type a Pokémon name or ID to search."
NOT_FOUND_MESSAGE = "Pokémon not found!"
SEARCH_ERROR_MESSAGE = "Error loading Pokémon. Please try again."
SUGGESTIONS_ERROR_MESSAGE = "Error loading suggestions."
TYPE_ERROR_MESSAGE = "Error loading Pokémon for this type."


def no_type_results_message(type_name: str) -> str:
    return f"No Pokémon found for type: {type_name}."


# --- Surfaces -------------------------------------------------------------


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class ShowingSuggestions:
    entities: Tuple[Pokemon, ...] = ()
    message: Optional[str] = None


@dataclass(frozen=True)
class ShowingResults:
    entities: Tuple[Pokemon, ...] = ()
    message: Optional[str] = None


@dataclass(frozen=True)
class ShowingError:
    message: str


DisplayState = Union[Idle, ShowingSuggestions, ShowingResults, ShowingError]


@dataclass(frozen=True)
class DisplayView:
    """Everything the rendering layer needs: one surface plus the search box text."""

    state: DisplayState = field(default_factory=Idle)
    search_input: str = ""
    generation: int = 0

    @property
    def surface(self) -> str:
        return type(self.state).__name__


# --- Events ---------------------------------------------------------------


@dataclass(frozen=True)
class InputChanged:
    text: str


@dataclass(frozen=True)
class SuggestionsReady:
    entities: Tuple[Pokemon, ...]


@dataclass(frozen=True)
class SuggestionsFailed:
    pass


@dataclass(frozen=True)
class SearchPromptRequired:
    pass


@dataclass(frozen=True)
class SearchResolved:
    pokemon: Pokemon


@dataclass(frozen=True)
class SearchFailed:
    error: Exception


@dataclass(frozen=True)
class FilterResolved:
    type_name: str
    entities: Tuple[Pokemon, ...]


@dataclass(frozen=True)
class FilterFailed:
    type_name: str


@dataclass(frozen=True)
class ResetRequested:
    pass


DisplayEvent = Union[
    InputChanged,
    SuggestionsReady,
    SuggestionsFailed,
    SearchPromptRequired,
    SearchResolved,
    SearchFailed,
    FilterResolved,
    FilterFailed,
    ResetRequested,
]


def _entities(items: Sequence[Pokemon]) -> Tuple[Pokemon, ...]:
    return tuple(items)


def transition(view: DisplayView, event: DisplayEvent) -> DisplayView:
    """Pure state transition; every branch replaces the whole surface."""
    if isinstance(event, InputChanged):
        return replace(view, search_input=event.text)
    if isinstance(event, SuggestionsReady):
        if not event.entities:
            return replace(view, state=Idle())
        return replace(view, state=ShowingSuggestions(entities=_entities(event.entities)))
    if isinstance(event, SuggestionsFailed):
        return replace(view, state=ShowingSuggestions(message=SUGGESTIONS_ERROR_MESSAGE))
    if isinstance(event, SearchPromptRequired):
        return replace(view, state=ShowingError(message=SEARCH_PROMPT))
    if isinstance(event, SearchResolved):
        return replace(view, state=ShowingResults(entities=(event.pokemon,)))
    if isinstance(event, SearchFailed):
        message = NOT_FOUND_MESSAGE if isinstance(event.error, NotFound) else SEARCH_ERROR_MESSAGE
        return replace(view, state=ShowingResults(message=message))
    if isinstance(event, FilterResolved):
        if not event.entities:
            state = ShowingResults(message=no_type_results_message(event.type_name))
        else:
            state = ShowingResults(entities=_entities(event.entities))
        return replace(view, state=state, search_input="")
    if isinstance(event, FilterFailed):
        return replace(view, state=ShowingResults(message=TYPE_ERROR_MESSAGE), search_input="")
    if isinstance(event, ResetRequested):
        return replace(view, state=Idle(), search_input="")
    raise TypeError(f"Unknown display event: {event!r}")
