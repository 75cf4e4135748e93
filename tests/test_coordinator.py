import asyncio

import httpx
import pytest

from fakes import FakeCatalog, pokemon_payload
from pokedex_tracker.connector.catalog_client import CatalogClient, CatalogConfig
from pokedex_tracker.connector.errors import NetworkError, UnknownCategory, UserInputEmpty
from pokedex_tracker.display.coordinator import DisplayCoordinator, validate_search
from pokedex_tracker.knowledge.resolver import Resolver
from pokedex_tracker.knowledge.suggestions import SuggestionEngine
from pokedex_tracker.knowledge.type_filter import TypeFilterEngine
from pokedex_tracker.runner.lookup import build_coordinator
from pokedex_tracker.state.display_state import (
    NOT_FOUND_MESSAGE,
    SEARCH_ERROR_MESSAGE,
    SEARCH_PROMPT,
    SUGGESTIONS_ERROR_MESSAGE,
    TYPE_ERROR_MESSAGE,
    Idle,
    ShowingError,
    ShowingResults,
    ShowingSuggestions,
)


def make_coordinator(renderer=None):
    catalog = FakeCatalog(
        [
            pokemon_payload(4, "charmander", types=("fire",), hp=39),
            pokemon_payload(5, "charmeleon", types=("fire",), hp=58),
            pokemon_payload(6, "charizard", types=("fire", "flying"), hp=78),
            pokemon_payload(25, "pikachu", types=("electric",), hp=35),
            pokemon_payload(37, "vulpix", types=("fire",), hp=38),
        ]
    )
    catalog.types["fire"] = ["charmander", "charmeleon", "charizard", "vulpix"]
    resolver = Resolver(catalog)
    coordinator = DisplayCoordinator(
        resolver=resolver,
        suggestions=SuggestionEngine(resolver, catalog),
        type_filter=TypeFilterEngine(resolver, catalog),
        renderer=renderer,
    )
    return coordinator, catalog


def names(view):
    return [p.name for p in view.state.entities]


def test_validate_search():
    assert validate_search("  PikaChu ") == "pikachu"
    with pytest.raises(UserInputEmpty):
        validate_search("   ")


@pytest.mark.asyncio
async def test_empty_submit_prompts_without_remote_calls():
    coordinator, catalog = make_coordinator()

    view = await coordinator.on_submit("")

    assert view.state == ShowingError(message=SEARCH_PROMPT)
    assert catalog.remote_calls == 0


@pytest.mark.asyncio
async def test_keystroke_shows_suggestions_then_empty_query_goes_idle():
    coordinator, catalog = make_coordinator()

    view = await coordinator.on_keystroke("char")
    assert isinstance(view.state, ShowingSuggestions)
    assert names(view) == ["charmander", "charmeleon", "charizard"]
    assert view.search_input == "char"

    calls_before = catalog.remote_calls
    view = await coordinator.on_keystroke("   ")
    assert isinstance(view.state, Idle)
    assert catalog.remote_calls == calls_before


@pytest.mark.asyncio
async def test_suggestion_index_failure_shows_message():
    coordinator, catalog = make_coordinator()
    catalog.index_error = NetworkError("offline")

    view = await coordinator.on_keystroke("pi")

    assert view.state == ShowingSuggestions(message=SUGGESTIONS_ERROR_MESSAGE)


@pytest.mark.asyncio
async def test_submit_uses_typed_input_and_keeps_it():
    coordinator, catalog = make_coordinator()
    await coordinator.on_keystroke("  Pikachu ")

    view = await coordinator.on_submit()

    assert isinstance(view.state, ShowingResults)
    assert names(view) == ["pikachu"]
    assert view.search_input == "  Pikachu "


@pytest.mark.asyncio
async def test_submit_not_found_and_network_error():
    coordinator, catalog = make_coordinator()
    catalog.failures["pikachu"] = NetworkError("down", key="pikachu")

    missing = await coordinator.on_submit("99999")
    assert missing.state == ShowingResults(message=NOT_FOUND_MESSAGE)
    assert coordinator.resolver.cached("99999") is None

    failed = await coordinator.on_submit("pikachu")
    assert failed.state == ShowingResults(message=SEARCH_ERROR_MESSAGE)

    await coordinator.on_submit("99999")
    assert catalog.pokemon_calls.count("99999") == 2


@pytest.mark.asyncio
async def test_select_sets_input_and_searches():
    coordinator, catalog = make_coordinator()
    suggestions = await coordinator.on_keystroke("char")
    charizard = suggestions.state.entities[2]

    view = await coordinator.on_select(charizard)

    assert names(view) == ["charizard"]
    assert view.search_input == "charizard"
    # Already resolved while suggesting, so selection is served from cache.
    assert catalog.pokemon_calls.count("charizard") == 1


@pytest.mark.asyncio
async def test_type_click_clears_input_and_shows_results():
    coordinator, catalog = make_coordinator()
    await coordinator.on_keystroke("pika")

    view = await coordinator.on_type_click("fire")

    assert names(view) == ["charmander", "charmeleon", "charizard", "vulpix"]
    assert view.search_input == ""


@pytest.mark.asyncio
async def test_type_click_empty_and_failure():
    coordinator, catalog = make_coordinator()

    empty = await coordinator.on_type_click("dragon")
    assert empty.state == ShowingResults(message="No Pokémon found for type: dragon.")

    catalog.type_error = NetworkError("down")
    failed = await coordinator.on_type_click("fire")
    assert failed.state == ShowingResults(message=TYPE_ERROR_MESSAGE)


@pytest.mark.asyncio
async def test_unknown_type_is_rejected_without_touching_the_view():
    rendered = []
    coordinator, catalog = make_coordinator(renderer=rendered.append)
    await coordinator.on_keystroke("pikachu")
    before = coordinator.view
    generation = coordinator.generation
    renders = len(rendered)
    calls = catalog.remote_calls

    with pytest.raises(UnknownCategory):
        await coordinator.on_type_click("sound")

    assert coordinator.view == before
    assert coordinator.view.search_input == "pikachu"
    assert coordinator.generation == generation
    assert len(rendered) == renders
    assert catalog.remote_calls == calls


@pytest.mark.asyncio
async def test_reset_keeps_cache():
    coordinator, catalog = make_coordinator()
    await coordinator.on_submit("pikachu")

    view = coordinator.reset()

    assert isinstance(view.state, Idle)
    assert view.search_input == ""
    assert "pikachu" in coordinator.resolver
    await coordinator.on_submit("pikachu")
    assert catalog.pokemon_calls.count("pikachu") == 1


@pytest.mark.asyncio
async def test_stale_suggestions_do_not_overwrite_newer_results():
    coordinator, catalog = make_coordinator()
    catalog.index_gate = asyncio.Event()

    slow = asyncio.create_task(coordinator.on_keystroke("char"))
    await asyncio.sleep(0)
    fire = await coordinator.on_type_click("fire")
    catalog.index_gate.set()
    await slow

    assert coordinator.view == fire
    assert isinstance(coordinator.view.state, ShowingResults)
    assert coordinator.view.generation == coordinator.generation == 2


@pytest.mark.asyncio
async def test_renderer_receives_each_applied_view():
    rendered = []
    coordinator, catalog = make_coordinator(renderer=rendered.append)

    await coordinator.on_submit("pikachu")

    assert rendered[-1] is coordinator.view
    assert isinstance(rendered[-1].state, ShowingResults)


@pytest.mark.asyncio
async def test_reset_discards_a_slower_submit():
    coordinator, catalog = make_coordinator()
    await coordinator.on_keystroke("zzz")
    catalog.pokemon_gate = asyncio.Event()

    slow = asyncio.create_task(coordinator.on_submit("charizard"))
    await asyncio.sleep(0)
    reset_view = coordinator.reset()
    catalog.pokemon_gate.set()
    await slow

    assert coordinator.view == reset_view
    assert isinstance(coordinator.view.state, Idle)
    assert coordinator.view.search_input == ""
    # The lookup itself still completed and was cached.
    assert "charizard" in coordinator.resolver


@pytest.mark.asyncio
async def test_newer_submit_wins_over_older_type_click():
    coordinator, catalog = make_coordinator()
    catalog.type_gate = asyncio.Event()

    slow = asyncio.create_task(coordinator.on_type_click("fire"))
    await asyncio.sleep(0)
    search = await coordinator.on_submit("pikachu")
    catalog.type_gate.set()
    await slow

    assert coordinator.view == search
    assert names(coordinator.view) == ["pikachu"]


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["pika\tchu", "pika\x00chu"])
async def test_submit_with_control_characters_reports_not_found(raw):
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(404)))
    client = CatalogClient(CatalogConfig(base_url="http://example/api/v2"), client=http)
    coordinator = build_coordinator(client)

    view = await coordinator.on_submit(raw)
    await http.aclose()

    assert view.state == ShowingResults(message=NOT_FOUND_MESSAGE)
