from __future__ import annotations

from typing import Dict, List

from pokedex_tracker.state.display_state import (
    DisplayView,
    Idle,
    ShowingError,
    ShowingResults,
    ShowingSuggestions,
)
from pokedex_tracker.state.pokemon import Pokemon

DEFAULT_TYPE_COLOR = "#3d7dca"

TYPE_COLORS: Dict[str, str] = {
    "fire": "#ff0000",
    "water": "#1E90FF",
    "electric": "#FFD700",
    "grass": "#00FF7F",
    "ice": "#00FFFF",
    "psychic": "#EE82EE",
    "fighting": "#8B0000",
    "normal": "#A8A77A",
    "bug": "#A6B91A",
    "poison": "#A33EA1",
    "ground": "#E2BF65",
    "rock": "#B6A136",
    "ghost": "#735797",
    "dragon": "#6F35FC",
    "steel": "#B7B7CE",
    "dark": "#705746",
    "fairy": "#D685AD",
    "flying": "#A98FF3",
}


def type_color(type_name: str) -> str:
    return TYPE_COLORS.get(type_name.lower(), DEFAULT_TYPE_COLOR)


def format_card(pokemon: Pokemon) -> str:
    lines = [
        f"#{pokemon.id} {pokemon.name}",
        f"Type: {', '.join(pokemon.types)}",
        f"HP: {pokemon.hp}",
    ]
    if pokemon.sprite:
        lines.append(f"Sprite: {pokemon.sprite}")
    return "\n".join(lines)


def render_view(view: DisplayView) -> str:
    """Plain-text rendering of whichever surface is visible."""
    state = view.state
    if isinstance(state, Idle):
        return ""
    if isinstance(state, ShowingError):
        return state.message
    if isinstance(state, (ShowingSuggestions, ShowingResults)):
        if state.message:
            return state.message
        header = "Suggestions:" if isinstance(state, ShowingSuggestions) else "Results:"
        blocks: List[str] = [header]
        blocks.extend(format_card(p) for p in state.entities)
        return "\n\n".join(blocks)
    raise TypeError(f"Unknown display state: {state!r}")
