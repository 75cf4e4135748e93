from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from pokedex_tracker.connector.errors import MalformedPayload


@dataclass(frozen=True)
class Pokemon:
    id: int
    name: str
    types: Tuple[str, ...]
    stats: Tuple[Tuple[str, int], ...]
    sprite: Optional[str] = None
    hp: int = field(init=False)

    def __post_init__(self) -> None:
        if not self.types:
            raise MalformedPayload(f"Pokemon {self.name!r} has no types", key=self.name)
        hp = self.stat("hp")
        if hp is None:
            raise MalformedPayload(f"Pokemon {self.name!r} has no 'hp' stat", key=self.name)
        object.__setattr__(self, "hp", hp)

    def stat(self, name: str) -> Optional[int]:
        for stat_name, value in self.stats:
            if stat_name == name:
                return value
        return None

    def to_dict(self) -> Dict[str, object]:
        payload = asdict(self)
        payload["types"] = list(self.types)
        payload["stats"] = [list(pair) for pair in self.stats]
        return payload

    @classmethod
    def from_payload(cls, data: Mapping[str, object]) -> "Pokemon":
        """Build from a raw PokeAPI ``/pokemon/{key}`` record."""
        try:
            sprites = data.get("sprites") or {}
            return cls(
                id=int(data["id"]),
                name=str(data["name"]).lower(),
                types=tuple(t["type"]["name"] for t in data["types"]),
                stats=tuple((s["stat"]["name"], int(s["base_stat"])) for s in data["stats"]),
                sprite=sprites.get("front_default"),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise MalformedPayload(f"Invalid pokemon payload: {exc}", key=str(data.get("name", ""))) from exc
