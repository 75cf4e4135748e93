from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import httpx

from pokedex_tracker.connector.errors import MalformedPayload, NetworkError, NotFound, UnexpectedStatus
from pokedex_tracker.utils.env import env_value, load_env
from pokedex_tracker.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://pokeapi.co/api/v2"
DEFAULT_TIMEOUT = 10.0
# First generation only; both the suggestion index and type filters stop here.
TOTAL_POKEMON = 151


@dataclass
class CatalogConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    limit: int = TOTAL_POKEMON

    @classmethod
    def resolve(
        cls,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        limit: Optional[int] = None,
        env_path: str = ".env",
    ) -> "CatalogConfig":
        env = load_env(env_path)
        resolved_timeout = timeout if timeout is not None else env_value("POKEDEX_TIMEOUT", env)
        resolved_limit = limit if limit is not None else env_value("POKEDEX_LIMIT", env)
        return cls(
            base_url=(base_url or env_value("POKEDEX_API_URL", env) or DEFAULT_BASE_URL).rstrip("/"),
            timeout=float(resolved_timeout) if resolved_timeout is not None else DEFAULT_TIMEOUT,
            limit=int(resolved_limit) if resolved_limit is not None else TOTAL_POKEMON,
        )


class CatalogClient:
    """Async read-only adapter over the PokeAPI pokemon, type and listing endpoints."""

    def __init__(self, config: Optional[CatalogConfig] = None, client: Optional[httpx.AsyncClient] = None) -> None:
        self.config = config or CatalogConfig.resolve()
        self.base_url = self.config.base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.config.timeout)

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
            logger.debug("catalog_client_closed")

    async def fetch_pokemon(self, key: str) -> Dict[str, object]:
        return await self._get_json(f"pokemon/{key}", key=key)

    async def fetch_type_members(self, type_name: str) -> List[str]:
        data = await self._get_json(f"type/{type_name}", key=type_name)
        try:
            return [entry["pokemon"]["name"] for entry in data["pokemon"]]
        except (KeyError, TypeError) as exc:
            raise MalformedPayload(f"Type payload for {type_name!r} has no member list", key=type_name) from exc

    async def list_names(self, limit: int = TOTAL_POKEMON, offset: int = 0) -> List[str]:
        data = await self._get_json("pokemon", params={"limit": limit, "offset": offset})
        try:
            return [entry["name"] for entry in data["results"]]
        except (KeyError, TypeError) as exc:
            raise MalformedPayload("Listing payload has no results") from exc

    async def _get_json(
        self,
        path: str,
        key: Optional[str] = None,
        params: Optional[Dict[str, object]] = None,
    ) -> Dict[str, object]:
        url = f"{self.base_url}/{path}"
        try:
            resp = await self._client.get(url, params=params, timeout=self.config.timeout)
        except httpx.InvalidURL as exc:
            # Keys with control characters cannot name any catalog entry.
            logger.warning("catalog_invalid_key", key=key, error=str(exc))
            raise NotFound(f"{key or path!r} is not a valid catalog key", key=key) from exc
        except httpx.TimeoutException as exc:
            logger.error("catalog_timeout", url=url)
            raise NetworkError(f"No response from catalog for {url}", key=key) from exc
        except httpx.RequestError as exc:
            logger.error("catalog_request_failed", url=url, error=str(exc))
            raise NetworkError(f"Failed to reach catalog: {exc}", key=key) from exc

        if resp.status_code == 404:
            logger.warning("catalog_not_found", url=url, key=key)
            raise NotFound(f"{key or path!r} not found in catalog", key=key)
        if resp.is_error:
            logger.error("catalog_bad_status", url=url, status=resp.status_code)
            raise UnexpectedStatus(
                f"Catalog returned HTTP {resp.status_code} for {url}",
                status_code=resp.status_code,
                key=key,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise MalformedPayload(f"Catalog returned invalid JSON for {url}", key=key) from exc
        if not isinstance(data, dict):
            raise MalformedPayload(f"Catalog returned a non-object payload for {url}", key=key)
        logger.debug("catalog_fetched", url=url)
        return data
