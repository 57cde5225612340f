"""
HTTP client for consumers of the Pokémon Abilities API.
"""

from typing import List, Optional

import httpx


DEFAULT_API_URL = "http://localhost:3000"


class AbilitiesClientError(Exception):
    """The service could not be reached or returned an unexpected answer."""


class PokemonLookupNotFound(AbilitiesClientError):
    def __init__(self, name: str):
        super().__init__(f'Pokémon "{name}" not found')
        self.name = name


class AbilitiesClient:
    """Synchronous client for ``GET /pokemon/{name}``."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def __enter__(self) -> "AbilitiesClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_abilities(self, name: str) -> List[str]:
        normalized = name.strip().lower()
        try:
            response = self._client.get(f"/pokemon/{normalized}")
        except httpx.HTTPError as exc:
            raise AbilitiesClientError(str(exc)) from exc

        if response.status_code == 404:
            raise PokemonLookupNotFound(name.strip())
        if response.status_code != 200:
            raise AbilitiesClientError(f"Unexpected status {response.status_code}")
        return list(response.json())
