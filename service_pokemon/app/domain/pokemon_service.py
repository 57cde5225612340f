"""
Pokémon lookup service: validation, cache lookup, PokeAPI fetch and shaping.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from shared.errors import ValidationError
from shared.logging import get_logger

from service_pokemon.app.adapters.pokeapi_client import PokeApiClient
from service_pokemon.app.caching.cache_manager import CacheManager
from service_pokemon.app.domain.exceptions import UpstreamUnavailableError
from service_pokemon.app.domain.models import CacheClearResult, PokemonDetails, WarmupResponse


NAME_MAX_LENGTH = 50
_NAME_PATTERN = re.compile(r"[a-z0-9.\-]+")
_ALNUM = re.compile(r"[a-z0-9]")
_REQUIRED_FIELDS = ("name", "id", "abilities")


def normalize_pokemon_name(raw: Optional[str]) -> str:
    """Trim and lower-case ``raw``, rejecting anything PokeAPI could not name."""
    if not isinstance(raw, str):
        raise ValidationError("Name must be a string", details={"field": "name"})

    name = raw.strip().lower()
    if not name:
        raise ValidationError("Name must not be empty", details={"field": "name"})
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(
            f"Name must be between 1 and {NAME_MAX_LENGTH} characters",
            details={"field": "name", "length": len(name)},
        )
    if not _NAME_PATTERN.fullmatch(name):
        raise ValidationError(
            "Name may only contain letters, numbers, hyphens and dots",
            details={"field": "name", "value": raw},
        )
    if not _ALNUM.search(name):
        raise ValidationError(
            "Name must contain at least one letter or number",
            details={"field": "name", "value": raw},
        )
    return name


def check_document(document: Any, pokemon: str) -> Dict[str, Any]:
    """Reject PokeAPI answers that are not a Pokémon document."""
    if not isinstance(document, dict):
        raise UpstreamUnavailableError(pokemon, "malformed document", details={"missing": list(_REQUIRED_FIELDS)})

    missing = [field for field in _REQUIRED_FIELDS if document.get(field) is None]
    if not missing and not isinstance(document["abilities"], list):
        missing = ["abilities"]
    if missing:
        raise UpstreamUnavailableError(pokemon, "malformed document", details={"missing": missing})
    return document


def extract_abilities(document: Dict[str, Any], pokemon: str) -> List[str]:
    """Ability names from a PokeAPI document, sorted."""
    check_document(document, pokemon)
    return sorted(entry["ability"]["name"] for entry in document["abilities"])


def extract_types(document: Dict[str, Any]) -> List[str]:
    entries = sorted(document.get("types") or [], key=lambda entry: entry.get("slot", 0))
    return [entry["type"]["name"] for entry in entries]


def build_details(document: Dict[str, Any], pokemon: str) -> Dict[str, Any]:
    """Shape a raw PokeAPI document into the cached details payload."""
    check_document(document, pokemon)
    sprites = document.get("sprites") or {}
    return {
        "name": document["name"],
        "id": document["id"],
        "abilities": extract_abilities(document, pokemon),
        "sprite": sprites.get("front_default"),
        "types": extract_types(document),
    }


class PokemonService:
    """Coordinates the cache and PokeAPI for ability lookups."""

    def __init__(self, client: PokeApiClient, cache: CacheManager) -> None:
        self.client = client
        self.cache = cache
        self.logger = get_logger("pokemon.service")

    async def get_pokemon_abilities(self, name: str) -> List[str]:
        """Return the sorted ability names for ``name``."""
        normalized = normalize_pokemon_name(name)

        async def _load() -> List[str]:
            document = await self.client.get_pokemon(normalized)
            return extract_abilities(document, normalized)

        abilities, from_cache = await self.cache.get_or_load(CacheManager.abilities_key(normalized), _load)
        self.logger.info(
            "Abilities resolved",
            pokemon=normalized,
            from_cache=from_cache,
            count=len(abilities),
        )
        return list(abilities)

    async def get_pokemon_details(self, name: str) -> PokemonDetails:
        """Return the normalized details view, flagging cache hits."""
        normalized = normalize_pokemon_name(name)

        async def _load() -> Dict[str, Any]:
            document = await self.client.get_pokemon(normalized)
            details = build_details(document, normalized)
            # same document answers the abilities lookup too
            self.cache.set(CacheManager.abilities_key(normalized), list(details["abilities"]))
            return details

        details, from_cache = await self.cache.get_or_load(CacheManager.details_key(normalized), _load)
        self.logger.info("Details resolved", pokemon=normalized, from_cache=from_cache)
        return PokemonDetails(**details, from_cache=from_cache)

    async def warmup(self, name: str) -> WarmupResponse:
        """Populate the cache for ``name`` ahead of client traffic."""
        normalized = normalize_pokemon_name(name)
        abilities = await self.get_pokemon_abilities(normalized)
        return WarmupResponse(
            message=f"Cache warmed up for: {normalized}",
            pokemon=normalized,
            abilities=abilities,
        )

    async def clear_cache(self, name: Optional[str] = None) -> CacheClearResult:
        """Invalidate one Pokémon, or everything when ``name`` is None."""
        if name is None:
            removed = self.cache.clear()
            return CacheClearResult(cleared=True, target="all", removed=removed)

        normalized = normalize_pokemon_name(name)
        removed = self.cache.delete_pokemon(normalized)
        return CacheClearResult(cleared=removed > 0, target=normalized, removed=removed)

    def get_cache_stats(self) -> Dict[str, Any]:
        return self.cache.stats()
