"""
Unit tests for the Pokémon lookup service.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.errors import ValidationError
from shared.test_helpers import FakePokeApi, TEST_POKEAPI_URL, TEST_POKEMON_DATA, create_pokemon_document
from service_pokemon.app.adapters.pokeapi_client import PokeApiClient
from service_pokemon.app.caching.cache_manager import CacheManager
from service_pokemon.app.domain.exceptions import PokemonNotFoundError, UpstreamUnavailableError
from service_pokemon.app.domain.pokemon_service import (
    PokemonService,
    build_details,
    extract_abilities,
    normalize_pokemon_name,
)


class TestNameNormalization:
    """Test cases for name validation."""

    @pytest.mark.parametrize("raw,expected", [
        ("pikachu", "pikachu"),
        ("PIKACHU", "pikachu"),
        ("  Charizard  ", "charizard"),
        ("Mr-Mime", "mr-mime"),
        ("mr.mime", "mr.mime"),
        ("25", "25"),
        ("a" * 50, "a" * 50),
    ])
    def test_valid_names(self, raw, expected):
        assert normalize_pokemon_name(raw) == expected

    @pytest.mark.parametrize("raw", [
        "",
        "   ",
        "a" * 51,
        "pika chu",
        "pikachu!",
        "../pokemon",
        "pika\tchu",
        "pikachû",
        ".",
        "..",
        "...",
        "-",
        ".-.",
    ])
    def test_invalid_names(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            normalize_pokemon_name(raw)

        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "VALIDATION_ERROR"

    def test_non_string_rejected(self):
        with pytest.raises(ValidationError):
            normalize_pokemon_name(None)


class TestTransforms:
    """Test cases for PokeAPI document shaping."""

    def test_extract_abilities_sorted(self):
        assert extract_abilities(TEST_POKEMON_DATA["mr-mime"], "mr-mime") == ["filter", "soundproof", "technician"]

    def test_extract_abilities_empty(self):
        assert extract_abilities(TEST_POKEMON_DATA["ditto"], "ditto") == []

    @pytest.mark.parametrize("document,missing", [
        ({"count": 1302, "results": []}, ["name", "id", "abilities"]),
        ({"name": "glitch", "id": 0}, ["abilities"]),
        ({"name": "glitch", "abilities": []}, ["id"]),
        ({"name": "glitch", "id": 0, "abilities": None}, ["abilities"]),
        ({"name": "glitch", "id": 0, "abilities": "static"}, ["abilities"]),
    ])
    def test_malformed_documents_rejected(self, document, missing):
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            extract_abilities(document, "glitch")

        error = exc_info.value
        assert error.status_code == 404
        assert error.message == 'Pokémon "glitch" not found.'
        assert error.details["reason"] == "malformed document"
        assert error.details["missing"] == missing

        with pytest.raises(UpstreamUnavailableError):
            build_details(document, "glitch")

    def test_non_dict_document_rejected(self):
        with pytest.raises(UpstreamUnavailableError):
            build_details(["static"], "glitch")

    def test_build_details(self):
        details = build_details(TEST_POKEMON_DATA["charizard"], "charizard")

        assert details == {
            "name": "charizard",
            "id": 6,
            "abilities": ["blaze", "solar-power"],
            "sprite": "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/6.png",
            "types": ["fire", "flying"],
        }

    def test_build_details_orders_types_by_slot(self):
        document = create_pokemon_document("mr-mime", ["filter"], pokemon_id=122)
        document["types"] = [
            {"slot": 2, "type": {"name": "fairy"}},
            {"slot": 1, "type": {"name": "psychic"}},
        ]
        document["sprites"] = None

        details = build_details(document, "mr-mime")
        assert details["types"] == ["psychic", "fairy"]
        assert details["sprite"] is None


class TestPokemonService:
    """Test cases for PokemonService."""

    @pytest.fixture
    def fake_api(self):
        return FakePokeApi()

    @pytest.fixture
    def cache(self):
        return CacheManager(ttl_seconds=300, max_items=100)

    @pytest.fixture
    def service(self, fake_api, cache):
        """Create service backed by the in-memory PokeAPI."""
        client = PokeApiClient(TEST_POKEAPI_URL, retry_base_delay=0, transport=fake_api.transport)
        return PokemonService(client, cache)

    @pytest.mark.asyncio
    async def test_abilities_fetched_then_cached(self, service, fake_api):
        first = await service.get_pokemon_abilities("Pikachu")
        second = await service.get_pokemon_abilities("pikachu")

        assert first == ["lightning-rod", "static"]
        assert second == first
        assert fake_api.calls["pikachu"] == 1

    @pytest.mark.asyncio
    async def test_empty_abilities_are_cached(self, service, fake_api):
        assert await service.get_pokemon_abilities("ditto") == []
        assert await service.get_pokemon_abilities("ditto") == []
        assert fake_api.calls["ditto"] == 1

    @pytest.mark.asyncio
    async def test_invalid_name_never_reaches_upstream(self, service, fake_api):
        with pytest.raises(ValidationError):
            await service.get_pokemon_abilities("pika chu")

        assert fake_api.total_calls == 0

    @pytest.mark.asyncio
    async def test_not_found_is_not_cached(self, service, fake_api, cache):
        for _ in range(2):
            with pytest.raises(PokemonNotFoundError):
                await service.get_pokemon_abilities("missingno")

        assert fake_api.calls["missingno"] == 2
        assert cache.stats()["size"] == 0

    @pytest.mark.asyncio
    async def test_upstream_failure_is_not_cached(self, service, fake_api, cache):
        fake_api.offline = True
        with pytest.raises(UpstreamUnavailableError):
            await service.get_pokemon_abilities("pikachu")

        fake_api.offline = False
        assert await service.get_pokemon_abilities("pikachu") == ["lightning-rod", "static"]

    @pytest.mark.asyncio
    async def test_concurrent_lookups_share_one_fetch(self, cache):
        fake_api = FakePokeApi(latency=0.02)
        client = PokeApiClient(TEST_POKEAPI_URL, transport=fake_api.transport)
        service = PokemonService(client, cache)

        results = await asyncio.gather(*(service.get_pokemon_abilities("charizard") for _ in range(10)))

        assert all(result == ["blaze", "solar-power"] for result in results)
        assert fake_api.calls["charizard"] == 1

    @pytest.mark.asyncio
    async def test_details_flag_cache_hits(self, service, fake_api):
        first = await service.get_pokemon_details("PIKACHU")
        second = await service.get_pokemon_details("pikachu")

        assert first.name == "pikachu"
        assert first.id == 25
        assert first.types == ["electric"]
        assert first.from_cache is False
        assert second.from_cache is True
        assert fake_api.calls["pikachu"] == 1

    @pytest.mark.asyncio
    async def test_details_prime_abilities_cache(self, service, fake_api):
        await service.get_pokemon_details("mr-mime")
        abilities = await service.get_pokemon_abilities("mr-mime")

        assert abilities == ["filter", "soundproof", "technician"]
        assert fake_api.calls["mr-mime"] == 1

    @pytest.mark.asyncio
    async def test_warmup_populates_cache(self, service, cache):
        response = await service.warmup("Charizard")

        assert response.pokemon == "charizard"
        assert response.message == "Cache warmed up for: charizard"
        assert response.abilities == ["blaze", "solar-power"]
        assert CacheManager.abilities_key("charizard") in cache.stats()["keys"]

    @pytest.mark.asyncio
    async def test_clear_single_pokemon(self, service):
        await service.get_pokemon_details("pikachu")

        result = await service.clear_cache("  PIKACHU ")
        assert result.cleared is True
        assert result.target == "pikachu"
        assert result.removed == 2

        again = await service.clear_cache("pikachu")
        assert again.cleared is False
        assert again.removed == 0

    @pytest.mark.asyncio
    async def test_clear_all(self, service, cache):
        await service.get_pokemon_abilities("pikachu")
        await service.get_pokemon_abilities("ditto")

        result = await service.clear_cache()

        assert result.cleared is True
        assert result.target == "all"
        assert result.removed == 2
        assert cache.stats()["size"] == 0

    @pytest.mark.asyncio
    async def test_clear_validates_name(self, service):
        with pytest.raises(ValidationError):
            await service.clear_cache("bad name!")

    @pytest.mark.asyncio
    async def test_stats_delegate_to_cache(self):
        cache = MagicMock()
        cache.stats.return_value = {"size": 0}
        service = PokemonService(AsyncMock(), cache)

        assert service.get_cache_stats() == {"size": 0}
        cache.stats.assert_called_once()
