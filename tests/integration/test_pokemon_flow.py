"""
End-to-end integration tests for the Pokémon lookup flow.

The service runs in-process behind ``httpx.ASGITransport`` while PokeAPI is
served by the in-memory fake, so the full middleware, cache and error
mapping stack is exercised without network access.
"""

import asyncio
import pytest
import httpx

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.test_helpers import FakePokeApi, create_test_config
from service_pokemon.app.main import create_app


class TestPokemonFlow:
    """Integration tests for lookups, caching and administration."""

    @pytest.fixture
    def fake_api(self):
        return FakePokeApi(latency=0.01)

    @pytest.fixture
    def app(self, fake_api):
        return create_app(create_test_config(), transport=fake_api.transport, retry_base_delay=0)

    @pytest.fixture
    def service_url(self):
        """In-process service URL."""
        return "http://pokemon.test"

    @pytest.mark.asyncio
    async def test_lookup_journey(self, app, fake_api, service_url):
        """Search, repeat from cache, invalidate and search again."""
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=service_url) as client:
            # 1. First lookup goes upstream
            response = await client.get("/pokemon/PIKACHU")
            assert response.status_code == 200
            assert response.headers["content-type"].startswith("application/json")
            assert response.json() == ["lightning-rod", "static"]

            # 2. Second lookup is served from cache
            response = await client.get("/pokemon/pikachu")
            assert response.json() == ["lightning-rod", "static"]
            assert fake_api.calls["pikachu"] == 1

            stats = (await client.get("/admin/pokemon/cache/stats")).json()
            assert stats["hits"] == 1
            assert stats["keys"] == ["pokemon-abilities-pikachu"]

            # 3. Invalidate and look up again
            response = await client.delete("/admin/pokemon/cache/pikachu")
            assert response.json()["cleared"] is True

            await client.get("/pokemon/pikachu")
            assert fake_api.calls["pikachu"] == 2

    @pytest.mark.asyncio
    async def test_unknown_and_special_names(self, app, service_url):
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=service_url) as client:
            response = await client.get("/pokemon/notapokemon")
            assert response.status_code == 404
            assert response.json()["message"] == 'Pokémon "notapokemon" not found.'

            response = await client.get("/pokemon/ditto")
            assert response.status_code == 200
            assert response.json() == []

            response = await client.get("/pokemon/mr-mime")
            assert response.status_code == 200
            assert "soundproof" in response.json()

    @pytest.mark.asyncio
    async def test_concurrent_requests_hit_upstream_once(self, app, fake_api, service_url):
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=service_url) as client:
            responses = await asyncio.gather(*(client.get("/pokemon/charizard") for _ in range(8)))

        assert all(response.status_code == 200 for response in responses)
        assert all(response.json() == ["blaze", "solar-power"] for response in responses)
        assert fake_api.calls["charizard"] == 1

    @pytest.mark.asyncio
    async def test_upstream_outage_and_recovery(self, app, fake_api, service_url):
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=service_url) as client:
            await client.get("/pokemon/pikachu")
            fake_api.offline = True

            # cached entries keep answering while PokeAPI is down
            response = await client.get("/pokemon/pikachu")
            assert response.status_code == 200

            # an outage reads as not found and is not cached
            response = await client.get("/pokemon/charizard")
            assert response.status_code == 404
            assert response.json()["message"] == 'Pokémon "charizard" not found.'

            health = await client.get("/health")
            assert health.status_code == 503

            fake_api.offline = False
            response = await client.get("/pokemon/charizard")
            assert response.status_code == 200
            assert (await client.get("/health")).status_code == 200

    @pytest.mark.asyncio
    async def test_warmup_then_clear_all(self, app, fake_api, service_url):
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=service_url) as client:
            for name in ("pikachu", "charizard", "ditto"):
                response = await client.post(f"/admin/pokemon/cache/warmup/{name}")
                assert response.status_code == 200

            assert (await client.get("/admin/pokemon/cache/stats")).json()["size"] == 3

            response = await client.delete("/admin/pokemon/cache")
            assert response.json()["removed"] == 3
            assert (await client.get("/admin/pokemon/cache/stats")).json()["size"] == 0
