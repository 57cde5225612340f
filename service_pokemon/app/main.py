"""
Pokémon Abilities API service.
"""

from datetime import datetime, timezone
from typing import Annotated, Dict, List, Optional

import httpx
from fastapi import Path
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config

from service_pokemon.app.adapters.pokeapi_client import PokeApiClient
from service_pokemon.app.caching.cache_manager import CacheManager
from service_pokemon.app.domain.models import (
    CacheClearResponse,
    CacheStats,
    PokemonDetails,
    WarmupResponse,
)
from service_pokemon.app.domain.pokemon_service import PokemonService


SERVICE_NAME = "pokemon"

PokemonName = Annotated[str, Path(description="Pokémon name (case-insensitive)", examples=["pikachu"])]


class AbilitiesService(BaseService):
    """HTTP surface for Pokémon ability lookups."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_base_delay: float = 0.2,
    ):
        super().__init__(SERVICE_NAME, config)

        self.pokeapi_client = PokeApiClient(
            self.config.pokeapi_base_url,
            timeout=self.config.http_timeout_seconds,
            max_redirects=self.config.http_max_redirects,
            retries=self.config.http_retries,
            retry_base_delay=retry_base_delay,
            metrics=self.metrics,
            transport=transport,
        )
        self.cache_manager = CacheManager(
            self.config.cache_ttl,
            self.config.cache_max_items,
            metrics=self.metrics,
        )
        self.pokemon_service = PokemonService(self.pokeapi_client, self.cache_manager)

        self._setup_probe_routes()
        self._setup_pokemon_routes()
        self._setup_admin_routes()

        self.logger.info(
            "Service configured",
            env=self.config.env,
            pokeapi_base_url=self.config.pokeapi_base_url,
            cache_ttl=self.config.cache_ttl,
            cache_max_items=self.config.cache_max_items,
        )

        # Expose service instance via app state for introspection/testing
        self.app.state.abilities_service = self

    def _setup_probe_routes(self):
        """Root banner plus liveness/readiness probes."""

        @self.app.get("/")
        async def root():
            return {
                "service": SERVICE_NAME,
                "message": "Pokémon Abilities API",
                "version": self.version,
                "docs": "/api/docs",
            }

        @self.app.get("/health/liveness", tags=["health"])
        async def liveness():
            """The process is up and serving requests."""
            return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

        @self.app.get("/health/readiness", tags=["health"])
        async def readiness():
            """Ready when PokeAPI is reachable."""
            dependencies = await self._check_dependencies()
            ready = all(value == "ok" for value in dependencies.values())
            payload = {"status": "ok" if ready else "error", "dependencies": dependencies}
            if not ready:
                return JSONResponse(status_code=503, content=payload)
            return payload

    def _setup_pokemon_routes(self):
        """Set up public lookup routes."""

        @self.app.get(
            "/pokemon/{name}",
            response_model=List[str],
            tags=["pokemon"],
            summary="List a Pokémon's abilities",
            responses={404: {"description": "Pokémon not found"}, 400: {"description": "Invalid name"}},
        )
        async def get_pokemon_abilities(name: PokemonName):
            """Sorted ability names for the Pokémon. Results are cached."""
            return await self.pokemon_service.get_pokemon_abilities(name)

        @self.app.get(
            "/pokemon/{name}/details",
            response_model=PokemonDetails,
            tags=["pokemon"],
            summary="Abilities plus sprite and types",
        )
        async def get_pokemon_details(name: PokemonName):
            return await self.pokemon_service.get_pokemon_details(name)

    def _setup_admin_routes(self):
        """Set up cache administration routes."""

        @self.app.get("/admin/pokemon/cache/stats", response_model=CacheStats, tags=["admin"])
        async def get_cache_stats():
            return self.pokemon_service.get_cache_stats()

        @self.app.delete("/admin/pokemon/cache/{name}", response_model=CacheClearResponse, tags=["admin"])
        async def clear_pokemon_cache(name: PokemonName):
            """Invalidate cached entries for one Pokémon."""
            result = await self.pokemon_service.clear_cache(name)
            state = "cleared" if result.cleared else "not cleared"
            return CacheClearResponse(message=f"Cache {state} for: {result.target}", **result.model_dump())

        @self.app.delete("/admin/pokemon/cache", response_model=CacheClearResponse, tags=["admin"])
        async def clear_all_cache():
            """Invalidate every cached entry."""
            result = await self.pokemon_service.clear_cache()
            return CacheClearResponse(
                message=f"Cache cleared: {result.removed} entries removed",
                **result.model_dump(),
            )

        @self.app.post("/admin/pokemon/cache/warmup/{name}", response_model=WarmupResponse, tags=["admin"])
        async def warmup_cache(name: PokemonName):
            """Pre-load the cache for one Pokémon."""
            return await self.pokemon_service.warmup(name)

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check PokeAPI reachability."""
        return {"pokeapi": "ok" if await self.pokeapi_client.ping() else "error"}


def create_app(config: Optional[ServiceConfig] = None, **kwargs):
    """Create FastAPI application."""
    service = AbilitiesService(config, **kwargs)
    return service.app


def main() -> None:
    AbilitiesService(get_config(SERVICE_NAME)).run()


if __name__ == "__main__":
    main()
