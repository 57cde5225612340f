"""
Response shapes served by the Pokémon Abilities API.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class PokemonDetails(BaseModel):
    """Normalized view of a PokeAPI ``/pokemon/{name}`` document."""

    name: str = Field(..., examples=["pikachu"])
    id: int = Field(..., examples=[25])
    abilities: List[str] = Field(default_factory=list, examples=[["lightning-rod", "static"]])
    sprite: Optional[str] = Field(
        default=None,
        examples=["https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/25.png"],
    )
    types: List[str] = Field(default_factory=list, examples=[["electric"]])
    from_cache: bool = False


class CacheClearResult(BaseModel):
    cleared: bool
    target: str
    removed: int = 0


class CacheClearResponse(CacheClearResult):
    message: str


class CacheStats(BaseModel):
    size: int
    max_size: int
    ttl_seconds: float
    hits: int
    misses: int
    hit_ratio: float
    keys: List[str]


class WarmupResponse(BaseModel):
    message: str
    pokemon: str
    abilities: List[str]
