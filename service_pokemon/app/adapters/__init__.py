"""
Adapters package for the Pokémon Abilities service.

Contains the HTTP client wrapper for PokeAPI. The adapter encapsulates:

- Base URL and request shape
- Retry policy and circuit breaker
- Error handling that maps to domain errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .pokeapi_client import PokeApiClient

__all__ = ["PokeApiClient"]
