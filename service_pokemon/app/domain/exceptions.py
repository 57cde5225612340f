"""
Domain errors raised while resolving Pokémon lookups.
"""

from typing import Any, Dict, Optional

from shared.errors import NotFoundError


class PokemonNotFoundError(NotFoundError):
    """PokeAPI has no Pokémon by this name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Pokémon "{name}" not found.', details={"pokemon": name})


class UpstreamUnavailableError(NotFoundError):
    """PokeAPI could not produce a usable answer for ``name``.

    Clients get the same 404 as for an unknown Pokémon; ``reason`` and the
    details keep the upstream cause for logs and error bodies.
    """

    def __init__(self, name: str, reason: str, details: Optional[Dict[str, Any]] = None):
        self.name = name
        self.reason = reason
        super().__init__(
            f'Pokémon "{name}" not found.',
            details={"pokemon": name, "upstream": "pokeapi", "reason": reason, **(details or {})},
        )
