"""
Terminal front-end for the Pokémon Abilities API.

Looks up a single Pokémon and prints its abilities, mirroring the search
screen: blank input is rejected, unknown Pokémon and connectivity problems
get distinct messages.
"""

import argparse
import json
import os
import sys
from typing import List, Optional

from service_pokemon.app.client import (
    DEFAULT_API_URL,
    AbilitiesClient,
    AbilitiesClientError,
    PokemonLookupNotFound,
)


EXIT_OK = 0
EXIT_LOOKUP_FAILED = 1
EXIT_USAGE = 2


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="poke-abilities", description="Look up a Pokémon's abilities.")
    parser.add_argument("name", nargs="?", help="Pokémon name; prompted for when omitted")
    parser.add_argument("--api-url", default=os.getenv("POKE_API_URL", DEFAULT_API_URL), help="Service base URL")
    parser.add_argument("--timeout", type=float, default=10.0, help="Request timeout in seconds")
    parser.add_argument("--json", action="store_true", help="Print the raw JSON ability list")
    return parser.parse_args(argv)


def render(name: str, abilities: List[str]) -> str:
    lines = [name.strip().upper(), "Abilities:"]
    if abilities:
        lines.extend(f"  - {ability}" for ability in abilities)
    else:
        lines.append("  (none)")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None, client: Optional[AbilitiesClient] = None) -> int:
    args = _parse_args(argv)

    name = args.name
    if name is None:
        try:
            name = input("Pokémon name: ")
        except EOFError:
            name = ""

    if not name.strip():
        print("Please enter a Pokémon name.", file=sys.stderr)
        return EXIT_USAGE

    client = client or AbilitiesClient(args.api_url, timeout=args.timeout)
    print("Searching...", file=sys.stderr)
    try:
        with client:
            abilities = client.get_abilities(name)
    except PokemonLookupNotFound as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_LOOKUP_FAILED
    except AbilitiesClientError:
        print("Failed to fetch Pokémon. Check your connection.", file=sys.stderr)
        return EXIT_LOOKUP_FAILED

    if args.json:
        print(json.dumps(abilities))
    else:
        print(render(name, abilities))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
