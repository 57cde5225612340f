#!/usr/bin/env python3
"""
Warm the Pokémon Abilities service cache for a list of names.

This helper drives the service's warmup endpoint so a freshly deployed
instance answers popular lookups from cache. It can be executed manually
from a developer workstation or from a deploy job.
"""

import argparse
import asyncio
import json
from pathlib import Path
from typing import List
import sys
import os

from service_pokemon.app.caching.warmer import CacheWarmer
from shared.logging import configure_logging


def _load_names(args: argparse.Namespace) -> List[str]:
    names = list(args.names)
    if args.names_file:
        for line in args.names_file.read_text(encoding="utf-8").splitlines():
            line = line.split("#", 1)[0].strip()
            if line:
                names.append(line)
    return names


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Warm the Pokémon abilities cache.")
    parser.add_argument("names", nargs="*", help="Pokémon names to warm")
    parser.add_argument("--service-url", default=os.getenv("POKE_API_URL", "http://localhost:3000"), help="Service base URL")
    parser.add_argument("--names-file", type=Path, default=None, help="File with one Pokémon name per line")
    parser.add_argument("--concurrency", type=int, default=5, help="Concurrent warm operations")
    parser.add_argument("--dry-run", action="store_true", help="Print planned names without calling the service")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write JSON summary")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    configure_logging("pokemon", os.getenv("POKE_LOG_LEVEL", "warning"))

    names = _load_names(args)
    if not names:
        print("[cache-warm] no Pokémon names given", file=sys.stderr)
        return 2

    warmer = CacheWarmer(args.service_url, concurrency=args.concurrency)
    try:
        summary = asyncio.run(warmer.warm(names, dry_run=args.dry_run))
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover - CLI surface
        print(f"[cache-warm] failed: {exc}", file=sys.stderr)
        return 1

    if args.dry_run:
        print("[cache-warm] DRY RUN - service not called")

    print(json.dumps(summary, indent=2))

    if args.output:
        args.output.write_text(json.dumps(summary, indent=2))

    return 0 if not summary["errors"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
