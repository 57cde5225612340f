"""
Remote cache warming against a running Pokémon Abilities service.
"""

import asyncio
import time
from typing import Any, Dict, Iterable, List, Optional

import httpx

from shared.logging import get_logger


class CacheWarmer:
    """Calls the warmup endpoint for a batch of Pokémon names."""

    def __init__(
        self,
        service_url: str,
        *,
        concurrency: int = 5,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.service_url = service_url.rstrip("/")
        self.timeout = timeout
        self.logger = get_logger("pokemon.cache_warmer")
        self._semaphore = asyncio.Semaphore(max(1, concurrency))
        self._transport = transport

    @staticmethod
    def plan(names: Iterable[str]) -> List[str]:
        """Normalize and de-duplicate names, keeping first-seen order."""
        seen: Dict[str, None] = {}
        for name in names:
            normalized = name.strip().lower()
            if normalized:
                seen.setdefault(normalized, None)
        return list(seen)

    async def warm(self, names: Iterable[str], *, dry_run: bool = False) -> Dict[str, Any]:
        """Warm every planned name; returns a summary of outcomes."""
        plan = self.plan(names)
        summary: Dict[str, Any] = {
            "planned": len(plan),
            "warmed": 0,
            "not_found": [],
            "errors": [],
            "dry_run": dry_run,
        }

        if dry_run or not plan:
            summary["names"] = plan
            return summary

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            results = await asyncio.gather(
                *(self._warm_one(client, name) for name in plan),
                return_exceptions=True,
            )

        for name, outcome in zip(plan, results):
            if isinstance(outcome, Exception):
                summary["errors"].append({"pokemon": name, "error": str(outcome)})
            elif outcome == "warmed":
                summary["warmed"] += 1
            elif outcome == "not_found":
                summary["not_found"].append(name)

        self.logger.info(
            "Cache warm completed",
            planned=summary["planned"],
            warmed=summary["warmed"],
            not_found=len(summary["not_found"]),
            errors=len(summary["errors"]),
        )
        return summary

    async def _warm_one(self, client: httpx.AsyncClient, name: str) -> str:
        async with self._semaphore:
            start = time.perf_counter()
            response = await client.post(f"{self.service_url}/admin/pokemon/cache/warmup/{name}")
            duration_ms = round((time.perf_counter() - start) * 1000, 2)

        if response.status_code == 404:
            self.logger.info("Warmup skipped unknown Pokémon", pokemon=name)
            return "not_found"

        response.raise_for_status()
        self.logger.debug("Warmed cache entry", pokemon=name, duration_ms=duration_ms)
        return "warmed"
