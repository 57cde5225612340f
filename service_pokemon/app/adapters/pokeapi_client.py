"""
PokeAPI client for the Pokémon Abilities service.
"""

from contextlib import nullcontext
from typing import Any, Dict, Optional
import httpx

from shared.logging import get_logger
from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException
from shared.metrics import MetricsCollector
from shared.retry import RetryConfig, RetryError, call_with_retry

from service_pokemon.app.domain.exceptions import PokemonNotFoundError, UpstreamUnavailableError


DEFAULT_POKEAPI_URL = "https://pokeapi.co/api/v2"


class UpstreamStatusError(Exception):
    """Retryable non-success status returned by PokeAPI."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Unexpected status {status_code}")
        self.status_code = status_code
        self.body = body


class PokeApiClient:
    """Client for retrieving Pokémon documents from PokeAPI."""

    def __init__(
        self,
        base_url: str = DEFAULT_POKEAPI_URL,
        *,
        timeout: float = 5.0,
        max_redirects: int = 3,
        retries: int = 2,
        retry_base_delay: float = 0.2,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.metrics = metrics
        self.logger = get_logger("pokemon.pokeapi_client")
        self._transport = transport

        self.circuit_breaker = CircuitBreaker(
            failure_threshold=5,
            recovery_timeout=30.0,
            ignored_exceptions=(PokemonNotFoundError,),
            name="pokeapi",
        )

        self.retry_config = RetryConfig(
            max_attempts=retries + 1,
            base_delay=retry_base_delay,
            max_delay=2.0,
            exponential_base=2.0,
            jitter=True
        )

    def pokemon_url(self, name: str) -> str:
        return f"{self.base_url}/pokemon/{name}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            max_redirects=self.max_redirects,
            transport=self._transport,
        )

    async def get_pokemon(self, name: str) -> Dict[str, Any]:
        """Fetch the raw PokeAPI document for ``name``.

        ``name`` must already be normalized. Raises
        :class:`PokemonNotFoundError` on 404 and
        :class:`UpstreamUnavailableError` once retries are exhausted, the
        breaker is open, or the payload is not JSON.
        """
        url = self.pokemon_url(name)

        async def _request() -> Dict[str, Any]:
            outcome = "error"
            try:
                with self._time_upstream():
                    async with self._client() as client:
                        response = await client.get(url)

                if response.status_code == 200:
                    outcome = "ok"
                    self.logger.debug("Pokémon retrieved", url=url)
                    return response.json()

                if response.status_code == 404:
                    outcome = "not_found"
                    self.logger.info("Pokémon not found upstream", url=url)
                    raise PokemonNotFoundError(name)

                self.logger.warning(
                    "PokeAPI request failed",
                    url=url,
                    status_code=response.status_code,
                )
                raise UpstreamStatusError(response.status_code, response.text)
            finally:
                self._count_upstream(outcome)

        try:
            return await self.circuit_breaker.call(
                call_with_retry,
                _request,
                exceptions=(httpx.TransportError, UpstreamStatusError),
                config=self.retry_config,
            )
        except PokemonNotFoundError:
            raise
        except CircuitBreakerOpenException as exc:
            self.logger.warning("PokeAPI circuit open, failing fast", url=url)
            raise UpstreamUnavailableError(
                name,
                "circuit open",
                details={"circuit_breaker": self.circuit_breaker.get_state()["state"]},
            ) from exc
        except RetryError as exc:
            last = exc.last_exception
            details: Dict[str, Any] = {"attempts": exc.attempts, "error": str(last)}
            if isinstance(last, UpstreamStatusError):
                details["status_code"] = last.status_code
            self.logger.error("PokeAPI retries exhausted", url=url, **details)
            raise UpstreamUnavailableError(name, "retries exhausted", details=details) from exc
        except (httpx.HTTPError, ValueError) as exc:
            self.logger.error("PokeAPI error", url=url, error=str(exc))
            raise UpstreamUnavailableError(name, "invalid response", details={"error": str(exc)}) from exc

    async def ping(self) -> bool:
        """Return True when PokeAPI answers the reference lookup."""
        try:
            async with self._client() as client:
                response = await client.get(self.pokemon_url("1"))
            return response.status_code == 200
        except httpx.HTTPError as exc:
            self.logger.warning("PokeAPI ping failed", error=str(exc))
            return False

    def _time_upstream(self):
        if not self.metrics:
            return nullcontext()
        return self.metrics.time_operation("upstream_request_duration_seconds", upstream="pokeapi")

    def _count_upstream(self, outcome: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("upstream_requests_total", upstream="pokeapi", outcome=outcome)
