"""
Shared utilities for the Pokémon Abilities service.

This package aggregates the common building blocks the service is wired from:

- config: Service configuration via pydantic-settings
- logging: Structured logging with trace correlation
- metrics: Prometheus metrics helpers
- tracing: OpenTelemetry tracing config
- errors: Canonical error types and responses
- retry: Retry helper for upstream calls
- circuit_breaker: Resilient external call protection
- base_service: FastAPI app skeleton with health, metrics and error handlers

Do not import from service_* packages into shared/.
"""
