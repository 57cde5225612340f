"""
Base service class for the Pokémon Abilities service.
"""

import os
import time
import traceback
from typing import Dict, Optional

import psutil
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST

from shared.config import ServiceConfig, get_config
from shared.errors import ErrorResponse, ServiceException, current_trace_id
from shared.logging import configure_logging, get_logger, set_request_id, clear_context
from shared.metrics import get_metrics_collector
from shared.tracing import configure_tracing


class BaseService:
    """Base service class with common functionality."""

    version = "1.0.0"

    def __init__(self, service_name: str, config: Optional[ServiceConfig] = None):
        self.service_name = service_name
        self.config = config or get_config(service_name)

        configure_logging(service_name, self.config.log_level)
        self.logger = get_logger(f"{service_name}.http")
        self.metrics = get_metrics_collector(service_name)
        self._start_time = time.time()

        self.app = self._create_app()

        if self.config.enable_tracing:
            configure_tracing(
                self.app,
                service_name,
                self.config.env,
                otel_exporter=self.config.otel_exporter,
                enable_console=self.config.enable_console_tracing,
            )

        self._setup_middleware()
        self._setup_routes()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""
        return FastAPI(
            title=f"{self.service_name.title()} Service",
            description="Pokémon ability lookups backed by PokeAPI with a short-lived cache",
            version=self.version,
            docs_url="/api/docs",
            redoc_url="/api/redoc" if self.config.is_development else None,
        )

    def _setup_middleware(self):
        """Set up middleware."""

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if self.config.is_development else self.config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        @self.app.middleware("http")
        async def add_request_context(request: Request, call_next):
            request_id = set_request_id(request.headers.get("X-Request-ID"))
            start_time = time.time()

            self.logger.info(
                "HTTP request received",
                method=request.method,
                path=request.url.path,
                client=request.client.host if request.client else None,
                user_agent=request.headers.get("User-Agent", ""),
            )

            try:
                response = await call_next(request)
            except Exception as exc:
                self.logger.error(
                    "HTTP request failed",
                    method=request.method,
                    path=request.url.path,
                    duration_ms=round((time.time() - start_time) * 1000, 2),
                    error=str(exc),
                )
                clear_context()
                raise

            duration = time.time() - start_time
            duration_ms = round(duration * 1000, 2)

            self.metrics.record_http_request(
                method=request.method,
                endpoint=self._route_template(request),
                status_code=response.status_code,
                duration=duration
            )

            self.logger.info(
                "HTTP request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=duration_ms
            )

            if duration_ms > self.config.slow_request_ms:
                self.logger.warning(
                    "Slow request detected",
                    method=request.method,
                    path=request.url.path,
                    duration_ms=duration_ms,
                    threshold_ms=self.config.slow_request_ms,
                )

            response.headers["X-Request-ID"] = request_id
            clear_context()
            return response

    @staticmethod
    def _route_template(request: Request) -> str:
        """Use the matched route path so metric labels stay bounded."""
        route = request.scope.get("route")
        return getattr(route, "path", request.url.path)

    def _setup_routes(self):
        """Set up common routes."""

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            dependencies = await self._check_health()
            healthy = all(value == "ok" for value in dependencies.values())
            self.metrics.record_health_check("ok" if healthy else "error")

            payload = {
                "service": self.service_name,
                "status": "ok" if healthy else "error",
                "uptime_seconds": self._get_uptime(),
                "dependencies": dependencies,
                "version": self.version,
                "commit": os.getenv("GIT_COMMIT", "unknown")
            }
            if not healthy:
                self.logger.warning("Health check failed", dependencies=dependencies)
                return JSONResponse(status_code=503, content=payload)
            return payload

        @self.app.get("/metrics")
        async def metrics_endpoint():
            """Prometheus metrics endpoint."""
            return Response(
                content=self.metrics.export(),
                media_type=CONTENT_TYPE_LATEST
            )

        @self.app.exception_handler(ServiceException)
        async def service_exception_handler(request: Request, exc: ServiceException):
            """Handle ServiceException."""
            log = self.logger.warning if exc.status_code < 500 else self.logger.error
            log(
                "Service error",
                method=request.method,
                path=request.url.path,
                code=exc.code,
                message=exc.message,
                status_code=exc.status_code,
            )
            self.metrics.record_error(exc.code)
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_response(path=request.url.path, method=request.method).model_dump()
            )

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle general exceptions."""
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            self.metrics.record_error("INTERNAL_ERROR")

            details = {}
            if self.config.is_development:
                details["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

            body = ErrorResponse(
                trace_id=current_trace_id(),
                code="INTERNAL_ERROR",
                message="Internal server error",
                details=details,
                status_code=500,
                path=request.url.path,
                method=request.method,
            )
            return JSONResponse(status_code=500, content=body.model_dump())

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check service dependencies. Override in subclasses."""
        return {}

    async def _check_health(self) -> Dict[str, str]:
        """Dependencies plus process memory, reported by /health."""
        checks = await self._check_dependencies()
        checks["memory_rss"] = self._check_memory()
        return checks

    def _check_memory(self) -> str:
        rss_mb = psutil.Process().memory_info().rss / (1024 * 1024)
        if rss_mb > self.config.health_max_rss_mb:
            self.logger.warning(
                "Memory above health threshold",
                rss_mb=round(rss_mb, 1),
                threshold_mb=self.config.health_max_rss_mb,
            )
            return "error"
        return "ok"

    def _get_uptime(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time

    def run(self):
        """Run the service."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower()
        )
