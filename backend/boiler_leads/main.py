import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from boiler_leads.api.problem_details import install_exception_handlers
from boiler_leads.api.routes_estimate import router as estimate_router
from boiler_leads.api.routes_health import router as health_router
from boiler_leads.api.routes_inquiries import router as inquiries_router
from boiler_leads.api.routes_promotions import router as promotions_router
from boiler_leads.api.routes_visits import router as visits_router
from boiler_leads.infra.db import dispose_engine, get_session_factory
from boiler_leads.infra.logging import bind_request_context, configure_logging, reset_request_context
from boiler_leads.infra.metrics import Metrics, configure_metrics
from boiler_leads.infra.tracing import configure_tracing, instrument_app
from boiler_leads.services import build_app_services
from boiler_leads.settings import settings

logger = logging.getLogger(__name__)

DEV_ORIGINS = ["http://localhost:5000", "http://localhost:5173"]
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, log its outcome and harden the response."""

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        bind_request_context(request_id=request_id, method=request.method, path=request.url.path)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            logger.info(
                "request_completed",
                extra={
                    "extra": {
                        "status_code": response.status_code,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                    }
                },
            )
        finally:
            reset_request_context()
        response.headers["X-Request-ID"] = request_id
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


class HttpMetricsMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, metrics_client: Metrics) -> None:  # noqa: ANN001
        super().__init__(app)
        self.metrics = metrics_client

    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            # Route templates keep label cardinality bounded; unknown paths share one label.
            route = getattr(request.scope.get("route"), "path", "unmatched")
            self.metrics.observe_http_request(request.method, route, status_code, time.perf_counter() - started)


def _allowed_origins(app_settings) -> list[str]:  # noqa: ANN001
    if app_settings.cors_origins:
        return app_settings.cors_origins
    if app_settings.app_env == "dev" and not app_settings.strict_cors:
        return DEV_ORIGINS
    return []


def create_app(app_settings) -> FastAPI:  # noqa: ANN001
    configure_logging()
    tracer_provider = configure_tracing(app_settings)
    metrics_client = configure_metrics(app_settings.metrics_enabled)
    services = build_app_services(app_settings, metrics=metrics_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Tests may pre-seed app.state; only fill what is missing.
        state = app.state
        state.services = getattr(state, "services", None) or services
        state.app_settings = getattr(state, "app_settings", None) or app_settings
        state.metrics = getattr(state, "metrics", None) or state.services.metrics
        state.webhook_notifier = getattr(state, "webhook_notifier", None) or state.services.webhook_notifier
        state.db_session_factory = getattr(state, "db_session_factory", None) or get_session_factory()
        if not state.webhook_notifier.enabled:
            logger.info("webhook_disabled_no_url")
        yield
        await state.webhook_notifier.drain(timeout=app_settings.webhook_drain_timeout_seconds)
        await dispose_engine()

    app = FastAPI(title="Boiler Leads", version="1.0.0", lifespan=lifespan)

    app.add_middleware(HttpMetricsMiddleware, metrics_client=metrics_client)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(app_settings),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    install_exception_handlers(app)

    for router in (health_router, inquiries_router, visits_router, estimate_router, promotions_router):
        app.include_router(router)
    if app_settings.metrics_enabled:
        from boiler_leads.api.routes_metrics import router as metrics_router

        app.include_router(metrics_router)

    # Instrument last so the server span wraps every middleware.
    instrument_app(app, tracer_provider)
    return app


app = create_app(settings)
