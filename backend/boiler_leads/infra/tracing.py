import atexit
import logging
import os

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

UNTRACED_PATHS = "healthz,readyz,metrics"

_provider: TracerProvider | None = None


def _strip_webhook_query(span, request) -> None:  # noqa: ANN001
    # Webhook URLs may embed a shared secret in the query string.
    if span is None or not span.is_recording():
        return
    span.set_attribute("http.url", str(request.url.copy_with(query=None)))


async def _strip_webhook_query_async(span, request) -> None:  # noqa: ANN001
    _strip_webhook_query(span, request)


def configure_tracing(app_settings) -> TracerProvider:  # noqa: ANN001
    """Install the process-wide tracer provider once.

    Spans are exported only when ``OTEL_EXPORTER_OTLP_ENDPOINT`` is set; the
    outbound webhook call is traced through the httpx instrumentation.
    """
    global _provider
    if _provider is not None:
        return _provider

    service_name = os.getenv("OTEL_SERVICE_NAME") or app_settings.app_name
    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint and not app_settings.testing:
        exporter = OTLPSpanExporter(endpoint=endpoint, insecure=endpoint.startswith("http://"))
        provider.add_span_processor(BatchSpanProcessor(exporter))
    else:
        logger.debug("tracing_export_disabled")

    trace.set_tracer_provider(provider)
    HTTPXClientInstrumentor().instrument(
        tracer_provider=provider,
        request_hook=_strip_webhook_query,
        async_request_hook=_strip_webhook_query_async,
    )
    atexit.register(provider.shutdown)
    _provider = provider
    return provider


def instrument_app(app: FastAPI, provider: TracerProvider | None = None) -> None:
    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=provider or trace.get_tracer_provider(),
        excluded_urls=UNTRACED_PATHS,
    )
