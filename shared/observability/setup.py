import os
import logging
import structlog
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

# OpenTelemetry
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
# Empty string disables span export (local runs without a collector)
OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT", "http://localhost:4317")
# One process can host several services (see the root main.py)
CLUSTER_NAME = os.getenv("OTEL_SERVICE_NAME", "ecommerce-order-saga")

_provider = None


# 1. Structlog processors: trace/span ids and the emitting service
def add_otel_ids(logger, log_method, event_dict):
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = trace.format_trace_id(ctx.trace_id)
        event_dict["span_id"] = trace.format_span_id(ctx.span_id)
    return event_dict


def add_service_name(logger, log_method, event_dict):
    # Loggers are named after their module: services.<x>_service.<module>
    parts = (event_dict.get("logger") or "").split(".")
    if len(parts) > 1 and parts[0] == "services":
        event_dict.setdefault("service", parts[1])
    return event_dict


# 2. JSON logs for the order, product and user services
def configure_logging(level: str = LOG_LEVEL):
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            add_service_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_otel_ids,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level)
        ),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", level=level)


# 3. Tracing. The provider is process-wide, instrumentation is per app
def _tracer_provider() -> TracerProvider:
    global _provider
    if _provider is None:
        _provider = TracerProvider(resource=Resource.create({SERVICE_NAME: CLUSTER_NAME}))
        if OTLP_ENDPOINT:
            exporter = OTLPSpanExporter(endpoint=OTLP_ENDPOINT, insecure=True)
            _provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(_provider)
        # Outgoing user/product lookups and stock calls get a client span
        HTTPXClientInstrumentor().instrument(tracer_provider=_provider)
    return _provider


def configure_tracing(app: FastAPI, service_name: str):
    provider = _tracer_provider()
    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=provider,
        server_request_hook=lambda span, scope: span.set_attribute("app.service", service_name),
        excluded_urls="health,metrics",
    )


# 4. Prometheus: HTTP latency/status per handler, plus the order business metrics
def configure_metrics(app: FastAPI):
    Instrumentator(excluded_handlers=["/health", "/metrics"]).instrument(app).expose(app)


def setup_observability(app: FastAPI, service_name: str):
    """
    Bootstraps logging, tracing and metrics for one service app.
    Safe to call for every app mounted in the same process.
    """
    configure_logging()
    configure_tracing(app, service_name)
    configure_metrics(app)
    structlog.get_logger(__name__).info("observability_ready", app_service=service_name)
