import logging
from typing import Optional

from opentelemetry import trace, _logs
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor

from replay.core.config import settings


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure stdlib logging at ``level`` (defaults to settings.LOG_LEVEL)."""
    logging.basicConfig(level=level or settings.LOG_LEVEL, format=LOG_FORMAT)


def _tracer_provider(resource: Resource, endpoint: str) -> TracerProvider:
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=f"{endpoint}/v1/traces"))
    )
    return provider


def _logger_provider(resource: Resource, endpoint: str) -> LoggerProvider:
    provider = LoggerProvider(resource=resource)
    provider.add_log_record_processor(
        BatchLogRecordProcessor(OTLPLogExporter(endpoint=f"{endpoint}/v1/logs"))
    )
    return provider


def setup_telemetry(
    service_name: str = "replay-buffer", endpoint: Optional[str] = None
) -> bool:
    """
    Export replay spans (``load_data``, ``sort_pending``) and log records over OTLP/HTTP.

    ``endpoint`` defaults to settings.OTEL_EXPORTER_OTLP_ENDPOINT. Without one
    nothing is installed and False is returned. The root logger gets at most
    one OTel handler, however often this is called.
    """
    endpoint = endpoint or settings.OTEL_EXPORTER_OTLP_ENDPOINT
    if not endpoint:
        logger.info("Telemetry: no OTLP endpoint configured, spans stay local")
        return False

    resource = Resource(
        attributes={SERVICE_NAME: service_name, SERVICE_VERSION: settings.VERSION}
    )
    trace.set_tracer_provider(_tracer_provider(resource, endpoint))

    logger_provider = _logger_provider(resource, endpoint)
    _logs.set_logger_provider(logger_provider)

    root = logging.getLogger()
    if not any(isinstance(h, LoggingHandler) for h in root.handlers):
        root.addHandler(
            LoggingHandler(level=logging.NOTSET, logger_provider=logger_provider)
        )

    logger.info(f"Telemetry: exporting {service_name} to {endpoint}")
    return True
