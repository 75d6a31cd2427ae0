"""Logging helpers with OpenTelemetry export."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource

if TYPE_CHECKING:  # pragma: no cover
    from .config import TelemetryConfig

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s "
    "| trace_id=%(otelTraceID)s span_id=%(otelSpanID)s"
)

_LOGGERS: dict[str, logging.Logger] = {}
_HANDLER_INSTALLED = False


class _OtelContextFilter(logging.Filter):
    """Ensures trace/span placeholders exist even when no context is active."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        if not hasattr(record, "otelTraceID"):
            record.otelTraceID = "-"
        if not hasattr(record, "otelSpanID"):
            record.otelSpanID = "-"
        return True


def get_logger(name: str = "seabattle") -> logging.Logger:
    logger = _LOGGERS.get(name)
    if logger is None:
        logger = logging.getLogger(name)
        _LOGGERS[name] = logger
    return logger


def init_logging(config: TelemetryConfig) -> logging.Logger:
    """Route log records to the OTLP logs endpoint and the console."""
    logger = get_logger(config.service_name)
    level = logging.getLevelName(config.log_level)

    provider = LoggerProvider(resource=Resource.create(config.resource))
    if config.otlp_logs_endpoint:
        exporter = OTLPLogExporter(endpoint=config.otlp_logs_endpoint, insecure=True)
        provider.add_log_record_processor(BatchLogRecordProcessor(exporter))
    set_logger_provider(provider)

    _install_root_handler(LoggingHandler(level=level, logger_provider=provider), level)
    return logger


def _install_root_handler(handler: logging.Handler, level: int) -> None:
    """Attach the OTLP logging handler to the root logger once."""
    global _HANDLER_INSTALLED
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if _HANDLER_INSTALLED:
        return

    if not root_logger.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    for existing in root_logger.handlers:
        existing.addFilter(_OtelContextFilter())

    handler.addFilter(_OtelContextFilter())
    root_logger.addHandler(handler)
    _HANDLER_INSTALLED = True
