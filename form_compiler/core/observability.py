"""
Observability for the form compiler.

The compiler runs inside a host service, so this module only provides the
pieces the host wires up:
- A JSON log formatter that tags every record with the host's request id
- `configure_logging()` driven by `Settings`
- Prometheus metrics for compilation, the compilation cache and validation,
  on a registry the host can expose through `render_metrics()`

Usage:
    from form_compiler.core.observability import configure_logging, set_correlation_id

    configure_logging()
    set_correlation_id(incoming_request_id)
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

from form_compiler.core.config import Settings, settings

# ============================================================================
# Correlation ID
# ============================================================================

# Set by the hosting transport so compiler logs join the request's logs
_request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id() -> str:
    return _request_id_ctx.get()


def set_correlation_id(request_id: str) -> None:
    """Bind `request_id` to the current context; an empty string unbinds it."""
    _request_id_ctx.set(request_id)


# ============================================================================
# Structured Logging
# ============================================================================

# Attributes every LogRecord carries; anything else came from `extra=`
_STANDARD_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """
    Render log records as one JSON object per line.

    Keys: timestamp (ISO 8601, UTC), level, logger, message, source location,
    plus request_id when one is bound, exception (type and message) when the
    record carries exc_info, and extra for fields passed via `extra=`.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {"type": exc_type.__name__, "message": str(exc_value)}

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS
        }
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str, ensure_ascii=False)


def configure_structured_logging(level: str = "INFO") -> None:
    """Replace the root logger's handlers with one JSON handler on stderr."""
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())


def configure_logging(config: Settings | None = None) -> None:
    """Configure logging from settings: JSON when structured logs are on, plain text otherwise."""
    config = config or settings
    if config.structured_logs:
        configure_structured_logging(config.log_level)
        return

    logging.basicConfig(
        level=config.log_level_value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


# ============================================================================
# Prometheus Metrics
# ============================================================================

# Use a custom registry to avoid conflicts with the host's metrics
_registry = CollectorRegistry()


class Metrics:
    """
    Centralized metrics collection for the compiler.

    Metrics groups:
    - Compiler: Compilation outcome, duration, form size
    - Cache: Lookups by result, evictions, resident entries
    - Validation: Validation outcomes
    """

    def __init__(self, registry: CollectorRegistry) -> None:
        self.registry = registry

        # -------------------------------------------------------------------
        # Compiler Metrics
        # -------------------------------------------------------------------

        self.form_compilations_total = Counter(
            "form_compilations_total",
            "Total form definition compilations",
            ["status"],
            registry=self.registry,
        )

        self.form_compile_duration_seconds = Histogram(
            "form_compile_duration_seconds",
            "Form definition compilation duration in seconds",
            buckets=(0.0001, 0.00025, 0.0005, 0.001, 0.0025, 0.005, 0.01, 0.05, 0.1),
            registry=self.registry,
        )

        self.form_compile_fields_count = Histogram(
            "form_compile_fields_count",
            "Number of fields in compiled forms",
            buckets=(1, 5, 10, 25, 50, 100, 250),
            registry=self.registry,
        )

        # -------------------------------------------------------------------
        # Cache Metrics
        # -------------------------------------------------------------------

        self.form_cache_lookups_total = Counter(
            "form_cache_lookups_total",
            "Compilation cache lookups by result (hit, miss, shared)",
            ["result"],
            registry=self.registry,
        )

        self.form_cache_evictions_total = Counter(
            "form_cache_evictions_total",
            "Compiled forms evicted from the compilation cache",
            registry=self.registry,
        )

        self.form_cache_entries = Gauge(
            "form_cache_entries",
            "Compiled forms currently held in the compilation cache",
            registry=self.registry,
        )

        # -------------------------------------------------------------------
        # Validation Metrics
        # -------------------------------------------------------------------

        self.form_validations_total = Counter(
            "form_validations_total",
            "Total validations of submitted data by outcome",
            ["outcome"],
            registry=self.registry,
        )


# Global metrics instance
metrics = Metrics(_registry)


def metrics_enabled() -> bool:
    return settings.metrics_enabled


def render_metrics() -> bytes:
    """Metrics in Prometheus text format, for the host's /metrics endpoint."""
    return generate_latest(_registry)
