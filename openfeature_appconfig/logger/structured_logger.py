"""
Structured JSON logging for the AppConfig provider.

USAGE:
    from openfeature_appconfig.logger import logger
    logger.info("appconfig_flag_resolved", flag_key="new-checkout", reason="DEFAULT")

HOW IT WORKS:
    1. Logs are formatted as JSON using structlog
    2. Records go through a queue so logging never blocks a flag evaluation
    3. A listener thread writes them to stdout (for container logs)
    4. Datadog trace IDs are injected when ddtrace is installed
    5. The evaluation context (evaluation_id, flag_key, ...) is injected

ENVIRONMENT VARIABLES:
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
    APPCONFIG_LOG_SERVICE: Service name on every log line (default: DD_SERVICE or "appconfig-provider")
    ENVIRONMENT / DD_ENV: Environment name on every log line (default: "dev")
"""

from __future__ import annotations

import atexit
import logging
import os
import sys
import threading
from logging.handlers import QueueHandler, QueueListener
from queue import Queue
from typing import Any

import structlog

from .context import inject_evaluation_context

# =============================================================================
# STEP 1: CHECK OPTIONAL DEPENDENCIES
# =============================================================================

# ddtrace: Datadog APM tracing (adds trace_id/span_id to logs)
try:
    from ddtrace import tracer
    DDTRACE_AVAILABLE = True
except ImportError:
    tracer = None
    DDTRACE_AVAILABLE = False


# =============================================================================
# STEP 2: READ CONFIGURATION FROM ENVIRONMENT
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_SERVICE = os.getenv(
    "APPCONFIG_LOG_SERVICE",
    os.getenv("DD_SERVICE", "appconfig-provider"),
)
LOG_ENV = os.getenv("ENVIRONMENT") or os.getenv("DD_ENV") or "dev"


# =============================================================================
# STEP 3: SINGLETON STATE
# =============================================================================

_logger_instance: structlog.stdlib.BoundLogger | None = None
_logger_lock = threading.Lock()
_is_configured = False


# =============================================================================
# STEP 4: PROCESSORS
# =============================================================================


def add_datadog_trace_context(
    logger_instance: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """
    Add Datadog trace IDs (dd.trace_id, dd.span_id, ...) to a log entry.

    No-op when ddtrace is not installed.
    """
    if not DDTRACE_AVAILABLE or tracer is None:
        return event_dict

    try:
        trace_context = tracer.get_log_correlation_context()
        if trace_context:
            event_dict.update(trace_context)
    except Exception:
        # Never fail logging because of trace injection
        pass

    return event_dict


def drop_none_values(
    logger_instance: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Remove fields whose value is None so log lines stay compact."""
    return {key: value for key, value in event_dict.items() if value is not None}


# =============================================================================
# STEP 5: MAIN CONFIGURATION FUNCTION
# =============================================================================


def configure_logging(
    *,
    service: str | None = None,
    env: str | None = None,
    level: str | None = None,
) -> structlog.stdlib.BoundLogger:
    """
    Configure the logging system.

    SINGLETON BEHAVIOR:
        This function can be called multiple times safely.
        After the first call, subsequent calls return the same logger.

    Args:
        service: Service name (default: APPCONFIG_LOG_SERVICE env var)
        env: Environment (default: ENVIRONMENT / DD_ENV env var or "dev")
        level: Log level name (default: LOG_LEVEL env var or "INFO")

    Returns:
        A configured structlog logger instance
    """
    global _logger_instance, _is_configured

    # Fast path, outside the lock
    if _is_configured and _logger_instance is not None:
        return _logger_instance

    with _logger_lock:
        if _is_configured and _logger_instance is not None:
            return _logger_instance

        resolved_service = service if service is not None else LOG_SERVICE
        resolved_env = env if env is not None else LOG_ENV
        resolved_level_name = (level or LOG_LEVEL).upper()
        resolved_log_level = getattr(logging, resolved_level_name, logging.INFO)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(resolved_log_level)

        # Flow: logger.info() -> QueueHandler -> Queue -> QueueListener -> stdout
        log_queue: Queue[logging.LogRecord] = Queue(maxsize=1000)
        queue_handler = QueueHandler(log_queue)
        queue_listener = QueueListener(
            log_queue,
            console_handler,
            respect_handler_level=True,
        )
        queue_listener.start()
        atexit.register(queue_listener.stop)

        logging.basicConfig(
            level=resolved_log_level,
            format="%(message)s",  # structlog handles formatting
            handlers=[queue_handler],
        )

        # botocore and httpx are chatty at INFO
        logging.getLogger("botocore").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                inject_evaluation_context,
                add_datadog_trace_context,
                drop_none_values,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.EventRenamer("msg"),
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        _logger_instance = structlog.get_logger("openfeature_appconfig").bind(
            service=resolved_service,
            env=resolved_env,
        )
        _is_configured = True

        sys.stderr.write(
            f"Logger: READY "
            f"(level={resolved_level_name}, ddtrace={DDTRACE_AVAILABLE})\n"
        )
        sys.stderr.flush()

        return _logger_instance


# =============================================================================
# STEP 6: LAZY LOGGER PROXY
# =============================================================================


class LazyLoggerProxy:
    """
    A proxy that delays logger configuration until first use.

    Importing the provider stays side-effect free, and an application can
    call configure_logging() with its own settings before the first log.
    """

    def __getattr__(self, attribute_name: str) -> Any:
        real_logger = configure_logging()
        return getattr(real_logger, attribute_name)


logger = LazyLoggerProxy()
