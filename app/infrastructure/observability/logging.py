"""
Structured logging setup for the ChronoGift backend.
Provides JSON-formatted logs with consistent fields for production monitoring.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import LoggerFactory

# Keys that must never reach a log line, whatever a caller passes in.
_REDACTED_KEYS = frozenset({"passcode", "passcode_hash", "credential", "access_token", "id_token"})


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging with JSON output for production.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            _redact_secrets,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("psycopg.pool").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def _redact_secrets(logger, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Replace secret-bearing fields with a marker."""
    for key in _REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "[redacted]"
    return event_dict


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def log_health_check(dependency: str, ok: bool, latency_ms: float, error: str | None = None):
    """One line per readiness probe of a dependency."""
    logger = get_logger("health")
    if ok:
        logger.debug("Dependency ready", dependency=dependency, latency_ms=latency_ms)
    else:
        logger.warning(
            "Dependency not ready", dependency=dependency, latency_ms=latency_ms, error=error
        )


def log_request(method: str, path: str, status_code: int, duration_ms: float):
    """Access log line; 5xx at error level, 4xx at warning."""
    logger = get_logger("http")
    fields = {"method": method, "path": path, "status_code": status_code, "duration_ms": duration_ms}

    if status_code >= 500:
        logger.error("HTTP request failed", **fields)
    elif status_code >= 400:
        logger.warning("HTTP request rejected", **fields)
    else:
        logger.info("HTTP request completed", **fields)
