"""
RTI Logging
===========
Structured logging for the RTI middleware.

Usage:
    from rti_core.rti_logger import setup_logging, RTILogger

    # Setup at startup
    setup_logging(service_name="shop-frontend")

    # Leveled messages with an optional action label
    rti_logger = RTILogger()
    rti_logger.audit("RTI decision", action="block")
    rti_logger.error("RTI request failed", action="allow")
"""

import json
import logging
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from rti_core.config.settings import SERVICE_NAME

# Context variables for request tracking
request_id_var: ContextVar[str] = ContextVar("request_id", default="")
service_name_var: ContextVar[str] = ContextVar("service_name", default=SERVICE_NAME)

LOG_LEVELS = ("audit", "error", "info", "warn")


# =============================================================================
# JSON Formatter
# =============================================================================

class JSONFormatter(logging.Formatter):
    """
    Formats log records as JSON for structured logging.
    Compatible with ELK, Datadog, CloudWatch, etc.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": service_name_var.get(),
            "request_id": request_id_var.get() or None,
        }

        # Add extra fields
        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        # Add exception info
        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_data, default=str)


def _event_to_extra_data(logger: Any, method_name: str, event_dict: dict) -> dict:
    """
    Final structlog processor: hand the event to stdlib as keyword arguments.

    The event text becomes the record message and the remaining keys travel
    as extra_data, which JSONFormatter merges into the top level.
    """
    message = event_dict.pop("event", "")
    return {"msg": message, "extra": {"extra_data": event_dict}}


# =============================================================================
# Setup
# =============================================================================

def setup_logging(
    service_name: str = SERVICE_NAME,
    level: str = "INFO",
    json_output: bool = True,
) -> logging.Logger:
    """
    Configure stdlib and structlog logging for the host process.

    Args:
        service_name: Name of the host service
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Whether to output JSON (for production)

    Returns:
        Configured root logger
    """
    service_name_var.set(service_name)
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        ))
    root_logger.addHandler(handler)

    # Route structlog events through the stdlib handler above
    if json_output:
        processors = [structlog.contextvars.merge_contextvars, _event_to_extra_data]
    else:
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.dev.ConsoleRenderer(colors=False),
        ]
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )

    root_logger.info(f"Logging configured for {service_name}", extra={
        "extra_data": {"event": "logging.configured", "service": service_name}
    })

    return root_logger


# =============================================================================
# RTI Logger
# =============================================================================

class RTILogger:
    """
    Leveled logger used around the decision core.

    Levels are audit, error, info and warn. Audit messages are emitted
    at info level with audit=True so they can be filtered downstream.
    """

    def __init__(self, name: str = "rti", service_name: Optional[str] = None):
        self.service_name = service_name or service_name_var.get()
        self._logger = structlog.get_logger(name)

    def log(self, level: str, message: str, action: Optional[str] = None, **fields: Any) -> None:
        """
        Log a message at an RTI level.

        Args:
            level: One of audit, error, info, warn (unknown levels log as info)
            message: Message text
            action: Optional action label, e.g. "block"
            **fields: Additional structured context
        """
        event = {
            "rti_level": level,
            "service": self.service_name,
            "request_id": request_id_var.get() or None,
            **fields,
        }
        if action is not None:
            event["action"] = action

        if level == "error":
            self._logger.error(message, **event)
        elif level == "warn":
            self._logger.warning(message, **event)
        elif level == "audit":
            self._logger.info(message, audit=True, **event)
        else:
            self._logger.info(message, **event)

    def audit(self, message: str, action: Optional[str] = None, **fields: Any) -> None:
        self.log("audit", message, action, **fields)

    def error(self, message: str, action: Optional[str] = None, **fields: Any) -> None:
        self.log("error", message, action, **fields)

    def info(self, message: str, action: Optional[str] = None, **fields: Any) -> None:
        self.log("info", message, action, **fields)

    def warn(self, message: str, action: Optional[str] = None, **fields: Any) -> None:
        self.log("warn", message, action, **fields)
