"""
Structured logging configuration for goreplace.

Events are emitted as JSON lines on stderr so they never interleave with the
interactive prompts printed on stdout.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

_RESERVED_RECORD_KEYS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "getMessage",
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": getattr(record, "component", record.name),
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class EventLogger:
    """Structured logger for goreplace events."""

    def __init__(self, name: str = "goreplace"):
        self.logger = logging.getLogger(f"goreplace.{name}")
        self.logger.propagate = False
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Setup logger with structured formatting."""
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.WARNING)

    def _log(self, level: str, event_type: str, **kwargs) -> None:
        """Internal logging method."""
        log_data = {"event_type": event_type, **kwargs}
        getattr(self.logger, level)(event_type, extra=log_data)

    def info(self, event_type: str, **kwargs) -> None:
        self._log("info", event_type, **kwargs)

    def debug(self, event_type: str, **kwargs) -> None:
        self._log("debug", event_type, **kwargs)


# Global logger instances
_manifest_logger = EventLogger("manifest")
_resolver_logger = EventLogger("resolver")
_cli_logger = EventLogger("cli")

_ALL_LOGGERS: List[EventLogger] = [_manifest_logger, _resolver_logger, _cli_logger]


def log_manifest_parsed(
    record_count: int, replaced_count: int, file_path: Optional[str] = None
) -> None:
    """Log the outcome of parsing a manifest."""
    log_data: Dict[str, Any] = {
        "record_count": record_count,
        "replaced_count": replaced_count,
    }
    if file_path:
        log_data["file_path"] = file_path
    _manifest_logger.debug("manifest_parsed", **log_data)


def log_local_path_probe(module_path: str, candidate: str, exists: bool) -> None:
    """Log a single filesystem probe made by the resolver."""
    _resolver_logger.debug(
        "local_path_probe", module_path=module_path, candidate=candidate, exists=exists
    )


def log_local_path_resolved(module_path: str, local_path: str, stripped: bool) -> None:
    """Log the local path chosen for a module."""
    _resolver_logger.info(
        "local_path_resolved",
        module_path=module_path,
        local_path=local_path,
        version_stripped=stripped,
    )


def log_replace_applied(manifest_path: str, module_path: str, local_path: str) -> None:
    """Log a replace directive written to the manifest."""
    _manifest_logger.info(
        "replace_applied",
        file_path=manifest_path,
        module_path=module_path,
        local_path=local_path,
    )


def log_operation_cancelled(module_path: str) -> None:
    """Log an operator-cancelled confirmation."""
    _cli_logger.info("operation_cancelled", module_path=module_path)


def configure_logging(log_level: str = "WARNING", enable_json: bool = True) -> None:
    """Configure logging for the application."""
    level = getattr(logging, log_level.upper(), logging.WARNING)

    for event_logger in _ALL_LOGGERS:
        event_logger.logger.setLevel(level)
        for handler in event_logger.logger.handlers:
            if enable_json:
                handler.setFormatter(StructuredFormatter())
            else:
                handler.setFormatter(
                    logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
                )


# Initialize with default configuration
configure_logging()
