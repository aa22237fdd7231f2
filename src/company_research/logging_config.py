"""Logging configuration with JSON output to stdout and file."""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from company_research.constants import (
    MAX_COMPANY_NAME_LOG_LENGTH,
    MIN_COMPANY_NAME_TRUNCATE_LENGTH,
)

# Global configuration cache
_logging_config: Optional[Dict] = None

DEFAULT_ENVIRONMENT = "development"


def _load_logging_config() -> Dict:
    """
    Load logging configuration from config/logging.yaml.

    Returns:
        Dict with logging configuration, or default config if file not found.
    """
    global _logging_config

    if _logging_config is not None:
        return _logging_config

    config_path = Path(__file__).parent.parent.parent / "config" / "logging.yaml"

    if config_path.exists():
        try:
            with open(config_path, "r") as f:
                _logging_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            print(
                f"Failed to load logging config from {config_path}: {e}",
                file=sys.stderr,
            )
            _logging_config = {}
    else:
        _logging_config = {}

    _logging_config.setdefault("console", {})
    _logging_config["console"].setdefault("max_company_name_length", MAX_COMPANY_NAME_LOG_LENGTH)
    _logging_config.setdefault("service", "company-research")

    return _logging_config


def format_company_name(company_name: str, max_length: Optional[int] = None) -> Tuple[str, str]:
    """
    Format a company name for logging with both full and display versions.

    Args:
        company_name: The full company name to format.
        max_length: Maximum length for display version. If None, uses config value.

    Returns:
        Tuple of (full_name, display_name)
    """
    if not company_name:
        return "", ""

    full_name = company_name.strip()

    if max_length is None:
        config = _load_logging_config()
        max_length = config["console"]["max_company_name_length"]

    if max_length <= 0 or len(full_name) <= max_length:
        return full_name, full_name

    if max_length <= MIN_COMPANY_NAME_TRUNCATE_LENGTH:
        display_name = full_name[:max_length]
    else:
        display_name = full_name[: max_length - 3] + "..."

    return full_name, display_name


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Emits one JSON object per record with severity, timestamp, environment,
    service and either the structured fields of a StructuredLogger call or
    the plain message.
    """

    def __init__(self, environment: str = DEFAULT_ENVIRONMENT, service: str = "company-research"):
        super().__init__()
        self.environment = environment
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        severity_map = {
            logging.DEBUG: "DEBUG",
            logging.INFO: "INFO",
            logging.WARNING: "WARNING",
            logging.ERROR: "ERROR",
            logging.CRITICAL: "ERROR",
        }
        severity = severity_map.get(record.levelno, "INFO")

        log_entry: Dict[str, Any] = {
            "severity": severity,
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "environment": self.environment,
            "service": self.service,
            "logger": record.name,
        }

        if hasattr(record, "structured_fields"):
            log_entry.update(record.structured_fields)
        else:
            log_entry.update(
                {
                    "category": "system",
                    "action": "log",
                    "message": record.getMessage(),
                }
            )

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            log_entry["error"] = {
                "type": exc_type.__name__ if exc_type else "Exception",
                "message": str(exc_value),
                "stack": self.formatException(record.exc_info) if exc_tb else None,
            }

        return json.dumps(log_entry, default=str)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
) -> None:
    """
    Configure logging with JSON output to stdout and, optionally, a file.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Path to log file. If None, only stdout is used.

    Environment Variables:
        LOG_LEVEL: Override log level.
        LOG_FILE: Override log file path.
        ENVIRONMENT: Environment name (staging, production, development).
    """
    log_level = os.getenv("LOG_LEVEL", log_level).upper()
    log_file = os.getenv("LOG_FILE", log_file)

    environment = os.getenv("ENVIRONMENT")
    if not environment:
        environment = DEFAULT_ENVIRONMENT
        print("WARNING: ENVIRONMENT not set, defaulting to 'development'", file=sys.stderr)

    config = _load_logging_config()
    json_formatter = JSONFormatter(environment=environment, service=config["service"])
    level = getattr(logging, log_level, logging.INFO)

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(json_formatter)
    console_handler.setLevel(level)
    handlers.append(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(json_formatter)
        file_handler.setLevel(level)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # The OpenAI SDK logs every request at INFO through httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)

    get_structured_logger(__name__).worker_status(
        "logging_configured",
        details={"environment": environment, "level": log_level, "file": log_file},
    )


class StructuredLogger:
    """
    Helper class for structured logging with JSON output.

    Each helper produces a fixed category/action/message/details shape that
    JSONFormatter merges into the emitted record.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _log(self, level: str, structured_fields: Dict[str, Any]) -> None:
        log_method = getattr(self.logger, level.lower())
        message = structured_fields.get("message", "")
        log_method(message, extra={"structured_fields": structured_fields})

    def research_activity(
        self,
        company_name: str,
        stage: str,
        status: str,
        details: Optional[Dict] = None,
    ) -> None:
        """
        Log a company pipeline stage transition.

        Args:
            company_name: Company being researched
            stage: Pipeline stage (research, enhance, fill)
            status: Stage status (started, completed, failed, skipped)
            details: Optional additional details
        """
        full_name, display_name = format_company_name(company_name)

        structured_fields = {
            "category": "research",
            "action": status.lower(),
            "message": f"Research {stage} {status}: {display_name}",
            "researchStage": stage.lower(),
            "details": {
                "company_name": full_name,
                "company_name_display": display_name,
                **(details or {}),
            },
        }

        level = "info"
        if status.lower() in ["failed", "error"]:
            level = "error"

        self._log(level, structured_fields)

    def batch_status(self, status: str, details: Optional[Dict] = None) -> None:
        """
        Log batch job state changes.

        Args:
            status: Batch status (admitting, draining, done)
            details: Optional additional details (counts, concurrency)
        """
        structured_fields = {
            "category": "batch",
            "action": status.lower(),
            "message": f"Batch {status}",
            "details": details or {},
        }
        self._log("info", structured_fields)

    def ai_activity(self, operation: str, status: str, details: Optional[Dict] = None) -> None:
        """
        Log AI operations.

        Args:
            operation: AI operation (research, followup)
            status: Operation status
            details: Optional additional details (model, tokens)
        """
        structured_fields = {
            "category": "ai",
            "action": operation.lower(),
            "message": f"AI {operation} {status}",
            "details": details or {},
        }
        self._log("info", structured_fields)

    def worker_status(self, status: str, details: Optional[Dict] = None) -> None:
        """
        Log process status changes.

        Args:
            status: Process status (started, logging_configured, stopping)
            details: Optional additional details
        """
        structured_fields = {
            "category": "worker",
            "action": status.lower(),
            "message": f"Worker {status}",
            "details": details or {},
        }
        self._log("info", structured_fields)


def get_structured_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__).

    Returns:
        StructuredLogger instance.
    """
    return StructuredLogger(logging.getLogger(name))
