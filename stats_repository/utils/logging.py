"""Logging setup for the statistics repository."""

import logging
import sys
import json
from typing import Optional, Dict, Any
from datetime import datetime, timezone


class StructuredFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string, including any statistic context
        """
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Context attached by StatsLoggerAdapter
        if hasattr(record, "stats_context"):
            log_data.update(record.stats_context)

        return json.dumps(log_data, default=str)


class StandardFormatter(logging.Formatter):
    """Human-readable formatter."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging(
    level: str = "INFO",
    structured: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """Configure root logging for the repository and its CLI.

    Output goes to stderr so command results on stdout stay parseable.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        structured: Emit JSON lines instead of plain text
        log_file: Optional file to mirror log output into
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if structured:
        formatter = StructuredFormatter()
    else:
        formatter = StandardFormatter()

    handlers = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True,
    )

    # Driver and parser chatter stays at WARNING
    logging.getLogger("psycopg2").setLevel(logging.WARNING)
    logging.getLogger("sqlglot").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class StatsLoggerAdapter(logging.LoggerAdapter):
    """Attach table/column context to every record."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        """Prefix the message with the context and attach it to the record.

        Args:
            msg: Log message
            kwargs: Keyword arguments of the logging call

        Returns:
            Tuple of (message, kwargs)
        """
        extra = kwargs.setdefault("extra", {})
        extra["stats_context"] = self.extra
        context = " ".join(f"{key}={value}" for key, value in self.extra.items())
        if context:
            msg = f"[{context}] {msg}"
        return msg, kwargs


def get_contextual_logger(name: str, context: Dict[str, Any]) -> StatsLoggerAdapter:
    """Get a logger that prefixes messages with statistic context.

    Args:
        name: Logger name
        context: Context included in every message and JSON record

    Returns:
        Logger adapter with context

    Example:
        >>> logger = get_contextual_logger(__name__, {"table_id": 100, "column": "amount"})
        >>> logger.info("Altered statistics")
    """
    return StatsLoggerAdapter(get_logger(name), context)
