"""Shared utilities."""

from .logging import setup_logging, get_contextual_logger, StructuredFormatter

__all__ = ["setup_logging", "get_contextual_logger", "StructuredFormatter"]
