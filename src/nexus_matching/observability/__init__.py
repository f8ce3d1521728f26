"""Observability helpers."""

from .logging import get_logger, log_duration

__all__ = ["get_logger", "log_duration"]
