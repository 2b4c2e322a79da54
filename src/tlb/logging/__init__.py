"""Structured logging module for TLB.

Provides configurable logging with JSON format support and file rotation.
Includes build context support so concurrent builds can be told apart.
"""

from tlb.logging.config import configure_logging
from tlb.logging.context import (
    BuildContextFilter,
    build_context,
    get_build_context,
)
from tlb.logging.handlers import JSONFormatter

__all__ = [
    "BuildContextFilter",
    "JSONFormatter",
    "build_context",
    "configure_logging",
    "get_build_context",
]
