"""Utilities shared across services to standardise observability."""

from .logging import (
    CorrelationIdFilter,
    JsonLogFormatter,
    configure_logging,
    get_correlation_id,
    run_context,
)

__all__ = [
    "CorrelationIdFilter",
    "JsonLogFormatter",
    "configure_logging",
    "get_correlation_id",
    "run_context",
]
