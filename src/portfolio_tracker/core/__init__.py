"""Core utilities: exceptions, timezone, currencies, market hours."""

from portfolio_tracker.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    ConflictError,
    InsufficientSharesError,
    StorageError,
    UpstreamDataError,
)

__all__ = [
    "AppError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "InsufficientSharesError",
    "StorageError",
    "UpstreamDataError",
]
