"""Temporary file cleanup for nodes and the control side."""

from .service import (
    Cleaner,
    CleanupResult,
    CleanupStrategy,
    NoopCleanupStrategy,
    UnixCleanupStrategy,
    get_strategy,
)

__all__ = [
    "Cleaner",
    "CleanupResult",
    "CleanupStrategy",
    "NoopCleanupStrategy",
    "UnixCleanupStrategy",
    "get_strategy",
]
