"""
Exceptions raised by node setup.

Exception Hierarchy:
    SetupError (base)
    ├── AbortFailure (a prepare/install/cleanup script exited nonzero)
    ├── DeployError (transport misuse, e.g. missing bundle source)
    └── ConfigError (invalid configuration or selector input)

    CacheReadError (OSError) - cache file unreadable after existence check
    CacheWriteError (OSError) - cache file could not be written

The cache errors subclass OSError so callers that only care about "the
node's state file is broken" can catch the builtin. InterruptedError is never
wrapped.

Example:
    >>> from nodesetup.core.errors import AbortFailure
    >>> try:
    ...     raise AbortFailure(2, script="make install")
    ... except AbortFailure as e:
    ...     print(e.exit_code)
    2
"""

from pathlib import Path


class SetupError(Exception):
    """
    Base exception for node setup errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        """
        Initialize a setup error with message and context.

        Args:
            message: Human-readable error message
            **context: Additional context as keyword arguments
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


class AbortFailure(SetupError):
    """
    Raised when a script run by node setup exits with a nonzero code.

    Terminates the current reconciliation pass. Entries recorded for items
    that succeeded earlier in the pass are still persisted.

    Attributes:
        exit_code: The script's exit code
    """

    def __init__(self, exit_code: int, **context: object) -> None:
        super().__init__(f"Script failed with exit code {exit_code}", **context)
        self.exit_code = exit_code


class DeployError(SetupError):
    """Raised when a deploy step cannot be attempted at all."""


class ConfigError(SetupError):
    """Raised for invalid configuration, setup items or label expressions."""


class CacheReadError(OSError):
    """Raised when the node's cache file exists but cannot be read."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"Cannot read setup cache {path}: {reason}")
        self.path = str(path)


class CacheWriteError(OSError):
    """Raised when the node's cache file cannot be written."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"Cannot write setup cache {path}: {reason}")
        self.path = str(path)
