"""
Line-oriented logging sink for reconciliation passes.

Each Reconciler (and Cleaner) receives a SetupLog at construction instead of
reaching for process-wide state. A SetupLog forwards lines to an optional
sink callable; debug lines are only forwarded when the log was created with
debug enabled. With no sink, lines are dropped.

Every line is also emitted through the stdlib logger of this module, so
applications that configure `logging` still see them.

Usage:
    from rich.console import Console
    from nodesetup.core.log import SetupLog, console_sink

    log = SetupLog(console_sink(Console()), debug=True)
    log.info("Installing jdk")
    log.debug("Cache contains 3 entries")
"""

import logging
import sys
from collections.abc import Callable

from rich.console import Console

logger = logging.getLogger(__name__)

LineSink = Callable[[str], None]


class SetupLog:
    """
    Injected logging capability with a debug switch.

    Attributes:
        sink: Callable receiving one line per message, or None
        debug_enabled: Whether debug lines are forwarded to the sink
    """

    def __init__(self, sink: LineSink | None = None, debug: bool = False) -> None:
        self.sink = sink
        self.debug_enabled = debug

    def info(self, message: str) -> None:
        """Forward an informational line to the sink."""
        logger.info(message)
        if self.sink is not None:
            self.sink(message)

    def debug(self, message: str) -> None:
        """Forward a debug line to the sink if debug is enabled."""
        logger.debug(message)
        if self.debug_enabled and self.sink is not None:
            self.sink(message)


class RecordingSink:
    """Sink that keeps every line it receives. Handy for callers and tests."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def __call__(self, line: str) -> None:
        self.lines.append(line)

    def __contains__(self, text: object) -> bool:
        return any(str(text) in line for line in self.lines)


def console_sink(console: Console | None = None) -> LineSink:
    """
    Build a sink that prints lines to a rich Console.

    Markup is disabled so script output containing brackets is printed
    verbatim.

    Args:
        console: Console to print to (defaults to a new stdout Console)

    Returns:
        Sink callable
    """
    target = console or Console()

    def _print(line: str) -> None:
        target.print(line, markup=False, highlight=False)

    return _print


def configure_logging(debug: bool = False) -> None:
    """
    Configure stdlib logging for node setup.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
