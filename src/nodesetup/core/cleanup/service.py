"""
Temporary file cleanup service.

Removes stale script files that deploys leave in the temp directory:
- on the node, when its root is a Unix absolute path
- on the control side, when it runs a Unix-like OS

Each side gets a CleanupStrategy picked from its PlatformFamily. Windows has
no cleanup command, so its strategy does nothing.
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from nodesetup.core.errors import AbortFailure
from nodesetup.core.log import SetupLog
from nodesetup.core.nodes.environment import node_environment
from nodesetup.core.nodes.models import PlatformFamily, control_platform

if TYPE_CHECKING:
    from nodesetup.core.config.models import CleanupConfig
    from nodesetup.core.deploy.deployer import Deployer
    from nodesetup.core.nodes.provider import NodeContext

logger = logging.getLogger(__name__)


class CleanupStrategy(Protocol):
    """Builds the cleanup command for one platform family."""

    def command(self, config: CleanupConfig) -> str | None:
        """Return the command to run, or None when there is nothing to do."""
        ...


class UnixCleanupStrategy:
    """Removes matching files with find(1)."""

    def command(self, config: CleanupConfig) -> str | None:
        return (
            f"find {shlex.quote(config.temp_dir)} -maxdepth 1 -type f"
            f" -name {shlex.quote(config.pattern)}"
            f" -atime +{config.max_age_days} -delete"
        )


class NoopCleanupStrategy:
    """Platforms without a cleanup command."""

    def command(self, config: CleanupConfig) -> str | None:
        return None


_STRATEGIES: dict[PlatformFamily, CleanupStrategy] = {
    PlatformFamily.UNIX: UnixCleanupStrategy(),
    PlatformFamily.WINDOWS: NoopCleanupStrategy(),
}


def get_strategy(platform: PlatformFamily) -> CleanupStrategy:
    """Return the cleanup strategy for a platform family."""
    return _STRATEGIES[platform]


@dataclass
class CleanupResult:
    """Results of a cleanup operation."""

    # Whether the node-side command ran
    target_cleaned: bool = False

    # Whether the control-side command ran
    control_cleaned: bool = False

    def summary(self) -> str:
        """Generate a human-readable summary of the cleanup."""
        parts = []
        if self.target_cleaned:
            parts.append("Cleared temporary data on node")
        if self.control_cleaned:
            parts.append("Cleared temporary data on control side")
        if not parts:
            return "No cleanup actions needed"
        return ", ".join(parts)


class Cleaner:
    """
    Best-effort purge of stale temporary files.

    Runs through the same Deployer as reconciliation. A nonzero exit raises
    AbortFailure and stops the cleanup; callers running cleanup next to a
    reconciliation decide whether that failure matters.

    Example:
        >>> cleaner = Cleaner(node, LocalDeployer(), CleanupConfig(), log=log)
        >>> print(cleaner.clean().summary())
        Cleared temporary data on node, Cleared temporary data on control side
    """

    def __init__(
        self,
        node: NodeContext,
        deployer: Deployer,
        config: CleanupConfig,
        log: SetupLog | None = None,
        control: PlatformFamily | None = None,
        env_files: Sequence[Path] = (),
    ):
        """
        Initialize the cleaner.

        Args:
            node: Node to clean
            deployer: Transport used to run the cleanup commands
            config: Cleanup settings
            log: Log sink
            control: Control side OS family (detected if None)
            env_files: Extra dotenv files layered under the node environment
        """
        self.node = node
        self.deployer = deployer
        self.config = config
        self.log = log or SetupLog()
        self.control = control or control_platform()
        self.env_files = tuple(env_files)

    def clean(self) -> CleanupResult:
        """
        Remove stale temporary files on the node and the control side.

        Returns:
            CleanupResult describing which sides were cleaned

        Raises:
            AbortFailure: If a cleanup command exits nonzero
        """
        result = CleanupResult()
        if not self.config.enabled:
            return result

        env = node_environment(self.node, self.env_files)

        # Node family comes from the shape of its root path
        target_command = get_strategy(
            PlatformFamily.from_root_path(self.node.root)
        ).command(self.config)
        if target_command:
            self.log.info(f"Clearing temporary data on {self.node.name}")
            self._validate_response(
                self.deployer.run_on_target(target_command, self.node.root, env)
            )
            result.target_cleaned = True

        control_command = get_strategy(self.control).command(self.config)
        if control_command:
            self.log.info("Clearing temporary data on control side")
            self._validate_response(
                self.deployer.run_on_control_side(control_command, self.node, env)
            )
            result.control_cleaned = True

        self.log.debug("Finished removing temporary data")
        return result

    def _validate_response(self, code: int) -> None:
        if code != 0:
            self.log.info(f"Script failed with exit code {code}")
            raise AbortFailure(code, step="cleanup")
