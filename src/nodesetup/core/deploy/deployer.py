"""
Deploy transport.

The reconciler reaches script execution and file copying through the
Deployer protocol. Script runs return the exit code; the reconciler turns
any nonzero code into an AbortFailure.

LocalDeployer runs scripts through the local shell with subprocess and copies
bundles with shutil. It serves nodes whose root is reachable on the local
filesystem (see LocalNode).

Usage:
    from nodesetup.core.deploy import LocalDeployer

    deployer = LocalDeployer(log=log, timeout_seconds=600)
    code = deployer.run_on_target("./install.sh", node.root, node.environment())
"""

import logging
import shutil
import subprocess
import time
from pathlib import Path
from typing import Protocol, runtime_checkable

from nodesetup.core.errors import DeployError
from nodesetup.core.log import SetupLog
from nodesetup.core.nodes.models import control_platform
from nodesetup.core.nodes.provider import NodeContext

logger = logging.getLogger(__name__)


@runtime_checkable
class Deployer(Protocol):
    """Protocol for deploy transports."""

    def run_on_control_side(
        self, script: str, node: NodeContext, env: dict[str, str]
    ) -> int:
        """
        Run a script on the control side on behalf of a node.

        Args:
            script: Script text
            node: Node the script prepares
            env: Environment for the script

        Returns:
            Exit code
        """
        ...

    def run_on_target(self, script: str, target_path: str, env: dict[str, str]) -> int:
        """
        Run a script on the node with target_path as working directory.

        Args:
            script: Script text
            target_path: Node-side working directory
            env: Environment for the script

        Returns:
            Exit code
        """
        ...

    def copy_tree(self, source: Path, dest: str) -> None:
        """
        Copy the contents of a control-side directory into a node directory.

        Raises:
            DeployError: If the source directory does not exist
        """
        ...


class LocalDeployer:
    """
    Deployer running everything on the local machine.

    Script output is forwarded line by line to the log. A script that times
    out or cannot be started reports exit code -1.

    Attributes:
        log: Log receiving script output
        work_dir: Working directory for control-side scripts
        timeout_seconds: Per-script timeout (None waits indefinitely)
    """

    def __init__(
        self,
        log: SetupLog | None = None,
        work_dir: Path | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self.log = log or SetupLog()
        self.work_dir = work_dir or Path.cwd()
        self.timeout_seconds = timeout_seconds

    def run_on_control_side(
        self, script: str, node: NodeContext, env: dict[str, str]
    ) -> int:
        self.log.debug(f"Running prepare script for {node.name} in {self.work_dir}")
        return self._run(script, self.work_dir, env)

    def run_on_target(self, script: str, target_path: str, env: dict[str, str]) -> int:
        self.log.debug(f"Running script in {target_path}")
        return self._run(script, Path(target_path), env)

    def copy_tree(self, source: Path, dest: str) -> None:
        if not source.is_dir():
            raise DeployError(f"Bundle directory not found: {source}", source=str(source))
        self.log.debug(f"Copying {source} to {dest}")
        shutil.copytree(source, dest, dirs_exist_ok=True)

    def _run(self, script: str, cwd: Path, env: dict[str, str]) -> int:
        """
        Execute a script through the local shell.

        Args:
            script: Script text
            cwd: Working directory
            env: Environment

        Returns:
            Exit code, or -1 if the script timed out or could not start
        """
        command = [*control_platform().shell, script]
        start_time = time.time()
        try:
            result = subprocess.run(
                command,
                cwd=str(cwd),
                env=env,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            duration = time.time() - start_time
            logger.warning("Script timed out after %.1fs: %s", duration, script)
            self.log.info(f"Script timed out after {self.timeout_seconds}s")
            return -1
        except InterruptedError:
            raise
        except OSError as e:
            logger.error("Failed to start script %r: %s", script, e)
            self.log.info(f"Failed to start script: {e}")
            return -1

        for line in (result.stdout + result.stderr).splitlines():
            self.log.info(line)

        logger.debug(
            "Script exited with %d in %.2fs", result.returncode, time.time() - start_time
        )
        return result.returncode
