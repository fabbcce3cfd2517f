"""
Pytest configuration and shared fixtures.

Provides fixtures for local nodes, a recording fake deployer, log sinks and
sample setup items used across the test suite.
"""

from pathlib import Path

import pytest

from nodesetup.core.deploy.models import SetupItem
from nodesetup.core.log import RecordingSink, SetupLog
from nodesetup.core.nodes.local import LocalNode
from nodesetup.core.nodes.models import PlatformFamily

# ==============================================================================
# Fake Deployer
# ==============================================================================


class FakeDeployer:
    """
    Deployer that records calls instead of running anything.

    Exit codes are looked up by script text in `exit_codes`; unknown scripts
    succeed.
    """

    def __init__(self, exit_codes: dict[str, int] | None = None) -> None:
        self.exit_codes = exit_codes or {}
        self.calls: list[tuple[str, str]] = []
        self.envs: list[dict[str, str]] = []

    def run_on_control_side(self, script, node, env):
        self.calls.append(("control", script))
        self.envs.append(env)
        return self.exit_codes.get(script, 0)

    def run_on_target(self, script, target_path, env):
        self.calls.append(("target", script))
        self.envs.append(env)
        return self.exit_codes.get(script, 0)

    def copy_tree(self, source, dest):
        self.calls.append(("copy", str(source)))

    @property
    def scripts(self) -> list[str]:
        """Scripts run on either side, in order."""
        return [script for side, script in self.calls if side != "copy"]


# ==============================================================================
# Node Fixtures
# ==============================================================================


@pytest.fixture
def node_root(tmp_path) -> Path:
    """Provide an empty directory acting as a node root."""
    root = tmp_path / "agent"
    root.mkdir()
    return root


@pytest.fixture
def node(node_root) -> LocalNode:
    """Provide a Unix local node labelled linux and jdk."""
    return LocalNode(
        "agent-1",
        node_root,
        labels={"linux", "jdk"},
        platform=PlatformFamily.UNIX,
        base_env={"PATH": "/usr/bin:/bin"},
    )


@pytest.fixture
def windows_node(node_root) -> LocalNode:
    """Provide a local node using Windows line terminators."""
    return LocalNode(
        "win-agent",
        node_root,
        labels={"windows"},
        platform=PlatformFamily.WINDOWS,
        base_env={},
    )


# ==============================================================================
# Deployer and Log Fixtures
# ==============================================================================


@pytest.fixture
def deployer() -> FakeDeployer:
    """Provide a fake deployer where every script succeeds."""
    return FakeDeployer()


@pytest.fixture
def deployer_cls() -> type[FakeDeployer]:
    """Provide the fake deployer class for tests needing exit codes or subclasses."""
    return FakeDeployer


@pytest.fixture
def sink() -> RecordingSink:
    """Provide a sink recording every forwarded line."""
    return RecordingSink()


@pytest.fixture
def log(sink) -> SetupLog:
    """Provide a debug-enabled log writing to the recording sink."""
    return SetupLog(sink, debug=True)


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================


@pytest.fixture
def sample_items() -> list[SetupItem]:
    """Provide three setup items all matching the default node."""
    return [
        SetupItem(identity="jdk", selector="jdk", version="17", install_script="install-jdk"),
        SetupItem(identity="maven", selector="linux", version="3.9", install_script="install-maven"),
        SetupItem(identity="node", selector="linux", version="20", install_script="install-node"),
    ]
