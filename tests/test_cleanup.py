"""
Tests for the cleanup service.

Tests the temporary file purge that runs on nodes and the control side,
gated by platform family.
"""

from pathlib import Path

import pytest

from nodesetup.core.cleanup import (
    Cleaner,
    CleanupResult,
    NoopCleanupStrategy,
    UnixCleanupStrategy,
    get_strategy,
)
from nodesetup.core.config.models import CleanupConfig
from nodesetup.core.errors import AbortFailure
from nodesetup.core.nodes import LocalNode, PlatformFamily


class TestCleanupConfig:
    """Tests for CleanupConfig model."""

    def test_default_config(self):
        """Default config should have sensible values."""
        config = CleanupConfig()

        assert config.enabled is True
        assert config.temp_dir == "/tmp"
        assert config.pattern == "*jenkins*.sh"
        assert config.max_age_days == 10

    def test_negative_age_rejected(self):
        """Ages cannot be negative."""
        with pytest.raises(ValueError):
            CleanupConfig(max_age_days=-1)


class TestCleanupStrategies:
    """Tests for platform cleanup strategies."""

    def test_strategy_per_platform(self):
        """Unix gets find(1); Windows gets nothing."""
        assert isinstance(get_strategy(PlatformFamily.UNIX), UnixCleanupStrategy)
        assert isinstance(get_strategy(PlatformFamily.WINDOWS), NoopCleanupStrategy)

    def test_unix_command(self):
        """The find command targets old matching files in the temp dir."""
        command = UnixCleanupStrategy().command(CleanupConfig(max_age_days=3))

        assert command == "find /tmp -maxdepth 1 -type f -name '*jenkins*.sh' -atime +3 -delete"

    def test_unix_command_quotes_paths(self):
        """Paths with spaces are quoted."""
        command = UnixCleanupStrategy().command(CleanupConfig(temp_dir="/var/my tmp"))
        assert "'/var/my tmp'" in command

    def test_noop_command(self):
        """Windows has no cleanup command."""
        assert NoopCleanupStrategy().command(CleanupConfig()) is None


class TestCleanupResult:
    """Tests for CleanupResult dataclass."""

    def test_empty_result(self):
        """Empty result should report no actions."""
        assert CleanupResult().summary() == "No cleanup actions needed"

    def test_summary(self):
        """Summary should report both sides."""
        summary = CleanupResult(target_cleaned=True, control_cleaned=True).summary()
        assert "on node" in summary
        assert "on control side" in summary


class TestCleaner:
    """Tests for Cleaner."""

    def test_unix_node_and_control(self, node, deployer, log, sink):
        """Both sides are cleaned when both are Unix."""
        cleaner = Cleaner(node, deployer, CleanupConfig(), log=log, control=PlatformFamily.UNIX)

        result = cleaner.clean()

        assert result.target_cleaned and result.control_cleaned
        assert [side for side, _ in deployer.calls] == ["target", "control"]
        assert "Clearing temporary data on agent-1" in sink
        assert "Finished removing temporary data" in sink

    def test_windows_control_side_skipped(self, node, deployer):
        """A Windows control side runs no local cleanup."""
        result = Cleaner(node, deployer, CleanupConfig(), control=PlatformFamily.WINDOWS).clean()

        assert result.target_cleaned is True
        assert result.control_cleaned is False
        assert [side for side, _ in deployer.calls] == ["target"]

    def test_node_gated_by_root_path(self, deployer):
        """Nodes whose root is not a Unix absolute path are not cleaned."""
        node = LocalNode("win", Path("C:\\agent"), base_env={})

        result = Cleaner(node, deployer, CleanupConfig(), control=PlatformFamily.UNIX).clean()

        assert result.target_cleaned is False
        assert [side for side, _ in deployer.calls] == ["control"]

    def test_disabled(self, node, deployer):
        """Disabled cleanup does nothing."""
        result = Cleaner(node, deployer, CleanupConfig(enabled=False)).clean()

        assert result == CleanupResult()
        assert deployer.calls == []

    def test_failure_raises_abort(self, node, deployer_cls):
        """A failing cleanup command aborts the cleanup step."""
        command = UnixCleanupStrategy().command(CleanupConfig())
        deployer = deployer_cls({command: 2})

        with pytest.raises(AbortFailure) as exc_info:
            Cleaner(node, deployer, CleanupConfig(), control=PlatformFamily.UNIX).clean()

        assert exc_info.value.exit_code == 2
        assert exc_info.value.context["step"] == "cleanup"
        assert len(deployer.calls) == 1

    def test_env_files_layered(self, node, deployer, tmp_path):
        """Cleanup commands see extra dotenv values."""
        env_file = tmp_path / "cleanup.env"
        env_file.write_text("TMPDIR=/scratch\n")

        Cleaner(
            node, deployer, CleanupConfig(), control=PlatformFamily.UNIX, env_files=[env_file]
        ).clean()

        assert [env["TMPDIR"] for env in deployer.envs] == ["/scratch", "/scratch"]
