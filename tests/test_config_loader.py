"""
Tests for configuration loading.

Tests layered merging of defaults, the JSON config file and NODESETUP_*
environment variables.
"""

import json
from pathlib import Path

import pytest

from nodesetup.core.config import (
    CacheConfig,
    SetupConfig,
    apply_env_overrides,
    deep_merge,
    get_default_config,
    load_config,
    load_json_file,
)
from nodesetup.core.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep NODESETUP_* variables from the host out of the tests."""
    for name in (
        "NODESETUP_DEBUG",
        "NODESETUP_CACHE_FILENAME",
        "NODESETUP_CLEANUP_MAX_AGE_DAYS",
    ):
        monkeypatch.delenv(name, raising=False)


def write_config(tmp_path: Path, data) -> Path:
    path = tmp_path / "nodesetup.json"
    path.write_text(json.dumps(data))
    return path


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_simple_merge(self):
        """Override values replace base values."""
        assert deep_merge({"a": 1, "b": 2}, {"b": 3}) == {"a": 1, "b": 3}

    def test_nested_merge(self):
        """Nested dicts are merged, not replaced."""
        base = {"cleanup": {"enabled": True, "max_age_days": 10}}
        override = {"cleanup": {"max_age_days": 3}}

        assert deep_merge(base, override) == {"cleanup": {"enabled": True, "max_age_days": 3}}

    def test_lists_replaced(self):
        """Lists are replaced as a whole."""
        assert deep_merge({"items": [1, 2]}, {"items": [3]}) == {"items": [3]}

    def test_base_not_mutated(self):
        """The inputs are left untouched."""
        base = {"cache": {"filename": "a"}}
        deep_merge(base, {"cache": {"filename": "b"}})
        assert base == {"cache": {"filename": "a"}}


class TestLoadJsonFile:
    """Tests for load_json_file function."""

    def test_valid_file(self, tmp_path):
        """A JSON object is returned as a dict."""
        path = write_config(tmp_path, {"debug": True})
        assert load_json_file(path) == {"debug": True}

    def test_missing_file(self, tmp_path):
        """A missing file raises ConfigError."""
        with pytest.raises(ConfigError):
            load_json_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Malformed JSON raises ConfigError carrying the path."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(ConfigError) as exc_info:
            load_json_file(path)

        assert exc_info.value.context["path"] == str(path)

    def test_non_object(self, tmp_path):
        """Top-level arrays are rejected."""
        path = write_config(tmp_path, [1, 2])
        with pytest.raises(ConfigError):
            load_json_file(path)


class TestEnvOverrides:
    """Tests for apply_env_overrides function."""

    def test_no_env(self):
        """Without env vars the dict is unchanged."""
        config = get_default_config()
        assert apply_env_overrides(config) == config

    @pytest.mark.parametrize(
        "value,expected",
        [("1", True), ("true", True), ("0", False), ("false", False), ("False", False)],
    )
    def test_debug(self, monkeypatch, value, expected):
        """NODESETUP_DEBUG toggles debug output."""
        monkeypatch.setenv("NODESETUP_DEBUG", value)
        assert apply_env_overrides({})["debug"] is expected

    def test_cache_filename(self, monkeypatch):
        """NODESETUP_CACHE_FILENAME keeps other cache settings."""
        monkeypatch.setenv("NODESETUP_CACHE_FILENAME", "setup.ini")
        result = apply_env_overrides({"cache": {"filename": "old.ini"}})
        assert result["cache"] == {"filename": "setup.ini"}

    def test_cleanup_age(self, monkeypatch):
        """NODESETUP_CLEANUP_MAX_AGE_DAYS is parsed as an int."""
        monkeypatch.setenv("NODESETUP_CLEANUP_MAX_AGE_DAYS", "3")
        result = apply_env_overrides({"cleanup": {"enabled": False}})
        assert result["cleanup"] == {"enabled": False, "max_age_days": 3}

    def test_invalid_cleanup_age_ignored(self, monkeypatch):
        """Non-numeric ages are ignored."""
        monkeypatch.setenv("NODESETUP_CLEANUP_MAX_AGE_DAYS", "soon")
        assert "cleanup" not in apply_env_overrides({})


class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults(self):
        """Without a file the defaults apply."""
        config = load_config()

        assert isinstance(config, SetupConfig)
        assert config.items == []
        assert config.debug is False
        assert config.cache.filename == "slave_setup.ini"
        assert config.cleanup.max_age_days == 10

    def test_file_values(self, tmp_path):
        """File values override defaults."""
        path = write_config(
            tmp_path,
            {
                "debug": True,
                "cleanup": {"max_age_days": 5},
                "items": [
                    {"identity": "jdk", "selector": "linux", "version": "17",
                     "install_script": "install-jdk"},
                ],
            },
        )

        config = load_config(path)

        assert config.debug is True
        assert config.cleanup.max_age_days == 5
        assert config.cleanup.enabled is True
        assert [item.component for item in config.items] == ["jdk"]

    def test_env_beats_file(self, tmp_path, monkeypatch):
        """Environment variables take precedence over the file."""
        path = write_config(tmp_path, {"cache": {"filename": "file.ini"}})
        monkeypatch.setenv("NODESETUP_CACHE_FILENAME", "env.ini")

        assert load_config(path).cache.filename == "env.ini"

    def test_relative_paths_resolved(self, tmp_path):
        """Relative bundle and env file paths are anchored at the config file."""
        path = write_config(
            tmp_path,
            {
                "env_files": ["node.env", "/etc/nodesetup.env"],
                "items": [
                    {"identity": "a", "version": "1", "files_dir": "bundles/a"},
                    {"identity": "b", "version": "1", "files_dir": "/srv/b"},
                ],
            },
        )

        config = load_config(path)

        assert config.env_files == [tmp_path / "node.env", Path("/etc/nodesetup.env")]
        assert config.items[0].files_dir == tmp_path / "bundles" / "a"
        assert config.items[1].files_dir == Path("/srv/b")

    def test_unknown_key(self, tmp_path):
        """Unknown top-level keys raise ConfigError."""
        path = write_config(tmp_path, {"colour": "blue"})
        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_item(self, tmp_path):
        """Items without a version raise ConfigError."""
        path = write_config(tmp_path, {"items": [{"identity": "a"}]})

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)

        assert exc_info.value.context["source"] == str(path)

    def test_invalid_env_override(self, monkeypatch):
        """Bad env values surface as ConfigError."""
        monkeypatch.setenv("NODESETUP_CACHE_FILENAME", "../escape.ini")
        with pytest.raises(ConfigError):
            load_config()


class TestCacheConfig:
    """Tests for CacheConfig model."""

    @pytest.mark.parametrize("filename", ["slave_setup.ini", "state/setup.ini"])
    def test_valid(self, filename):
        """Relative names are accepted."""
        assert CacheConfig(filename=filename).filename == filename

    @pytest.mark.parametrize("filename", ["", "/etc/setup.ini", "\\setup.ini", "../setup.ini"])
    def test_invalid(self, filename):
        """Empty, absolute and escaping names are rejected."""
        with pytest.raises(ValueError):
            CacheConfig(filename=filename)
