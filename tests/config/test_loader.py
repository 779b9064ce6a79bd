"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- load_config() precedence: kwargs > env vars > yaml > defaults
- derived paths on TablePlaneConfig
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tableplane.config.loader import _load_yaml, load_config
from tableplane.config.models import IndexerConfig, LoggingConfig
from tableplane.core.errors import ConfigError, ErrorCode


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        """Returns empty dict when file doesn't exist."""
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        """Loads valid YAML content."""
        config_file = tmp_path / "tableplane.yaml"
        config_file.write_text("repository:\n  sub_path: db\n")

        assert _load_yaml(config_file) == {"repository": {"sub_path": "db"}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        """Returns empty dict for empty YAML file."""
        config_file = tmp_path / "tableplane.yaml"
        config_file.write_text("")

        assert _load_yaml(config_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        """Raises ConfigError for invalid YAML syntax."""
        config_file = tmp_path / "tableplane.yaml"
        config_file.write_text("invalid: yaml: content: [")

        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(config_file)
        assert exc_info.value.code is ErrorCode.CONFIG_PARSE_ERROR

    def test_raises_config_error_for_non_mapping(self, tmp_path: Path) -> None:
        """A top-level list is not a config."""
        config_file = tmp_path / "tableplane.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError):
            _load_yaml(config_file)


class TestLoadConfig:
    """Tests for load_config function."""

    @pytest.fixture(autouse=True)
    def _isolated_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        for name in ("TABLEPLANE__LOGGING__LEVEL", "TABLEPLANE__SERVER__PORT"):
            monkeypatch.delenv(name, raising=False)

    def test_returns_default_config_when_no_files(self) -> None:
        """Returns default config when no config file exists."""
        config = load_config()

        assert config.logging.level == "INFO"
        assert config.repository.sub_path == ""
        assert config.indexer.indexing_version == "0.0.0"
        assert config.indexer.isolate_failures is True
        assert config.indexer.skip_unchanged is False

    def test_loads_default_file_from_cwd(self, tmp_path: Path) -> None:
        """tableplane.yaml in the working directory is picked up."""
        (tmp_path / "tableplane.yaml").write_text(
            "logging:\n  level: DEBUG\nrepository:\n  sub_path: /db/\n"
        )

        config = load_config()

        assert config.logging.level == "DEBUG"
        assert config.repository.sub_path == "db"

    def test_loads_explicit_path(self, tmp_path: Path) -> None:
        """An explicit config path is read instead of the default."""
        custom = tmp_path / "conf" / "custom.yaml"
        custom.parent.mkdir()
        custom.write_text("server:\n  port: 9000\n")

        config = load_config(custom)

        assert config.server.port == 9000

    def test_missing_explicit_path_raises(self, tmp_path: Path) -> None:
        """A named config file that does not exist is an error."""
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path / "absent.yaml")
        assert exc_info.value.code is ErrorCode.CONFIG_PARSE_ERROR

    def test_env_vars_override_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment variables override YAML config."""
        (tmp_path / "tableplane.yaml").write_text("logging:\n  level: INFO\n")
        monkeypatch.setenv("TABLEPLANE__LOGGING__LEVEL", "WARNING")

        config = load_config()

        assert config.logging.level == "WARNING"

    def test_kwargs_override_all(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Keyword arguments override everything."""
        monkeypatch.setenv("TABLEPLANE__LOGGING__LEVEL", "WARNING")

        config = load_config(
            logging=LoggingConfig(level="ERROR"),
            indexer=IndexerConfig(max_workers=4),
        )

        assert config.logging.level == "ERROR"
        assert config.indexer.max_workers == 4

    def test_raises_config_error_for_invalid_value(self, tmp_path: Path) -> None:
        """Raises ConfigError naming the dotted field for invalid values."""
        (tmp_path / "tableplane.yaml").write_text("server:\n  port: 70000\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config()

        assert exc_info.value.code is ErrorCode.CONFIG_INVALID_VALUE
        assert exc_info.value.details["field"].startswith("server.port")


class TestDerivedPaths:
    """Tests for repo_root and db_path properties."""

    @pytest.fixture(autouse=True)
    def _isolated_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

    def test_relative_db_path_resolves_under_repo(self, tmp_path: Path) -> None:
        config = load_config(repository={"path": str(tmp_path)})

        assert config.repo_root == tmp_path.resolve()
        assert config.db_path == tmp_path.resolve() / ".tableplane" / "index.db"

    def test_absolute_db_path_kept(self, tmp_path: Path) -> None:
        db_file = tmp_path / "elsewhere" / "index.db"

        config = load_config(repository={"path": str(tmp_path)}, database={"path": str(db_file)})

        assert config.db_path == db_file
