"""Tests for configuration schema and loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from cratesmith.config import CratesmithConfig, ReleaseConfig, SemverConfig, load_config
from cratesmith.config.loader import CONFIG_ENV_VAR, find_config
from cratesmith.errors import ConfigurationError


class TestCratesmithConfig:
    """Tests for CratesmithConfig."""

    def test_defaults(self) -> None:
        """Every field has a usable default."""
        config = CratesmithConfig()
        assert config.namespaces == ["embassy-", "cyw43"]
        assert config.ignore_dirs == ["target"]
        assert config.metadata_key == "embassy"
        assert config.release.tag_format == "{name}-v{version}"
        assert config.semver.toolchain == "nightly-2025-06-29"
        assert config.manifest_lint.edition == "2024"

    def test_empty_namespaces_rejected(self) -> None:
        """At least one namespace prefix is required."""
        with pytest.raises(ValidationError):
            CratesmithConfig(namespaces=[])

    def test_unknown_keys_rejected(self) -> None:
        """Typos in the config file are errors."""
        with pytest.raises(ValidationError):
            CratesmithConfig.model_validate({"namespace": ["x-"]})

    def test_ignored_dir_case_insensitive(self) -> None:
        """Ignored directory names match regardless of case."""
        config = CratesmithConfig()
        assert config.is_ignored_dir("target")
        assert config.is_ignored_dir("TARGET")
        assert not config.is_ignored_dir("src")


class TestReleaseConfig:
    """Tests for ReleaseConfig."""

    def test_tag_format_requires_version(self) -> None:
        """A tag format without the version would produce clashing tags."""
        with pytest.raises(ValidationError):
            ReleaseConfig(tag_format="{name}")

    def test_custom_tag_format(self) -> None:
        """Custom formats are accepted."""
        config = ReleaseConfig(tag_format="{name}@{version}")
        assert config.tag_format.format(name="a", version="1.0.0") == "a@1.0.0"


class TestSemverConfig:
    """Tests for SemverConfig."""

    def test_timeout_must_be_positive(self) -> None:
        """Download timeouts must be positive."""
        with pytest.raises(ValidationError):
            SemverConfig(timeout=0)


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_gives_defaults(self, temp_dir: Path) -> None:
        """No config file means defaults."""
        assert load_config(temp_dir) == CratesmithConfig()

    def test_empty_file_gives_defaults(self, temp_dir: Path) -> None:
        """An empty file means defaults."""
        (temp_dir / "cratesmith.yaml").write_text("")
        assert load_config(temp_dir) == CratesmithConfig()

    def test_loads_values(self, temp_dir: Path) -> None:
        """Values from the YAML file override defaults."""
        (temp_dir / "cratesmith.yaml").write_text(
            "namespaces: [acme-]\n"
            "release:\n"
            "  commit_message: 'release: crates'\n"
            "semver:\n"
            "  build_std: []\n"
        )
        config = load_config(temp_dir)
        assert config.namespaces == ["acme-"]
        assert config.release.commit_message == "release: crates"
        assert config.semver.build_std == []
        assert config.metadata_key == "embassy"

    def test_invalid_yaml(self, temp_dir: Path) -> None:
        """Broken YAML is a configuration error."""
        (temp_dir / "cratesmith.yaml").write_text("namespaces: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(temp_dir)

    def test_non_mapping(self, temp_dir: Path) -> None:
        """The top level must be a mapping."""
        (temp_dir / "cratesmith.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(temp_dir)

    def test_validation_error_includes_path(self, temp_dir: Path) -> None:
        """Schema errors name the offending file."""
        path = temp_dir / "cratesmith.yaml"
        path.write_text("metadata_key: [1, 2]\n")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(temp_dir)
        assert exc_info.value.path == path

    def test_env_override(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """CRATESMITH_CONFIG points at an alternate file."""
        alt = temp_dir / "alt.yaml"
        alt.write_text("metadata_key: acme\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, "alt.yaml")
        assert find_config(temp_dir) == alt
        assert load_config(temp_dir).metadata_key == "acme"

    def test_env_override_missing(
        self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A missing override file is an error rather than silently ignored."""
        monkeypatch.setenv(CONFIG_ENV_VAR, str(temp_dir / "nope.yaml"))
        with pytest.raises(ConfigurationError, match="not found"):
            find_config(temp_dir)
