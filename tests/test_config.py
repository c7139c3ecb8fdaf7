from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from rubigo.config import (
    RubigoConfig,
    discover_config_file,
    load_config,
    _parse_section,
    _pyproject_has_rubigo_section,
    _read_toml,
)
from rubigo.exceptions import ConfigError


@pytest.mark.unit
class TestRubigoConfig:
    """Tests for RubigoConfig dataclass."""

    def test_default_initialization(self) -> None:
        """Test RubigoConfig initializes with correct defaults."""
        config = RubigoConfig()

        assert config.vendor_dir == "vendor"
        assert config.max_workers is None
        assert config.http_timeout is None
        assert config.http_retries == 0
        assert config.vanity_namespaces == ["golang.org/x"]
        assert config.source_path is None

    def test_default_namespaces_are_not_shared(self) -> None:
        """Test each instance gets its own namespace list."""
        first = RubigoConfig()
        first.vanity_namespaces.append("go.uber.org")

        assert RubigoConfig().vanity_namespaces == ["golang.org/x"]

    def test_to_log_dict(self) -> None:
        """Test to_log_dict returns configuration without metadata."""
        config = RubigoConfig(max_workers=4, source_path=Path("/test/path.toml"))

        result = config.to_log_dict()

        assert result == {
            "vendor_dir": "vendor",
            "max_workers": 4,
            "http_timeout": None,
            "http_retries": 0,
            "vanity_namespaces": ["golang.org/x"],
        }
        assert "source_path" not in result


@pytest.mark.unit
class TestDiscoverConfigFile:
    """Tests for discover_config_file function."""

    def test_explicit_path_priority(self, tmp_path: Path) -> None:
        """Test explicit path is used when provided and exists."""
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[rubigo]\n", encoding="utf-8")
        (tmp_path / "rubigo.toml").write_text("[rubigo]\n", encoding="utf-8")

        result = discover_config_file(config_file, tmp_path)

        assert result == config_file.resolve()

    def test_explicit_path_not_found_raises_error(self, tmp_path: Path) -> None:
        """Test ConfigError raised when explicit path doesn't exist."""
        with pytest.raises(ConfigError) as exc_info:
            discover_config_file(tmp_path / "nonexistent.toml")

        assert "not found" in str(exc_info.value).lower()

    def test_discovers_rubigo_toml_in_project_dir(self, tmp_path: Path) -> None:
        """Test rubigo.toml is found in the given project directory."""
        config_file = tmp_path / "rubigo.toml"
        config_file.write_text("[rubigo]\n", encoding="utf-8")

        assert discover_config_file(project_dir=tmp_path) == config_file

    def test_defaults_to_current_directory(self, tmp_path: Path) -> None:
        """Test the current directory is searched when no project dir is given."""
        config_file = tmp_path / "rubigo.toml"
        config_file.write_text("[rubigo]\n", encoding="utf-8")

        with patch("rubigo.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == config_file

    def test_discovers_pyproject_toml_with_section(self, tmp_path: Path) -> None:
        """Test discovers pyproject.toml with [tool.rubigo] section."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("[tool.rubigo]\nmax_workers = 4\n", encoding="utf-8")

        assert discover_config_file(project_dir=tmp_path) == config_file

    def test_ignores_pyproject_toml_without_section(self, tmp_path: Path) -> None:
        """Test ignores pyproject.toml without [tool.rubigo] section."""
        (tmp_path / "pyproject.toml").write_text("[tool.other]\nkey = 'value'\n", encoding="utf-8")

        assert discover_config_file(project_dir=tmp_path) is None

    def test_precedence_order(self, tmp_path: Path) -> None:
        """Test discovery precedence: rubigo.toml before pyproject.toml."""
        rubigo_toml = tmp_path / "rubigo.toml"
        rubigo_toml.write_text("[rubigo]\n", encoding="utf-8")
        (tmp_path / "pyproject.toml").write_text("[tool.rubigo]\n", encoding="utf-8")

        assert discover_config_file(project_dir=tmp_path) == rubigo_toml


@pytest.mark.unit
class TestPyprojectHasRubigoSection:
    """Tests for _pyproject_has_rubigo_section helper."""

    def test_returns_true_when_section_exists(self, tmp_path: Path) -> None:
        """Test returns True when [tool.rubigo] section exists."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("[tool.rubigo]\nhttp_retries = 1\n", encoding="utf-8")

        assert _pyproject_has_rubigo_section(config_file) is True

    def test_returns_false_on_errors(self, tmp_path: Path) -> None:
        """Test returns False gracefully on parse errors or missing files."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("invalid ][[", encoding="utf-8")

        assert _pyproject_has_rubigo_section(config_file) is False
        assert _pyproject_has_rubigo_section(tmp_path / "missing.toml") is False


@pytest.mark.unit
class TestReadToml:
    """Tests for _read_toml helper."""

    def test_raises_error_on_invalid_toml(self, tmp_path: Path) -> None:
        """Test raises ConfigError when TOML is invalid."""
        toml_file = tmp_path / "invalid.toml"
        toml_file.write_text("invalid ][[ toml", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            _read_toml(toml_file)

        assert "Invalid TOML" in str(exc_info.value)

    def test_raises_error_when_file_not_found(self, tmp_path: Path) -> None:
        """Test raises ConfigError when file doesn't exist."""
        with pytest.raises(ConfigError) as exc_info:
            _read_toml(tmp_path / "nonexistent.toml")

        assert "Cannot read" in str(exc_info.value)


@pytest.mark.unit
class TestParseSection:
    """Tests for _parse_section configuration validator."""

    def test_parses_empty_section(self) -> None:
        """Test parsing empty section returns defaults."""
        result = _parse_section({}, config_path="test.toml")

        assert result.vendor_dir == "vendor"
        assert result.max_workers is None

    def test_parses_all_options(self) -> None:
        """Test parsing all configuration options."""
        section = {
            "vendor_dir": "third_party",
            "max_workers": 8,
            "http_timeout": 30,
            "http_retries": 2,
            "vanity_namespaces": ["golang.org/x", "go.uber.org"],
        }

        result = _parse_section(section, config_path="test.toml")

        assert result.vendor_dir == "third_party"
        assert result.max_workers == 8
        assert result.http_timeout == 30.0
        assert result.http_retries == 2
        assert result.vanity_namespaces == ["golang.org/x", "go.uber.org"]

    def test_raises_error_on_unknown_keys(self) -> None:
        """Test raises ConfigError when unknown keys are present."""
        with pytest.raises(ConfigError) as exc_info:
            _parse_section({"unknown_key": "value"}, config_path="test.toml")

        assert "Unknown configuration keys" in str(exc_info.value)
        assert "unknown_key" in str(exc_info.value)

    @pytest.mark.parametrize(
        "key,value",
        [
            ("vendor_dir", ""),
            ("vendor_dir", 3),
            ("vendor_dir", "../shared"),
            ("vendor_dir", "/opt/vendor"),
            ("max_workers", 0),
            ("max_workers", True),
            ("max_workers", "4"),
            ("http_timeout", 0),
            ("http_timeout", False),
            ("http_retries", -1),
            ("http_retries", 1.5),
            ("vanity_namespaces", "golang.org/x"),
            ("vanity_namespaces", ["golang.org/x", ""]),
        ],
    )
    def test_rejects_invalid_values(self, key: str, value: object) -> None:
        """Test ConfigError names the offending option."""
        with pytest.raises(ConfigError) as exc_info:
            _parse_section({key: value}, config_path="test.toml")

        assert exc_info.value.details["option"] == key


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config main function."""

    def test_returns_defaults_when_no_config_found(self, tmp_path: Path) -> None:
        """Test returns defaults when no configuration file exists."""
        result = load_config(project_dir=tmp_path)

        assert result == RubigoConfig()
        assert result.source_path is None

    def test_loads_rubigo_toml(self, tmp_path: Path) -> None:
        """Test loads configuration from rubigo.toml."""
        config_file = tmp_path / "rubigo.toml"
        config_file.write_text("[rubigo]\nmax_workers = 3\n", encoding="utf-8")

        result = load_config(project_dir=tmp_path)

        assert result.max_workers == 3
        assert result.source_path == config_file

    def test_loads_pyproject_toml(self, tmp_path: Path) -> None:
        """Test loads configuration from pyproject.toml."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("[tool.rubigo]\nvendor_dir = \"deps\"\n", encoding="utf-8")

        result = load_config(project_dir=tmp_path)

        assert result.vendor_dir == "deps"
        assert result.source_path == config_file

    def test_loads_explicit_config_path(self, tmp_path: Path) -> None:
        """Test loads configuration from explicitly specified path."""
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[rubigo]\nhttp_retries = 3\n", encoding="utf-8")

        result = load_config(config_file)

        assert result.http_retries == 3
        assert result.source_path == config_file.resolve()

    def test_handles_empty_rubigo_section(self, tmp_path: Path) -> None:
        """Test handles empty [rubigo] section gracefully."""
        config_file = tmp_path / "rubigo.toml"
        config_file.write_text("[rubigo]\n", encoding="utf-8")

        result = load_config(project_dir=tmp_path)

        assert result.vendor_dir == "vendor"
        assert result.source_path == config_file

    def test_raises_error_on_unknown_keys(self, tmp_path: Path) -> None:
        """Test raises ConfigError when config contains unknown keys."""
        (tmp_path / "rubigo.toml").write_text("[rubigo]\nunknown_option = true\n", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            load_config(project_dir=tmp_path)

        assert "Unknown configuration keys" in str(exc_info.value)
