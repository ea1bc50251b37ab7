"""
Unit tests for compiler configuration.
"""

import json

import pytest
from pydantic import ValidationError

from layout_schema.config import CompilerConfig, load_config


class TestCompilerConfig:
    """Test configuration defaults and validation."""

    def test_defaults(self):
        """Test the conventional settings."""
        config = CompilerConfig()

        assert config.entry_names == ["Schema", "slideSchema", "SlideSchema"]
        assert config.name_suffix == "Schema"
        assert config.builder_namespace == "z"
        assert config.container_hint == "slide"
        assert config.max_depth == 32

    def test_defaults_are_not_shared(self):
        """Test that each config gets its own entry list."""
        first = CompilerConfig()
        first.entry_names.append("Extra")
        assert CompilerConfig().entry_names == ["Schema", "slideSchema", "SlideSchema"]

    def test_invalid_values(self):
        """Test rejected settings."""
        with pytest.raises(ValidationError):
            CompilerConfig(entry_names=[])
        with pytest.raises(ValidationError):
            CompilerConfig(entry_names=["not a name"])
        with pytest.raises(ValidationError):
            CompilerConfig(builder_namespace="z.")
        with pytest.raises(ValidationError):
            CompilerConfig(max_depth=0)


class TestLoadConfig:
    """Test loading configuration files."""

    def test_load(self, tmp_path):
        """Test loading a partial config file."""
        path = tmp_path / "layout-schema.json"
        path.write_text(json.dumps({"entry_names": ["CardSchema"], "max_depth": 8}))

        config = load_config(path)

        assert config.entry_names == ["CardSchema"]
        assert config.max_depth == 8
        assert config.name_suffix == "Schema"

    def test_missing_file(self, tmp_path):
        """Test a path that does not exist."""
        with pytest.raises(ValueError, match="not found"):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Test a file that is not JSON."""
        path = tmp_path / "broken.json"
        path.write_text("{entry_names: }")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_config(path)

    def test_invalid_settings(self, tmp_path):
        """Test a JSON file with rejected settings."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"max_depth": -1}))
        with pytest.raises(ValueError):
            load_config(path)
