"""Tests for shared YAML loader utilities."""

from pathlib import Path

import pytest

from persona_engine.config.loader import ConfigLoadError, load_yaml_file


class TestLoadYamlFile:
    """Test shared YAML loading utility."""

    def test_load_valid_yaml(self, tmp_path: Path) -> None:
        """Test loading a valid YAML file."""
        yaml_file = tmp_path / "test.yaml"
        yaml_file.write_text(
            """
models:
  - id: tiny
    name: Tiny
settings:
  retries: 3
"""
        )

        result = load_yaml_file(yaml_file)

        assert result == {
            "models": [{"id": "tiny", "name": "Tiny"}],
            "settings": {"retries": 3},
        }

    def test_load_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert load_yaml_file(yaml_file) == {}

    def test_load_comments_only(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "comments.yaml"
        yaml_file.write_text("# Just comments\n# No actual content")

        assert load_yaml_file(yaml_file) == {}

    def test_load_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="not found"):
            load_yaml_file(tmp_path / "nonexistent.yaml")

    def test_load_invalid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("invalid: yaml: content: [unclosed")

        with pytest.raises(ConfigLoadError, match="Failed to parse YAML"):
            load_yaml_file(yaml_file)

    def test_top_level_list_rejected(self, tmp_path: Path) -> None:
        """Test that a document that is not a mapping is rejected."""
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- one\n- two\n")

        with pytest.raises(ConfigLoadError, match="Expected a mapping"):
            load_yaml_file(yaml_file)

    def test_custom_error_class(self, tmp_path: Path) -> None:
        """Test that custom error class can be used."""

        class CustomError(ConfigLoadError):
            pass

        with pytest.raises(CustomError, match="not found"):
            load_yaml_file(tmp_path / "nonexistent.yaml", error_class=CustomError)
