"""Tests for svg_editor.config module."""

import pytest
import yaml
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from svg_editor.config import (
    EditorConfig,
    ScaleConfig,
    SyncConfig,
    parse_config,
    parse_config_file,
    parse_format_section,
    parse_scale_section,
    parse_sync_section,
    parse_viewport_section,
)


class TestParseSections:
    """Tests for the per-section parsers."""

    def test_sync_defaults(self):
        assert parse_sync_section({}) == SyncConfig(0.150, 0.250)

    def test_sync_negative_delay(self):
        with pytest.raises(ValueError, match="delays must be >= 0"):
            parse_sync_section({"text_delay": -1})

    def test_scale_defaults(self):
        assert parse_scale_section({}) == ScaleConfig(0.05, 20.0, 1.05, 0.95)

    @pytest.mark.parametrize(
        "data, message",
        [
            ({"min": 0}, "0 < min <= max"),
            ({"min": 5, "max": 2}, "0 < min <= max"),
            ({"zoom_in": 1.0}, "zoom_in must be > 1"),
            ({"zoom_out": 1.2}, "zoom_out must be between 0 and 1"),
            ({"zoom_out": 0}, "zoom_out must be between 0 and 1"),
        ],
    )
    def test_scale_invalid(self, data, message):
        with pytest.raises(ValueError, match=message):
            parse_scale_section(data)

    def test_viewport_must_be_positive(self):
        with pytest.raises(ValueError, match="must be positive"):
            parse_viewport_section({"width": 0})

    def test_format_negative_indent(self):
        with pytest.raises(ValueError, match="indent must be >= 0"):
            parse_format_section({"indent": -2})


class TestParseConfig:
    """Tests for parse_config function."""

    def test_none_gives_defaults(self):
        assert parse_config(None) == EditorConfig()

    def test_not_a_mapping(self):
        with pytest.raises(ValueError, match="YAML dictionary"):
            parse_config(["sync"])

    def test_section_not_a_mapping(self):
        with pytest.raises(ValueError, match="'scale' section must be a mapping"):
            parse_config({"scale": 3})

    def test_empty_section_uses_defaults(self):
        assert parse_config({"sync": None}).sync == SyncConfig()


class TestParseConfigFile:
    """Tests for parse_config_file function."""

    @pytest.fixture
    def config_file(self, tmp_path) -> Path:
        """Create a full config file."""
        content = """
sync:
  graphic_delay: 0.1
  text_delay: 0.5
scale:
  min: 0.5
  max: 4
  zoom_in: 1.1
  zoom_out: 0.9
grid:
  source: https://example.com/grid.svg
  stroke: "#808080"
viewport:
  width: 1024
  height: 768
format:
  indent: 4
"""
        config_file = tmp_path / "editor.yaml"
        config_file.write_text(content)
        return config_file

    def test_parse_full_config(self, config_file):
        config = parse_config_file(config_file)
        assert config.sync.graphic_delay == 0.1
        assert config.sync.text_delay == 0.5
        assert (config.scale.min, config.scale.max) == (0.5, 4.0)
        assert (config.scale.zoom_in, config.scale.zoom_out) == (1.1, 0.9)
        assert config.grid.source == "https://example.com/grid.svg"
        assert config.grid.stroke == "#808080"
        assert (config.viewport.width, config.viewport.height) == (1024, 768)
        assert config.format.indent == 4

    def test_partial_config(self, tmp_path):
        config_file = tmp_path / "partial.yaml"
        config_file.write_text("scale:\n  max: 10\n")
        config = parse_config_file(config_file)
        assert config.scale.max == 10
        assert config.scale.min == 0.05
        assert config.grid.source is None

    def test_empty_file(self, tmp_path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert parse_config_file(config_file) == EditorConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_config_file(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "invalid.yaml"
        config_file.write_text("sync: [unclosed")
        with pytest.raises(yaml.YAMLError):
            parse_config_file(config_file)
