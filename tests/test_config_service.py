"""
Tests for the configuration service.

Tests cover:
- Default file creation
- Merging partial files with defaults
- Recovery from corrupt files
- Persisting changes
"""

import json

import pytest

from image_editor.services.config_service import DEFAULT_CONFIG, ConfigService


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "image_editor" / "config.json"


class TestConfigService:
    """Test loading and saving settings."""

    def test_missing_file_is_created(self, config_path):
        """Test a missing config file is written with defaults."""
        config = ConfigService(config_path)
        assert config_path.exists()
        assert config.max_width == 643
        assert config.max_height == 400
        assert config.export_format == "PNG"

    def test_partial_editor_section_is_merged(self, config_path):
        """Test keys missing from the file fall back to defaults."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text(json.dumps({"editor": {"max_width": 800}}), encoding="utf-8")

        config = ConfigService(config_path)
        assert config.max_width == 800
        assert config.handle_size == DEFAULT_CONFIG["editor"]["handle_size"]
        assert config.crop_dim_alpha == 128

    def test_corrupt_file_is_recreated(self, config_path):
        """Test invalid JSON is replaced by the defaults."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text("{not json", encoding="utf-8")

        config = ConfigService(config_path)
        assert config.min_crop_size == 10
        assert json.loads(config_path.read_text(encoding="utf-8")) == DEFAULT_CONFIG

    def test_non_object_file_is_recreated(self, config_path):
        """Test a JSON list is treated as corrupt."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text("[1, 2]", encoding="utf-8")

        config = ConfigService(config_path)
        assert config.editor == DEFAULT_CONFIG["editor"]

    def test_set_and_save(self, config_path):
        """Test set() is in memory until save() writes it."""
        config = ConfigService(config_path)
        config.set("export_format", "JPEG")
        assert json.loads(config_path.read_text(encoding="utf-8"))["export_format"] == "PNG"

        config.save()
        assert ConfigService(config_path).export_format == "JPEG"

    def test_defaults_are_not_shared(self, config_path, tmp_path):
        """Test changing one service leaves the module defaults untouched."""
        config = ConfigService(config_path)
        config.editor["max_width"] = 1
        config.set("editor", {"max_width": 2})
        assert DEFAULT_CONFIG["editor"]["max_width"] == 643
        assert ConfigService(tmp_path / "other.json").max_width == 643
