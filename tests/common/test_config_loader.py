"""Tests for catalog_export/common/config_loader.py"""

import logging

import pytest

from catalog_export.common.config_loader import ExportSettings, load_config, load_export_settings
from catalog_export.common.constants import IMAGE_FETCH_TIMEOUT, IMAGE_MAX_BYTES


class TestLoadConfig:
    def test_loads_yaml(self, tmp_path):
        (tmp_path / "sample.yaml").write_text("export:\n  title: Test\n", encoding="utf-8")
        assert load_config("sample.yaml", tmp_path) == {"export": {"title": "Test"}}

    def test_empty_file_is_empty_dict(self, tmp_path):
        (tmp_path / "empty.yaml").write_text("", encoding="utf-8")
        assert load_config("empty.yaml", tmp_path) == {}

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config("nope.yaml", tmp_path)


class TestLoadExportSettings:
    def test_defaults_when_file_missing(self, tmp_path):
        settings = load_export_settings("nope.yaml", tmp_path)
        assert settings == ExportSettings()
        assert settings.image_timeout == IMAGE_FETCH_TIMEOUT
        assert settings.image_max_bytes == IMAGE_MAX_BYTES

    def test_overrides_known_keys(self, tmp_path):
        (tmp_path / "export.yaml").write_text(
            "export:\n  title: Spring List\n  fetch_workers: 1\n", encoding="utf-8"
        )
        settings = load_export_settings(config_dir=tmp_path)
        assert settings.title == "Spring List"
        assert settings.fetch_workers == 1
        assert settings.source == ExportSettings().source

    def test_ignores_unknown_keys(self, tmp_path, caplog):
        (tmp_path / "export.yaml").write_text("export:\n  colour: green\n", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            settings = load_export_settings(config_dir=tmp_path)
        assert settings == ExportSettings()
        assert "colour" in caplog.text

    def test_project_config_loads(self):
        settings = load_export_settings()
        assert settings.title
        assert settings.image_timeout == 10
        assert settings.image_max_bytes == 5 * 1024 * 1024
