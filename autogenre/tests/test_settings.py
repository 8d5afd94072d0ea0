"""Tests for settings.py persistence."""

import json

import pytest

from autogenre.errors import SettingsError
from autogenre.models import AppSettings
from autogenre.settings import get_config_dir, load_settings, save_settings


class TestGetConfigDir:
    """Tests for get_config_dir."""

    def test_explicit_dir(self, monkeypatch, tmp_path):
        """Should use AUTOGENRE_CONFIG_DIR first."""
        monkeypatch.setenv("AUTOGENRE_CONFIG_DIR", str(tmp_path))
        assert get_config_dir() == tmp_path

    def test_xdg_config_home(self, monkeypatch, tmp_path):
        """Should fall back to $XDG_CONFIG_HOME/autogenre."""
        monkeypatch.delenv("AUTOGENRE_CONFIG_DIR", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_dir() == tmp_path / "autogenre"

    def test_home_default(self, monkeypatch, tmp_path):
        """Should default to ~/.config/autogenre."""
        monkeypatch.delenv("AUTOGENRE_CONFIG_DIR", raising=False)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_config_dir() == tmp_path / ".config" / "autogenre"


class TestLoadSaveSettings:
    """Tests for load_settings and save_settings."""

    def test_missing_file_gives_defaults(self, tmp_path):
        """Should return defaults when nothing was saved yet."""
        assert load_settings(str(tmp_path / "settings.json")) == AppSettings()

    def test_save_then_load(self, tmp_path):
        """Should read back what was saved."""
        path = tmp_path / "nested" / "settings.json"
        settings = AppSettings(folder_pattern="{genre}/{artist}", rename_files=True)

        saved = save_settings(settings, str(path))

        assert saved == path
        assert load_settings(str(path)) == settings

    def test_default_location(self, monkeypatch, tmp_path):
        """Should write settings.json in the config directory."""
        monkeypatch.setenv("AUTOGENRE_CONFIG_DIR", str(tmp_path))
        saved = save_settings(AppSettings(organize_files=True))
        assert saved == tmp_path / "settings.json"
        assert load_settings().organize_files is True

    def test_partial_file_keeps_defaults(self, tmp_path):
        """Should fill in defaults for keys not in the file."""
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"rename_files": True}))
        settings = load_settings(str(path))
        assert settings.rename_files is True
        assert settings.backup_before_changes is True

    def test_invalid_json(self, tmp_path):
        """Should raise SettingsError on bad JSON."""
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        with pytest.raises(SettingsError, match="Failed to parse settings"):
            load_settings(str(path))

    def test_not_an_object(self, tmp_path):
        """Should raise SettingsError for a JSON list."""
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")
        with pytest.raises(SettingsError):
            load_settings(str(path))
