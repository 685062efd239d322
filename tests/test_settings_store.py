"""
Tests for the settings record and its JSON file persistence.
"""

import json
import os
import platform

import pytest

from docsync import ConfigurationError, Settings, SettingsStore


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / "gdocs" / "settings.json"


class TestSettings:

    def test_defaults(self):
        record = Settings.from_dict({})
        assert (record.folder_id, record.credentials, record.tokens) == ("", "", "")

    def test_stored_keys_map_to_fields(self):
        record = Settings.from_dict({"googleDriveFolderId": "abc", "credentials": "{}", "tokens": "{}"})
        assert record.folder_id == "abc"
        assert record.to_dict() == {"googleDriveFolderId": "abc", "credentials": "{}", "tokens": "{}"}

    def test_unknown_keys_are_preserved(self):
        record = Settings.from_dict({"theme": "dark", "tokens": ""})
        assert record.extra == {"theme": "dark"}
        assert record.to_dict()["theme"] == "dark"

    def test_null_becomes_empty(self):
        assert Settings.from_dict({"tokens": None}).tokens == ""

    def test_non_string_rejected(self):
        with pytest.raises(ConfigurationError):
            Settings.from_dict({"tokens": {"access_token": "x"}})


class TestSettingsStore:

    def test_missing_file_gives_defaults(self, settings_path):
        assert SettingsStore(str(settings_path)).load() == Settings()

    def test_save_then_load(self, settings_path):
        store = SettingsStore(str(settings_path))
        store.save(Settings(folder_id="folder", credentials="{\"a\": 1}", tokens="t"))

        loaded = store.load()

        assert loaded.folder_id == "folder"
        assert loaded.credentials == "{\"a\": 1}"
        assert json.loads(settings_path.read_text())["googleDriveFolderId"] == "folder"

    @pytest.mark.skipif(platform.system() == "Windows", reason="POSIX permissions")
    def test_owner_only_permissions(self, settings_path):
        SettingsStore(str(settings_path)).save(Settings(tokens="secret"))

        assert os.stat(settings_path).st_mode & 0o777 == 0o600
        assert os.stat(settings_path.parent).st_mode & 0o777 == 0o700

    def test_invalid_json(self, settings_path):
        settings_path.parent.mkdir(parents=True)
        settings_path.write_text("{oops")

        with pytest.raises(ConfigurationError):
            SettingsStore(str(settings_path)).load()

    def test_non_object(self, settings_path):
        settings_path.parent.mkdir(parents=True)
        settings_path.write_text("[]")

        with pytest.raises(ConfigurationError):
            SettingsStore(str(settings_path)).load()

    def test_empty_file_gives_defaults(self, settings_path):
        settings_path.parent.mkdir(parents=True)
        settings_path.write_text("")

        assert SettingsStore(str(settings_path)).load() == Settings()

    def test_update_changes_one_field(self, settings_path):
        store = SettingsStore(str(settings_path))
        store.save(Settings(folder_id="keep", tokens="old"))

        updated = store.update(tokens="new")

        assert updated.tokens == "new"
        assert store.load().folder_id == "keep"

    def test_update_unknown_field(self, settings_path):
        with pytest.raises(ConfigurationError):
            SettingsStore(str(settings_path)).update(colour="blue")

    def test_home_is_expanded(self):
        store = SettingsStore("~/gdocs/settings.json")
        assert "~" not in str(store.settings_file)
