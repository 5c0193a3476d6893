"""
Tests for configuration loading and session persistence.
"""

import json
import os
import stat

import pytest

from dropbox_rest.config import load_session_blob, load_settings, save_session_blob
from dropbox_rest.modes import RootMode


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DROPBOX_CONSUMER_KEY", "DROPBOX_CONSUMER_SECRET", "DROPBOX_SSL", "DROPBOX_MODE", "DROPBOX_SESSION_FILE"):
        monkeypatch.delenv(name, raising=False)


class TestLoadSettings:
    """Test load_settings."""

    def test_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DROPBOX_CONSUMER_KEY", "key")
        monkeypatch.setenv("DROPBOX_CONSUMER_SECRET", "secret")
        monkeypatch.setenv("DROPBOX_SSL", "true")
        monkeypatch.setenv("DROPBOX_MODE", "dropbox")
        monkeypatch.setenv("DROPBOX_SESSION_FILE", str(tmp_path / "session.json"))

        settings = load_settings()

        assert settings.consumer_key == "key"
        assert settings.consumer_secret == "secret"
        assert settings.ssl is True
        assert settings.mode is RootMode.FULL_ACCESS
        assert settings.session_file == tmp_path / "session.json"

    def test_defaults(self, monkeypatch):
        monkeypatch.setenv("DROPBOX_CONSUMER_KEY", "key")
        monkeypatch.setenv("DROPBOX_CONSUMER_SECRET", "secret")

        settings = load_settings()

        assert settings.ssl is False
        assert settings.mode is RootMode.SANDBOX
        assert settings.session_file.name == "session.json"

    def test_keys_file_overrides_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DROPBOX_CONSUMER_KEY", "env key")
        monkeypatch.setenv("DROPBOX_CONSUMER_SECRET", "env secret")
        keys_file = tmp_path / "keys.json"
        keys_file.write_text(json.dumps({"key": "file key", "secret": "file secret"}))

        settings = load_settings(str(keys_file))

        assert settings.consumer_key == "file key"
        assert settings.consumer_secret == "file secret"

    def test_missing_credentials(self):
        with pytest.raises(ValueError, match="DROPBOX_CONSUMER_KEY"):
            load_settings()

    def test_unknown_mode(self, monkeypatch):
        monkeypatch.setenv("DROPBOX_CONSUMER_KEY", "key")
        monkeypatch.setenv("DROPBOX_CONSUMER_SECRET", "secret")
        monkeypatch.setenv("DROPBOX_MODE", "everything")

        with pytest.raises(ValueError, match="Unknown API mode"):
            load_settings()


class TestSessionBlob:
    """Test saving and loading the serialized session."""

    def test_missing_file(self, tmp_path):
        assert load_session_blob(tmp_path / "none.json") is None

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "session.json"

        save_session_blob(path, '["k", "s", true, "t", "ts", false, "sandbox"]')

        assert load_session_blob(path) == '["k", "s", true, "t", "ts", false, "sandbox"]'
        if os.name == "posix":
            assert stat.S_IMODE(path.stat().st_mode) == 0o600
