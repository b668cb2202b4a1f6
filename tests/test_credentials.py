"""Tests for API key lookup and storage."""

from __future__ import annotations

from pathlib import Path

import pytest

from helpgpt.credentials import (
    API_KEY_ENV_VAR,
    API_KEY_PREF_NAME,
    SOURCE_ENVIRONMENT,
    SOURCE_PREFERENCES,
    CredentialStore,
    clear_credential,
    get_credential,
    set_credential,
)
from helpgpt.paths import PREFERENCES_FILE


class TestCredentialStore:
    def test_absent_when_nothing_is_configured(self, store: CredentialStore) -> None:
        assert store.get() is None
        assert store.source() is None

    def test_set_then_get(self, store: CredentialStore) -> None:
        store.set("X")
        assert store.get() == "X"
        assert store.source() == SOURCE_PREFERENCES

    def test_set_overwrites_previous_value(self, store: CredentialStore) -> None:
        store.set("first")
        store.set("second")
        assert store.get() == "second"

    def test_value_is_stored_as_plaintext(self, store: CredentialStore) -> None:
        store.set("sk-plain")
        content = store.path.read_text()
        assert API_KEY_PREF_NAME in content
        assert "sk-plain" in content

    def test_set_creates_missing_directories(self, tmp_path: Path) -> None:
        store = CredentialStore(tmp_path / "a" / "b" / "prefs.env")
        store.set("X")
        assert store.path.is_file()
        assert store.get() == "X"

    def test_clear_then_get_is_absent(self, store: CredentialStore) -> None:
        store.set("X")
        store.clear()
        assert store.get() is None

    def test_clear_without_file_is_a_noop(self, store: CredentialStore) -> None:
        store.clear()
        assert not store.path.exists()
        assert store.get() is None

    def test_clear_keeps_other_entries(self, store: CredentialStore) -> None:
        store.path.write_text("OTHER=value\n")
        store.set("X")
        store.clear()
        assert "OTHER=value" in store.path.read_text()
        assert store.get() is None

    def test_environment_fallback(
        self, store: CredentialStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(API_KEY_ENV_VAR, "from-env")
        assert store.get() == "from-env"
        assert store.source() == SOURCE_ENVIRONMENT

    def test_preferences_take_precedence(
        self, store: CredentialStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(API_KEY_ENV_VAR, "from-env")
        store.set("from-prefs")
        assert store.get() == "from-prefs"

    def test_clear_falls_back_to_environment(
        self, store: CredentialStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(API_KEY_ENV_VAR, "from-env")
        store.set("from-prefs")
        store.clear()
        assert store.get() == "from-env"

    def test_empty_environment_variable_is_absent(
        self, store: CredentialStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(API_KEY_ENV_VAR, "")
        assert store.get() is None

    def test_not_cached_between_reads(self, store: CredentialStore) -> None:
        other = CredentialStore(store.path)
        assert store.get() is None
        other.set("written-elsewhere")
        assert store.get() == "written-elsewhere"


class TestModuleFunctions:
    def test_round_trip_uses_helpgpt_home(self, tmp_path: Path) -> None:
        set_credential("X")
        assert get_credential() == "X"
        assert PREFERENCES_FILE.path.is_relative_to(tmp_path)

        clear_credential()
        assert get_credential() is None

    def test_environment_only(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(API_KEY_ENV_VAR, "env-key")
        assert get_credential() == "env-key"
