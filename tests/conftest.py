from __future__ import annotations

from pathlib import Path

import pytest

from helpgpt.credentials import API_KEY_ENV_VAR, CredentialStore


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep tests away from the real preference file, API key and settings."""
    monkeypatch.setenv("HELPGPT_HOME", str(tmp_path / "helpgpt-home"))
    monkeypatch.delenv(API_KEY_ENV_VAR, raising=False)
    for name in ("HELPGPT_MODEL", "HELPGPT_API_BASE", "HELPGPT_API_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def store(tmp_path: Path) -> CredentialStore:
    return CredentialStore(tmp_path / "preferences.env")


@pytest.fixture
def keyed_store(store: CredentialStore) -> CredentialStore:
    store.set("sk-test-key")
    return store
