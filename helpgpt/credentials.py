"""API key lookup and storage.

The key is read from the helpgpt preference file first and from the
``OPENAI_API_KEY`` environment variable second. Nothing is cached: every
lookup reads the file again, so ``set_credential``/``clear_credential`` take
effect immediately.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import dotenv_values, set_key, unset_key

from helpgpt.paths import PREFERENCES_FILE

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "OPENAI_API_KEY"
API_KEY_PREF_NAME = "openai_api_key"

SOURCE_PREFERENCES = "preferences"
SOURCE_ENVIRONMENT = "environment"


class CredentialStore:
    """Reads and writes the API key stored in a dotenv-format preference file."""

    def __init__(
        self,
        path: Path | None = None,
        *,
        pref_name: str = API_KEY_PREF_NAME,
        env_var: str = API_KEY_ENV_VAR,
    ) -> None:
        self._path = path
        self.pref_name = pref_name
        self.env_var = env_var

    @property
    def path(self) -> Path:
        return self._path if self._path is not None else PREFERENCES_FILE.path

    def _load_preference(self) -> str | None:
        if not self.path.is_file():
            return None
        return dotenv_values(self.path).get(self.pref_name) or None

    def source(self) -> str | None:
        """Where the key would be read from, or None when it is not set anywhere."""
        if self._load_preference() is not None:
            return SOURCE_PREFERENCES
        if os.environ.get(self.env_var):
            return SOURCE_ENVIRONMENT
        return None

    def get(self) -> str | None:
        key = self._load_preference()
        if key is None:
            key = os.environ.get(self.env_var) or None
        return key

    def set(self, value: str) -> None:
        """Store ``value`` as plaintext in the preference file, replacing any previous key."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        set_key(self.path, self.pref_name, value)
        logger.debug("Stored API key in %s", self.path)

    def clear(self) -> None:
        if self._load_preference() is None:
            return
        unset_key(self.path, self.pref_name)
        logger.debug("Removed API key from %s", self.path)


_default_store = CredentialStore()


def get_credential() -> str | None:
    """Return the API key from the preference file or ``OPENAI_API_KEY``, else None."""
    return _default_store.get()


def set_credential(value: str) -> None:
    """Save the API key to the preference file (plaintext).

    The key can be removed again with ``clear_credential()``.
    """
    _default_store.set(value)


def clear_credential() -> None:
    """Delete the API key saved in the preference file, if present."""
    _default_store.clear()
