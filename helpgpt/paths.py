from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path


@dataclass(frozen=True)
class GlobalPath:
    """A path resolved lazily so that environment overrides apply at use time."""

    env_var: str
    default: Path
    relative: str | None = None

    @property
    def path(self) -> Path:
        base = Path(os.environ.get(self.env_var) or self.default).expanduser()
        return base / self.relative if self.relative else base


HELPGPT_HOME = GlobalPath("HELPGPT_HOME", Path.home() / ".helpgpt")
PREFERENCES_FILE = GlobalPath("HELPGPT_HOME", Path.home() / ".helpgpt", "preferences.env")
