"""helpgpt configuration.

Two layers:
    - AssistSettings: how to reach the chat completion API, read from
      ``HELPGPT_*`` environment variables.
    - HookConfig: how the installed hook renders tracebacks; fixed when the
      hook is installed.

Usage:
    from helpgpt.config import AssistSettings, HookConfig
    settings = AssistSettings()
    config = HookConfig(max_n_frames=20)
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_API_BASE = "https://api.openai.com/v1"

# Top-level module names treated as library code on top of the standard library.
DEFAULT_HIDDEN_MODULES: tuple[str, ...] = (
    "runpy",
    "importlib",
    "_pytest",
    "pluggy",
)


class AssistSettings(BaseSettings):
    """Chat completion settings, sourced from ``HELPGPT_*`` env vars."""

    model_config = SettingsConfigDict(env_prefix="HELPGPT_", extra="ignore")

    model: str = Field(default=DEFAULT_MODEL, description="Chat model identifier")
    api_base: str = Field(
        default=DEFAULT_API_BASE,
        description="Base URL of an OpenAI-compatible API, including the version",
    )
    # None disables the httpx timeout: the request blocks until the API answers.
    api_timeout: float | None = None


class HookConfig(BaseModel):
    """Options of the installed error hook.

    Attributes:
        reverse_backtrace: Show the most recent frame first
        max_n_frames: Frames rendered before the middle of the trace is elided
        hide_frames: Collapse frames that belong to library modules
        hidden_modules: Extra top-level modules treated as library code
        shown_modules: Top-level modules that are never hidden
    """

    model_config = ConfigDict(frozen=True)

    reverse_backtrace: bool = True
    max_n_frames: int = Field(default=30, ge=1)
    hide_frames: bool = True
    hidden_modules: tuple[str, ...] = DEFAULT_HIDDEN_MODULES
    shown_modules: tuple[str, ...] = ()
