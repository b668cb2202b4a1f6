"""helpgpt: styled tracebacks explained by a chat model.

    import helpgpt
    helpgpt.install_error_hook()

The API key is read from the helpgpt preference file (see ``set_credential``)
or from the ``OPENAI_API_KEY`` environment variable.
"""

from __future__ import annotations

from helpgpt.answer import ask, render_answer, render_missing_credential_notice
from helpgpt.completion import CompletionClient, ask_model
from helpgpt.config import AssistSettings, HookConfig
from helpgpt.credentials import clear_credential, get_credential, set_credential
from helpgpt.exceptions import CompletionError, HelpGPTError
from helpgpt.frames import ErrorEvent
from helpgpt.prompt import compose_prompt
from helpgpt.reporter import ErrorReporter, install_error_hook

__version__ = "0.1.0"

__all__ = [
    "AssistSettings",
    "CompletionClient",
    "CompletionError",
    "ErrorEvent",
    "ErrorReporter",
    "HelpGPTError",
    "HookConfig",
    "ask",
    "ask_model",
    "clear_credential",
    "compose_prompt",
    "get_credential",
    "install_error_hook",
    "render_answer",
    "render_missing_credential_notice",
    "set_credential",
]
