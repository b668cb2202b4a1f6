from __future__ import annotations

import logging
from typing import TextIO

from rich.console import Console, Group
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from helpgpt.completion import CompletionClient
from helpgpt.credentials import API_KEY_ENV_VAR, CredentialStore

logger = logging.getLogger(__name__)

ANSWER_TITLE = "AI help"
ANSWER_SUBTITLE = "Help"
ANSWER_BACKGROUND = "on #20232a"
ANSWER_STYLE = f"white {ANSWER_BACKGROUND}"
# (top, right, bottom, left)
ANSWER_PADDING = (1, 4, 1, 4)

MISSING_CREDENTIAL_NOTICE = (
    "OpenAI API key not found! Please set it with "
    '`helpgpt.set_credential("<YOUR OPENAI API KEY>")` (or `helpgpt set-key <YOUR OPENAI API KEY>`) '
    f"or set the environment variable `{API_KEY_ENV_VAR}=<YOUR OPENAI API KEY>`."
)


def _console(io: TextIO, width: int | None) -> Console:
    return Console(file=io, width=width, highlight=False)


def render_answer(io: TextIO, markdown_text: str, width: int) -> None:
    """Print the model's markdown reply in the "AI help" panel, then a dim rule."""
    panel = Panel(
        Markdown(markdown_text, style=ANSWER_STYLE),
        title=Text(ANSWER_TITLE, style="white"),
        subtitle=Text(ANSWER_SUBTITLE, style="white"),
        subtitle_align="right",
        width=width,
        padding=ANSWER_PADDING,
        style=ANSWER_STYLE,
    )
    _console(io, width).print(Group(panel, Rule(style="dim")))


def render_missing_credential_notice(io: TextIO, width: int | None = None) -> None:
    panel = Panel(
        Markdown(MISSING_CREDENTIAL_NOTICE),
        title=Text(ANSWER_TITLE, style="bold #FFB800"),
        border_style="#FFB800",
        width=width,
        padding=(0, 2),
    )
    _console(io, width).print(panel)


def ask(
    io: TextIO,
    prompt_text: str,
    *,
    width: int | None = None,
    store: CredentialStore | None = None,
    client: CompletionClient | None = None,
) -> None:
    """Ask the model about ``prompt_text`` and print its answer to ``io``.

    Without an API key the instructions for setting one are printed instead
    and no request is made.

    Raises:
        CompletionError: the chat completion request failed
    """
    key = (store or CredentialStore()).get()
    if key is None:
        logger.debug("No API key configured, showing setup notice")
        render_missing_credential_notice(io, width)
        return

    response = (client or CompletionClient()).ask_model(key, prompt_text)
    render_answer(io, response, width or _console(io, None).width)
