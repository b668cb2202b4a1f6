from __future__ import annotations

from collections.abc import Callable
import io
from typing import Any

import httpx
from rich.console import Console, RenderableType

from helpgpt.completion import CompletionClient
from helpgpt.config import AssistSettings

DEFAULT_REPLY = "Reduce the value before calling."


def completion_body(content: str = DEFAULT_REPLY) -> dict[str, Any]:
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1677652288,
        "model": "gpt-3.5-turbo",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 9, "completion_tokens": 12, "total_tokens": 21},
    }


class FakeChatAPI:
    """Stands in for the /chat/completions endpoint and counts the requests it gets."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def client(self, settings: AssistSettings | None = None) -> CompletionClient:
        return CompletionClient(
            settings or AssistSettings(),
            http_client=httpx.Client(transport=httpx.MockTransport(self)),
        )


def reply_api(
    reply: str = DEFAULT_REPLY, *, status_code: int = 200, json: Any = None
) -> FakeChatAPI:
    body = json if json is not None else completion_body(reply)
    return FakeChatAPI(lambda request: httpx.Response(status_code, json=body))


def render_to_text(renderable: RenderableType, width: int = 100) -> str:
    console = Console(file=io.StringIO(), width=width)
    console.print(renderable)
    return console.file.getvalue()
