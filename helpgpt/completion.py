from __future__ import annotations

from enum import Enum
import logging
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from helpgpt.config import AssistSettings
from helpgpt.exceptions import CompletionError

logger = logging.getLogger(__name__)

CHAT_ENDPOINT = "/chat/completions"


class Role(str, Enum):
    system = "system"
    user = "user"
    assistant = "assistant"


class ChatMessage(BaseModel):
    role: Role
    content: str


class ChatRequest(BaseModel):
    model: str
    messages: list[ChatMessage]


class ReplyMessage(BaseModel):
    role: str = Role.assistant.value
    content: str


class Choice(BaseModel):
    index: int = 0
    message: ReplyMessage
    finish_reason: str | None = None


class ChatResponse(BaseModel):
    choices: list[Choice]


def build_conversation(prompt: str) -> list[ChatMessage]:
    """A fresh single-turn conversation: one user message, no history."""
    return [ChatMessage(role=Role.user, content=prompt)]


class CompletionClient:
    """Sends one-shot prompts to an OpenAI-compatible chat completion API."""

    def __init__(
        self,
        settings: AssistSettings | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.settings = settings or AssistSettings()
        self._http_client = http_client

    @property
    def url(self) -> str:
        return self.settings.api_base.rstrip("/") + CHAT_ENDPOINT

    def prepare_request(self, credential: str, prompt: str) -> tuple[dict[str, str], dict[str, Any]]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential}",
        }
        payload = ChatRequest(
            model=self.settings.model, messages=build_conversation(prompt)
        ).model_dump(mode="json")
        return headers, payload

    def parse_response(self, response: httpx.Response) -> str:
        model = self.settings.model
        try:
            data = response.json()
        except ValueError as err:
            raise CompletionError(
                "Chat completion response is not JSON",
                status=response.status_code,
                model=model,
                body_text=response.text,
            ) from err

        try:
            parsed = ChatResponse.model_validate(data)
        except ValidationError as err:
            raise CompletionError(
                f"Malformed chat completion response: {err.error_count()} validation error(s)",
                status=response.status_code,
                model=model,
                body_text=response.text,
            ) from err

        if not parsed.choices:
            raise CompletionError(
                "Chat completion response contains no choices",
                status=response.status_code,
                model=model,
            )
        return parsed.choices[0].message.content

    def _post(self, client: httpx.Client, credential: str, prompt: str) -> httpx.Response:
        headers, payload = self.prepare_request(credential, prompt)
        logger.debug("Requesting chat completion from %s (model=%s)", self.url, self.settings.model)
        try:
            response = client.post(self.url, headers=headers, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as err:
            raise CompletionError(
                "Chat completion request was rejected",
                status=err.response.status_code,
                model=self.settings.model,
                body_text=err.response.text,
            ) from err
        except httpx.HTTPError as err:
            raise CompletionError(
                f"Chat completion request to {self.url} failed: {err}",
                model=self.settings.model,
            ) from err
        return response

    def ask_model(self, credential: str, prompt: str) -> str:
        """Send ``prompt`` as a single user message and return the reply text.

        Raises:
            CompletionError: transport failure, non-2xx status or unusable body
        """
        if self._http_client is not None:
            response = self._post(self._http_client, credential, prompt)
        else:
            with httpx.Client(timeout=self.settings.api_timeout) as client:
                response = self._post(client, credential, prompt)
        return self.parse_response(response)


def ask_model(credential: str, prompt: str) -> str:
    """Ask the default chat model about ``prompt``; see ``CompletionClient.ask_model``."""
    return CompletionClient().ask_model(credential, prompt)
