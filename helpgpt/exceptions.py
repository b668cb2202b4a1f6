from __future__ import annotations


class HelpGPTError(Exception):
    """Base class for errors raised by helpgpt itself."""


class CompletionError(HelpGPTError):
    """The chat completion request failed or returned an unusable reply.

    Covers transport errors, non-2xx responses and bodies that do not contain
    at least one choice with message content.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        model: str | None = None,
        body_text: str | None = None,
    ) -> None:
        self.status = status
        self.model = model
        self.body_text = body_text
        super().__init__(self._fmt(message))

    def _fmt(self, message: str) -> str:
        details = []
        if self.status is not None:
            details.append(f"status={self.status}")
        if self.model:
            details.append(f"model={self.model}")
        if self.body_text:
            details.append(f"body={self._excerpt(self.body_text)!r}")
        return f"{message} ({', '.join(details)})" if details else message

    @staticmethod
    def _excerpt(s: str, *, n: int = 200) -> str:
        s = s.strip()
        return s if len(s) <= n else s[:n] + "…"
