"""Traceback frames and the policies applied to them before rendering."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import sys
import traceback
from types import TracebackType

from helpgpt.config import DEFAULT_HIDDEN_MODULES

# Frames kept at each end of a RecursionError traceback.
OVERFLOW_HEAD = 25
OVERFLOW_TAIL = 25

CAUSE_SEPARATOR = "The above exception was the direct cause of the following exception:"
CONTEXT_SEPARATOR = "During handling of the above exception, another exception occurred:"


@dataclass(frozen=True)
class Frame:
    summary: traceback.FrameSummary
    module: str = ""

    @property
    def filename(self) -> str:
        return self.summary.filename

    @property
    def lineno(self) -> int | None:
        return self.summary.lineno

    @property
    def name(self) -> str:
        return self.summary.name

    @property
    def line(self) -> str:
        return (self.summary.line or "").strip()


def frames_from_traceback(tb: TracebackType | None) -> tuple[Frame, ...]:
    """Extract frames from ``tb``, outermost first."""
    if tb is None:
        return ()
    # extract_tb keeps column positions, which the bare formatter uses for carets.
    summaries = traceback.extract_tb(tb)
    return tuple(
        Frame(summary=summary, module=frame.f_globals.get("__name__", ""))
        for (frame, _), summary in zip(traceback.walk_tb(tb), summaries)
    )


@dataclass(frozen=True)
class ErrorEvent:
    """An uncaught exception together with the frames to report for it."""

    error: BaseException
    frames: tuple[Frame, ...] = ()

    @classmethod
    def from_exception(
        cls, error: BaseException, tb: TracebackType | None = None
    ) -> ErrorEvent:
        return cls(error, frames_from_traceback(tb or error.__traceback__))

    @property
    def type_name(self) -> str:
        return type(self.error).__name__

    def with_frames(self, frames: Iterable[Frame]) -> ErrorEvent:
        return ErrorEvent(self.error, tuple(frames))


def is_overflow(error: BaseException) -> bool:
    return isinstance(error, RecursionError)


def truncate_overflow(event: ErrorEvent) -> ErrorEvent:
    """Keep only both ends of a RecursionError traceback.

    Events with at most ``OVERFLOW_HEAD + OVERFLOW_TAIL`` frames, and events for
    other exception types, are returned unchanged.
    """
    frames = event.frames
    if not is_overflow(event.error) or len(frames) <= OVERFLOW_HEAD + OVERFLOW_TAIL:
        return event
    return event.with_frames(frames[:OVERFLOW_HEAD] + frames[-OVERFLOW_TAIL:])


def _top_level(module: str) -> str:
    return module.partition(".")[0]


class LibraryFrameFilter:
    """Decides whether a frame's module is library code that may be hidden.

    A module is library code when its top-level package is in ``hidden`` and
    not in ``shown``. ``__main__`` is never library code.
    """

    def __init__(
        self,
        hidden: Iterable[str] | None = None,
        shown: Iterable[str] = (),
    ) -> None:
        if hidden is None:
            hidden = (*sys.stdlib_module_names, *DEFAULT_HIDDEN_MODULES)
        self.hidden = frozenset(hidden)
        self.shown = frozenset(shown)

    def is_library(self, module: str) -> bool:
        if not module or module == "__main__":
            return False
        top = _top_level(module)
        return top in self.hidden and top not in self.shown

    def __call__(self, frame: Frame) -> bool:
        return self.is_library(frame.module)


def format_plain_backtrace(frames: Sequence[Frame]) -> str:
    """The interpreter's own frame listing, without the exception line."""
    return "".join(traceback.format_list([frame.summary for frame in frames]))


def chained_causes(error: BaseException) -> list[tuple[BaseException, str]]:
    """Exceptions chained to ``error``, in the order the interpreter prints them.

    Each cause is paired with the separator line printed between it and the
    exception it led to. ``__suppress_context__`` is honored, so
    ``raise ... from None`` leaves no causes.
    """
    chain: list[tuple[BaseException, str]] = []
    seen = {id(error)}
    current = error
    while True:
        if current.__cause__ is not None:
            cause, separator = current.__cause__, CAUSE_SEPARATOR
        elif current.__context__ is not None and not current.__suppress_context__:
            cause, separator = current.__context__, CONTEXT_SEPARATOR
        else:
            break
        if id(cause) in seen:
            break
        seen.add(id(cause))
        chain.append((cause, separator))
        current = cause
    chain.reverse()
    return chain


def format_cause_chain(error: BaseException) -> str:
    """Tracebacks of the causes of ``error``, each followed by its separator."""
    parts: list[str] = []
    for cause, separator in chained_causes(error):
        parts.extend(
            traceback.format_exception(type(cause), cause, cause.__traceback__, chain=False)
        )
        parts.append(f"\n{separator}\n\n")
    return "".join(parts)
