"""The error hook: styled traceback, then the model's explanation.

Usage:
    import helpgpt
    helpgpt.install_error_hook()

    # or, keeping hold of the reporter
    reporter = ErrorReporter(HookConfig(max_n_frames=10))
    reporter.install()
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import logging
import sys
import threading
from types import TracebackType
from typing import Any, TextIO

from rich.console import Console, RenderableType

from helpgpt.answer import ask
from helpgpt.completion import CompletionClient
from helpgpt.config import AssistSettings, HookConfig
from helpgpt.credentials import CredentialStore
from helpgpt.fallback import format_bare, print_fallback
from helpgpt.frames import (
    ErrorEvent,
    Frame,
    LibraryFrameFilter,
    format_cause_chain,
    format_plain_backtrace,
    truncate_overflow,
)
from helpgpt.prompt import compose_prompt
from helpgpt.render import (
    RenderingContext,
    message_text,
    render_backtrace,
    render_header,
    render_message,
)

logger = logging.getLogger(__name__)

MIN_TERMINAL_WIDTH = 70
NARROW_TERMINAL_WARNING = (
    "helpgpt: can't render error message, console too narrow. Using default traceback"
)

FrameRenderer = Callable[..., RenderableType]


class ErrorReporter:
    """Renders uncaught exceptions and asks the chat model to explain them.

    Configuration is fixed at construction. Nothing is kept between events: a
    new rendering context and console are created for each one.
    """

    def __init__(
        self,
        config: HookConfig | None = None,
        *,
        settings: AssistSettings | None = None,
        store: CredentialStore | None = None,
        client: CompletionClient | None = None,
        frame_renderer: FrameRenderer = render_backtrace,
        file: TextIO | None = None,
        width: int | None = None,
    ) -> None:
        self.config = config or HookConfig()
        self.store = store or CredentialStore()
        self.client = client or CompletionClient(settings)
        self.frame_renderer = frame_renderer
        self.frame_filter = LibraryFrameFilter(
            hidden=(*sys.stdlib_module_names, *self.config.hidden_modules),
            shown=self.config.shown_modules,
        )
        self._file = file
        self._width = width

    @property
    def file(self) -> TextIO:
        return self._file if self._file is not None else sys.stderr

    def terminal_width(self, io: TextIO) -> int:
        if self._width is not None:
            return self._width
        return Console(file=io).width

    def install(self) -> None:
        """Register this reporter as the process-wide uncaught exception handler."""
        sys.excepthook = self.excepthook
        threading.excepthook = self.thread_excepthook
        logger.debug("Installed helpgpt error hook (%s)", self.config)

    def excepthook(
        self,
        exc_type: type[BaseException],
        exc_value: BaseException,
        tb: TracebackType | None,
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, tb)
            return
        try:
            self.report(ErrorEvent.from_exception(exc_value, tb))
        except Exception:
            logger.exception("helpgpt error hook failed")
            sys.__excepthook__(exc_type, exc_value, tb)

    def thread_excepthook(self, args: Any) -> None:
        # threading.__excepthook__ ignores SystemExit silently as well.
        if issubclass(args.exc_type, SystemExit):
            return
        if args.exc_value is None:
            threading.__excepthook__(args)
            return
        self.excepthook(args.exc_type, args.exc_value, args.exc_traceback)

    def report(self, event: ErrorEvent, file: TextIO | None = None) -> None:
        """Print the full report for one uncaught exception."""
        io = file if file is not None else self.file
        event = truncate_overflow(event)

        width = self.terminal_width(io)
        if width < MIN_TERMINAL_WIDTH:
            logger.debug("Terminal is %d columns wide, using the default traceback", width)
            print(NARROW_TERMINAL_WARNING, file=io)
            io.write(format_bare(event))
            io.flush()
            return

        io.write("\n")
        try:
            self._report_styled(io, event, width)
        except Exception as failure:
            print_fallback(io, failure, event)

    def _render_frames(self, ctx: RenderingContext, frames: Sequence[Frame]) -> RenderableType:
        return self.frame_renderer(
            ctx,
            frames,
            reverse_backtrace=self.config.reverse_backtrace,
            max_n_frames=self.config.max_n_frames,
            hide_frames=self.config.hide_frames,
            frame_filter=self.frame_filter,
        )

    def _report_styled(self, io: TextIO, event: ErrorEvent, width: int) -> None:
        ctx = RenderingContext.create(width)
        console = Console(file=io, width=ctx.out_w)
        error = event.error

        # Nothing reaches io until the traceback part is fully rendered.
        backtrace_text: str | None = None
        with console.capture() as capture:
            if event.frames:
                console.print(render_header(ctx, error))
                console.print(self._render_frames(ctx, event.frames))
                backtrace_text = format_plain_backtrace(event.frames)
            console.print(render_message(ctx, error))
        io.write(capture.get())
        io.flush()

        prompt = compose_prompt(format_cause_chain(error) + message_text(error), backtrace_text)
        ask(io, prompt, width=ctx.out_w, store=self.store, client=self.client)


def install_error_hook(
    reverse_backtrace: bool = True,
    max_n_frames: int = 30,
    hide_frames: bool = True,
    **options: Any,
) -> ErrorReporter:
    """Replace the default uncaught exception printer for the rest of the process.

    Tracebacks are printed as a list of frames followed by a panel with the
    exception message, and then the chat model's explanation of the error.

    Args:
        reverse_backtrace: Show the most recent frame first
        max_n_frames: Frames shown before the middle of long tracebacks is elided
        hide_frames: Collapse frames from standard library and other library modules
        **options: ``hidden_modules``/``shown_modules`` for ``HookConfig``, and
            the keyword arguments of ``ErrorReporter``

    Returns:
        The installed reporter
    """
    config_fields = {k: options.pop(k) for k in ("hidden_modules", "shown_modules") if k in options}
    reporter = ErrorReporter(
        HookConfig(
            reverse_backtrace=reverse_backtrace,
            max_n_frames=max_n_frames,
            hide_frames=hide_frames,
            **config_fields,
        ),
        **options,
    )
    reporter.install()
    return reporter
