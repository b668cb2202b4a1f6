"""Rich renderables for an uncaught exception.

The output of one error event is built from three parts:
    - a header rule carrying the exception type name,
    - the frame list ("Error Stack"),
    - the message panel.

Color Palette:
    - Error: #FF4444
    - Accent: #FF7000 (function names)
    - Warning: #FFB800 (module names)
    - Muted: #666666 (paths, hidden frames)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
import linecache
import traceback

from rich.console import Group, RenderableType
from rich.highlighter import ReprHighlighter
from rich.padding import Padding
from rich.panel import Panel
from rich.rule import Rule
from rich.syntax import Syntax
from rich.text import Text

from helpgpt.frames import Frame, chained_causes

MAX_OUTPUT_WIDTH = 140
# Columns between the panel edge and the wrapped message/code text.
TEXT_INSET = 12
# Lines of source shown above and below the error site.
SOURCE_CONTEXT = 2
FRAME_INDENT = 4
# Module names listed on a collapsed run of library frames.
MAX_HIDDEN_MODULE_NAMES = 3


@dataclass(frozen=True)
class ErrorTheme:
    err_errmsg: str = "#FF4444"
    err_funcname: str = "#FF7000"
    err_module: str = "#FFB800"
    err_filepath: str = "#666666"
    text: str = "#E0E0E0"
    code_theme: str = "monokai"


@dataclass(frozen=True)
class RenderingContext:
    """Presentation parameters of one error event."""

    theme: ErrorTheme = field(default_factory=ErrorTheme)
    out_w: int = 100
    module_line_w: int = 100 - TEXT_INSET

    @classmethod
    def create(cls, width: int, theme: ErrorTheme | None = None) -> RenderingContext:
        out_w = min(width, MAX_OUTPUT_WIDTH)
        return cls(
            theme=theme or ErrorTheme(),
            out_w=out_w,
            module_line_w=out_w - TEXT_INSET,
        )


def message_text(error: BaseException) -> str:
    return "".join(traceback.format_exception_only(type(error), error)).strip()


def render_header(ctx: RenderingContext, error: BaseException) -> Rule:
    color = ctx.theme.err_errmsg
    return Rule(Text(type(error).__name__, style=f"bold {color}"), style=f"dim {color}")


def render_message(ctx: RenderingContext, error: BaseException) -> Panel:
    """The exception message, highlighted and wrapped, titled with its type name.

    Chained causes are listed above the message, oldest first, each followed
    by the interpreter's separator line.
    """
    color = ctx.theme.err_errmsg
    highlighter = ReprHighlighter()
    lines: list[RenderableType] = []
    for cause, separator in chained_causes(error):
        lines.append(highlighter(Text(message_text(cause), style=f"dim {ctx.theme.text}")))
        lines.append(Text(separator, style=f"dim italic {ctx.theme.err_filepath}"))
        lines.append(Text())
    lines.append(highlighter(Text(message_text(error), style=ctx.theme.text)))
    side = max((TEXT_INSET - 2) // 2, 1)
    return Panel(
        Group(*lines),
        title=Text(type(error).__name__, style=f"bold underline {color}"),
        title_align="center",
        width=ctx.out_w,
        padding=(1, side),
        border_style=f"dim {color}",
    )


# ---------------------------------------------------------------------------
# Frame list
# ---------------------------------------------------------------------------


@dataclass
class _FrameEntry:
    index: int
    frame: Frame
    is_error_site: bool = False

    @property
    def n_frames(self) -> int:
        return 1


@dataclass
class _HiddenFrames:
    modules: list[str] = field(default_factory=list)

    @property
    def n_frames(self) -> int:
        return len(self.modules)


@dataclass
class _SkippedFrames:
    n_frames: int


_Entry = _FrameEntry | _HiddenFrames | _SkippedFrames


def _collect_entries(
    frames: Sequence[Frame],
    hide_frames: bool,
    frame_filter: Callable[[Frame], bool] | None,
) -> list[_Entry]:
    entries: list[_Entry] = []
    last = len(frames)
    for index, frame in enumerate(frames, start=1):
        is_site = index == last
        if hide_frames and frame_filter is not None and not is_site and frame_filter(frame):
            if entries and isinstance(entries[-1], _HiddenFrames):
                entries[-1].modules.append(frame.module)
            else:
                entries.append(_HiddenFrames([frame.module]))
            continue
        entries.append(_FrameEntry(index, frame, is_site))
    return entries


def _elide(entries: list[_Entry], max_n_frames: int) -> list[_Entry]:
    positions = [i for i, entry in enumerate(entries) if isinstance(entry, _FrameEntry)]
    if len(positions) <= max_n_frames:
        return entries
    head = max_n_frames // 2
    tail = max_n_frames - head
    cut_start = positions[head]
    cut_end = positions[-tail]
    skipped = sum(entry.n_frames for entry in entries[cut_start:cut_end])
    return [*entries[:cut_start], _SkippedFrames(skipped), *entries[cut_end:]]


def _source_excerpt(ctx: RenderingContext, frame: Frame, context: int) -> RenderableType | None:
    lineno = frame.lineno
    lines = linecache.getlines(frame.filename)
    if lineno and 0 < lineno <= len(lines):
        return Syntax(
            "".join(lines),
            "python",
            theme=ctx.theme.code_theme,
            line_numbers=True,
            line_range=(max(lineno - context, 1), min(lineno + context, len(lines))),
            highlight_lines={lineno},
            code_width=ctx.module_line_w,
            word_wrap=True,
            background_color="default",
        )
    if frame.line:
        return Syntax(
            frame.line,
            "python",
            theme=ctx.theme.code_theme,
            code_width=ctx.module_line_w,
            word_wrap=True,
            background_color="default",
        )
    return None


def _render_frame(ctx: RenderingContext, entry: _FrameEntry) -> RenderableType:
    theme = ctx.theme
    frame = entry.frame
    title = Text()
    title.append(f"({entry.index}) ", style=theme.err_filepath)
    title.append(frame.name, style=f"bold {theme.err_funcname}")
    if frame.module:
        title.append(" in ", style="dim")
        title.append(frame.module, style=theme.err_module)
    location = Text(f"{frame.filename}:{frame.lineno}", style=f"dim {theme.err_filepath}")

    parts: list[RenderableType] = [title, Padding(location, (0, 0, 0, FRAME_INDENT))]
    excerpt = _source_excerpt(ctx, frame, SOURCE_CONTEXT if entry.is_error_site else 0)
    if excerpt is not None:
        parts.append(Padding(excerpt, (0, 0, 0, FRAME_INDENT)))
    return Group(*parts)


def _render_entry(ctx: RenderingContext, entry: _Entry) -> RenderableType:
    if isinstance(entry, _FrameEntry):
        return _render_frame(ctx, entry)
    if isinstance(entry, _HiddenFrames):
        names = sorted({m for m in entry.modules if m})
        modules = ", ".join(names[:MAX_HIDDEN_MODULE_NAMES])
        if len(names) > MAX_HIDDEN_MODULE_NAMES:
            modules += ", …"
        label = f"… {entry.n_frames} library frame{'s' if entry.n_frames != 1 else ''} hidden"
        if modules:
            label += f" ({modules})"
        return Padding(Text(label, style=f"dim {ctx.theme.err_filepath}"), (0, 0, 0, FRAME_INDENT))
    return Padding(
        Text(f"… skipped {entry.n_frames} frames …", style=f"dim {ctx.theme.err_filepath}"),
        (0, 0, 0, FRAME_INDENT),
    )


def render_backtrace(
    ctx: RenderingContext,
    frames: Sequence[Frame],
    *,
    reverse_backtrace: bool = True,
    max_n_frames: int = 30,
    hide_frames: bool = True,
    frame_filter: Callable[[Frame], bool] | None = None,
) -> Group:
    """Render the frame list of a traceback.

    Args:
        ctx: Rendering context of the current error event
        frames: Frames in interpreter order (outermost first)
        reverse_backtrace: Show the most recent frame first
        max_n_frames: Frames shown before the middle of the list is elided
        hide_frames: Collapse frames for which ``frame_filter`` returns True
        frame_filter: Library-frame predicate

    Returns:
        A rich Group with one item per frame or collapsed run of frames
    """
    entries = _elide(_collect_entries(frames, hide_frames, frame_filter), max_n_frames)
    if reverse_backtrace:
        entries.reverse()

    order = "most recent call first" if reverse_backtrace else "most recent call last"
    items: list[RenderableType] = [
        Text.assemble(("Error Stack", f"bold {ctx.theme.err_errmsg}"), (f" ({order})", "dim"))
    ]
    for entry in entries:
        items.append(Text())
        items.append(_render_entry(ctx, entry))
    items.append(Text())
    return Group(*items)
