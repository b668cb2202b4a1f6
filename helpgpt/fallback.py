"""Plain-text reporting used when the styled report cannot be produced.

Everything here goes through the interpreter's own ``traceback`` formatting so
that it cannot fail for the same reason as the styled pipeline.
"""

from __future__ import annotations

import logging
import traceback
from typing import TextIO

from helpgpt.frames import ErrorEvent

logger = logging.getLogger(__name__)

FALLBACK_MARKER = "helpgpt: failed to render the error report, falling back to the default traceback"
FAILURES_HEADER = "Error during error report generation:"
ORIGINAL_HEADER = "Original error:"
MAX_NESTED_FAILURES = 8


def format_bare(event: ErrorEvent) -> str:
    """The interpreter's default rendering of ``event``, using the event's frames."""
    error = event.error
    exc = traceback.TracebackException(type(error), error, error.__traceback__)
    exc.stack = traceback.StackSummary.from_list([frame.summary for frame in event.frames])
    return "".join(exc.format())


def _format_single(error: BaseException) -> str:
    return "".join(
        traceback.format_exception(type(error), error, error.__traceback__, chain=False)
    )


def collect_failures(
    failure: BaseException,
    original: BaseException | None = None,
    limit: int = MAX_NESTED_FAILURES,
) -> list[BaseException]:
    """Exceptions active when ``failure`` was raised, oldest cause first.

    Follows ``__cause__`` (or ``__context__`` when there is no explicit cause)
    from ``failure`` back to the first exception of the chain. ``original`` is
    left out since it is reported on its own. At most ``limit`` exceptions are
    returned; the most recent ones are kept.
    """
    chain: list[BaseException] = []
    seen: set[int] = set()
    current: BaseException | None = failure
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if current is not original:
            chain.append(current)
        current = current.__cause__ or current.__context__
    chain.reverse()
    return chain[-limit:] if limit > 0 else []


def print_fallback(io: TextIO, failure: BaseException, event: ErrorEvent) -> None:
    """Report ``failure`` and then ``event`` without any styling."""
    print(FALLBACK_MARKER, file=io)
    logger.error("error while rendering error message: %r", failure)

    for i, exc in enumerate(collect_failures(failure, event.error)):
        if i == 0:
            print(FAILURES_HEADER, file=io)
        io.write(_format_single(exc))
        io.write("\n")

    io.write("\n" * 2)
    print(ORIGINAL_HEADER, file=io)
    io.write(format_bare(event))
    io.flush()
