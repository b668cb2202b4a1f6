from __future__ import annotations

FENCE = "```"

PROMPT_TEMPLATE = (
    "I've got this error in my code: \n\n"
    f"{FENCE}\n{{message}}\n{FENCE}\n\n"
    "Please summarize the error, where it happens and why. "
    "Then suggest ways to fix it."
)
BACKTRACE_TEMPLATE = f"\n\nHere's the stacktrace:\n\n{FENCE}\n{{backtrace}}\n{FENCE}"


def compose_prompt(rendered_message: str, rendered_backtrace: str | None = None) -> str:
    """Build the question sent to the model for one error.

    Args:
        rendered_message: The exception message as shown in the error panel
        rendered_backtrace: Plain-text traceback, or None for message-only errors

    Returns:
        The prompt text
    """
    prompt = PROMPT_TEMPLATE.format(message=rendered_message.strip("\n"))
    if rendered_backtrace is not None:
        prompt += BACKTRACE_TEMPLATE.format(backtrace=rendered_backtrace.rstrip("\n"))
    return prompt
