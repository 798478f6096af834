"""Cleanup of raw provider output into a bare LaTeX document."""

import re

# Opening fence with optional language tag (```latex, ```TeX, ```)
OPENING_FENCE = re.compile(r"\A```[ \t]*[\w+-]*[ \t]*\r?\n?", re.IGNORECASE)
CLOSING_FENCE = re.compile(r"\r?\n?```[ \t]*\Z")


def sanitize_latex_output(text: str) -> str:
    """
    Strip markdown fences and surrounding whitespace from provider output.

    Args:
        text: Raw completion text

    Returns:
        The document without a leading ```lang line, trailing ``` line,
        or leading/trailing whitespace

    Example:
        >>> sanitize_latex_output("```latex\\n\\\\documentclass{article}\\n```")
        '\\\\documentclass{article}'
    """
    if not text:
        return text

    out = text.strip()
    if out.startswith("```"):
        out = OPENING_FENCE.sub("", out, count=1)
        out = CLOSING_FENCE.sub("", out, count=1)

    return out.strip()

