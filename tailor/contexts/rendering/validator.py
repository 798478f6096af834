"""
Structural checks on a LaTeX document before it is sent to any backend.

validate_document() is the only blocking check: a document must carry both
bookend markers. find_structural_concerns() reports softer problems for the
log and never raises; a malformed-but-bookended document is left for the
backends to accept or reject.
"""

import re
from typing import List

from tailor.exceptions import StructuralError

START_MARKER = r"\documentclass"
END_MARKER = r"\end{document}"

MISSING_START = "missing-start-marker"
MISSING_END = "missing-end-marker"

# \resumeProjectHeading{...}{ } - whitespace inside the second argument breaks the macro
MALFORMED_PROJECT_HEADING = re.compile(r"\\resumeProjectHeading\s*\{[^\n]*?\}\s*\{\s+\}")

# Escaped braces are literal characters; a double backslash is a line break, not an escape
ESCAPED_BRACE = re.compile(r"\\\\|\\[{}]")
COMMENT = re.compile(r"(?<!\\)%.*$", re.MULTILINE)


def validate_document(
    document: str, start_marker: str = START_MARKER, end_marker: str = END_MARKER
) -> None:
    """
    Check that a document carries its structural bookends.

    Args:
        document: LaTeX source
        start_marker: Token that must appear (default: \\documentclass)
        end_marker: Token that must appear (default: \\end{document})

    Raises:
        StructuralError: 'missing-start-marker' or 'missing-end-marker'
    """
    if start_marker not in document:
        raise StructuralError(MISSING_START)
    if end_marker not in document:
        raise StructuralError(MISSING_END)


def brace_balance(document: str) -> int:
    """Count of unmatched '{' (positive) or '}' (negative), ignoring comments and escapes."""
    stripped = ESCAPED_BRACE.sub("", COMMENT.sub("", document))
    return stripped.count("{") - stripped.count("}")


def find_structural_concerns(document: str) -> List[str]:
    """
    Advisory checks for problems generation commonly introduces.

    Returns:
        Human-readable concerns (empty list if none)
    """
    concerns = []

    balance = brace_balance(document)
    if balance > 0:
        concerns.append(f"{balance} unclosed '{{'")
    elif balance < 0:
        concerns.append(f"{-balance} unmatched '}}'")

    headings = MALFORMED_PROJECT_HEADING.findall(document)
    if headings:
        concerns.append(
            f"{len(headings)} \\resumeProjectHeading with whitespace in its empty second argument"
        )

    if document.count(START_MARKER) > 1:
        concerns.append(f"{document.count(START_MARKER)} {START_MARKER} declarations")

    return concerns
