"""
Task input normalization.

A tailoring task is either a free-text job description or an ordered list of
keywords. Keywords may arrive as a list or as one comma-separated string; they
are trimmed and empty entries dropped, but order and duplicates are preserved.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from tailor.contexts.intake.logger import log_task_received
from tailor.exceptions import InputError

NO_TASK = "no-task-specified"
AMBIGUOUS_TASK = "ambiguous-task"

KeywordInput = Union[str, Iterable[Optional[str]]]


@dataclass(frozen=True)
class TaskSpec:
    """
    Validated tailoring task.

    Attributes:
        mode: "description" or "keywords"
        description: Job description text (description mode only)
        keywords: Normalized keyword list (keywords mode only)
    """

    mode: str
    description: str = ""
    keywords: List[str] = field(default_factory=list)


def normalize_keywords(keywords: Optional[KeywordInput]) -> List[str]:
    """
    Normalize keyword input into an ordered list of non-empty strings.

    Args:
        keywords: List of keywords or a comma-separated string (None allowed)

    Returns:
        Trimmed keywords in input order, empties removed, duplicates kept

    Examples:
        >>> normalize_keywords(" Go, Kubernetes ,, gRPC ")
        ['Go', 'Kubernetes', 'gRPC']
        >>> normalize_keywords(["Go", "", None, " Go "])
        ['Go', 'Go']
    """
    if keywords is None:
        return []

    if isinstance(keywords, str):
        entries = keywords.split(",")
    else:
        entries = [str(k) for k in keywords if k]

    return [entry.strip() for entry in entries if entry.strip()]


def require_description(description: Optional[str]) -> str:
    """Return the description, or raise InputError if it is empty or whitespace-only."""
    if description is None or not description.strip():
        raise InputError(NO_TASK, "job description is empty")
    return description


def require_keywords(keywords: Optional[KeywordInput]) -> List[str]:
    """Return normalized keywords, or raise InputError if none survive normalization."""
    normalized = normalize_keywords(keywords)
    if not normalized:
        raise InputError(NO_TASK, "no keywords provided")
    return normalized


def resolve_task(
    task_description: Optional[str] = None,
    keywords: Optional[KeywordInput] = None,
) -> TaskSpec:
    """
    Resolve caller input into a TaskSpec.

    Exactly one of task_description or keywords must be given.

    Raises:
        InputError: 'ambiguous-task' if both are given, 'no-task-specified' if
            neither is given or the given one is empty
    """
    if task_description is not None and keywords is not None:
        raise InputError(AMBIGUOUS_TASK, "give a job description or keywords, not both")

    if keywords is not None:
        spec = TaskSpec(mode="keywords", keywords=require_keywords(keywords))
    else:
        spec = TaskSpec(mode="description", description=require_description(task_description))

    log_task_received(spec.mode, spec.description, spec.keywords)
    return spec
