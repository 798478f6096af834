"""
Intake Context

Responsibilities:
- Accepts the caller's task (job description XOR keyword list)
- Normalizes keyword input and rejects empty tasks before any network call
- Builds the transformation instruction sent to the generation provider

Owns: Task normalization, instruction text
Never: Calls providers or touches rendering backends
"""

from tailor.contexts.intake.prompts import build_description_instruction, build_keywords_instruction
from tailor.contexts.intake.task_input import TaskSpec, normalize_keywords, resolve_task

__all__ = [
    "TaskSpec",
    "build_description_instruction",
    "build_keywords_instruction",
    "normalize_keywords",
    "resolve_task",
]
