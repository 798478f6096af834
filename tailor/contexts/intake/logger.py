"""
Intake context logger.

Provides logging interface for intake context with automatic [intake] prefix.
All intake modules should import from this module, not from loguru directly.
"""

from typing import List

from loguru import logger

CONTEXT_PREFIX = "[intake]"


def _log_info(message: str) -> None:
    """Log info message with [intake] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [intake] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_task_received(mode: str, description: str = "", keywords: List[str] = ()) -> None:
    """Log the accepted task without dumping the whole job description."""
    if mode == "keywords":
        _log_info(f"Keywords task: {len(keywords)} keywords")
        _log_debug(f"  Keywords: {', '.join(keywords)}")
    else:
        preview = description[:100].replace("\n", " ")
        _log_info(f"Job description task: {len(description)} characters")
        _log_debug(f"  Preview: {preview}...")
