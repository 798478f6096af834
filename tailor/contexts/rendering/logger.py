"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from loguru directly.
"""

from typing import Dict, List

from loguru import logger

CONTEXT_PREFIX = "[render]"


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_render_start(document_length: int, backend_names: List[str]) -> None:
    """Log start of a render with the fallback order."""
    _log_info(f"Rendering document ({document_length} characters)")
    _log_info(f"Backend order: {' -> '.join(backend_names) or '(none)'}")


def log_backend_attempt(name: str, shape: str, position: int, total: int) -> None:
    _log_debug(f"Trying backend {position}/{total}: {name} ({shape})")


def log_backend_failed(name: str, reason: str) -> None:
    """Log why a backend was skipped."""
    _log_warning(f"Backend '{name}' failed: {reason}")


def log_render_result(artifact, elapsed_time: float) -> None:  # Artifact
    """Log the artifact that ended the fallback chain."""
    _log_success(
        f"{artifact.backend}: {artifact.format} artifact, {artifact.size} bytes ({elapsed_time:.2f}s)"
    )
    if artifact.page_count is not None:
        _log_debug(f"  Pages: {artifact.page_count}")


def log_render_exhausted(reasons: Dict[str, str], elapsed_time: float) -> None:
    """Log the per-backend reasons once every backend has failed."""
    _log_error(f"All {len(reasons)} backends failed ({elapsed_time:.2f}s)")
    for name, reason in reasons.items():
        _log_error(f"  {name}: {reason}")


def log_compiler_output(stdout: str, stderr: str = "") -> None:
    """
    Dump compiler output verbatim at debug level.

    Uses opt(raw=True) so loguru does not prefix every line of multi-line output.
    """
    if stdout:
        logger.opt(raw=True).debug(f"\n{'=' * 80}\nCOMPILER STDOUT:\n{'=' * 80}\n{stdout}\n")
    if stderr:
        logger.opt(raw=True).debug(f"\n{'=' * 80}\nCOMPILER STDERR:\n{'=' * 80}\n{stderr}\n")
