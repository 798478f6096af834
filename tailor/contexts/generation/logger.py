"""
Generation context logger.

Provides logging interface for generation context with automatic [generate] prefix.
All generation modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[generate]"


# Wrapper functions with automatic [generate] prefix


def _log_info(message: str) -> None:
    """Log info message with [generate] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [generate] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [generate] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [generate] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [generate] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level generation-specific logging helpers


def log_attempt_start(provider_name: str, attempt: int, max_attempts: int, prompt_length: int) -> None:
    """Log the start of one provider call."""
    _log_info(f"Calling {provider_name} (attempt {attempt}/{max_attempts})")
    _log_debug(f"  Instruction length: {prompt_length} characters")


def log_attempt_failed(attempt, message: str) -> None:  # GenerationAttempt
    """Log a failed provider call with its retry classification."""
    _log_warning(
        f"Attempt {attempt.attempt_number}/{attempt.max_attempts} failed "
        f"({attempt.error_class}): {message}"
    )


def log_backoff(delay_s: float, next_attempt: int, max_attempts: int) -> None:
    """Log the delay before the next attempt."""
    _log_info(f"Retrying in {delay_s:.1f}s... (next attempt {next_attempt}/{max_attempts})")


def log_generation_result(provider_name: str, output: str, attempts: int, elapsed_time: float) -> None:
    """Log a successful transformation."""
    _log_success(
        f"{provider_name}: document tailored in {attempts} attempt(s) ({elapsed_time:.2f}s)"
    )
    _log_debug(f"  Output length: {len(output)} characters")


def log_generation_failed(error, elapsed_time: float) -> None:  # GenerationError
    """Log the terminal failure of a transformation."""
    _log_error(f"Generation failed ({elapsed_time:.2f}s): {error}")
