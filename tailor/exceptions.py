"""
Exception taxonomy shared across contexts.

Every failure that leaves a context is one of four kinds:
- InputError: bad or missing caller input (never retried)
- GenerationError: provider gave up (retry budget exhausted or terminal error)
- StructuralError: transformed document failed bookend validation
- RenderError: every configured rendering backend failed
"""

from typing import Dict, Optional


class TailorError(Exception):
    """Base class for all resume-tailor failures."""

    pass


class InputError(TailorError):
    """
    Exception raised when the caller's input cannot be processed.

    Attributes:
        reason: Machine-readable reason (e.g., 'no-task-specified')
        detail: Optional human-readable elaboration
    """

    def __init__(self, reason: str, detail: Optional[str] = None):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)


class GenerationError(TailorError):
    """
    Exception raised when the generation provider could not produce a document.

    Attributes:
        attempts_made: Number of provider calls made before giving up
        last_message: Message of the last underlying provider error
        retryable: True if the last error was transient (rate limit, overload)
    """

    def __init__(self, attempts_made: int, last_message: str, retryable: bool = False):
        self.attempts_made = attempts_made
        self.last_message = last_message
        self.retryable = retryable

        plural = "attempt" if attempts_made == 1 else "attempts"
        super().__init__(
            f"Failed to tailor document after {attempts_made} {plural}: {last_message}"
        )


class ProviderNotConfiguredError(GenerationError):
    """Raised before any call when the provider lacks credentials or is unknown."""

    def __init__(self, message: str):
        super().__init__(attempts_made=0, last_message=message, retryable=False)


class StructuralError(TailorError):
    """
    Exception raised when a document is missing a structural bookend marker.

    Attributes:
        reason: 'missing-start-marker' or 'missing-end-marker'
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class RenderError(TailorError):
    """
    Exception raised when no rendering backend produced a usable artifact.

    Attributes:
        reason: Summary reason (e.g., 'all-backends-exhausted')
        backend_reasons: Ordered mapping of backend name -> failure reason
    """

    def __init__(self, reason: str, backend_reasons: Optional[Dict[str, str]] = None):
        self.reason = reason
        self.backend_reasons = dict(backend_reasons or {})

        parts = [reason]
        for name, backend_reason in self.backend_reasons.items():
            parts.append(f"  {name}: {backend_reason}")

        super().__init__("\n".join(parts))
