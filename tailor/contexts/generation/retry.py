"""
Retry policy for generation calls, as an explicit state machine.

    Attempting(n) --success--------------------------> Succeeded
    Attempting(n) --terminal error / budget spent----> Failed
    Attempting(n) --retryable error, budget left-----> BackingOff(delay)
    BackingOff(delay) --delay elapsed----------------> Attempting(n + 1)

Transitions are pure functions of (state, event) so the contract can be
tested without any waiting; run_with_retry() drives them with an injected
sleep capability.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Tuple, TypeVar

from tailor.exceptions import GenerationError

T = TypeVar("T")

# Case-sensitive substrings marking a transient provider failure
RETRYABLE_MARKERS = ("429", "503", "overloaded", "Service Unavailable", "Too Many Requests")

RETRYABLE = "retryable"
TERMINAL = "terminal"


def is_retryable(message: str) -> bool:
    """True if the error text indicates rate limiting or temporary overload."""
    return any(marker in message for marker in RETRYABLE_MARKERS)


class Phase(Enum):
    ATTEMPTING = "attempting"
    BACKING_OFF = "backing_off"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry budget and backoff curve.

    Attributes:
        max_attempts: Total provider calls allowed (>= 1)
        base_delay_s: Delay after the first failure; doubles after each further one
    """

    max_attempts: int = 3
    base_delay_s: float = 2.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay_s < 0:
            raise ValueError(f"base_delay_s must be >= 0, got {self.base_delay_s}")

    def delay_for(self, attempt: int) -> float:
        """Backoff after the given (1-based) failed attempt: base * 2^(attempt-1)."""
        return self.base_delay_s * (2 ** (attempt - 1))


@dataclass(frozen=True)
class GenerationAttempt:
    """Record of one provider call. Lives only for the duration of a transform."""

    attempt_number: int
    max_attempts: int
    error_class: Optional[str] = None


@dataclass(frozen=True)
class RetryState:
    phase: Phase
    attempt: int
    max_attempts: int
    delay_s: float = 0.0
    result: Optional[str] = None
    last_error: Optional[str] = None
    retryable: bool = False

    @classmethod
    def start(cls, policy: RetryPolicy) -> "RetryState":
        return cls(phase=Phase.ATTEMPTING, attempt=1, max_attempts=policy.max_attempts)

    @property
    def done(self) -> bool:
        return self.phase in (Phase.SUCCEEDED, Phase.FAILED)

    def to_error(self) -> GenerationError:
        """GenerationError describing a FAILED state."""
        return GenerationError(
            attempts_made=self.attempt,
            last_message=self.last_error or "unknown error",
            retryable=self.retryable,
        )


def _expect(state: RetryState, phase: Phase, event: str) -> None:
    if state.phase is not phase:
        raise ValueError(f"Cannot handle '{event}' in phase {state.phase.value}")


def on_success(state: RetryState, result: str) -> RetryState:
    """Attempting(n) -> Succeeded."""
    _expect(state, Phase.ATTEMPTING, "success")
    return replace(state, phase=Phase.SUCCEEDED, result=result)


def on_failure(
    state: RetryState, message: str, policy: RetryPolicy
) -> Tuple[RetryState, GenerationAttempt]:
    """
    Attempting(n) -> BackingOff(delay) | Failed.

    Returns:
        Tuple of (next state, attempt record carrying the error classification)
    """
    _expect(state, Phase.ATTEMPTING, "failure")

    retryable = is_retryable(message)
    attempt = GenerationAttempt(
        attempt_number=state.attempt,
        max_attempts=state.max_attempts,
        error_class=RETRYABLE if retryable else TERMINAL,
    )

    if retryable and state.attempt < state.max_attempts:
        next_state = replace(
            state,
            phase=Phase.BACKING_OFF,
            delay_s=policy.delay_for(state.attempt),
            last_error=message,
            retryable=True,
        )
    else:
        next_state = replace(state, phase=Phase.FAILED, last_error=message, retryable=retryable)

    return next_state, attempt


def on_backoff_elapsed(state: RetryState) -> RetryState:
    """BackingOff(delay) -> Attempting(n + 1)."""
    _expect(state, Phase.BACKING_OFF, "backoff elapsed")
    return replace(state, phase=Phase.ATTEMPTING, attempt=state.attempt + 1, delay_s=0.0)


def run_with_retry(
    operation: Callable[[], str],
    policy: RetryPolicy,
    sleep: Callable[[float], None],
    on_attempt: Optional[Callable[[int], None]] = None,
    on_attempt_failed: Optional[Callable[[GenerationAttempt, str], None]] = None,
    on_backoff: Optional[Callable[[float, int], None]] = None,
) -> Tuple[str, RetryState]:
    """
    Drive the state machine until it succeeds or fails.

    Any exception raised by operation counts as a failed attempt and is
    classified by its message.

    Args:
        operation: One provider call; returns text or raises
        policy: Retry budget and backoff curve
        sleep: Blocking delay capability (time.sleep in production)
        on_attempt: Called with the attempt number before each call
        on_attempt_failed: Called with (attempt record, error message) after each failure
        on_backoff: Called with (delay, next attempt number) before sleeping

    Returns:
        Tuple of (result text, final SUCCEEDED state)

    Raises:
        GenerationError: When the state machine reaches FAILED
    """
    state = RetryState.start(policy)

    while not state.done:
        if state.phase is Phase.ATTEMPTING:
            if on_attempt:
                on_attempt(state.attempt)
            try:
                result = operation()
            except Exception as e:
                message = str(e) or type(e).__name__
                state, attempt = on_failure(state, message, policy)
                if on_attempt_failed:
                    on_attempt_failed(attempt, message)
            else:
                state = on_success(state, result)

        elif state.phase is Phase.BACKING_OFF:
            if on_backoff:
                on_backoff(state.delay_s, state.attempt + 1)
            sleep(state.delay_s)
            state = on_backoff_elapsed(state)

    if state.phase is Phase.FAILED:
        raise state.to_error()

    return state.result, state
