"""
Generation client: rewrites a document through an LLM provider.

transform() makes up to max_attempts provider calls. Failures whose message
marks them as transient (429, 503, overloaded, ...) are retried after an
exponential backoff; anything else fails immediately. Successful output has its
markdown fences stripped before it is returned.
"""

import time
from typing import Callable, Iterable, Optional

from tailor.config import ProviderConfig
from tailor.contexts.generation.logger import (
    _log_warning,
    log_attempt_failed,
    log_attempt_start,
    log_backoff,
    log_generation_failed,
    log_generation_result,
)
from tailor.contexts.generation.providers import LLMProvider, get_provider
from tailor.contexts.generation.retry import RetryPolicy, run_with_retry
from tailor.contexts.generation.sanitizer import sanitize_latex_output
from tailor.contexts.intake.prompts import (
    build_description_instruction,
    build_keywords_instruction,
)
from tailor.contexts.intake.task_input import NO_TASK, KeywordInput
from tailor.exceptions import GenerationError, InputError


class GenerationClient:
    """
    Retrying wrapper around one LLM provider.

    Args:
        provider: Provider used for every attempt
        max_attempts: Total provider calls allowed per transform (default: 3)
        base_delay: Backoff after the first failure in seconds; doubles each retry (default: 2.0)
        sleep: Delay capability, injectable for tests (default: time.sleep)

    Example:
        client = GenerationClient.from_config(ProviderConfig("gemini", key, "gemini-2.0-flash"))
        tailored = client.tailor_to_description(job_description, resume_tex)
    """

    def __init__(
        self,
        provider: LLMProvider,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.provider = provider
        self.policy = RetryPolicy(max_attempts=max_attempts, base_delay_s=base_delay)
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: ProviderConfig, **kwargs) -> "GenerationClient":
        """Build the provider from explicit configuration and wrap it."""
        return cls(get_provider(config), **kwargs)

    @property
    def provider_name(self) -> str:
        return getattr(self.provider, "name", type(self.provider).__name__)

    def transform(self, instruction: str, original: Optional[str] = None) -> str:
        """
        Ask the provider to transform a document.

        Args:
            instruction: Complete instruction text (already embeds the original document)
            original: The original document, used only for logging; never modified

        Returns:
            Transformed document with fences and surrounding whitespace removed

        Raises:
            InputError: Blank instruction (no provider call made)
            GenerationError: Terminal provider error, or retry budget exhausted
        """
        if not instruction or not instruction.strip():
            raise InputError(NO_TASK, "instruction is empty")

        max_attempts = self.policy.max_attempts
        start_time = time.time()

        def call_provider() -> str:
            return self.provider.generate(instruction).content

        try:
            raw_output, state = run_with_retry(
                call_provider,
                self.policy,
                self._sleep,
                on_attempt=lambda n: log_attempt_start(
                    self.provider_name, n, max_attempts, len(instruction)
                ),
                on_attempt_failed=log_attempt_failed,
                on_backoff=lambda delay, n: log_backoff(delay, n, max_attempts),
            )
        except GenerationError as e:
            log_generation_failed(e, time.time() - start_time)
            raise

        tailored = sanitize_latex_output(raw_output)
        log_generation_result(self.provider_name, tailored, state.attempt, time.time() - start_time)
        if original is not None and tailored == original.strip():
            _log_warning("Provider returned the document unchanged")
        return tailored

    def tailor_to_description(
        self, description: str, original: str, excluded: Optional[Iterable[str]] = None
    ) -> str:
        """
        Rewrite a resume to match a job description.

        Raises:
            InputError: Empty or whitespace-only description (no provider call made)
            GenerationError: See transform()
        """
        instruction = build_description_instruction(description, original, excluded=excluded)
        return self.transform(instruction, original)

    def tailor_to_keywords(self, keywords: KeywordInput, original: str) -> str:
        """
        Rewrite a resume to include an exact keyword list.

        Raises:
            InputError: No keywords after normalization (no provider call made)
            GenerationError: See transform()
        """
        instruction = build_keywords_instruction(keywords, original)
        return self.transform(instruction, original)
