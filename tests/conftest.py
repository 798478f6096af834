"""Shared fakes for provider and backend tests."""

from typing import Callable, List, Union

import pytest

from tailor.contexts.generation.providers import LLMProvider, LLMResponse
from tailor.contexts.rendering.backends import BackendFailure, BackendReply, RenderBackend, ResponseShape

MINIMAL_DOCUMENT = r"""\documentclass{article}
\begin{document}
Jane Doe, Python developer.
\end{document}"""

# Large enough to clear the 1000-byte artifact minimum
PDF_BYTES = b"%PDF-1.4\n" + b"0" * 2048 + b"\n%%EOF\n"


class ScriptedProvider(LLMProvider):
    """Provider that replays scripted outcomes: strings are returned, exceptions raised."""

    _provider_prefix = "scripted"

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.prompts: List[str] = []
        self.update_model("test-model")

    def _call_api(self, prompt: str) -> LLMResponse:
        self.prompts.append(prompt)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return LLMResponse(content=outcome, model=self.model, input_tokens=0, output_tokens=0)


class RecordingBackend:
    """invoke() callable that counts calls and returns (or raises) a fixed outcome."""

    def __init__(self, outcome: Union[BackendReply, Exception]):
        self.outcome = outcome
        self.documents: List[str] = []

    @property
    def calls(self) -> int:
        return len(self.documents)

    def __call__(self, document: str) -> BackendReply:
        self.documents.append(document)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


@pytest.fixture
def minimal_document() -> str:
    return MINIMAL_DOCUMENT


@pytest.fixture
def pdf_bytes() -> bytes:
    return PDF_BYTES


@pytest.fixture
def scripted_provider() -> Callable[..., ScriptedProvider]:
    """Factory: scripted_provider("output") or scripted_provider(Exception("429"), "output")."""
    return lambda *outcomes: ScriptedProvider(outcomes)


@pytest.fixture
def recorded_sleep():
    """Sleep capability that records requested delays instead of waiting."""
    delays: List[float] = []

    def sleep(seconds: float) -> None:
        delays.append(seconds)

    sleep.delays = delays
    return sleep


@pytest.fixture
def make_backend():
    """
    Factory for RenderBackend fakes.

    make_backend("a", pdf_reply) returns (backend, recorder); the recorder
    exposes how often and with which documents the backend was invoked.
    """

    def make(
        name: str,
        outcome: Union[BackendReply, Exception, bytes],
        shape: ResponseShape = ResponseShape.RAW_BINARY,
        options=None,
    ):
        if isinstance(outcome, bytes):
            outcome = BackendReply(status_code=200, content=outcome)
        recorder = RecordingBackend(outcome)
        backend = RenderBackend(name=name, invoke=recorder, shape=shape, options=options or {})
        return backend, recorder

    return make


@pytest.fixture
def no_fetch():
    """Fetch capability that fails the test if a follow-up download is attempted."""

    def fetch(url: str) -> BackendReply:
        raise BackendFailure(f"unexpected follow-up fetch of {url}")

    return fetch
