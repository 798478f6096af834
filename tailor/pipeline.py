"""
End-to-end tailoring pipeline: task -> tailored LaTeX -> rendered artifact.

This is the single caller-facing operation. It processes one request
synchronously and keeps no state between calls. Failures surface as one of
the four TailorError kinds; describe_failure() maps them onto the HTTP
semantics a web layer would expose.
"""

import time
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, Optional, Sequence

from loguru import logger

from tailor.config import Settings
from tailor.contexts.generation.client import GenerationClient
from tailor.contexts.intake.task_input import KeywordInput, resolve_task
from tailor.contexts.rendering.artifact import Artifact
from tailor.contexts.rendering.backends import RenderBackend
from tailor.contexts.rendering.normalizers import Fetch
from tailor.contexts.rendering.orchestrator import (
    MIN_ARTIFACT_BYTES,
    check_backend,
    render_document,
)
from tailor.contexts.rendering.validator import find_structural_concerns, validate_document
from tailor.exceptions import (
    GenerationError,
    InputError,
    ProviderNotConfiguredError,
    RenderError,
    StructuralError,
    TailorError,
)
from tailor.utils.event_logging import log_pipeline_event
from tailor.utils.timestamp import download_date, now

# Seconds a client should wait after a rate-limited generation
RETRY_AFTER_S = 60


@dataclass(frozen=True)
class TailorResult:
    """
    Outcome of a successful tailoring request.

    Attributes:
        artifact: Rendered artifact (bytes, format, producing backend)
        document: Tailored LaTeX source that was rendered
        request_id: Identifier used in logs and pipeline events
    """

    artifact: Artifact
    document: str
    request_id: str = ""

    @property
    def content(self) -> bytes:
        return self.artifact.content

    @property
    def format(self) -> str:
        return self.artifact.format


def load_template(path: Path) -> str:
    """Read the LaTeX resume template, raising InputError if it is missing."""
    path = Path(path)
    if not path.exists():
        raise InputError("template-not-found", f"resume template not found at {path}")
    return path.read_text(encoding="utf-8")


def tailor_resume(
    template: str,
    task_description: Optional[str] = None,
    keywords: Optional[KeywordInput] = None,
    *,
    generation_client: GenerationClient,
    backends: Sequence[RenderBackend],
    fetch: Optional[Fetch] = None,
    min_artifact_bytes: int = MIN_ARTIFACT_BYTES,
    strict_validation: bool = True,
    request_id: Optional[str] = None,
) -> TailorResult:
    """
    Tailor a LaTeX resume to a task and render it.

    Exactly one of task_description or keywords must be given.

    Args:
        template: Original LaTeX resume
        task_description: Free-text job description
        keywords: Keyword list or comma-separated string
        generation_client: Client used to rewrite the resume
        backends: Rendering backends in fallback order
        fetch: Follow-up download capability for URL-returning backends
        min_artifact_bytes: Smallest payload accepted as an artifact
        strict_validation: Fail before rendering if bookends are missing
            (False logs the problem and renders anyway)
        request_id: Identifier for logs/events (default: timestamp)

    Returns:
        TailorResult with the artifact and the tailored LaTeX

    Raises:
        InputError: Missing, empty or ambiguous task
        GenerationError: Provider not configured, terminal error, or retries exhausted
        StructuralError: Tailored document lacks a bookend (strict_validation only)
        RenderError: Every backend failed
    """
    request_id = request_id or now()
    start_time = time.time()

    try:
        task = resolve_task(task_description, keywords)
        log_pipeline_event("tailor_started", request_id, "pipeline", mode=task.mode)

        if task.mode == "keywords":
            document = generation_client.tailor_to_keywords(task.keywords, template)
        else:
            document = generation_client.tailor_to_description(task.description, template)

        for concern in find_structural_concerns(document):
            logger.warning(f"Structural concern in tailored document: {concern}")

        try:
            validate_document(document)
        except StructuralError as e:
            if strict_validation:
                raise
            logger.warning(f"Rendering despite structural error: {e.reason}")

        artifact = render_document(
            document, backends, fetch=fetch, min_artifact_bytes=min_artifact_bytes
        )

    except TailorError as e:
        report = describe_failure(e)
        log_pipeline_event(
            "tailor_failed",
            request_id,
            "pipeline",
            kind=report.kind,
            status_code=report.status_code,
            error=str(e),
            elapsed_s=round(time.time() - start_time, 2),
        )
        raise

    log_pipeline_event(
        "tailor_completed",
        request_id,
        "pipeline",
        backend=artifact.backend,
        format=artifact.format,
        size_bytes=artifact.size,
        elapsed_s=round(time.time() - start_time, 2),
    )
    logger.success(f"Tailored resume ready: {artifact.format}, {artifact.size} bytes")

    return TailorResult(artifact=artifact, document=document, request_id=request_id)


@dataclass(frozen=True)
class FailureReport:
    """
    User-facing description of a failure.

    Attributes:
        status_code: HTTP status a web layer should answer with
        error: Message for the user
        kind: 'input', 'configuration', 'rate_limit', 'generation', 'structure', 'render'
        retry_after: Seconds to wait before retrying (rate limits only)
        details: Diagnostics (per-backend reasons, reason codes)
    """

    status_code: int
    error: str
    kind: str
    retry_after: Optional[int] = None
    details: Dict[str, str] = field(default_factory=dict)

    @property
    def transient(self) -> bool:
        """True if trying again later may succeed without any change."""
        return self.kind == "rate_limit"

    def to_dict(self) -> dict:
        body = {"error": self.error, "type": self.kind}
        if self.retry_after is not None:
            body["retryAfter"] = self.retry_after
        if self.details:
            body["details"] = dict(self.details)
        return body


def describe_failure(error: Exception) -> FailureReport:
    """
    Map an exception to status code, message and diagnostics.

    InputError -> 400; ProviderNotConfiguredError -> 500; retryable
    GenerationError -> 503 with retry_after; other GenerationError -> 500;
    StructuralError -> 500; RenderError -> 500 with per-backend reasons.
    """
    if isinstance(error, InputError):
        return FailureReport(
            status_code=400,
            error=f"Invalid request: {error}",
            kind="input",
            details={"reason": error.reason},
        )

    if isinstance(error, ProviderNotConfiguredError):
        return FailureReport(
            status_code=500,
            error=f"Generation provider not configured: {error.last_message}",
            kind="configuration",
        )

    if isinstance(error, GenerationError):
        if error.retryable:
            return FailureReport(
                status_code=503,
                error="AI service is temporarily overloaded. Please try again in a few minutes.",
                kind="rate_limit",
                retry_after=RETRY_AFTER_S,
                details={"attempts": str(error.attempts_made), "last_error": error.last_message},
            )
        return FailureReport(
            status_code=500,
            error="Failed to process resume with AI. Please check your API key and try again.",
            kind="generation",
            details={"attempts": str(error.attempts_made), "last_error": error.last_message},
        )

    if isinstance(error, StructuralError):
        return FailureReport(
            status_code=500,
            error="The tailored resume is not a complete LaTeX document.",
            kind="structure",
            details={"reason": error.reason},
        )

    if isinstance(error, RenderError):
        return FailureReport(
            status_code=500,
            error="Failed to compile PDF: every rendering backend failed.",
            kind="render",
            details=dict(error.backend_reasons),
        )

    return FailureReport(
        status_code=500, error="An unexpected error occurred. Please try again.", kind="unexpected"
    )


def output_filename(candidate_name: str, fmt: str = "pdf", day: Optional[date] = None) -> str:
    """
    Download filename, e.g. 'Jane_Doe_Resume_18102026.pdf'.

    Unknown formats get a .bin extension.
    """
    stem = "_".join(candidate_name.split()) or "Resume"
    if not stem.endswith("Resume"):
        stem = f"{stem}_Resume"
    extension = fmt if fmt in ("pdf", "png") else "bin"
    return f"{stem}_{download_date(day)}.{extension}"


def status_report(
    settings: Settings,
    backends: Sequence[RenderBackend],
    fetch: Optional[Fetch] = None,
    probe: bool = True,
) -> dict:
    """
    Readiness check: provider credentials, template presence, backend availability.

    Args:
        settings: Resolved settings
        backends: Backends to report on
        fetch: Follow-up download capability for probes
        probe: Render a probe document on each backend (False lists them as unknown)

    Returns:
        Dict with generation_configured, template_exists, backends, ready
    """
    backend_status = {}
    for backend in backends:
        backend_status[backend.name] = (
            check_backend(backend, fetch, settings.min_artifact_bytes) if probe else None
        )

    generation_configured = settings.provider.is_configured
    template_exists = Path(settings.template_path).exists()
    any_backend = any(backend_status.values()) if probe else bool(backends)

    return {
        "provider": f"{settings.provider.provider}/{settings.provider.model_id}",
        "generation_configured": generation_configured,
        "template_exists": template_exists,
        "backends": backend_status,
        "ready": generation_configured and template_exists and any_backend,
    }
