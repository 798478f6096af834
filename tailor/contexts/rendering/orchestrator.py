"""
Rendering orchestrator: first-success fallback across rendering backends.

Backends are tried strictly in the given order. Each reply is normalized
according to its backend's ResponseShape and must then clear a minimum size,
since several services answer errors with a small 200 page. The first usable
artifact ends the chain; if none is produced the collected per-backend reasons
are raised in a RenderError.
"""

import time
from typing import Dict, Optional, Sequence

import httpx

from tailor.contexts.rendering.artifact import Artifact
from tailor.contexts.rendering.backends import BackendFailure, BackendReply, RenderBackend
from tailor.contexts.rendering.logger import (
    log_backend_attempt,
    log_backend_failed,
    log_render_exhausted,
    log_render_result,
    log_render_start,
)
from tailor.contexts.rendering.normalizers import Fetch, normalize
from tailor.exceptions import RenderError

# Payloads below this size are error pages, not documents
MIN_ARTIFACT_BYTES = 1000

ALL_BACKENDS_EXHAUSTED = "all-backends-exhausted"

PROBE_DOCUMENT = r"""\documentclass{article}
\begin{document}
Rendering backend probe.
\end{document}
"""


def http_fetcher(client: httpx.Client) -> Fetch:
    """Fetch capability for follow-up downloads over a shared client."""

    def fetch(url: str) -> BackendReply:
        return BackendReply.from_response(client.get(url))

    return fetch


def _default_fetch(url: str) -> BackendReply:
    return BackendReply.from_response(httpx.get(url, follow_redirects=True, timeout=60.0))


def try_backend(
    backend: RenderBackend,
    document: str,
    fetch: Fetch,
    min_artifact_bytes: int = MIN_ARTIFACT_BYTES,
) -> bytes:
    """
    Invoke one backend and normalize its reply.

    Returns:
        Artifact bytes of at least min_artifact_bytes

    Raises:
        BackendFailure: For every way this backend can fail, with a short reason
    """
    try:
        reply = backend.invoke(document)
        content = normalize(backend.shape, reply, backend.options, fetch)
    except BackendFailure:
        raise
    except Exception as e:
        raise BackendFailure(f"{type(e).__name__}: {e}") from e

    if len(content) < min_artifact_bytes:
        raise BackendFailure(
            f"payload of {len(content)} bytes is below the {min_artifact_bytes}-byte minimum"
        )
    return content


def render_document(
    document: str,
    backends: Sequence[RenderBackend],
    fetch: Optional[Fetch] = None,
    min_artifact_bytes: int = MIN_ARTIFACT_BYTES,
) -> Artifact:
    """
    Render a document with the first backend that produces a usable artifact.

    Args:
        document: LaTeX source
        backends: Backends in fallback order
        fetch: Capability for follow-up downloads (default: one-off httpx GET)
        min_artifact_bytes: Smallest payload accepted as an artifact

    Returns:
        Artifact from the first successful backend; later backends are not invoked

    Raises:
        RenderError: 'all-backends-exhausted' with each backend's failure reason
        ValueError: Two backends share a name
    """
    names = [b.name for b in backends]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate backend names: {duplicates}")

    fetch = fetch or _default_fetch
    start_time = time.time()
    log_render_start(len(document), names)

    reasons: Dict[str, str] = {}
    for position, backend in enumerate(backends, 1):
        log_backend_attempt(backend.name, backend.shape.value, position, len(backends))
        try:
            content = try_backend(backend, document, fetch, min_artifact_bytes)
        except BackendFailure as failure:
            reasons[backend.name] = failure.reason
            log_backend_failed(backend.name, failure.reason)
            continue

        artifact = Artifact.from_bytes(content, backend=backend.name)
        log_render_result(artifact, time.time() - start_time)
        return artifact

    log_render_exhausted(reasons, time.time() - start_time)
    raise RenderError(ALL_BACKENDS_EXHAUSTED, reasons)


def check_backend(
    backend: RenderBackend,
    fetch: Optional[Fetch] = None,
    min_artifact_bytes: int = MIN_ARTIFACT_BYTES,
) -> bool:
    """True if the backend renders a minimal probe document."""
    try:
        try_backend(backend, PROBE_DOCUMENT, fetch or _default_fetch, min_artifact_bytes)
    except BackendFailure as failure:
        log_backend_failed(backend.name, failure.reason)
        return False
    return True
