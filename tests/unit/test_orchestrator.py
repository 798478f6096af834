"""Unit tests for first-success rendering fallback."""

import httpx
import pytest

from tailor.contexts.rendering.backends import BackendReply, ResponseShape
from tailor.contexts.rendering.orchestrator import (
    ALL_BACKENDS_EXHAUSTED,
    check_backend,
    render_document,
)
from tailor.exceptions import RenderError


@pytest.mark.unit
def test_first_success_wins(make_backend, minimal_document, pdf_bytes, no_fetch):
    a, a_calls = make_backend("a", BackendReply(status_code=500, content=b"boom"))
    b, b_calls = make_backend("b", pdf_bytes)
    c, c_calls = make_backend("c", pdf_bytes)

    artifact = render_document(minimal_document, [a, b, c], fetch=no_fetch)

    assert artifact.backend == "b"
    assert artifact.format == "pdf"
    assert artifact.content == pdf_bytes
    assert (a_calls.calls, b_calls.calls, c_calls.calls) == (1, 1, 0)


@pytest.mark.unit
def test_document_passed_unchanged(make_backend, minimal_document, pdf_bytes, no_fetch):
    backend, recorder = make_backend("a", pdf_bytes)
    render_document(minimal_document, [backend], fetch=no_fetch)
    assert recorder.documents == [minimal_document]


@pytest.mark.unit
def test_small_payload_rejected(make_backend, minimal_document, pdf_bytes, no_fetch):
    tiny, _ = make_backend("tiny", b"%PDF-1.4\n")
    real, _ = make_backend("real", pdf_bytes)

    artifact = render_document(minimal_document, [tiny, real], fetch=no_fetch)
    assert artifact.backend == "real"


@pytest.mark.unit
def test_min_artifact_bytes_is_configurable(make_backend, minimal_document, no_fetch):
    backend, _ = make_backend("a", b"%PDF" + b"0" * 96)
    artifact = render_document(minimal_document, [backend], fetch=no_fetch, min_artifact_bytes=100)
    assert artifact.size == 100


@pytest.mark.unit
def test_transport_errors_fall_through(make_backend, minimal_document, pdf_bytes, no_fetch):
    down, _ = make_backend("down", httpx.ConnectError("connection refused"))
    slow, _ = make_backend("slow", httpx.ReadTimeout("timed out"))
    ok, _ = make_backend("ok", pdf_bytes)

    artifact = render_document(minimal_document, [down, slow, ok], fetch=no_fetch)
    assert artifact.backend == "ok"


@pytest.mark.unit
def test_unexpected_backend_errors_fall_through(make_backend, minimal_document, pdf_bytes, no_fetch):
    broken, broken_calls = make_backend("broken", RuntimeError("boom"))
    missing, _ = make_backend("missing", KeyError("ref"))
    ok, ok_calls = make_backend("ok", pdf_bytes)

    artifact = render_document(minimal_document, [broken, missing, ok], fetch=no_fetch)

    assert artifact.backend == "ok"
    assert (broken_calls.calls, ok_calls.calls) == (1, 1)


@pytest.mark.unit
def test_unexpected_errors_are_reported_per_backend(make_backend, minimal_document, no_fetch):
    broken, _ = make_backend("broken", RuntimeError("boom"))

    with pytest.raises(RenderError) as exc_info:
        render_document(minimal_document, [broken], fetch=no_fetch)

    assert exc_info.value.backend_reasons == {"broken": "RuntimeError: boom"}


@pytest.mark.unit
def test_duplicate_backend_names_rejected(make_backend, minimal_document, pdf_bytes, no_fetch):
    first, first_calls = make_backend("same", pdf_bytes)
    second, _ = make_backend("same", pdf_bytes)

    with pytest.raises(ValueError, match="Duplicate backend names"):
        render_document(minimal_document, [first, second], fetch=no_fetch)
    assert first_calls.calls == 0


@pytest.mark.unit
def test_exhaustion_reports_every_backend(make_backend, minimal_document, no_fetch):
    a, _ = make_backend("a", BackendReply(status_code=503, content=b""))
    b, _ = make_backend("b", b"short")
    c, _ = make_backend(
        "c", BackendReply(status_code=200, content=b'{"status": "error"}'),
        shape=ResponseShape.JSON_FOLLOWUP_URL,
    )
    d, _ = make_backend("d", httpx.ConnectError("no route to host"))

    with pytest.raises(RenderError) as exc_info:
        render_document(minimal_document, [a, b, c, d], fetch=no_fetch)

    error = exc_info.value
    assert error.reason == ALL_BACKENDS_EXHAUSTED
    assert list(error.backend_reasons) == ["a", "b", "c", "d"]
    assert "HTTP 503" in error.backend_reasons["a"]
    assert "below the 1000-byte minimum" in error.backend_reasons["b"]
    assert "'error'" in error.backend_reasons["c"]
    assert "ConnectError" in error.backend_reasons["d"]
    assert "no route to host" in str(error)


@pytest.mark.unit
def test_empty_backend_list(minimal_document, no_fetch):
    with pytest.raises(RenderError) as exc_info:
        render_document(minimal_document, [], fetch=no_fetch)
    assert exc_info.value.backend_reasons == {}


@pytest.mark.unit
def test_non_pdf_artifact_is_classified(make_backend, minimal_document, no_fetch):
    backend, _ = make_backend("html", b"<html>" + b"x" * 2000)
    artifact = render_document(minimal_document, [backend], fetch=no_fetch)
    assert artifact.format == "unknown"


@pytest.mark.unit
def test_check_backend(make_backend, pdf_bytes, no_fetch):
    good, recorder = make_backend("good", pdf_bytes)
    bad, _ = make_backend("bad", BackendReply(status_code=500, content=b""))

    assert check_backend(good, no_fetch) is True
    assert check_backend(bad, no_fetch) is False
    assert "\\documentclass" in recorder.documents[0]
