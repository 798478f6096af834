"""
Response normalizers, one per ResponseShape.

Each normalizer takes the raw BackendReply, the backend's options and a fetch
capability (for shapes whose artifact lives behind a second URL) and returns
the artifact bytes, or raises BackendFailure with a short reason.

Options by shape:
    json_base64:
        payload_field   dotted path to the base64 string (default: "pdf")
        status_field    dotted path to a status value to check (default: none)
        success_value   expected status value (default: "success")
    json_followup_url:
        status_field    dotted path to the status value (default: "status")
        success_value   expected status value (default: "success")
        reference_field dotted path to the file reference (default: "filename")
        followup_url    URL template with {ref} (default: "{ref}", resolved
                        against the request URL when relative)
    line_protocol:
        success_code    expected first-line status (default: "0")
"""

import base64
import binascii
import json
from typing import Any, Callable, Dict, Mapping

import httpx

from tailor.contexts.rendering.backends import BackendFailure, BackendReply, ResponseShape

Fetch = Callable[[str], BackendReply]
Normalizer = Callable[[BackendReply, Mapping[str, Any], Fetch], bytes]

PREVIEW_CHARS = 120


def _preview(content: bytes) -> str:
    text = content[:PREVIEW_CHARS].decode("utf-8", errors="replace")
    return " ".join(text.split())


def _require_ok(reply: BackendReply, what: str = "request") -> None:
    if not reply.ok:
        detail = _preview(reply.content)
        raise BackendFailure(
            f"{what} returned HTTP {reply.status_code}" + (f": {detail}" if detail else "")
        )


def _parse_json(reply: BackendReply) -> Dict[str, Any]:
    try:
        data = json.loads(reply.content)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BackendFailure(f"malformed JSON envelope: {_preview(reply.content)!r}") from None
    if not isinstance(data, dict):
        raise BackendFailure(f"JSON envelope is a {type(data).__name__}, expected an object")
    return data


def lookup(data: Mapping[str, Any], dotted: str) -> Any:
    """Resolve 'a.b.c' in nested dicts; None if any step is missing."""
    current: Any = data
    for key in dotted.split("."):
        if not isinstance(current, Mapping) or key not in current:
            return None
        current = current[key]
    return current


def _check_status(data: Mapping[str, Any], options: Mapping[str, Any], default_field) -> None:
    status_field = options.get("status_field", default_field)
    if not status_field:
        return
    expected = str(options.get("success_value", "success"))
    status = lookup(data, status_field)
    if str(status) != expected:
        message = lookup(data, "error") or lookup(data, "description") or lookup(data, "log")
        detail = f" ({' '.join(str(message).split())[:PREVIEW_CHARS]})" if message else ""
        raise BackendFailure(f"{status_field} is {status!r}, expected {expected!r}{detail}")


def _fetch(fetch: Fetch, url: str) -> bytes:
    try:
        followup = fetch(url)
    except httpx.HTTPError as e:
        raise BackendFailure(f"follow-up fetch of {url} failed: {e}") from e
    _require_ok(followup, what=f"follow-up fetch of {url}")
    return followup.content


def normalize_raw_binary(reply: BackendReply, options: Mapping[str, Any], fetch: Fetch) -> bytes:
    """The 2xx response body is the artifact."""
    _require_ok(reply)
    return reply.content


def normalize_json_base64(reply: BackendReply, options: Mapping[str, Any], fetch: Fetch) -> bytes:
    """2xx JSON envelope with the artifact base64-encoded in one field."""
    _require_ok(reply)
    data = _parse_json(reply)
    _check_status(data, options, default_field=None)

    payload_field = options.get("payload_field", "pdf")
    encoded = lookup(data, payload_field)
    if not isinstance(encoded, str) or not encoded:
        raise BackendFailure(f"no base64 payload at '{payload_field}'")

    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise BackendFailure(f"payload at '{payload_field}' is not valid base64") from None


def normalize_json_followup_url(
    reply: BackendReply, options: Mapping[str, Any], fetch: Fetch
) -> bytes:
    """2xx JSON envelope with a success status and a file reference to fetch."""
    _require_ok(reply)
    data = _parse_json(reply)
    _check_status(data, options, default_field="status")

    reference_field = options.get("reference_field", "filename")
    reference = lookup(data, reference_field)
    if not reference:
        raise BackendFailure(f"success envelope has no file reference at '{reference_field}'")

    url = str(options.get("followup_url", "{ref}")).format(ref=reference)
    if reply.url:
        url = str(httpx.URL(reply.url).join(url))

    return _fetch(fetch, url)


def normalize_line_protocol(reply: BackendReply, options: Mapping[str, Any], fetch: Fetch) -> bytes:
    """
    2xx text body: line 1 is a status code, line 2 starts with the result URL.

    Example body (QuickLaTeX):
        0
        https://quicklatex.com/cache3/ab/ql_abcd.png 0 275 58
    """
    _require_ok(reply)
    lines = reply.content.decode("utf-8", errors="replace").splitlines()
    if not lines:
        raise BackendFailure("empty line-protocol response")

    status = lines[0].strip()
    expected = str(options.get("success_code", "0"))
    if status != expected:
        detail = " ".join(line.strip() for line in lines[1:3] if line.strip())
        raise BackendFailure(f"status line is {status!r}, expected {expected!r}: {detail}")

    if len(lines) < 2 or not lines[1].split():
        raise BackendFailure("line-protocol response has no result URL")

    url = lines[1].split()[0]
    if reply.url:
        url = str(httpx.URL(reply.url).join(url))

    return _fetch(fetch, url)


NORMALIZERS: Dict[ResponseShape, Normalizer] = {
    ResponseShape.RAW_BINARY: normalize_raw_binary,
    ResponseShape.JSON_BASE64: normalize_json_base64,
    ResponseShape.JSON_FOLLOWUP_URL: normalize_json_followup_url,
    ResponseShape.LINE_PROTOCOL: normalize_line_protocol,
}


def normalize(
    shape: ResponseShape, reply: BackendReply, options: Mapping[str, Any], fetch: Fetch
) -> bytes:
    """Dispatch to the normalizer registered for shape."""
    return NORMALIZERS[ResponseShape(shape)](reply, options, fetch)
