"""
Rendering backend descriptors and their construction from configuration.

A RenderBackend couples a name, an invoke() callable that turns a document into
a raw BackendReply, and the ResponseShape that says how that reply must be
normalized into artifact bytes. The ordered backend list is static
configuration (configs/render_backends.yaml by default), never derived at
runtime.

YAML format:
    backends:
      - name: latexonline         # unique
        kind: http                # http | local
        shape: raw_binary         # see ResponseShape
        url: https://latexonline.cc/compile
        encoding: form            # form | json | multipart
        payload: {text: <document>, command: pdflatex}
        options: {}               # shape-specific, see normalizers
        enabled: true
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

import httpx
from omegaconf import OmegaConf

# Payload values equal to this token are replaced by the document text
DOCUMENT_PLACEHOLDER = "<document>"

REQUEST_ENCODINGS = ("form", "json", "multipart")


class ResponseShape(str, Enum):
    """Closed set of backend response shapes, one normalizer each."""

    RAW_BINARY = "raw_binary"
    JSON_BASE64 = "json_base64"
    JSON_FOLLOWUP_URL = "json_followup_url"
    LINE_PROTOCOL = "line_protocol"


class BackendFailure(Exception):
    """A single backend could not produce an artifact. Never leaves the rendering context."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


@dataclass(frozen=True)
class BackendReply:
    """
    Raw transport result of one backend invocation, before normalization.

    Attributes:
        status_code: HTTP status (200 for local backends)
        content: Response body
        content_type: Content-Type header value, if any
        url: Final request URL, used to resolve relative follow-up references
    """

    status_code: int
    content: bytes
    content_type: str = ""
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @classmethod
    def from_response(cls, response: httpx.Response) -> "BackendReply":
        return cls(
            status_code=response.status_code,
            content=response.content,
            content_type=response.headers.get("content-type", ""),
            url=str(response.url),
        )


@dataclass(frozen=True)
class RenderBackend:
    """
    One rendering backend.

    Attributes:
        name: Unique name used in logs and failure reports
        invoke: Callable taking the document text and returning a BackendReply
        shape: How invoke()'s reply is normalized into artifact bytes
        options: Shape-specific normalizer options (field names, URL templates)
    """

    name: str
    invoke: Callable[[str], BackendReply]
    shape: ResponseShape
    options: Mapping[str, Any] = field(default_factory=dict)


def fill_placeholder(payload: Any, document: str) -> Any:
    """Deep-copy payload, replacing every DOCUMENT_PLACEHOLDER value with the document."""
    if isinstance(payload, str):
        return document if payload == DOCUMENT_PLACEHOLDER else payload
    if isinstance(payload, Mapping):
        return {key: fill_placeholder(value, document) for key, value in payload.items()}
    if isinstance(payload, list):
        return [fill_placeholder(item, document) for item in payload]
    return copy.deepcopy(payload)


def http_invoker(
    client: httpx.Client,
    url: str,
    payload: Mapping[str, Any],
    encoding: str = "form",
    headers: Optional[Mapping[str, str]] = None,
) -> Callable[[str], BackendReply]:
    """
    Build an invoke() callable that POSTs the document to an HTTP service.

    Args:
        client: Shared httpx client (timeouts, redirects)
        url: Endpoint URL
        payload: Request body template containing DOCUMENT_PLACEHOLDER
        encoding: 'form' (urlencoded), 'json' or 'multipart' (form-data)
        headers: Extra request headers

    Returns:
        Callable mapping document text to a BackendReply. Transport errors
        (httpx.HTTPError) propagate to the orchestrator.
    """
    if encoding not in REQUEST_ENCODINGS:
        raise ValueError(f"Unknown request encoding '{encoding}'. Use one of {REQUEST_ENCODINGS}")

    def invoke(document: str) -> BackendReply:
        body = fill_placeholder(dict(payload), document)
        if encoding == "json":
            response = client.post(url, json=body, headers=headers)
        elif encoding == "multipart":
            files = {key: (None, str(value)) for key, value in body.items()}
            response = client.post(url, files=files, headers=headers)
        else:
            response = client.post(url, data=body, headers=headers)
        return BackendReply.from_response(response)

    return invoke


def http_backend(
    name: str,
    client: httpx.Client,
    url: str,
    shape: ResponseShape = ResponseShape.RAW_BINARY,
    payload: Optional[Mapping[str, Any]] = None,
    encoding: str = "form",
    options: Optional[Mapping[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> RenderBackend:
    """Convenience constructor for an HTTP-backed RenderBackend."""
    return RenderBackend(
        name=name,
        invoke=http_invoker(client, url, payload or {"text": DOCUMENT_PLACEHOLDER}, encoding, headers),
        shape=ResponseShape(shape),
        options=dict(options or {}),
    )


def _build_entry(
    entry: Dict[str, Any],
    client: httpx.Client,
    scratch_dir: Path,
    timeout_s: float,
    latex_compiler: str,
) -> RenderBackend:
    name = entry.get("name")
    if not name:
        raise ValueError(f"Backend entry without a name: {entry}")

    kind = entry.get("kind", "http")
    try:
        shape = ResponseShape(entry.get("shape", ResponseShape.RAW_BINARY.value))
    except ValueError:
        valid = [s.value for s in ResponseShape]
        raise ValueError(
            f"Backend '{name}': unknown shape '{entry.get('shape')}'. Use one of {valid}"
        ) from None

    if kind == "http":
        if not entry.get("url"):
            raise ValueError(f"Backend '{name}': http backends need a url")
        return http_backend(
            name=name,
            client=client,
            url=entry["url"],
            shape=shape,
            payload=entry.get("payload"),
            encoding=entry.get("encoding", "form"),
            options=entry.get("options"),
            headers=entry.get("headers"),
        )

    if kind == "local":
        # Deferred: local_compiler imports this module
        from tailor.contexts.rendering.local_compiler import LocalLatexBackend

        compiler = LocalLatexBackend(
            compiler=entry.get("compiler") or latex_compiler,
            scratch_dir=Path(entry.get("scratch_dir", scratch_dir)),
            num_passes=int(entry.get("passes", 2)),
            timeout_s=float(entry.get("timeout_s", timeout_s)),
        )
        return RenderBackend(name=name, invoke=compiler, shape=shape, options=entry.get("options") or {})

    raise ValueError(f"Backend '{name}': unknown kind '{kind}'. Use 'http' or 'local'")


def load_backends(
    config_path: Path,
    client: httpx.Client,
    scratch_dir: Path = Path("outs/scratch"),
    timeout_s: float = 60.0,
    latex_compiler: str = "pdflatex",
    only: Optional[List[str]] = None,
) -> List[RenderBackend]:
    """
    Load the ordered backend list from a YAML file.

    Args:
        config_path: YAML file with a top-level 'backends' list
        client: httpx client shared by all HTTP backends
        scratch_dir: Scratch directory for local backends without their own
        timeout_s: Default timeout for local compilation
        latex_compiler: Compiler for local backends that do not name one
        only: Restrict to these backend names (keeps file order)

    Returns:
        Enabled backends in file order

    Raises:
        ValueError: Malformed entry or duplicate backend name
    """
    config = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)
    entries = config.get("backends") or []

    backends = []
    seen = set()
    for entry in entries:
        name = entry.get("name")
        if name in seen:
            raise ValueError(f"Duplicate backend name in {config_path}: {name}")
        seen.add(name)

        if not entry.get("enabled", True):
            continue
        if only is not None and name not in only:
            continue

        backends.append(_build_entry(entry, client, scratch_dir, timeout_s, latex_compiler))

    return backends
