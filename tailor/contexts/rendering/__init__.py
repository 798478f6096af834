"""
Rendering Context

Responsibilities:
- Checks documents for structural bookends before rendering
- Tries rendering backends in a fixed order until one produces an artifact
- Normalizes each backend's response shape into raw artifact bytes
- Classifies artifacts by their leading bytes

Owns: Backend descriptors, response normalization, local LaTeX compilation
Never: Modifies document content
"""

from tailor.contexts.rendering.artifact import Artifact, classify_artifact
from tailor.contexts.rendering.backends import RenderBackend, ResponseShape, load_backends
from tailor.contexts.rendering.orchestrator import render_document
from tailor.contexts.rendering.validator import validate_document

__all__ = [
    "Artifact",
    "RenderBackend",
    "ResponseShape",
    "classify_artifact",
    "load_backends",
    "render_document",
    "validate_document",
]
