"""
Generation Context

Responsibilities:
- Calls the configured text-generation provider to rewrite a document
- Retries transient provider failures with exponential backoff
- Strips markdown fences and stray whitespace from provider output

Owns: Provider clients, retry policy, output sanitizing
Never: Validates structure or renders documents
"""

from tailor.contexts.generation.client import GenerationClient
from tailor.contexts.generation.providers import LLMProvider, LLMResponse, get_provider
from tailor.contexts.generation.sanitizer import sanitize_latex_output

__all__ = [
    "GenerationClient",
    "LLMProvider",
    "LLMResponse",
    "get_provider",
    "sanitize_latex_output",
]
