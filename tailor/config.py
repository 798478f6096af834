"""
Runtime settings resolved from the environment (and .env).

Settings are resolved once per call to load_settings() into an immutable
Settings object that callers pass around explicitly. Nothing in the library
reads provider credentials from the environment on its own.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DEFAULT_TEMPLATE_PATH = PROJECT_ROOT / "data" / "resume_template" / "resume.tex"
DEFAULT_BACKENDS_PATH = PROJECT_ROOT / "configs" / "render_backends.yaml"

DEFAULT_MODELS = {
    "gemini": "gemini-2.0-flash",
    "openai": "gpt-4o",
    "anthropic": "claude-sonnet-4-20250514",
}

API_KEY_VARIABLES = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


@dataclass(frozen=True)
class ProviderConfig:
    """
    Explicit generation-provider configuration.

    Attributes:
        provider: Provider name ("gemini", "openai" or "anthropic")
        api_key: Credential for the provider (empty string if missing)
        model_id: Model identifier passed to the provider
    """

    provider: str
    api_key: str
    model_id: str

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class Settings:
    """
    Resolved runtime settings.

    Attributes:
        provider: Generation provider configuration
        template_path: LaTeX resume template used when the caller supplies none
        backends_path: YAML file listing rendering backends in fallback order
        latex_compiler: Executable for the local rendering backend
        scratch_path: Scratch directory for file-based backends
        logs_path: Root directory for per-session logs (None disables file logs)
        min_artifact_bytes: Payloads smaller than this are rejected as non-artifacts
        render_timeout_s: Per-request timeout for rendering backends
        max_attempts: Generation retry budget
        base_delay_s: First backoff delay (doubles each retry)
        candidate_name: Name used for download filenames
    """

    provider: ProviderConfig
    template_path: Path = DEFAULT_TEMPLATE_PATH
    backends_path: Path = DEFAULT_BACKENDS_PATH
    latex_compiler: str = "pdflatex"
    scratch_path: Path = Path("outs/scratch")
    logs_path: Optional[Path] = None
    min_artifact_bytes: int = 1000
    render_timeout_s: float = 60.0
    max_attempts: int = 3
    base_delay_s: float = 2.0
    candidate_name: str = "Resume"


def _clean_env(name: str, default: str = "") -> str:
    value = os.getenv(name)
    if value is None:
        value = default
    return str(value).strip().strip('"').strip("'")


def _env_path(name: str, default: Optional[Path]) -> Optional[Path]:
    raw = _clean_env(name)
    if not raw:
        return default
    path = Path(os.path.expanduser(raw))
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


def provider_config_from_env(provider: Optional[str] = None) -> ProviderConfig:
    """
    Build a ProviderConfig from LLM_PROVIDER, LLM_MODEL and the provider's key variable.

    Args:
        provider: Provider name override (default: LLM_PROVIDER, else "gemini")
    """
    name = (provider or _clean_env("LLM_PROVIDER", "gemini")).lower()
    key_variable = API_KEY_VARIABLES.get(name)
    return ProviderConfig(
        provider=name,
        api_key=_clean_env(key_variable) if key_variable else "",
        model_id=_clean_env("LLM_MODEL") or DEFAULT_MODELS.get(name, ""),
    )


def load_settings(env_file: Optional[Path] = None, provider: Optional[str] = None) -> Settings:
    """
    Load .env (if present) and resolve all settings.

    Args:
        env_file: Explicit .env path (default: search from the working directory)
        provider: Provider name override

    Returns:
        Settings instance
    """
    load_dotenv(dotenv_path=env_file)

    return Settings(
        provider=provider_config_from_env(provider),
        template_path=_env_path("RESUME_TEMPLATE_PATH", DEFAULT_TEMPLATE_PATH),
        backends_path=_env_path("RENDER_BACKENDS_PATH", DEFAULT_BACKENDS_PATH),
        latex_compiler=_clean_env("LATEX_COMPILER", "pdflatex"),
        scratch_path=_env_path("SCRATCH_PATH", Path("outs/scratch").resolve()),
        logs_path=_env_path("LOGS_PATH", None),
        min_artifact_bytes=int(_clean_env("MIN_ARTIFACT_BYTES", "1000")),
        render_timeout_s=float(_clean_env("RENDER_TIMEOUT_S", "60")),
        max_attempts=int(_clean_env("GENERATION_MAX_ATTEMPTS", "3")),
        base_delay_s=float(_clean_env("GENERATION_BASE_DELAY_S", "2.0")),
        candidate_name=_clean_env("CANDIDATE_NAME", "Resume"),
    )
