"""Unit tests for settings resolution from the environment."""

from pathlib import Path

import pytest

from tailor.config import (
    DEFAULT_BACKENDS_PATH,
    DEFAULT_TEMPLATE_PATH,
    PROJECT_ROOT,
    load_settings,
    provider_config_from_env,
)

SETTING_VARIABLES = [
    "LLM_PROVIDER",
    "LLM_MODEL",
    "GEMINI_API_KEY",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "RESUME_TEMPLATE_PATH",
    "RENDER_BACKENDS_PATH",
    "LATEX_COMPILER",
    "SCRATCH_PATH",
    "LOGS_PATH",
    "MIN_ARTIFACT_BYTES",
    "RENDER_TIMEOUT_S",
    "GENERATION_MAX_ATTEMPTS",
    "GENERATION_BASE_DELAY_S",
    "CANDIDATE_NAME",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in SETTING_VARIABLES:
        # setenv first so anything load_dotenv writes is undone after the test
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    # Nonexistent .env: nothing is loaded from disk
    return tmp_path / ".env"


@pytest.mark.unit
def test_defaults(clean_env):
    settings = load_settings(env_file=clean_env)

    assert settings.provider.provider == "gemini"
    assert settings.provider.model_id == "gemini-2.0-flash"
    assert not settings.provider.is_configured
    assert settings.template_path == DEFAULT_TEMPLATE_PATH
    assert settings.backends_path == DEFAULT_BACKENDS_PATH
    assert settings.latex_compiler == "pdflatex"
    assert settings.logs_path is None
    assert settings.min_artifact_bytes == 1000
    assert settings.max_attempts == 3
    assert settings.base_delay_s == 2.0


@pytest.mark.unit
def test_environment_overrides(clean_env, monkeypatch, tmp_path):
    monkeypatch.setenv("LLM_PROVIDER", "OpenAI")
    monkeypatch.setenv("OPENAI_API_KEY", ' "sk-test" ')
    monkeypatch.setenv("LLM_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("RESUME_TEMPLATE_PATH", str(tmp_path / "cv.tex"))
    monkeypatch.setenv("LOGS_PATH", "outs/logs")
    monkeypatch.setenv("MIN_ARTIFACT_BYTES", "500")
    monkeypatch.setenv("GENERATION_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("CANDIDATE_NAME", "Jane Doe")

    settings = load_settings(env_file=clean_env)

    assert settings.provider.provider == "openai"
    assert settings.provider.api_key == "sk-test"
    assert settings.provider.model_id == "gpt-4o-mini"
    assert settings.template_path == tmp_path / "cv.tex"
    assert settings.logs_path == PROJECT_ROOT / "outs" / "logs"
    assert settings.min_artifact_bytes == 500
    assert settings.max_attempts == 5
    assert settings.candidate_name == "Jane Doe"


@pytest.mark.unit
def test_dotenv_file_is_read(clean_env):
    clean_env.write_text("LLM_PROVIDER=anthropic\nANTHROPIC_API_KEY=abc\n")
    settings = load_settings(env_file=clean_env)

    assert settings.provider.provider == "anthropic"
    assert settings.provider.api_key == "abc"
    assert settings.provider.model_id == "claude-sonnet-4-20250514"


@pytest.mark.unit
def test_provider_override(clean_env, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "g")
    config = provider_config_from_env("gemini")
    assert config.is_configured
    assert config.api_key == "g"


@pytest.mark.unit
def test_unknown_provider_has_no_key(clean_env):
    config = provider_config_from_env("mystery")
    assert config.api_key == ""
    assert config.model_id == ""
    assert isinstance(DEFAULT_TEMPLATE_PATH, Path)
