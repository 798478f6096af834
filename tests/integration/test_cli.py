"""Integration tests for the tailor_resume.py CLI."""

import importlib.util
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from tailor.config import ProviderConfig, Settings
from tailor.contexts.generation.client import GenerationClient
from tailor.contexts.rendering.backends import BackendReply
from tailor.pipeline import output_filename

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "tailor_resume.py"

runner = CliRunner()


@pytest.fixture
def cli(monkeypatch, tmp_path, minimal_document):
    spec = importlib.util.spec_from_file_location("tailor_resume_cli", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    template = tmp_path / "resume.tex"
    template.write_text(minimal_document, encoding="utf-8")
    settings = Settings(
        provider=ProviderConfig(provider="gemini", api_key="test-key", model_id="test-model"),
        template_path=template,
        candidate_name="Jane Doe",
    )

    monkeypatch.setattr(module, "load_settings", lambda **kwargs: settings)
    monkeypatch.setattr(module, "setup_logger", lambda *args, **kwargs: None)
    return module


@pytest.fixture
def wire(cli, scripted_provider, recorded_sleep, make_backend):
    """Install a scripted provider and fake backends into the CLI."""

    def install(provider_outcomes, backends):
        provider = scripted_provider(*provider_outcomes)
        cli.make_generation_client = lambda settings: GenerationClient(provider, sleep=recorded_sleep)
        cli.make_backends = lambda settings, client, only=None: [
            make_backend(name, outcome)[0] for name, outcome in backends
        ]
        return provider

    return install


@pytest.mark.integration
def test_no_command_shows_help(cli):
    result = runner.invoke(cli.app, [])
    assert result.exit_code == 0
    assert "tailor" in result.output


@pytest.mark.integration
def test_tailor_writes_artifact(cli, wire, tmp_path, minimal_document, pdf_bytes):
    wire([minimal_document], [("latexonline", pdf_bytes)])
    out = tmp_path / "out"

    result = runner.invoke(
        cli.app, ["tailor", "-d", "Data engineer", "-o", str(out), "--save-tex"]
    )

    assert result.exit_code == 0, result.output
    artifact_path = out / output_filename("Jane Doe", "pdf")
    assert artifact_path.read_bytes() == pdf_bytes
    assert artifact_path.with_suffix(".tex").read_text(encoding="utf-8") == minimal_document
    assert "latexonline" in result.output


@pytest.mark.integration
def test_tailor_from_description_file(cli, wire, tmp_path, minimal_document, pdf_bytes):
    provider = wire([minimal_document], [("only", pdf_bytes)])
    job = tmp_path / "job.md"
    job.write_text("Platform engineer, Terraform")

    result = runner.invoke(cli.app, ["tailor", "-f", str(job), "-o", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "Platform engineer, Terraform" in provider.prompts[0]


@pytest.mark.integration
def test_tailor_keywords(cli, wire, tmp_path, minimal_document, pdf_bytes):
    provider = wire([minimal_document], [("only", pdf_bytes)])

    result = runner.invoke(cli.app, ["tailor", "-k", "Go, gRPC", "-o", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "- Go\n- gRPC\n" in provider.prompts[0]


@pytest.mark.integration
def test_tailor_ambiguous_task(cli, wire, tmp_path, minimal_document, pdf_bytes):
    provider = wire([minimal_document], [("only", pdf_bytes)])

    result = runner.invoke(cli.app, ["tailor", "-d", "Engineer", "-k", "Go", "-o", str(tmp_path)])

    assert result.exit_code == 1
    assert "Invalid request" in result.output
    assert provider.prompts == []


@pytest.mark.integration
def test_tailor_render_failure(cli, wire, tmp_path, minimal_document):
    wire(
        [minimal_document],
        [("a", BackendReply(status_code=502, content=b"")), ("b", b"tiny")],
    )

    result = runner.invoke(cli.app, ["tailor", "-d", "Engineer", "-o", str(tmp_path)])

    assert result.exit_code == 1
    assert "every rendering backend failed" in result.output
    assert "a: request returned HTTP 502" in result.output
    assert list(tmp_path.glob("*.pdf")) == []


@pytest.mark.integration
def test_status_ready(cli, wire, pdf_bytes):
    wire([], [("good", pdf_bytes)])

    result = runner.invoke(cli.app, ["status"])

    assert result.exit_code == 0, result.output
    assert "✓ good" in result.output
    assert "Ready" in result.output


@pytest.mark.integration
def test_status_not_ready(cli, wire):
    wire([], [("bad", BackendReply(status_code=500, content=b""))])

    result = runner.invoke(cli.app, ["status"])

    assert result.exit_code == 1
    assert "✗ bad" in result.output
    assert "Not ready" in result.output


@pytest.mark.integration
def test_backends_listing(cli, wire, pdf_bytes):
    wire([], [("latexonline", pdf_bytes), ("local-pdflatex", pdf_bytes)])

    result = runner.invoke(cli.app, ["backends"])

    assert result.exit_code == 0, result.output
    assert "1. latexonline (raw_binary)" in result.output
    assert "2. local-pdflatex (raw_binary)" in result.output


@pytest.mark.integration
def test_events(cli, tmp_path):
    events_file = tmp_path / "events.jsonl"
    events_file.write_text(
        json.dumps(
            {
                "timestamp": "2026-10-18T09:30:15",
                "event_type": "tailor_completed",
                "request_id": "20261018_093015",
                "source": "pipeline",
                "backend": "latexonline",
            }
        )
        + "\n"
    )

    result = runner.invoke(cli.app, ["events", "--file", str(events_file)])

    assert result.exit_code == 0, result.output
    assert "tailor_completed" in result.output
    assert "backend=latexonline" in result.output


@pytest.mark.integration
def test_events_empty(cli, tmp_path):
    result = runner.invoke(cli.app, ["events", "--file", str(tmp_path / "none.jsonl")])
    assert result.exit_code == 0
    assert "No pipeline events recorded" in result.output
