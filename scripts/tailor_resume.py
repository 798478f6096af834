#!/usr/bin/env python3
"""
Resume Tailoring CLI

Tailors the LaTeX resume template to a job description or keyword list and
renders it through the configured backends.

Commands:
    tailor   - Tailor the resume and write the rendered artifact
    status   - Check provider credentials, template and backend availability
    backends - List the configured rendering backends in fallback order
    events   - Show recent pipeline events

Examples:\n

    tailor_resume.py tailor --description-file jobs/MLEng_AcmeCorp.md      # From a job file

    tailor_resume.py tailor -d "Senior data engineer, Spark, Airflow"      # Inline description

    tailor_resume.py tailor --keywords "Python, Kubernetes, Terraform"     # Keyword mode

    tailor_resume.py status --no-probe                                     # Skip backend probes
"""

from pathlib import Path
from typing import List, Optional

import httpx
import typer
from typing_extensions import Annotated

from tailor.config import Settings, load_settings
from tailor.contexts.generation import GenerationClient
from tailor.contexts.rendering import RenderBackend, load_backends
from tailor.contexts.rendering.orchestrator import check_backend, http_fetcher
from tailor.exceptions import TailorError
from tailor.pipeline import (
    describe_failure,
    load_template,
    output_filename,
    status_report,
    tailor_resume,
)
from tailor.utils.event_logging import get_recent_events
from tailor.utils.logger import setup_logger
from tailor.utils.timestamp import format_timestamp, now

app = typer.Typer(
    help="Tailor a LaTeX resume to a job and render it to PDF",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def make_http_client(settings: Settings) -> httpx.Client:
    return httpx.Client(timeout=settings.render_timeout_s, follow_redirects=True)


def make_generation_client(settings: Settings) -> GenerationClient:
    return GenerationClient.from_config(
        settings.provider, max_attempts=settings.max_attempts, base_delay=settings.base_delay_s
    )


def make_backends(
    settings: Settings, client: httpx.Client, only: Optional[List[str]] = None
) -> List[RenderBackend]:
    return load_backends(
        settings.backends_path,
        client,
        scratch_dir=settings.scratch_path,
        timeout_s=settings.render_timeout_s,
        latex_compiler=settings.latex_compiler,
        only=only,
    )


def _fail(message: str, details: Optional[dict] = None) -> None:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    for key, value in (details or {}).items():
        typer.secho(f"  {key}: {value}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command("tailor")
def tailor_command(
    description: Annotated[
        Optional[str],
        typer.Option("--description", "-d", help="Job description text"),
    ] = None,
    description_file: Annotated[
        Optional[Path],
        typer.Option(
            "--description-file",
            "-f",
            help="File containing the job description",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    keywords: Annotated[
        Optional[str],
        typer.Option("--keywords", "-k", help="Comma-separated keywords to include"),
    ] = None,
    template: Annotated[
        Optional[Path],
        typer.Option("--template", "-t", help="LaTeX resume template (default: RESUME_TEMPLATE_PATH)"),
    ] = None,
    output_dir: Annotated[
        Path,
        typer.Option("--output-dir", "-o", help="Directory for the rendered artifact"),
    ] = Path("."),
    save_tex: Annotated[
        bool,
        typer.Option("--save-tex", help="Also write the tailored LaTeX next to the artifact"),
    ] = False,
    backend: Annotated[
        Optional[List[str]],
        typer.Option("--backend", "-b", help="Only use these backends (repeatable)"),
    ] = None,
    provider: Annotated[
        Optional[str],
        typer.Option("--provider", "-p", help="Generation provider (gemini, openai, anthropic)"),
    ] = None,
    advisory: Annotated[
        bool,
        typer.Option("--advisory", help="Render even if the tailored document lacks its bookends"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging on the console"),
    ] = False,
):
    """
    Tailor the resume to a job description or keyword list and render it.

    Examples:\n

        $ tailor_resume.py tailor -f jobs/DataEng_Initech.md --save-tex

        $ tailor_resume.py tailor -k "Go, gRPC, Postgres" -b local-pdflatex
    """
    settings = load_settings(provider=provider)
    request_id = now()

    log_dir = settings.logs_path / f"tailor_{request_id}" if settings.logs_path else None
    setup_logger(
        "tailor",
        log_dir=log_dir,
        extra_provenance={"Provider": f"{settings.provider.provider}/{settings.provider.model_id}"},
        console_level="DEBUG" if verbose else "INFO",
    )

    if description_file is not None:
        if description is not None:
            _fail("Use either --description or --description-file, not both")
        description = description_file.read_text(encoding="utf-8")

    try:
        document = load_template(template or settings.template_path)
        generation_client = make_generation_client(settings)

        with make_http_client(settings) as http:
            backends = make_backends(settings, http, only=backend)
            result = tailor_resume(
                document,
                task_description=description,
                keywords=keywords,
                generation_client=generation_client,
                backends=backends,
                fetch=http_fetcher(http),
                min_artifact_bytes=settings.min_artifact_bytes,
                strict_validation=not advisory,
                request_id=request_id,
            )
    except TailorError as e:
        report = describe_failure(e)
        _fail(report.error, report.details)
    except ValueError as e:
        _fail(str(e))

    output_dir.mkdir(parents=True, exist_ok=True)
    artifact_path = output_dir / output_filename(settings.candidate_name, result.format)
    artifact_path.write_bytes(result.content)

    typer.secho("✓ Resume tailored", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  Backend: {result.artifact.backend}")
    typer.echo(f"  Format: {result.format} ({result.artifact.size} bytes)")
    if result.artifact.page_count is not None:
        typer.echo(f"  Pages: {result.artifact.page_count}")
    typer.echo(f"  Saved: {artifact_path}")

    if save_tex:
        tex_path = artifact_path.with_suffix(".tex")
        tex_path.write_text(result.document, encoding="utf-8")
        typer.echo(f"  LaTeX: {tex_path}")


@app.command("status")
def status_command(
    probe: Annotated[
        bool,
        typer.Option("--probe/--no-probe", help="Render a probe document on every backend"),
    ] = True,
):
    """
    Report whether the tailoring pipeline is ready.

    Exits with code 1 when the provider key, the template or every backend is missing.
    """
    settings = load_settings()
    setup_logger("status", console_level="WARNING")

    try:
        with make_http_client(settings) as http:
            backends = make_backends(settings, http)
            report = status_report(settings, backends, fetch=http_fetcher(http), probe=probe)
    except ValueError as e:
        _fail(str(e))

    def mark(ok: Optional[bool]) -> str:
        if ok is None:
            return "?"
        return "✓" if ok else "✗"

    typer.secho("\nTailoring pipeline status", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"  Provider: {report['provider']}")
    typer.echo(f"  {mark(report['generation_configured'])} Generation configured")
    typer.echo(f"  {mark(report['template_exists'])} Template: {settings.template_path}")
    typer.echo("  Backends:")
    for name, ok in report["backends"].items():
        typer.echo(f"    {mark(ok)} {name}")

    if report["ready"]:
        typer.secho("\nReady", fg=typer.colors.GREEN, bold=True)
    else:
        typer.secho("\nNot ready", fg=typer.colors.RED, bold=True)
        raise typer.Exit(code=1)


@app.command("backends")
def backends_command(
    probe: Annotated[
        bool,
        typer.Option("--probe", help="Check each backend with a probe document"),
    ] = False,
):
    """List enabled rendering backends in the order they are tried."""
    settings = load_settings()
    setup_logger("backends", console_level="WARNING")

    try:
        with make_http_client(settings) as http:
            backends = make_backends(settings, http)
            typer.echo(f"Backends from {settings.backends_path}:")
            for position, item in enumerate(backends, 1):
                line = f"  {position}. {item.name} ({item.shape.value})"
                if probe:
                    ok = check_backend(item, http_fetcher(http), settings.min_artifact_bytes)
                    line += "  ✓" if ok else "  ✗"
                typer.echo(line)
    except ValueError as e:
        _fail(str(e))

    if not backends:
        typer.secho("No backends enabled", fg=typer.colors.YELLOW)


@app.command("events")
def events_command(
    count: Annotated[int, typer.Option("--count", "-n", help="Number of events", min=1)] = 10,
    event_type: Annotated[
        Optional[str],
        typer.Option("--type", help="Only events of this type (e.g. tailor_failed)"),
    ] = None,
    events_file: Annotated[
        Optional[Path],
        typer.Option("--file", help="Events file (default: PIPELINE_EVENTS_FILE)"),
    ] = None,
):
    """Show the most recent pipeline events."""
    events = get_recent_events(count, event_type=event_type, events_file=events_file)
    if not events:
        typer.echo("No pipeline events recorded")
        return

    for event in events:
        when = format_timestamp(event.get("timestamp", ""), relative=True)
        extras = {
            k: v
            for k, v in event.items()
            if k not in ("timestamp", "event_type", "request_id", "source")
        }
        detail = ", ".join(f"{k}={v}" for k, v in extras.items())
        typer.echo(f"{when:>16}  {event.get('event_type', '?'):<18} {event.get('request_id', '')}  {detail}")


if __name__ == "__main__":
    app()
