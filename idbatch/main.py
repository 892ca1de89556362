from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from idbatch.analyzer import analyze
from idbatch.config import get_settings
from idbatch.domain.models import FilterCriteria, GenerationSettings
from idbatch.domain.validation import inspect_identifier, validate_settings
from idbatch.errors import SettingsValidationError
from idbatch.exporter import export_identifiers, export_job
from idbatch.orchestrator import run_batch
from idbatch.reporter import print_inspection, print_job, print_kinds
from idbatch.selection import select_identifiers
from idbatch.strategies.registry import STRATEGIES
from idbatch.utils.logging import configure_logging

app = typer.Typer(help="Batch identifier generation and analysis CLI.")


def _build_settings(**options: object) -> GenerationSettings:
    try:
        return GenerationSettings(**{key: value for key, value in options.items() if value is not None})
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"env={settings.app_env} | max_count={settings.max_count} "
        f"chunk_size={settings.default_chunk_size} yield={settings.yield_seconds}s "
        f"failure_policy={settings.failure_policy} export_dir={settings.export_dir}"
    )


@app.command()
def kinds() -> None:
    """
    List the supported identifier kinds.
    """
    print_kinds(STRATEGIES)


@app.command()
def validate(
    kind: str = typer.Option("uuid_v4", "--kind", "-k", help="Identifier kind."),
    count: int = typer.Option(100, "--count", "-n", help="Number of identifiers."),
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", help="Items per chunk."),
    custom_length: Optional[int] = typer.Option(None, "--custom-length"),
    custom_alphabet: Optional[str] = typer.Option(None, "--custom-alphabet"),
    analysis: bool = typer.Option(True, "--analysis/--no-analysis"),
) -> None:
    """
    Check generation settings without running a batch.
    """
    app_settings = get_settings()
    settings = _build_settings(
        kind=kind,
        count=count,
        chunk_size=chunk_size or app_settings.default_chunk_size,
        custom_length=custom_length,
        custom_alphabet=custom_alphabet,
        enable_analysis=analysis,
    )
    result = validate_settings(settings, max_count=app_settings.max_count)
    typer.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    if not result.is_valid:
        raise typer.Exit(code=1)


@app.command()
def inspect(
    value: str = typer.Argument(..., help="Identifier string to inspect."),
    kind: Optional[str] = typer.Option(None, "--kind", "-k", help="Analyze as this kind instead of the detected one."),
) -> None:
    """
    Validate an arbitrary identifier and print its analysis.
    """
    inspection = inspect_identifier(value)
    if not inspection.value:
        typer.echo("Identifier cannot be empty", err=True)
        raise typer.Exit(code=1)
    print_inspection(inspection, analyze(inspection.value, kind or inspection.detected_kind or "custom"))
    if not inspection.is_valid:
        raise typer.Exit(code=1)


@app.command()
def run(
    kind: str = typer.Option("uuid_v4", "--kind", "-k", help="Identifier kind (see `idbatch kinds`)."),
    count: int = typer.Option(100, "--count", "-n", help="Number of identifiers to generate."),
    output_format: str = typer.Option(
        "standard", "--format", "-f", help="standard, compact, braced, urn, base64 or hex."
    ),
    case: str = typer.Option("preserve", "--case", help="preserve, uppercase or lowercase."),
    chunk_size: Optional[int] = typer.Option(
        None, "--chunk-size", help="Items per chunk (default from settings)."
    ),
    custom_length: Optional[int] = typer.Option(None, "--custom-length"),
    custom_alphabet: Optional[str] = typer.Option(None, "--custom-alphabet"),
    prefix: Optional[str] = typer.Option(None, "--prefix"),
    suffix: Optional[str] = typer.Option(None, "--suffix"),
    analysis: bool = typer.Option(True, "--analysis/--no-analysis"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for a reproducible batch."),
    sort: str = typer.Option("none", "--sort", help="none, alphabetical, timestamp, quality or security."),
    min_quality: Optional[float] = typer.Option(None, "--min-quality"),
    valid_only: bool = typer.Option(False, "--valid-only"),
    export: Optional[str] = typer.Option(
        None, "--export", "-e", help="Write an export file: txt, json, csv or xml."
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Export file path."),
    name: Optional[str] = typer.Option(None, "--name", help="Job display name."),
    preview: int = typer.Option(10, "--preview", help="Identifiers to show in the summary."),
) -> None:
    """
    Generate a batch, print a summary and optionally export it.
    """
    app_settings = get_settings()
    configure_logging(level=app_settings.log_level, json_logs=app_settings.log_json)

    criteria = None
    if min_quality is not None or valid_only:
        criteria = FilterCriteria(min_quality=min_quality, valid_only=valid_only)
    settings = _build_settings(
        kind=kind,
        count=count,
        format=output_format,
        case=case,
        chunk_size=chunk_size or app_settings.default_chunk_size,
        custom_length=custom_length,
        custom_alphabet=custom_alphabet,
        prefix=prefix,
        suffix=suffix,
        enable_analysis=analysis,
        seed=seed,
        filter_criteria=criteria,
        sort_order=sort,
        export_format=export,
    )

    try:
        job = run_batch(settings, name=name, app_settings=app_settings)
    except SettingsValidationError as exc:
        for error in exc.validation.errors:
            typer.echo(f"[{error.type}] {error.message}", err=True)
        raise typer.Exit(code=1) from exc

    print_job(job, preview=preview)

    if export:
        if criteria is not None or settings.sort_order != "none":
            selected = select_identifiers(job.items, criteria, settings.sort_order)
            payload = export_identifiers(selected, settings.export_format)
        else:
            payload = export_job(job, settings.export_format)
        target = output or Path(app_settings.export_dir) / payload.filename
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(payload.content, encoding="utf-8")
        typer.echo(f"Exported {payload.mime_type} to {target}")

    if job.status == "failed":
        raise typer.Exit(code=1)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
