from __future__ import annotations

from typing import Mapping, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from idbatch.analyzer import score_breakdown
from idbatch.domain.models import Analysis, BatchJob, Identifier, IdentifierInspection
from idbatch.strategies.abstract import IdentifierStrategy

STATUS_STYLES = {
    "pending": "dim",
    "processing": "cyan",
    "paused": "yellow",
    "completed": "bold green",
    "failed": "bold red",
}


def _histogram_table(title: str, distribution: Mapping[str, int], total: int) -> Table:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("Bucket", style="cyan", no_wrap=True)
    table.add_column("Count", justify="right", style="magenta")
    table.add_column("Share", justify="right", style="green")
    for label, count in distribution.items():
        share = count / total * 100 if total else 0.0
        table.add_row(label, f"{count:,}", f"{share:.1f}%")
    return table


def print_job(job: BatchJob, console: Optional[Console] = None, preview: int = 10) -> None:
    """
    Render a job summary, a preview of its identifiers and its histograms.

    Only the first `preview` identifiers are listed; the summary counts cover
    the whole batch.
    """
    console = console or Console()
    stats = job.statistics
    style = STATUS_STYLES.get(job.status, "white")

    summary = Table(title=f"Batch {escape(job.name)}", box=box.ROUNDED, show_header=False)
    summary.add_column("Field", style="cyan", no_wrap=True)
    summary.add_column("Value", justify="right")
    summary.add_row("Status", f"[{style}]{job.status}[/{style}]")
    summary.add_row("Kind", job.kind)
    summary.add_row("Requested", f"{job.count:,}")
    summary.add_row("Progress", f"{job.progress * 100:.1f}%")
    summary.add_row("Generated", f"{stats.total_generated:,}")
    summary.add_row("Valid / Invalid", f"{stats.valid_count:,} / {stats.invalid_count:,}")
    summary.add_row("Unique / Duplicates", f"{stats.unique_count:,} / {stats.duplicate_count:,}")
    summary.add_row("Collision rate", f"{stats.collision_rate * 100:.4f}%")
    summary.add_row("Avg quality", f"{stats.average_quality:.1f}")
    summary.add_row("Avg security", f"{stats.average_security:.1f}")
    summary.add_row("Avg entropy (bits)", f"{stats.average_entropy:.1f}")
    summary.add_row("Time (s)", f"{stats.generation_time_seconds:.3f}")
    if job.error:
        summary.add_row("Error", f"[red]{escape(job.error)}[/red]")
    console.print(summary)

    if job.items and preview > 0:
        console.print(_items_table(job.items[:preview], total=len(job.items)))

    for title, distribution in (
        ("Security levels", stats.security_distribution),
        ("Quality deciles", stats.quality_distribution),
        ("Value lengths", stats.length_distribution),
    ):
        if distribution:
            console.print(_histogram_table(title, distribution, stats.total_generated))


def _items_table(items: Sequence[Identifier], total: int) -> Table:
    caption = f"Showing {len(items)} of {total:,}" if total > len(items) else None
    table = Table(box=box.SIMPLE_HEAD, caption=caption)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Value", style="cyan")
    table.add_column("Quality", justify="right", style="green")
    table.add_column("Security", justify="right", style="yellow")
    for item in items:
        if not item.is_valid:
            table.add_row(str(item.index), f"[red]{escape(item.error or 'invalid')}[/red]", "-", "-")
            continue
        quality = f"{item.analysis.quality.overall_quality:.1f}" if item.analysis else "-"
        security = str(item.analysis.security.security_score) if item.analysis else "-"
        table.add_row(str(item.index), escape(item.value), quality, security)
    return table


def print_kinds(strategies: Mapping[str, IdentifierStrategy], console: Optional[Console] = None) -> None:
    console = console or Console()
    table = Table(title="Identifier kinds", box=box.ROUNDED)
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Version", justify="right", style="magenta")
    table.add_column("Description")
    for kind in sorted(strategies):
        strategy = strategies[kind]
        version = str(strategy.version) if strategy.version is not None else "-"
        table.add_row(kind, version, strategy.description)
    console.print(table)


def print_inspection(
    inspection: IdentifierInspection, analysis: Analysis, console: Optional[Console] = None
) -> None:
    console = console or Console()
    verdict = "[green]valid[/green]" if inspection.is_valid else "[red]invalid[/red]"
    console.print(f"{escape(inspection.value)}: {verdict} (detected kind: {inspection.detected_kind})")

    scores = Table(title="Scores", box=box.SIMPLE)
    scores.add_column("Dimension", style="cyan")
    scores.add_column("Score", justify="right", style="green")
    for dimension, value in score_breakdown(analysis).items():
        scores.add_row(dimension, f"{value:.1f}")
    console.print(scores)

    for label, messages, style in (
        ("error", inspection.errors, "red"),
        ("warning", inspection.warnings + analysis.warnings, "yellow"),
        ("suggestion", inspection.suggestions + analysis.recommendations, "blue"),
    ):
        for message in messages:
            console.print(f"[{style}]{label}:[/{style}] {escape(message)}")


__all__ = ["print_job", "print_kinds", "print_inspection"]
