"""
Serialization of batch jobs and identifier lists.

The exporter only produces strings: `ExportPayload` carries the content, a
MIME type hint and a suggested filename. Writing it anywhere is the caller's
business.

Formats:
- ``json``: one summary record for the job plus one record per identifier.
- ``csv``: fixed column order, every field quoted, inner quotes doubled.
- ``xml``: a root element wrapping one element per identifier; free-text
  values are CDATA sections.
- ``txt``: a human-readable report with per-item lines and histograms.
"""

from __future__ import annotations

import csv
import io
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence
from xml.sax.saxutils import escape, quoteattr

from idbatch.domain.models import BatchJob, Identifier

CSV_HEADER = (
    "Index",
    "Value",
    "Kind",
    "Version",
    "Valid",
    "Length",
    "Security Level",
    "Quality Score",
    "Security Score",
    "Entropy",
    "Timestamp",
)

MIME_TYPES: Mapping[str, str] = {
    "json": "application/json",
    "csv": "text/csv",
    "xml": "application/xml",
    "txt": "text/plain",
}

_SLUG = re.compile(r"[^A-Za-z0-9_.-]+")


@dataclass(frozen=True)
class ExportPayload:
    content: str
    mime_type: str
    filename: str


def _slug(name: str) -> str:
    return _SLUG.sub("-", name).strip("-") or "batch"


def _number(value: float) -> str:
    return f"{value:g}"


def identifier_record(item: Identifier) -> Dict[str, Any]:
    """JSON-ready record for one identifier."""
    return item.model_dump(
        mode="json",
        include={
            "id",
            "value",
            "kind",
            "version",
            "timestamp",
            "is_valid",
            "error",
            "metadata",
            "analysis",
            "index",
        },
    )


def job_summary_record(job: BatchJob) -> Dict[str, Any]:
    """JSON-ready summary of a job (everything but its items)."""
    return job.model_dump(mode="json", exclude={"items"})


def csv_row(item: Identifier) -> List[str]:
    metadata, analysis = item.metadata, item.analysis
    return [
        str(item.index),
        item.value,
        item.kind,
        str(item.version) if item.version is not None else "",
        "Yes" if item.is_valid else "No",
        str(metadata.length if metadata else len(item.value)),
        metadata.security_level if metadata else "",
        f"{analysis.quality.overall_quality:.1f}" if analysis else "",
        str(analysis.security.security_score) if analysis else "",
        _number(metadata.entropy) if metadata else "",
        item.timestamp.isoformat(),
    ]


def cdata(text: str) -> str:
    """Wrap `text` in a CDATA section, splitting any embedded terminator."""
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def _xml_item(item: Identifier) -> str:
    metadata, analysis = item.metadata, item.analysis
    lines = [
        "  <identifier>",
        f"    <index>{item.index}</index>",
        f"    <value>{cdata(item.value)}</value>",
        f"    <kind>{escape(item.kind)}</kind>",
        f"    <version>{item.version if item.version is not None else ''}</version>",
        f"    <valid>{'true' if item.is_valid else 'false'}</valid>",
    ]
    if item.error:
        lines.append(f"    <error>{cdata(item.error)}</error>")
    lines.extend(
        [
            "    <metadata>",
            f"      <length>{metadata.length if metadata else len(item.value)}</length>",
            f"      <securityLevel>{metadata.security_level if metadata else ''}</securityLevel>",
            f"      <entropy>{_number(metadata.entropy) if metadata else 0}</entropy>",
            "    </metadata>",
            "    <analysis>",
            f"      <qualityScore>{_number(analysis.quality.overall_quality) if analysis else 0}</qualityScore>",
            f"      <securityScore>{analysis.security.security_score if analysis else 0}</securityScore>",
            "    </analysis>",
            f"    <timestamp>{item.timestamp.isoformat()}</timestamp>",
            "  </identifier>",
        ]
    )
    return "\n".join(lines)


def _to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2)


def _to_csv(items: Iterable[Identifier]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for item in items:
        writer.writerow(csv_row(item))
    return buffer.getvalue()


def _to_xml(items: Iterable[Identifier], root_open: str, root_close: str) -> str:
    body = "\n".join(_xml_item(item) for item in items)
    parts = ['<?xml version="1.0" encoding="UTF-8"?>', root_open]
    if body:
        parts.append(body)
    parts.append(root_close)
    return "\n".join(parts) + "\n"


def _histogram_lines(distribution: Mapping[str, int], total: int) -> List[str]:
    lines = []
    for label, count in distribution.items():
        pct = (count / total * 100) if total else 0.0
        lines.append(f"- {label}: {count} ({pct:.1f}%)")
    return lines or ["- (none)"]


def _numeric_order(distribution: Mapping[str, int]) -> Dict[str, int]:
    """Order histogram labels such as "12" or "80-89" by their leading number."""

    def key(label: str) -> int:
        head = label.split("-")[0]
        return int(head) if head.isdigit() else 0

    return dict(sorted(distribution.items(), key=lambda entry: key(entry[0])))


def text_report(job: BatchJob) -> str:
    """Human-readable report: job details, statistics, items and histograms."""
    stats = job.statistics
    completed = job.completed_at.isoformat() if job.completed_at else "N/A"
    lines = [
        "Identifier Batch Report",
        "=======================",
        "",
        "Job Details:",
        f"- ID: {job.id}",
        f"- Name: {job.name}",
        f"- Kind: {job.kind}",
        f"- Count: {job.count}",
        f"- Status: {job.status}",
        f"- Progress: {job.progress * 100:.1f}%",
        f"- Created: {job.created_at.isoformat()}",
        f"- Completed: {completed}",
    ]
    if job.error:
        lines.append(f"- Error: {job.error}")
    lines += [
        "",
        "Statistics:",
        f"- Total Generated: {stats.total_generated}",
        f"- Valid: {stats.valid_count}",
        f"- Invalid: {stats.invalid_count}",
        f"- Unique: {stats.unique_count}",
        f"- Duplicates: {stats.duplicate_count}",
        f"- Generation Time: {stats.generation_time_seconds:.3f}s",
        f"- Collision Rate: {stats.collision_rate * 100:.4f}%",
        f"- Average Quality: {stats.average_quality:.1f}/100",
        f"- Average Security: {stats.average_security:.1f}/100",
        f"- Average Entropy: {stats.average_entropy:.1f} bits",
        "",
        "Generated Identifiers:",
    ]
    lines += [
        f"{position}. {item.value}{'' if item.is_valid else ' (INVALID: ' + (item.error or 'unknown') + ')'}"
        for position, item in enumerate(job.items, start=1)
    ]
    lines += ["", "Security Distribution:"]
    lines += _histogram_lines(stats.security_distribution, stats.total_generated)
    lines += ["", "Quality Distribution:"]
    lines += _histogram_lines(_numeric_order(stats.quality_distribution), stats.total_generated)
    lines += ["", "Length Distribution:"]
    lines += _histogram_lines(_numeric_order(stats.length_distribution), stats.total_generated)
    return "\n".join(lines) + "\n"


def export_job(job: BatchJob, fmt: str = "txt", filename: Optional[str] = None) -> ExportPayload:
    """
    Serialize a job in the given format.

    Unknown formats fall back to the plain-text report.
    """
    base = f"idbatch-{_slug(job.name)}"
    if fmt == "json":
        content = _to_json(
            {
                "job": job_summary_record(job),
                "identifiers": [identifier_record(item) for item in job.items],
            }
        )
    elif fmt == "csv":
        content = _to_csv(job.items)
    elif fmt == "xml":
        content = _to_xml(
            job.items,
            f"<batchJob id={quoteattr(job.id)} name={quoteattr(job.name)} status={quoteattr(job.status)}>",
            "</batchJob>",
        )
    else:
        fmt = "txt"
        content = text_report(job)
    return ExportPayload(
        content=content, mime_type=MIME_TYPES[fmt], filename=filename or f"{base}.{fmt}"
    )


def export_identifiers(
    items: Sequence[Identifier], fmt: str = "txt", filename: Optional[str] = None
) -> ExportPayload:
    """Serialize a bare list of identifiers; ``txt`` is one value per line."""
    if fmt == "json":
        content = _to_json([identifier_record(item) for item in items])
    elif fmt == "csv":
        content = _to_csv(items)
    elif fmt == "xml":
        content = _to_xml(items, "<identifiers>", "</identifiers>")
    else:
        fmt = "txt"
        content = "\n".join(item.value for item in items)
    return ExportPayload(
        content=content, mime_type=MIME_TYPES[fmt], filename=filename or f"identifiers.{fmt}"
    )


__all__ = [
    "CSV_HEADER",
    "MIME_TYPES",
    "ExportPayload",
    "identifier_record",
    "job_summary_record",
    "csv_row",
    "cdata",
    "text_report",
    "export_job",
    "export_identifiers",
]
