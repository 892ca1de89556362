from __future__ import annotations

import csv
import io
import json
from xml.etree import ElementTree

import pytest

from idbatch.analyzer import analyze, build_metadata
from idbatch.domain.models import BatchJob, GenerationSettings, Identifier
from idbatch.exporter import CSV_HEADER, cdata, csv_row, export_identifiers, export_job, text_report
from idbatch.orchestrator import compute_statistics

V4_A = "3f2504e0-4f89-41d3-9a0c-0305e82c3301"
V4_B = "9b2c8f1a-7d3e-4c5b-8a6f-1e2d3c4b5a69"


def _item(value: str, index: int) -> Identifier:
    settings = GenerationSettings()
    return Identifier(
        id=f"item-{index}",
        value=value,
        kind="uuid_v4",
        version=4,
        metadata=build_metadata(value, "uuid_v4", settings),
        analysis=analyze(value, "uuid_v4"),
        index=index,
    )


@pytest.fixture
def job() -> BatchJob:
    items = (_item(V4_A, 0), _item(V4_B, 1))
    return BatchJob(
        id="job-1",
        name="My Batch!",
        kind="uuid_v4",
        count=2,
        settings=GenerationSettings(count=2, chunk_size=2),
        items=items,
        status="completed",
        progress=1.0,
        statistics=compute_statistics(items, 0.25),
    )


def test_cdata_splits_embedded_terminator():
    assert cdata("plain") == "<![CDATA[plain]]>"
    assert cdata("a]]>b") == "<![CDATA[a]]]]><![CDATA[>b]]>"


def test_csv_row_fields():
    row = csv_row(_item(V4_A, 0))
    assert row[:6] == ["0", V4_A, "uuid_v4", "4", "Yes", "36"]
    assert row[6] == "very_high"
    assert row[8] == "100"
    assert row[9] == "128"


def test_csv_quotes_every_field_and_doubles_quotes():
    quoted = Identifier(id="q", value='say "hi"', kind="custom", index=0)
    payload = export_identifiers([quoted], "csv")
    lines = payload.content.splitlines()

    assert lines[0] == ",".join(f'"{name}"' for name in CSV_HEADER)
    assert lines[1].startswith('"0","say ""hi""","custom",""')
    parsed = list(csv.reader(io.StringIO(payload.content)))
    assert parsed[1][1] == 'say "hi"'
    assert payload.mime_type == "text/csv"


def test_json_export_shape(job: BatchJob):
    payload = export_job(job, "json")
    data = json.loads(payload.content)

    assert set(data) == {"job", "identifiers"}
    assert "items" not in data["job"]
    assert data["job"]["statistics"]["total_generated"] == 2
    assert [record["value"] for record in data["identifiers"]] == [V4_A, V4_B]
    assert data["identifiers"][0]["is_valid"] is True
    assert payload.mime_type == "application/json"
    assert payload.filename == "idbatch-My-Batch.json"


def test_xml_export_is_well_formed(job: BatchJob):
    payload = export_job(job, "xml")
    root = ElementTree.fromstring(payload.content.encode("utf-8"))

    assert root.tag == "batchJob"
    assert root.attrib == {"id": "job-1", "name": "My Batch!", "status": "completed"}
    values = [node.findtext("value") for node in root.findall("identifier")]
    assert values == [V4_A, V4_B]
    assert "<![CDATA[" + V4_A + "]]>" in payload.content


def test_xml_identifiers_with_awkward_values():
    awkward = Identifier(id="x", value="<a>]]>&", kind="custom", index=0)
    payload = export_identifiers([awkward], "xml")
    root = ElementTree.fromstring(payload.content.encode("utf-8"))
    assert root.tag == "identifiers"
    assert root.find("identifier").findtext("value") == "<a>]]>&"


def test_text_report_includes_histograms(job: BatchJob):
    report = text_report(job)

    assert "- Name: My Batch!" in report
    assert "- Total Generated: 2" in report
    assert f"1. {V4_A}" in report
    assert "Security Distribution:" in report
    assert "- very_high: 2 (100.0%)" in report
    assert "Length Distribution:" in report
    assert "- 36: 2 (100.0%)" in report


def test_text_report_marks_invalid_items():
    bad = Identifier(id="b", value="", kind="uuid_v4", is_valid=False, error="boom", index=0)
    failed = BatchJob(
        id="job-2",
        name="failing",
        kind="uuid_v4",
        count=1,
        settings=GenerationSettings(count=1),
        items=(bad,),
        status="failed",
        error="Batch cancelled by caller",
        statistics=compute_statistics([bad]),
    )
    report = text_report(failed)
    assert "1.  (INVALID: boom)" in report
    assert "- Error: Batch cancelled by caller" in report
    assert "- (none)" in report


def test_unknown_format_falls_back_to_text(job: BatchJob):
    payload = export_job(job, "pdf")
    assert payload.mime_type == "text/plain"
    assert payload.filename == "idbatch-My-Batch.txt"
    assert payload.content.startswith("Identifier Batch Report")


def test_plain_identifier_list_is_one_value_per_line():
    payload = export_identifiers([_item(V4_A, 0), _item(V4_B, 1)], "txt", filename="ids.txt")
    assert payload.content == f"{V4_A}\n{V4_B}"
    assert payload.filename == "ids.txt"
