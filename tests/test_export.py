import base64
import io
import json

import pytest

from cyberassess import export
from cyberassess.errors import ExportError, ValidationError
from cyberassess.export import (CSV_HEADERS, ExportArtifact, ReportOptions, export_report,
                                import_assessment_json, section_csv_row, write_artifact)
from cyberassess.scoring import section_scores

from conftest import FIXED_NOW


def test_json_round_trip_keeps_scores(record, nist):
    artifact = export_report(record, nist, "json", now=FIXED_NOW)
    assert artifact.mimetype == "application/json"
    assert artifact.filename.endswith("-report-a1-2026-01-15.json")

    payload = json.loads(artifact.content)
    assert payload["framework"]["id"] == "nist-csf-v2"
    assert payload["metadata"]["exportFormat"] == "json"
    assert payload["assessment"]["frameworkId"] == "nist-csf-v2"

    imported = import_assessment_json(artifact.content)
    assert imported.id == record.id
    assert imported.responses == record.responses
    assert section_scores(nist, imported.responses) == section_scores(nist, record.responses)


def test_report_filename_slug(record, nist):
    artifact = export_report(record, nist, "csv", now=FIXED_NOW)
    assert artifact.filename == "NIST-CSF-v2-0---Quick-Check-report-a1-2026-01-15.csv"


def test_csv_layout(record, nist):
    content = export_report(record, nist, "csv", now=FIXED_NOW).content
    assert content.startswith(b"\xef\xbb\xbf")

    lines = content.decode("utf-8-sig").split("\n")
    assert lines[0] == "# NIST CSF v2.0 - Quick Check Assessment Report"
    assert "# Organization: Acme <Corp>" in lines
    assert "# Assessment ID: a1" in lines

    header = next(line for line in lines if line.startswith('"Section"'))
    assert header == ",".join(f'"{h}"' for h in CSV_HEADERS)

    rows = [line for line in lines if line.startswith('"') and line != header]
    assert len(rows) == len(nist.sections) + 1
    assert rows[0].startswith('"Govern (GV)","63","2","3","67"')
    assert rows[-1].startswith('"OVERALL SUMMARY"')
    assert all(cell.startswith('"') and cell.endswith('"') for cell in rows[0].split(","))


def test_csv_gap_is_zero_above_target():
    row = section_csv_row("Protect", 80, 1, 1)
    assert row == ["Protect", "80", "1", "1", "100", "Satisfactory", "0", "Low"]


def test_csv_gap_below_target():
    row = section_csv_row("Detect", 38, 2, 3)
    assert row[5:] == ["Critical", "37", "High"]


def test_html_escapes_user_text(record, nist):
    html = export_report(record, nist, "html", now=FIXED_NOW).content.decode("utf-8")
    assert "Acme &lt;Corp&gt;" in html
    assert "Acme <Corp>" not in html
    assert "reviewed &amp; approved" in html
    assert "Gap Analysis (target 75%)" in html
    assert "Govern (GV)" in html


def test_html_without_gap_analysis(record, nist):
    options = ReportOptions(include_gap_analysis=False, include_recommendations=False)
    html = export_report(record, nist, "html", options, now=FIXED_NOW).content.decode("utf-8")
    assert "Gap Analysis (target" not in html
    assert "Recommendations &amp; Next Steps" not in html


def test_organization_override(record, nist):
    options = ReportOptions(organization_name="Globex")
    html = export_report(record, nist, "html", options, now=FIXED_NOW).content.decode("utf-8")
    assert "Organization: Globex" in html


def test_pdf_and_pptx_are_binary_documents(record, nist):
    pdf = export_report(record, nist, "pdf", now=FIXED_NOW)
    assert pdf.content.startswith(b"%PDF")
    assert pdf.mimetype == "application/pdf"

    pptx = export_report(record, nist, "pptx", now=FIXED_NOW)
    assert pptx.content.startswith(b"PK")
    assert pptx.filename.endswith(".pptx")


def test_unsupported_format(record, nist):
    with pytest.raises(ExportError, match="Unsupported format"):
        export_report(record, nist, "docx")


def test_renderer_failure_is_wrapped(record, nist, monkeypatch):
    def boom(*_args):
        raise RuntimeError("disk on fire")

    monkeypatch.setitem(export.EXPORTERS, "csv", boom)
    with pytest.raises(ExportError, match="disk on fire"):
        export_report(record, nist, "csv")


def test_write_artifact(tmp_path):
    artifact = ExportArtifact(content=b"hello", filename="report.csv", mimetype="text/csv")
    path = write_artifact(artifact, tmp_path / "out")
    assert path.read_bytes() == b"hello"
    assert [p.name for p in (tmp_path / "out").iterdir()] == ["report.csv"]


def test_write_artifact_failure_leaves_nothing(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    artifact = ExportArtifact(content=b"hello", filename="report.csv", mimetype="text/csv")
    with pytest.raises(ExportError):
        write_artifact(artifact, blocker)
    assert blocker.read_text() == "not a directory"


def test_import_accepts_bare_record_with_bom():
    text = "\ufeff" + json.dumps({"id": "x1", "frameworkId": "cmmc", "responses": {"cmmc.ac.3.1.1": 2}})
    record = import_assessment_json(text.encode("utf-8"))
    assert record.id == "x1"
    assert record.framework_id == "cmmc"
    assert record.tags == []


@pytest.mark.parametrize(
    "text",
    [
        "not json at all",
        "[1, 2, 3]",
        json.dumps({"assessment": {"id": "", "frameworkId": "nist-csf-v2"}}),
        json.dumps({"id": "x", "frameworkId": "nist-csf-v2", "responses": {"q": 7}}),
    ],
)
def test_import_rejects_bad_files(text):
    with pytest.raises(ValidationError):
        import_assessment_json(text)


def test_import_rejects_bytes_that_are_not_utf8():
    with pytest.raises(ValidationError, match="not UTF-8"):
        import_assessment_json(b'{"id": "x", "frameworkId": "cmmc", "notes": "\xff\xfe"}')


# 1x1 transparent PNG
PIXEL_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def test_pdf_embeds_section_charts(record, nist, monkeypatch):
    rendered = []

    def fake_img_from_fig(fig, width=720, height=420, scale=2):
        rendered.append(fig.layout.height)
        return io.BytesIO(PIXEL_PNG)

    monkeypatch.setattr(export, "img_from_fig", fake_img_from_fig)
    options = ReportOptions(include_charts=True)
    with_charts = export_report(record, nist, "pdf", options, now=FIXED_NOW)
    assert with_charts.content.startswith(b"%PDF")
    assert len(rendered) == 2

    without = export_report(record, nist, "pdf", now=FIXED_NOW)
    assert len(rendered) == 2
    assert len(with_charts.content) > len(without.content)
