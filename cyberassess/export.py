"""Report exporter.

Every format is rendered into an in-memory ``ExportArtifact``; the Dash layer
hands it to ``dcc.Download`` and ``write_artifact`` saves it to disk. Nothing
touches the filesystem until rendering has fully succeeded.
"""

import csv
import io
import json
import logging
import os
import re
import tempfile
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
from jinja2 import Environment
from pptx import Presentation
from pptx.util import Inches
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Image as RLImage
from reportlab.platypus import (ListFlowable, ListItem, Paragraph,
                                SimpleDocTemplate, Spacer, Table, TableStyle)

from .charts import bar_figure, img_from_fig, radar_figure
from .config import DEFAULT_TARGET_LEVEL, EXPORT_VERSION, REPORT_TARGET_SCORE
from .errors import AssessmentError, ExportError, ValidationError
from .gap_analysis import analyze_assessment
from .models import AssessmentRecord, Framework, GapAnalysisResult, parse_record, utcnow
from .scoring import (build_report_data, completion_rate, gap_to_target,
                      performance_label, report_priority, section_scores)

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Section",
    "Score (%)",
    "Questions Answered",
    "Total Questions",
    "Completion Rate (%)",
    "Performance Level",
    f"Gap to Target ({REPORT_TARGET_SCORE}%)",
    "Priority",
]

UTF8_BOM = "\ufeff"

MIME_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
    "html": "text/html",
    "pdf": "application/pdf",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
}


@dataclass
class ReportOptions:
    include_gap_analysis: bool = True
    include_recommendations: bool = True
    include_charts: bool = False
    organization_name: Optional[str] = None
    target_level: int = DEFAULT_TARGET_LEVEL
    theme: str = "light"


@dataclass
class ExportArtifact:
    content: bytes
    filename: str
    mimetype: str
    metadata: Dict[str, Any] = field(default_factory=dict)


def report_filename(framework: Framework, record: AssessmentRecord, ext: str, now=None) -> str:
    now = now or utcnow()
    slug = re.sub(r"[^a-zA-Z0-9]", "-", framework.name)
    return f"{slug}-report-{record.id}-{now.date().isoformat()}.{ext}"


def _org_name(record: AssessmentRecord, options: ReportOptions, default="Organization") -> str:
    if options.organization_name:
        return options.organization_name
    if record.organization_info and record.organization_info.name:
        return record.organization_info.name
    return default


# ----------- JSON -------------
def to_json(record, framework, options, now) -> bytes:
    data = build_report_data(record, framework)
    payload = {
        "assessment": record.to_json_dict(),
        "framework": framework.summary(),
        "reportData": data,
        "exportedAt": now.isoformat(),
        "options": asdict(options),
        "metadata": {
            "totalQuestions": data["totalQuestions"],
            "answeredQuestions": data["answeredQuestions"],
            "overallScore": data["overallScore"],
            "completionRate": data["completionRate"],
            "exportFormat": "json",
            "exportVersion": EXPORT_VERSION,
        },
    }
    return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")


# ----------- CSV -------------
def section_csv_row(name: str, score: int, answered: int, total: int) -> List[str]:
    return [
        name,
        str(score),
        str(answered),
        str(total),
        str(completion_rate(answered, total)),
        performance_label(score),
        str(gap_to_target(score)),
        report_priority(score),
    ]


def _csv_block(rows, header=True) -> str:
    df = pd.DataFrame(rows, columns=CSV_HEADERS)
    return df.to_csv(
        index=False, header=header, quoting=csv.QUOTE_ALL, lineterminator="\n"
    )


def to_csv(record, framework, options, now) -> bytes:
    data = build_report_data(record, framework)
    rows = [
        section_csv_row(s["name"], s["score"], s["answered"], s["total"])
        for s in data["sectionScores"]
    ]
    summary = section_csv_row(
        "OVERALL SUMMARY",
        data["overallScore"],
        data["answeredQuestions"],
        data["totalQuestions"],
    )
    org = _org_name(record, options, default="Not specified")
    meta = "\n".join(
        [
            f"# {framework.name} Assessment Report",
            f"# Organization: {org}",
            f"# Generated: {now.date().isoformat()}",
            f"# Assessment ID: {record.id}",
            f"# Framework Version: {framework.version}",
            "#",
            "",
        ]
    )
    text = meta + _csv_block(rows) + "\n" + _csv_block([summary], header=False)
    return (UTF8_BOM + text).encode("utf-8")


# ----------- HTML -------------
HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>{{ framework.name }} Assessment Report - {{ org }}</title>
  <style>
    @page { margin: 1in; size: letter; }
    body { font-family: -apple-system, 'Segoe UI', system-ui, sans-serif; margin: 0; padding: 20px; line-height: 1.6; color: #333; }
    .header { text-align: center; margin-bottom: 40px; border-bottom: 3px solid #2563eb; padding-bottom: 20px; }
    .header h1 { color: #1e40af; font-size: 28px; margin-bottom: 10px; }
    .subtitle { color: #6b7280; font-size: 16px; }
    .section { margin-bottom: 30px; break-inside: avoid; }
    .section h2 { color: #1f2937; font-size: 20px; border-bottom: 2px solid #e5e7eb; padding-bottom: 8px; }
    table { width: 100%; border-collapse: collapse; margin: 15px 0; }
    th, td { border: 1px solid #d1d5db; padding: 10px 8px; text-align: left; font-size: 14px; }
    th { background-color: #f9fafb; font-weight: 600; }
    .metric-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 20px; }
    .metric-card { border: 2px solid #e5e7eb; border-radius: 8px; padding: 20px; text-align: center; background: #f9fafb; }
    .metric-value { font-size: 24px; font-weight: bold; color: #2563eb; }
    .metric-label { font-size: 14px; color: #6b7280; }
    .progress-bar { width: 100%; height: 20px; background-color: #e5e7eb; border-radius: 10px; overflow: hidden; }
    .progress-fill { height: 100%; }
    .gap-item { background: #fef2f2; border: 1px solid #fecaca; border-radius: 8px; padding: 15px; margin: 10px 0; }
    .gap-title { font-weight: bold; color: #dc2626; }
    .notes-section { background: #f0f9ff; border: 1px solid #bae6fd; border-radius: 8px; padding: 15px; margin: 15px 0; }
    .footer { margin-top: 40px; text-align: center; font-size: 12px; color: #6b7280; border-top: 1px solid #e5e7eb; padding-top: 20px; }
    @media print { body { margin: 0; } .section { page-break-inside: avoid; } .header { page-break-after: avoid; } }
  </style>
</head>
<body>
  <div class="header">
    <h1>{{ framework.name }} Assessment Report</h1>
    <div class="subtitle">Organization: {{ org }}</div>
    <div class="subtitle">Generated on {{ generated }}</div>
    <div class="subtitle">Assessment ID: {{ record.id }}</div>
  </div>

  <div class="section">
    <h2>Executive Summary</h2>
    <div class="metric-grid">
      <div class="metric-card"><div class="metric-value">{{ data.overallScore }}%</div><div class="metric-label">Overall Score</div></div>
      <div class="metric-card"><div class="metric-value">{{ data.answeredQuestions }}/{{ data.totalQuestions }}</div><div class="metric-label">Questions Completed</div></div>
      <div class="metric-card"><div class="metric-value">{{ framework.name }}</div><div class="metric-label">Framework</div></div>
      <div class="metric-card"><div class="metric-value">v{{ framework.version }}</div><div class="metric-label">Version</div></div>
    </div>
    <p><strong>Last Modified:</strong> {{ record.last_modified.date().isoformat() }}</p>
    <p><strong>Assessment Status:</strong> {{ "Complete" if record.is_complete else "In Progress" }}</p>
    {% if data.maturityLevel %}<p><strong>Maturity Level:</strong> {{ data.maturityLevel }}</p>{% endif %}
  </div>

  <div class="section">
    <h2>Section Performance Analysis</h2>
    <table>
      <thead><tr><th style="width: 40%;">Section</th><th style="width: 15%;">Score</th><th style="width: 20%;">Progress</th><th style="width: 25%;">Performance Bar</th></tr></thead>
      <tbody>
      {% for s in data.sectionScores %}
        <tr>
          <td><strong>{{ s.name }}</strong></td>
          <td style="text-align: center; font-weight: bold; color: {{ s.score | text_color }};">{{ s.score }}%</td>
          <td style="text-align: center;">{{ s.answered }}/{{ s.total }}</td>
          <td><div class="progress-bar"><div class="progress-fill" style="width: {{ s.score }}%; background: {{ s.score | bar_color }};"></div></div></td>
        </tr>
      {% endfor %}
      </tbody>
    </table>
  </div>

  {% if gaps %}
  <div class="section">
    <h2>Gap Analysis (target {{ gaps[0].target_score }}%)</h2>
    {% for g in gaps %}
    <div class="gap-item">
      <div class="gap-title">{{ g.section_name }}: {{ g.gap }} points below target ({{ g.priority }} priority)</div>
      <p>Effort: {{ g.estimated_effort }} &middot; Timeframe: {{ g.timeframe }}</p>
      <p>{{ g.business_impact }}</p>
      {% if show_recs and g.recommendations %}
      <ul>{% for r in g.recommendations %}<li>{{ r }}</li>{% endfor %}</ul>
      {% endif %}
    </div>
    {% endfor %}
  </div>
  {% endif %}

  {% if record.question_notes %}
  <div class="section">
    <h2>Assessment Notes &amp; Comments</h2>
    {% for qid, note in record.question_notes.items() %}
    <div class="notes-section"><div class="notes-title">Question {{ qid }}:</div><p>{{ note }}</p></div>
    {% endfor %}
  </div>
  {% endif %}

  {% if show_recs %}
  <div class="section">
    <h2>Recommendations &amp; Next Steps</h2>
    <ol>
      <li><strong>Review Priority Gaps:</strong> Focus on sections scoring below {{ target }}% for immediate improvement</li>
      <li><strong>Develop Action Plan:</strong> Create timeline for implementing missing controls and processes</li>
      <li><strong>Assign Resources:</strong> Allocate appropriate personnel and budget for improvement initiatives</li>
      <li><strong>Monitor Progress:</strong> Schedule regular reassessments to track improvement</li>
      <li><strong>Document Evidence:</strong> Collect and maintain evidence of control implementation</li>
    </ol>
  </div>
  {% endif %}

  <div class="footer">
    <p>Assessment ID: {{ record.id }} | Generated: {{ generated }} | Framework: {{ framework.name }} v{{ framework.version }}</p>
    <p>This report contains confidential information. Handle according to your organization's data classification policies.</p>
  </div>
</body>
</html>
"""


def _text_color(score):
    return "#059669" if score >= 75 else "#d97706" if score >= 50 else "#dc2626"


def _bar_color(score):
    return "#10b981" if score >= 75 else "#f59e0b" if score >= 50 else "#ef4444"


_env = Environment(autoescape=True)
_env.filters["text_color"] = _text_color
_env.filters["bar_color"] = _bar_color
_html_template = _env.from_string(HTML_TEMPLATE)


def _gaps(record, framework, options) -> List[GapAnalysisResult]:
    if not options.include_gap_analysis:
        return []
    return analyze_assessment(record, framework, options.target_level)


def render_html(record, framework, options, now) -> str:
    return _html_template.render(
        record=record,
        framework=framework,
        data=build_report_data(record, framework),
        gaps=_gaps(record, framework, options),
        org=_org_name(record, options),
        generated=now.date().isoformat(),
        show_recs=options.include_recommendations,
        target=REPORT_TARGET_SCORE,
    )


def to_html(record, framework, options, now) -> bytes:
    return render_html(record, framework, options, now).encode("utf-8")


# ----------- PDF -------------
_TABLE_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#e9ebf3")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.HexColor("#0b1020")),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
        ("TOPPADDING", (0, 0), (-1, 0), 6),
    ]
)


def _esc(s) -> str:
    # reportlab Paragraph takes a mini-markup, so user text must be escaped
    return str(s).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _write_pdf_bytes(buf, record, framework, options, now):
    doc = SimpleDocTemplate(
        buf, pagesize=A4, leftMargin=16, rightMargin=16, topMargin=16, bottomMargin=16
    )
    styles = getSampleStyleSheet()
    data = build_report_data(record, framework)
    org = record.organization_info

    story = [
        Paragraph(f"<b>{_esc(framework.name)} Assessment Report</b>", styles["Title"]),
        Spacer(1, 8),
        Paragraph(
            f"Organization: {_esc(_org_name(record, options))}&nbsp;&nbsp;&nbsp; "
            f"Assessor: {_esc(org.assessor if org else '')}&nbsp;&nbsp;&nbsp; "
            f"Generated: {now.date().isoformat()}",
            styles["Normal"],
        ),
        Spacer(1, 10),
        Paragraph(
            f"<b>Overall Score:</b> {data['overallScore']}% "
            f"({data['answeredQuestions']}/{data['totalQuestions']} answered)",
            styles["Heading3"],
        ),
        Spacer(1, 8),
    ]

    tbl_data = [["Section", "Score (%)", "Answered", "Level"]] + [
        [s["name"], str(s["score"]), f"{s['answered']}/{s['total']}", performance_label(s["score"])]
        for s in data["sectionScores"]
    ]
    avail = A4[0] - 72
    col0 = 220
    rest = (avail - col0) / 3
    tbl = Table(tbl_data, colWidths=[col0, rest, rest, rest], hAlign="LEFT")
    tbl.setStyle(_TABLE_STYLE)
    story += [
        Paragraph("<b>Section Scores</b>", styles["Heading3"]),
        Spacer(1, 6),
        tbl,
        Spacer(1, 12),
    ]

    if options.include_charts:
        scores = section_scores(framework, record.responses)
        for title, fig in (
            ("Section Radar", radar_figure(scores, options.theme)),
            ("Section Scores", bar_figure(scores, options.theme)),
        ):
            story += [Paragraph(f"<b>{title}</b>", styles["Heading3"]), Spacer(1, 6)]
            img_buf = img_from_fig(fig, width=520, height=320, scale=2)
            story += [RLImage(img_buf, width=520, height=320), Spacer(1, 12)]

    gaps = _gaps(record, framework, options)
    if gaps:
        items = []
        for g in gaps:
            text = (
                f"<b>{_esc(g.section_name)}</b>: {g.gap} points below target "
                f"({g.priority} priority, {g.estimated_effort} effort, {g.timeframe})"
            )
            if options.include_recommendations and g.recommendations:
                text += "<br/>" + "; ".join(_esc(r) for r in g.recommendations)
            items.append(ListItem(Paragraph(text, styles["Normal"])))
        story += [
            Paragraph(
                f"<b>Gap Analysis (target {gaps[0].target_score}%)</b>", styles["Heading3"]
            ),
            Spacer(1, 6),
            ListFlowable(items, bulletType="bullet"),
            Spacer(1, 12),
        ]

    doc.build(story)


def to_pdf(record, framework, options, now) -> bytes:
    buf = io.BytesIO()
    _write_pdf_bytes(buf, record, framework, options, now)
    return buf.getvalue()


# ----------- PPTX -------------
def _write_ppt_bytes(buf, record, framework, options, now):
    """
    Write a deck with a title slide, a summary slide, the section score table
    and, when there are gaps, the gap list.
    """
    data = build_report_data(record, framework)
    org = record.organization_info
    prs = Presentation()

    slide = prs.slides.add_slide(prs.slide_layouts[0])
    slide.shapes.title.text = f"{framework.name} Assessment"
    slide.placeholders[1].text = (
        f"Organization: {_org_name(record, options)}\n"
        f"Assessor: {org.assessor if org else ''}\n"
        f"Generated: {now.date().isoformat()}"
    )

    slide = prs.slides.add_slide(prs.slide_layouts[1])
    slide.shapes.title.text = "Summary"
    body = slide.shapes.placeholders[1].text_frame
    body.clear()
    body.paragraphs[0].text = f"Overall Score: {data['overallScore']}%"
    body.add_paragraph().text = (
        f"Questions answered: {data['answeredQuestions']}/{data['totalQuestions']}"
    )
    if data["maturityLevel"]:
        body.add_paragraph().text = f"Maturity level: {data['maturityLevel']}"

    slide = prs.slides.add_slide(prs.slide_layouts[5])
    slide.shapes.title.text = "Section Scores"
    sections = data["sectionScores"]
    rows, cols = len(sections) + 1, 2
    table = slide.shapes.add_table(
        rows, cols, Inches(0.8), Inches(1.5), Inches(8.0), Inches(0.8 + 0.35 * rows)
    ).table
    table.cell(0, 0).text, table.cell(0, 1).text = "Section", "Score (%)"
    for i, s in enumerate(sections, start=1):
        table.cell(i, 0).text = s["name"]
        table.cell(i, 1).text = str(s["score"])

    gaps = _gaps(record, framework, options)
    if gaps:
        slide = prs.slides.add_slide(prs.slide_layouts[1])
        slide.shapes.title.text = "Priority Gaps"
        tf = slide.placeholders[1].text_frame
        tf.clear()
        tf.paragraphs[0].text = f"Target: {gaps[0].target_score}%"
        for g in gaps:
            tf.add_paragraph().text = (
                f"[{g.priority}] {g.section_name}: {g.gap} points ({g.timeframe})"
            )
    prs.save(buf)


def to_pptx(record, framework, options, now) -> bytes:
    buf = io.BytesIO()
    _write_ppt_bytes(buf, record, framework, options, now)
    return buf.getvalue()


EXPORTERS: Dict[str, Callable[..., bytes]] = {
    "json": to_json,
    "csv": to_csv,
    "html": to_html,
    "pdf": to_pdf,
    "pptx": to_pptx,
}


def export_report(
    record: AssessmentRecord,
    framework: Framework,
    fmt: str,
    options: Optional[ReportOptions] = None,
    now: Optional[datetime] = None,
) -> ExportArtifact:
    """
    Render a report for ``record`` in ``fmt`` (json, csv, html, pdf, pptx).

    Raises:
        ExportError: unsupported format, or the renderer failed.
    """
    fmt = (fmt or "").lower()
    exporter = EXPORTERS.get(fmt)
    if exporter is None:
        raise ExportError(f"Unsupported format: {fmt}")
    options = options or ReportOptions()
    now = now or utcnow()
    try:
        content = exporter(record, framework, options, now)
    except AssessmentError:
        raise
    except Exception as e:
        logger.exception("Export of %s as %s failed", record.id, fmt)
        raise ExportError(f"Failed to export report as {fmt}: {e}") from e
    logger.info("Exported assessment %s as %s (%d bytes)", record.id, fmt, len(content))
    return ExportArtifact(
        content=content,
        filename=report_filename(framework, record, fmt, now),
        mimetype=MIME_TYPES[fmt],
        metadata={"format": fmt, "assessmentId": record.id},
    )


def write_artifact(artifact: ExportArtifact, directory) -> Path:
    """
    Save an artifact under ``directory``.

    Writes to a temp file and replaces, so a failure never leaves a partial
    report behind.
    """
    directory = Path(directory)
    target = directory / artifact.filename
    tmp_name = None
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(directory), suffix=".tmp")
        with os.fdopen(fd, "wb") as f:
            f.write(artifact.content)
        os.replace(tmp_name, target)
        tmp_name = None
    except OSError as e:
        raise ExportError(f"Could not write {target}: {e}") from e
    finally:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
    return target


# ----------- Import -------------
def import_assessment_json(text) -> AssessmentRecord:
    """
    Parse a JSON export (or a bare assessment object) back into a record.

    Raises:
        ValidationError: the bytes are not UTF-8, the text is not JSON or
            it does not hold a valid assessment.
    """
    try:
        if isinstance(text, bytes):
            text = text.decode("utf-8-sig")
        data = json.loads(text)
    except UnicodeDecodeError as e:
        raise ValidationError(f"Import file is not UTF-8 text: {e}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Import file is not valid JSON: {e}") from e
    if isinstance(data, dict) and isinstance(data.get("assessment"), dict):
        data = data["assessment"]
    return parse_record(data)
