# app.py

import base64
import binascii
import json
import logging

import dash
import dash_daq as daq
from dash import ALL, Input, Output, State, dcc, html

from .autosave import Debouncer
from .backend import SupabaseMirror
from .charts import BAR_H, GAP_H, PRIORITY_COLORS, RADAR_H, bar_figure, gap_figure, radar_figure
from .config import APP_TITLE, Settings, configure_logging
from .errors import AssessmentError, ValidationError
from .export import MIME_TYPES, ReportOptions, export_report, import_assessment_json
from .frameworks import (DEFAULT_FRAMEWORK_ID, available_frameworks, get_framework,
                         validate_frameworks)
from .gap_analysis import MATURITY_TARGETS, analyze_gaps, summarize_gaps
from .recommendations import table_section_ids
from .scoring import build_report_data, section_scores, target_score_for
from .service import AssessmentService
from .storage import AssessmentRepository, LocalAssessmentStore

logger = logging.getLogger(__name__)

GRAPH_CONFIG = {"responsive": False, "displaylogo": False, "scrollZoom": False}


def _validate_config() -> None:
    """
    Check the sanity of the framework catalog and recommendation tables.

    Logs warnings for duplicate question ids, out-of-range option values,
    empty sections, and recommendation entries for unknown section ids.
    """
    problems = validate_frameworks()
    for fw_id, section_ids in table_section_ids().items():
        known = {s.id for s in get_framework(fw_id).sections}
        unknown = [sid for sid in section_ids if sid not in known]
        if unknown:
            problems.append(f"{fw_id}: recommendations for unknown sections {unknown}")
    for p in problems:
        logger.warning("[config warning] %s", p)


_validate_config()


# ----------- Helpers -------------
def _org_payload(name, assessor, industry):
    if not any((name, assessor, industry)):
        return None
    return {"name": name or "", "assessor": assessor or "", "industry": industry or ""}


def decode_upload(contents) -> bytes:
    """Bytes of a dcc.Upload data URL (``data:<mime>;base64,<payload>``)."""
    try:
        return base64.b64decode(contents.split(",", 1)[-1], validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Uploaded file could not be decoded: {e}") from e


def _saved_options(service):
    opts = []
    for r in service.list_assessments():
        org = r.organization_info.name if r.organization_info and r.organization_info.name else "Unnamed"
        status = "complete" if r.is_complete else "in progress"
        opts.append(
            {
                "label": f"{r.framework_name} - {org} ({r.last_modified:%Y-%m-%d %H:%M}, {status})",
                "value": r.id,
            }
        )
    return opts


def _field(label, control):
    return html.Div([html.Label(label), control], className="field")


# -------------- Layout --------------------
def build_question_cards(framework, responses=None):
    """
    Build one card per section, each listing its questions with a 0-3
    implementation scale. Unanswered questions start with no selection.
    """
    responses = responses or {}
    cards = []
    for section in framework.sections:
        children = [html.H3(section.name, className="domain-title")]
        if section.description:
            children.append(html.Div(section.description, className="section-desc"))
        for category in section.categories:
            children.append(html.H4(category.name, className="category-title"))
            for q in category.questions:
                row = [
                    html.Div(q.text, className="qtext"),
                    dcc.RadioItems(
                        id={"type": "q-input", "qid": q.id},
                        options=[{"label": o.label, "value": o.value} for o in q.options],
                        value=responses.get(q.id),
                        className="likert",
                    ),
                ]
                if q.guidance:
                    row.append(html.Details([html.Summary("Guidance"), q.guidance]))
                children.append(html.Div(row, className="qrow"))
        cards.append(html.Div(children, className=f"domain-card d-{section.id}"))
    return cards


def build_layout(service, settings):
    """Page layout; rebuilt on every page load so the saved list is current."""
    latest = service.latest_assessment()
    frameworks = available_frameworks()
    banner = []
    if service.local_only:
        banner = [
            html.Div(
                "Running in local-only mode. Assessments are saved on this machine only.",
                className="banner local-only",
            )
        ]

    return html.Div(
        id="page-root",
        className="page theme-light",
        children=[
            dcc.Store(id="assessment-id", data=latest.id if latest else None),
            dcc.Store(id="theme-store", data="light"),
            dcc.Download(id="download"),
            *banner,
            # Header
            html.Div(
                [
                    html.H1(APP_TITLE),
                    html.Div(
                        [
                            _field(
                                "Framework",
                                dcc.Dropdown(
                                    id="framework",
                                    options=[{"label": f.name, "value": f.id} for f in frameworks],
                                    value=latest.framework_id if latest else DEFAULT_FRAMEWORK_ID,
                                    clearable=False,
                                ),
                            ),
                            _field("Organization", dcc.Input(id="org-name", placeholder="e.g., Acme Corp", className="textin")),
                            _field("Assessor", dcc.Input(id="assessor", placeholder="Your name", className="textin")),
                            _field("Industry", dcc.Input(id="industry", placeholder="e.g., Healthcare", className="textin")),
                            _field(
                                "Dark mode",
                                daq.BooleanSwitch(id="theme-switch", on=False, color="#4f46e5", className="theme-switch"),
                            ),
                            html.Button("New Assessment", id="new-assessment", n_clicks=0, className="primary"),
                        ],
                        className="meta",
                    ),
                    html.Div(id="message", className="message"),
                ],
                className="header",
            ),
            dcc.Tabs(
                id="tabs",
                value="tab-assess",
                children=[
                    dcc.Tab(
                        label="Assessment",
                        value="tab-assess",
                        children=[
                            html.Div(id="assessment-title", className="assessment-title"),
                            html.Div(id="question-cards", className="grid"),
                            html.Div(id="save-status", className="save-status"),
                            html.Button("Mark Complete", id="mark-complete", n_clicks=0, className="primary"),
                        ],
                    ),
                    dcc.Tab(
                        label="Results & Insights",
                        value="tab-results",
                        children=[
                            _field(
                                "Target maturity level",
                                dcc.Dropdown(
                                    id="target-level",
                                    options=[
                                        {"label": f"{lvl} - {name} ({target_score_for(lvl)}%)", "value": lvl}
                                        for lvl, name in MATURITY_TARGETS.items()
                                    ],
                                    value=settings.target_level,
                                    clearable=False,
                                ),
                            ),
                            html.Div(id="kpis", className="kpis"),
                            # Export controls
                            html.Div(
                                [
                                    html.Button(
                                        f"Download {fmt.upper()}",
                                        id={"type": "export", "fmt": fmt},
                                        n_clicks=0,
                                        className="secondary",
                                    )
                                    for fmt in MIME_TYPES
                                ],
                                className="export-row",
                            ),
                            dcc.Checklist(
                                id="export-options",
                                options=[{"label": "Include charts in PDF", "value": "charts"}],
                                value=["charts"],
                                inline=True,
                            ),
                            html.Div(id="export-message", className="message"),
                            # Charts row (fixed heights)
                            html.Div(
                                [
                                    dcc.Graph(id="radar", style={"height": f"{RADAR_H}px"}, config=GRAPH_CONFIG),
                                    dcc.Graph(id="bar", style={"height": f"{BAR_H}px"}, config=GRAPH_CONFIG),
                                ],
                                className="charts",
                            ),
                            html.Div(
                                className="row-gap-actions",
                                children=[
                                    html.Div(
                                        [
                                            html.H3("Gap Analysis"),
                                            dcc.Graph(id="gaps", style={"height": f"{GAP_H}px"}, config=GRAPH_CONFIG),
                                        ],
                                        className="col gap-col",
                                    ),
                                    html.Div(
                                        [
                                            html.H3("Priority Gaps & Actions"),
                                            html.Ul(id="actions-list", className="actions"),
                                        ],
                                        className="col recs-col",
                                    ),
                                ],
                            ),
                        ],
                    ),
                    dcc.Tab(
                        label="Saved Assessments",
                        value="tab-saved",
                        children=[
                            dcc.Dropdown(
                                id="saved-select",
                                options=_saved_options(service),
                                value=latest.id if latest else None,
                                placeholder="Select an assessment",
                            ),
                            html.Div(
                                [
                                    html.Button("Open", id="open-assessment", n_clicks=0, className="secondary"),
                                    html.Button("Duplicate", id="duplicate-assessment", n_clicks=0, className="secondary"),
                                    html.Button("Delete", id="delete-assessment", n_clicks=0, className="secondary"),
                                    html.Button("Download Backup", id="download-backup", n_clicks=0, className="secondary"),
                                ],
                                className="export-row",
                            ),
                            dcc.Upload(
                                id="import-upload",
                                children=html.Div("Drop a JSON report here, or click to import"),
                                className="upload",
                                accept=".json,application/json",
                            ),
                        ],
                    ),
                ],
            ),
        ],
    )


# -------- Callbacks ------------------
def register_callbacks(app, service, saver):
    @app.callback(
        Output("assessment-id", "data"),
        Output("saved-select", "options"),
        Output("saved-select", "value"),
        Output("message", "children"),
        Input("new-assessment", "n_clicks"),
        Input("open-assessment", "n_clicks"),
        Input("duplicate-assessment", "n_clicks"),
        Input("delete-assessment", "n_clicks"),
        Input("import-upload", "contents"),
        State("framework", "value"),
        State("org-name", "value"),
        State("assessor", "value"),
        State("industry", "value"),
        State("saved-select", "value"),
        State("assessment-id", "data"),
        prevent_initial_call=True,
    )
    def on_assessment_action(_new, _open, _dup, _del, upload, framework_id, org, assessor, industry, selected, current):
        """
        Handle every action that changes which assessment is active: create,
        open, duplicate, delete and JSON import.

        Domain errors are shown inline in the header instead of failing the
        callback.
        """
        trigger = dash.ctx.triggered_id
        saver.flush()
        active, msg = current, ""
        try:
            if trigger == "new-assessment":
                record = service.create_assessment(
                    framework_id, _org_payload(org, assessor, industry)
                )
                active, msg = record.id, f"Started a new {record.framework_name} assessment."
            elif trigger == "open-assessment":
                if not selected:
                    raise dash.exceptions.PreventUpdate
                active = selected
            elif trigger == "duplicate-assessment":
                if not selected:
                    raise dash.exceptions.PreventUpdate
                record = service.duplicate_assessment(selected)
                active, msg = record.id, f"Created {record.framework_name}."
            elif trigger == "delete-assessment":
                if not selected:
                    raise dash.exceptions.PreventUpdate
                service.delete_assessment(selected)
                if selected == current:
                    latest = service.latest_assessment()
                    active = latest.id if latest else None
                msg = "Assessment deleted."
            elif trigger == "import-upload":
                if not upload:
                    raise dash.exceptions.PreventUpdate
                raw = decode_upload(upload)
                record = service.repository.save_assessment(import_assessment_json(raw))
                active, msg = record.id, f"Imported assessment {record.id}."
        except AssessmentError as e:
            logger.warning("Assessment action %s failed: %s", trigger, e)
            msg = str(e)
        return active, _saved_options(service), active, msg

    @app.callback(
        Output("question-cards", "children"),
        Output("assessment-title", "children"),
        Input("assessment-id", "data"),
    )
    def render_assessment(assessment_id):
        record = service.repository.get_assessment(assessment_id) if assessment_id else None
        if record is None:
            return html.Div("Start a new assessment to begin.", className="empty"), ""
        framework = get_framework(record.framework_id)
        title = f"{framework.name} (v{framework.version})"
        if record.organization_info and record.organization_info.name:
            title += f" - {record.organization_info.name}"
        return build_question_cards(framework, record.responses), title

    @app.callback(
        Output("save-status", "children"),
        Input({"type": "q-input", "qid": ALL}, "value"),
        State({"type": "q-input", "qid": ALL}, "id"),
        State("assessment-id", "data"),
        prevent_initial_call=True,
    )
    def autosave_responses(values, ids, assessment_id):
        """Queue the current answers for a debounced save."""
        if not assessment_id or not ids:
            raise dash.exceptions.PreventUpdate
        responses = {i["qid"]: v for i, v in zip(ids, values) if v is not None}
        saver.trigger((assessment_id, responses))
        answered = len(responses)
        return f"{answered}/{len(ids)} answered - changes are saved automatically"

    @app.callback(
        Output("kpis", "children"),
        Output("radar", "figure"),
        Output("bar", "figure"),
        Output("gaps", "figure"),
        Output("actions-list", "children"),
        Input({"type": "q-input", "qid": ALL}, "value"),
        Input("target-level", "value"),
        Input("theme-store", "data"),
        State({"type": "q-input", "qid": ALL}, "id"),
        State("assessment-id", "data"),
    )
    def update_results(values, target_level, theme, ids, assessment_id):
        """
        Recompute scores, charts and the gap list from the answers on screen,
        so results do not wait for the debounced save.
        """
        record = service.repository.get_assessment(assessment_id) if assessment_id else None
        if record is None:
            raise dash.exceptions.PreventUpdate
        if ids:
            responses = {i["qid"]: v for i, v in zip(ids, values) if v is not None}
            record = record.model_copy(update={"responses": responses})
        framework = get_framework(record.framework_id)
        data = build_report_data(record, framework)
        scores = section_scores(framework, record.responses)
        try:
            gaps = analyze_gaps(scores, target_level, framework.id)
        except AssessmentError as e:
            logger.warning("Gap analysis failed: %s", e)
            gaps = []
        summary = summarize_gaps(gaps)

        kpis = [
            ("Overall Score", f"{data['overallScore']}%"),
            ("Weighted Score", f"{data['weightedScore']}%"),
            ("Maturity Level", data["maturityLevel"] or "-"),
            ("Answered", f"{data['answeredQuestions']}/{data['totalQuestions']}"),
            ("Critical Gaps", str(summary["criticalGaps"])),
        ]
        kpi_children = [
            html.Div(
                [html.Div(title, className="kpi-title"), html.Div(value, className="kpi-value")],
                className="kpi",
            )
            for title, value in kpis
        ]
        actions = []
        for g in gaps:
            children = [
                html.Span(f"[{g.priority}] ", style={"color": PRIORITY_COLORS.get(g.priority)}),
                f"{g.section_name}: {g.gap} points below target "
                f"({g.estimated_effort} effort, {g.timeframe})",
            ]
            if g.recommendations:
                children.append(html.Ul([html.Li(a) for a in g.recommendations[:2]]))
            actions.append(html.Li(children))
        theme = theme or "light"
        return (
            kpi_children,
            radar_figure(scores, theme),
            bar_figure(scores, theme, target=target_score_for(target_level)),
            gap_figure(gaps, theme),
            actions,
        )

    @app.callback(
        Output("save-status", "children", allow_duplicate=True),
        Input("mark-complete", "n_clicks"),
        State("assessment-id", "data"),
        prevent_initial_call=True,
    )
    def on_mark_complete(n, assessment_id):
        if not n or not assessment_id:
            raise dash.exceptions.PreventUpdate
        saver.flush()
        try:
            service.mark_complete(assessment_id)
        except AssessmentError as e:
            return str(e)
        return "Assessment marked complete."

    # Exports
    @app.callback(
        Output("download", "data"),
        Output("export-message", "children"),
        Input({"type": "export", "fmt": ALL}, "n_clicks"),
        State("assessment-id", "data"),
        State("target-level", "value"),
        State("theme-store", "data"),
        State("org-name", "value"),
        State("export-options", "value"),
        prevent_initial_call=True,
    )
    def download_report(clicks, assessment_id, target_level, theme, org, export_opts):
        if not assessment_id or not any(clicks):
            raise dash.exceptions.PreventUpdate
        fmt = dash.ctx.triggered_id["fmt"]
        saver.flush()
        record = service.repository.get_assessment(assessment_id)
        if record is None:
            return None, "Assessment not found."
        options = ReportOptions(
            organization_name=org or None,
            target_level=target_level,
            theme=theme or "light",
            include_charts="charts" in (export_opts or []),
        )
        try:
            artifact = export_report(record, get_framework(record.framework_id), fmt, options)
        except AssessmentError as e:
            return None, str(e)
        return dcc.send_bytes(artifact.content, artifact.filename), ""

    @app.callback(
        Output("download", "data", allow_duplicate=True),
        Input("download-backup", "n_clicks"),
        prevent_initial_call=True,
    )
    def download_backup(n):
        if not n:
            raise dash.exceptions.PreventUpdate
        saver.flush()
        backup = service.repository.export_all()
        return dict(
            content=json.dumps(backup, indent=2, ensure_ascii=False),
            filename="cybersecurity-assessments-backup.json",
        )

    # Theme toggle -> update page class and store
    @app.callback(
        Output("page-root", "className"),
        Output("theme-store", "data"),
        Input("theme-switch", "on"),
    )
    def apply_theme(is_on):
        theme = "dark" if is_on else "light"
        return f"page theme-{theme}", theme


def create_app(settings=None, repository=None):
    """
    Build the Dash app with its storage, optional hosted mirror and auto-save.

    :param settings: defaults to ``Settings.from_env()``
    :param repository: an AssessmentRepository; built from ``settings`` when
        omitted
    :return: the configured ``dash.Dash`` instance
    """
    settings = settings or Settings.from_env()
    if repository is None:
        repository = AssessmentRepository(
            LocalAssessmentStore(settings.data_dir),
            SupabaseMirror.from_settings(settings),
        )
    service = AssessmentService(repository)
    saver = Debouncer(
        lambda item: service.set_responses(item[0], item[1]),
        settings.autosave_seconds,
    )

    app = dash.Dash(__name__, suppress_callback_exceptions=True)
    app.title = APP_TITLE
    app.layout = lambda: build_layout(service, settings)
    register_callbacks(app, service, saver)
    logger.info(
        "Storing assessments in %s (%s)",
        settings.data_dir,
        "local-only" if repository.local_only else "mirrored",
    )
    return app


# ---------- Main -------------------
def main():
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    create_app(settings).run(debug=False)


if __name__ == "__main__":
    main()
