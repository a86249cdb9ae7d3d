"""Plotly figures shared by the dashboard and the PDF export."""

import io
from typing import List, Sequence

import plotly.graph_objects as go
import plotly.io as pio

from .models import GapAnalysisResult, SectionScore

# for chart sizes
RADAR_H = 360
BAR_H = 360
GAP_H = 380

PRIORITY_COLORS = {
    "critical": "#dc2626",
    "high": "#ea580c",
    "medium": "#d97706",
    "low": "#16a34a",
}


def score_color(score: float) -> str:
    if score >= 75:
        return "#10b981"
    if score >= 50:
        return "#f59e0b"
    return "#ef4444"


def _base_fig_layout(fig, theme="light", height=360):
    """
    Apply a consistent layout to a figure.

    Sets the font and grid colors for light/dark themes and pins the height
    so Plotly does not resize charts on every callback.

    :param fig: a figure to update
    :param theme: a string, either "light" or "dark"
    :param height: the height of the figure in pixels
    :return: the updated figure
    """
    font_color = "#f6f7fb" if theme == "dark" else "#0b1020"
    grid_color = "#334155" if theme == "dark" else "#CBD5E1"
    axis = dict(
        showgrid=True,
        gridcolor=grid_color,
        zeroline=False,
        linecolor=font_color,
        ticks="outside",
        fixedrange=True,
    )
    fig.update_layout(
        autosize=False,
        height=height,
        margin=dict(l=30, r=30, t=30, b=30),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=font_color),
        xaxis=axis,
        yaxis=axis,
        uirevision="keep",
    )
    return fig


def radar_figure(scores: Sequence[SectionScore], theme="light"):
    """Section scores on a 0-100 radar."""
    cats = [s.name for s in scores]
    vals = [float(s.score) for s in scores]
    if cats:
        cats, vals = cats + [cats[0]], vals + [vals[0]]

    grid_color = "#334155" if theme == "dark" else "#CBD5E1"
    fig = go.Figure()
    fig.add_trace(
        go.Scatterpolar(
            r=vals,
            theta=cats,
            fill="toself",
            name="Score",
            line=dict(width=2),
            marker=dict(size=4),
        )
    )
    fig.update_layout(
        polar=dict(
            radialaxis=dict(
                range=[0, 100],
                autorange=False,
                tick0=0,
                dtick=25,
                gridcolor=grid_color,
                showline=True,
                linewidth=1,
            ),
            angularaxis=dict(gridcolor=grid_color, showline=True, linewidth=1),
        ),
    )
    return _base_fig_layout(fig, theme, height=RADAR_H)


def bar_figure(scores: Sequence[SectionScore], theme="light", target=None):
    """Section scores as bars, colored by performance band."""
    names = [s.name for s in scores]
    fig = go.Figure(
        go.Bar(
            x=names,
            y=[s.score for s in scores],
            marker_color=[score_color(s.score) for s in scores],
            text=[f"{s.score}%" for s in scores],
            textposition="outside",
        )
    )
    if target is not None:
        fig.add_hline(y=target, line_dash="dash", annotation_text=f"Target {target}%")
    fig.update_layout(
        xaxis=dict(categoryorder="array", categoryarray=names),
        yaxis=dict(range=[0, 105], tick0=0, dtick=25),
    )
    return _base_fig_layout(fig, theme, height=BAR_H)


def gap_figure(gaps: List[GapAnalysisResult], theme="light"):
    """Horizontal bars of gap size per section, colored by priority."""
    fig = go.Figure(
        go.Bar(
            y=[g.section_name for g in gaps],
            x=[g.gap for g in gaps],
            orientation="h",
            marker_color=[PRIORITY_COLORS.get(g.priority, "#6b7280") for g in gaps],
            hovertemplate="%{y}: %{x} points below target<extra></extra>",
        )
    )
    fig.update_layout(xaxis=dict(range=[0, 100]), yaxis=dict(autorange="reversed"))
    return _base_fig_layout(fig, theme, height=GAP_H)


def img_from_fig(fig, width=720, height=420, scale=2):
    """
    Convert a plotly figure to a PNG image bytes buffer.

    Requires kaleido.
    """
    png_bytes = pio.to_image(fig, format="png", width=width, height=height, scale=scale)
    return io.BytesIO(png_bytes)
