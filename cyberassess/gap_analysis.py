"""Gap analyzer.

Compares section scores with a target maturity level and classifies each
shortfall with fixed threshold tables.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .errors import ValidationError
from .models import AssessmentRecord, Framework, GapAnalysisResult, SectionScore
from .recommendations import guidance_for
from .scoring import round_half_up, section_scores, target_score_for

logger = logging.getLogger(__name__)

PRIORITY_ORDER = ["low", "medium", "high", "critical"]

# (exclusive lower bound on gap, label); first match wins.
PRIORITY_THRESHOLDS = [(50, "critical"), (30, "high"), (15, "medium")]
EFFORT_THRESHOLDS = [(40, "high", "6-12 months"), (20, "medium", "3-6 months")]

MATURITY_TARGETS = {1: "Partial", 2: "Risk Informed", 3: "Repeatable", 4: "Adaptive"}


def priority_for(gap: int) -> str:
    for bound, label in PRIORITY_THRESHOLDS:
        if gap > bound:
            return label
    return "low"


def effort_for(gap: int):
    """Return ``(effort, timeframe)`` for a gap."""
    for bound, effort, timeframe in EFFORT_THRESHOLDS:
        if gap > bound:
            return effort, timeframe
    return "low", "1-3 months"


def check_target_level(level: Any) -> int:
    if isinstance(level, bool) or level not in MATURITY_TARGETS:
        raise ValidationError(
            f"Target maturity level must be one of {sorted(MATURITY_TARGETS)}, got {level!r}"
        )
    return int(level)


def _as_pair(item: Union[SectionScore, Mapping[str, Any]]):
    if isinstance(item, SectionScore):
        return item.section_id, item.name, item.score
    sid = item.get("section_id") or item.get("sectionId") or item.get("id") or ""
    name = item.get("name", sid)
    return sid, name, int(item.get("score", 0))


def analyze_gaps(
    scores: Sequence[Union[SectionScore, Mapping[str, Any]]],
    target_level: int,
    framework_id: Optional[str] = None,
) -> List[GapAnalysisResult]:
    """
    Classify the gap between each section score and the target.

    Args:
        scores: SectionScore objects or dicts with ``name``, ``score`` and a
            section id (``section_id``/``sectionId``/``id``).
        target_level: maturity level 1-4; the target score is level x 25.
        framework_id: selects the recommendation tables.

    Returns:
        One result per section below target, in input order. Sections at or
        above target are dropped.
    """
    target_level = check_target_level(target_level)
    target = target_score_for(target_level)
    results = []
    for item in scores:
        sid, name, current = _as_pair(item)
        gap = max(0, target - current)
        if gap == 0:
            continue
        effort, timeframe = effort_for(gap)
        g = guidance_for(framework_id, sid, gap)
        results.append(
            GapAnalysisResult(
                section_id=sid,
                section_name=name,
                current_score=current,
                target_score=target,
                gap=gap,
                priority=priority_for(gap),
                estimated_effort=effort,
                timeframe=timeframe,
                business_impact=g.business_impact,
                recommendations=g.recommendations,
                required_actions=g.required_actions,
            )
        )
    logger.debug(
        "Gap analysis for %s at level %d: %d sections below target",
        framework_id, target_level, len(results),
    )
    return results


def analyze_assessment(
    record: AssessmentRecord, framework: Framework, target_level: int
) -> List[GapAnalysisResult]:
    return analyze_gaps(
        section_scores(framework, record.responses), target_level, framework.id
    )


def summarize_gaps(results: Sequence[GapAnalysisResult]) -> Dict[str, int]:
    total = sum(r.gap for r in results)
    return {
        "totalGap": total,
        "averageGap": round_half_up(total / len(results)) if results else 0,
        "criticalGaps": sum(1 for r in results if r.priority == "critical"),
        "highGaps": sum(1 for r in results if r.priority == "high"),
    }
