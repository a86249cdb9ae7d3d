"""Scoring engine.

Turns a sparse ``{question_id: 0..3}`` response map into percentage scores at
category, section and overall granularity.

Policy, applied everywhere in the package:

* only answered questions contribute to the mean;
* a scope with no answered questions scores 0;
* the mean is scaled by 25 and rounded half up (62.5 -> 63), never with
  Python's round-half-to-even.
"""

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd

from .config import REPORT_TARGET_SCORE
from .models import AssessmentRecord, Framework, MaturityLevel, SectionScore

POINTS_PER_LEVEL = 25


def round_half_up(x: float) -> int:
    """Round a non-negative number half up: 37.5 -> 38, 62.5 -> 63."""
    return int(math.floor(x + 0.5))


def _pct(total: int, count: int) -> int:
    # Integer form of round_half_up(total / count * 25); exact for every count.
    if count <= 0:
        return 0
    return (2 * POINTS_PER_LEVEL * int(total) + count) // (2 * count)


def compute_score(responses: Mapping[str, int], question_ids: Iterable[str]) -> int:
    """
    Score a scope of questions.

    :param responses: sparse mapping of question id to answer value (0-3)
    :param question_ids: the scope; ids missing from ``responses`` are ignored
    :return: integer score in [0, 100]
    """
    values = [responses[q] for q in dict.fromkeys(question_ids) if q in responses]
    return _pct(sum(values), len(values))


def completion_rate(answered: int, total: int) -> int:
    return _pct(answered * 4, total) if total > 0 else 0


# ----------- Aggregation -------------
def response_frame(framework: Framework, responses: Mapping[str, int]) -> pd.DataFrame:
    """
    One row per framework question with its section, category and answer.

    Unanswered questions carry NaN in ``value`` so pandas ``count`` gives the
    number answered and ``sum`` skips them.
    """
    rows = [
        {
            "section_id": s.id,
            "section": s.name,
            "weight": s.weight,
            "category_id": c.id,
            "category": c.name,
            "question_id": q.id,
            "value": responses.get(q.id),
        }
        for s, c, q in framework.iter_questions()
    ]
    df = pd.DataFrame(
        rows,
        columns=[
            "section_id", "section", "weight", "category_id",
            "category", "question_id", "value",
        ],
    )
    df["value"] = pd.to_numeric(df["value"], errors="coerce")
    return df


def _group_scores(df: pd.DataFrame, keys: List[str]) -> pd.DataFrame:
    g = df.groupby(keys, as_index=False, sort=False).agg(
        total_value=("value", "sum"),
        answered=("value", "count"),
        total=("question_id", "size"),
    )
    g["score"] = [
        _pct(int(v), int(n)) for v, n in zip(g["total_value"], g["answered"])
    ]
    return g


def section_scores(framework: Framework, responses: Mapping[str, int]) -> List[SectionScore]:
    """Score every section, in framework order. Empty sections score 0."""
    df = response_frame(framework, responses)
    by_id = {}
    if not df.empty:
        g = _group_scores(df, ["section_id"])
        by_id = {r.section_id: r for r in g.itertuples(index=False)}
    out = []
    for s in framework.sections:
        r = by_id.get(s.id)
        out.append(
            SectionScore(
                section_id=s.id,
                name=s.name,
                score=int(r.score) if r is not None else 0,
                answered=int(r.answered) if r is not None else 0,
                total=int(r.total) if r is not None else 0,
            )
        )
    return out


def category_scores(framework: Framework, responses: Mapping[str, int]) -> List[Dict[str, Any]]:
    """Score every category, in framework order."""
    df = response_frame(framework, responses)
    if df.empty:
        return []
    g = _group_scores(df, ["section_id", "category_id", "category"])
    return [
        {
            "section_id": r.section_id,
            "category_id": r.category_id,
            "name": r.category,
            "score": int(r.score),
            "answered": int(r.answered),
            "total": int(r.total),
        }
        for r in g.itertuples(index=False)
    ]


def overall_score(framework: Framework, responses: Mapping[str, int]) -> int:
    return compute_score(responses, framework.question_ids())


def weighted_overall_score(framework: Framework, scores: List[SectionScore]) -> int:
    """
    Section scores averaged by section weight.

    Sections with no answers count as 0, consistent with the zero policy.
    """
    weights = {s.id: s.weight for s in framework.sections}
    total_w = sum(weights.get(s.section_id, 0) for s in scores)
    if total_w <= 0:
        return 0
    acc = sum(s.score * weights.get(s.section_id, 0) for s in scores)
    return round_half_up(acc / total_w)


# ----------- Labels -------------
def maturity_level_for(framework: Framework, score: float) -> Optional[MaturityLevel]:
    """Return the framework maturity band containing ``score``."""
    levels = sorted(framework.maturity_levels, key=lambda m: m.min_score)
    match = None
    for m in levels:
        if score >= m.min_score:
            match = m
    return match


def target_score_for(level: int) -> int:
    return int(level) * POINTS_PER_LEVEL


def performance_label(score: int) -> str:
    if score >= 75:
        return "Satisfactory"
    if score >= 50:
        return "Needs Improvement"
    return "Critical"


def report_priority(score: int) -> str:
    if score < 50:
        return "High"
    if score < 75:
        return "Medium"
    return "Low"


def gap_to_target(score: int, target: int = REPORT_TARGET_SCORE) -> int:
    return max(0, target - score)


def build_report_data(record: AssessmentRecord, framework: Framework) -> Dict[str, Any]:
    """
    Compute everything the exporters and the dashboard show.

    Answered counts are scoped to the framework, so stray ids in the
    responses map never inflate them.
    """
    scores = section_scores(framework, record.responses)
    total = framework.total_questions
    answered = sum(s.answered for s in scores)
    overall = overall_score(framework, record.responses)
    level = maturity_level_for(framework, overall)
    return {
        "overallScore": overall,
        "weightedScore": weighted_overall_score(framework, scores),
        "maturityLevel": level.name if level else None,
        "sectionScores": [
            {
                "sectionId": s.section_id,
                "name": s.name,
                "score": s.score,
                "answered": s.answered,
                "total": s.total,
            }
            for s in scores
        ],
        "totalQuestions": total,
        "answeredQuestions": answered,
        "completionRate": completion_rate(answered, total),
    }
