import pytest

from cyberassess.errors import ValidationError
from cyberassess.gap_analysis import (PRIORITY_ORDER, analyze_assessment, analyze_gaps,
                                      effort_for, priority_for, summarize_gaps)
from cyberassess.models import AssessmentRecord
from cyberassess.recommendations import DEFAULT_IMPACT, NIST_IMPACTS, NIST_RECS
from cyberassess.scoring import section_scores


@pytest.mark.parametrize(
    "gap,expected",
    [(0, "low"), (15, "low"), (16, "medium"), (30, "medium"), (31, "high"), (50, "high"), (51, "critical"), (100, "critical")],
)
def test_priority_thresholds(gap, expected):
    assert priority_for(gap) == expected


def test_priority_is_monotonic_in_gap():
    ranks = [PRIORITY_ORDER.index(priority_for(g)) for g in range(0, 101)]
    assert ranks == sorted(ranks)


@pytest.mark.parametrize(
    "gap,expected",
    [(41, ("high", "6-12 months")), (40, ("medium", "3-6 months")), (21, ("medium", "3-6 months")), (20, ("low", "1-3 months"))],
)
def test_effort_thresholds(gap, expected):
    assert effort_for(gap) == expected


def test_empty_responses_give_maximal_gaps(nist):
    results = analyze_gaps(section_scores(nist, {}), 3, nist.id)
    assert len(results) == len(nist.sections)
    for r in results:
        assert r.current_score == 0
        assert r.target_score == 75
        assert r.gap == 75
        assert r.priority == "critical"
        assert r.estimated_effort == "high"
        assert r.recommendations == NIST_RECS[r.section_id]
        assert r.business_impact == NIST_IMPACTS[r.section_id]


def test_sections_at_or_above_target_are_dropped():
    scores = [
        {"section_id": "govern", "name": "Govern", "score": 80},
        {"section_id": "protect", "name": "Protect", "score": 75},
        {"sectionId": "detect", "name": "Detect", "score": 40},
    ]
    results = analyze_gaps(scores, 3, "nist-csf-v2")
    assert [r.section_id for r in results] == ["detect"]
    assert results[0].gap == 35
    assert results[0].priority == "high"


def test_target_level_4_scores_against_100():
    results = analyze_gaps([{"id": "govern", "name": "Govern", "score": 75}], 4)
    assert results[0].target_score == 100
    assert results[0].gap == 25


@pytest.mark.parametrize("level", [0, 5, -1, True, "3", None])
def test_invalid_target_level_rejected(level):
    with pytest.raises(ValidationError):
        analyze_gaps([], level)


def test_unknown_framework_gets_generic_guidance():
    results = analyze_gaps([{"id": "x", "name": "X", "score": 0}], 2, "made-up")
    assert results[0].recommendations == []
    assert results[0].required_actions == []
    assert results[0].business_impact == DEFAULT_IMPACT


def test_unknown_section_in_known_framework():
    results = analyze_gaps([{"id": "nope", "name": "Nope", "score": 0}], 2, "nist-csf-v2")
    assert results[0].recommendations == []
    assert results[0].business_impact == DEFAULT_IMPACT


def test_analyze_assessment(nist):
    record = AssessmentRecord(
        id="r1",
        framework_id=nist.id,
        responses={qid: 3 for qid in nist.sections[0].question_ids},
    )
    results = analyze_assessment(record, nist, 3)
    assert "govern" not in [r.section_id for r in results]
    assert len(results) == len(nist.sections) - 1


def test_summarize_gaps(nist):
    results = analyze_gaps(
        [
            {"id": "govern", "name": "Govern", "score": 0},
            {"id": "identify", "name": "Identify", "score": 40},
        ],
        3,
        nist.id,
    )
    summary = summarize_gaps(results)
    assert summary == {"totalGap": 110, "averageGap": 55, "criticalGaps": 1, "highGaps": 1}
    assert summarize_gaps([])["averageGap"] == 0
