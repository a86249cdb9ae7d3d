"""Static framework catalog, keyed by framework id."""

import logging
from typing import Dict, List, Optional

from ..models import Framework
from .cmmc import CMMC
from .nist_csf_v2 import NIST_CSF_V2
from .privacy import PRIVACY

logger = logging.getLogger(__name__)

FRAMEWORKS: Dict[str, Framework] = {
    fw.id: fw for fw in (Framework.from_dict(d) for d in (NIST_CSF_V2, CMMC, PRIVACY))
}

DEFAULT_FRAMEWORK_ID = NIST_CSF_V2["id"]

FALLBACK_FRAMEWORK = Framework.from_dict(
    {
        "id": "nist-csf-v2-fallback",
        "name": "NIST CSF v2.0 (Fallback)",
        "description": "Default NIST Cybersecurity Framework v2.0",
        "version": "2.0",
        "maturity_levels": NIST_CSF_V2["maturity_levels"],
        "sections": [],
    }
)


def available_frameworks() -> List[Framework]:
    return list(FRAMEWORKS.values())


def get_framework(framework_id: Optional[str] = None) -> Framework:
    """
    Look up a framework by id.

    No id returns the default framework. An unknown id returns an empty
    fallback framework (so every score computes to 0) and logs a warning.
    """
    if not framework_id:
        return FRAMEWORKS[DEFAULT_FRAMEWORK_ID]
    fw = FRAMEWORKS.get(framework_id)
    if fw is None:
        logger.warning("Framework %r not found, using fallback", framework_id)
        return FALLBACK_FRAMEWORK
    return fw


def validate_frameworks(frameworks: Optional[List[Framework]] = None) -> List[str]:
    """
    Check the sanity of the catalog.

    Returns a list of human-readable problems: duplicate question ids within a
    framework, questions whose option values fall outside 0-3, sections with
    no questions.
    """
    problems = []
    for fw in frameworks if frameworks is not None else available_frameworks():
        seen = set()
        for section, _, q in fw.iter_questions():
            if q.id in seen:
                problems.append(f"{fw.id}: duplicate question id {q.id}")
            seen.add(q.id)
            bad = [o.value for o in q.options if not 0 <= o.value <= 3]
            if bad:
                problems.append(f"{fw.id}: {q.id} has option values {bad}")
        for section in fw.sections:
            if not section.question_ids:
                problems.append(f"{fw.id}: section {section.id} has no questions")
    return problems
