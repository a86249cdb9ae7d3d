"""Framework definitions and assessment records.

Framework definitions are static and immutable, so they are frozen
dataclasses built from the plain dict constants in ``cyberassess.frameworks``.
Assessment records are user data that crosses trust boundaries (local file,
JSON import, hosted mirror) and are therefore pydantic models validated before
every write.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel

from .errors import ValidationError

MIN_RESPONSE = 0
MAX_RESPONSE = 3

DEFAULT_OPTIONS = [
    {"value": 0, "label": "Not Implemented", "risk_level": "critical"},
    {"value": 1, "label": "Partially Implemented", "risk_level": "high"},
    {"value": 2, "label": "Largely Implemented", "risk_level": "medium"},
    {"value": 3, "label": "Fully Implemented", "risk_level": "low"},
]


# ----------- Framework definitions -------------
@dataclass(frozen=True)
class Option:
    value: int
    label: str
    description: str = ""
    risk_level: str = ""


@dataclass(frozen=True)
class Question:
    id: str
    text: str
    options: Tuple[Option, ...]
    guidance: str = ""
    references: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    questions: Tuple[Question, ...]

    @property
    def question_ids(self) -> List[str]:
        return [q.id for q in self.questions]


@dataclass(frozen=True)
class Section:
    id: str
    name: str
    weight: float
    categories: Tuple[Category, ...]
    description: str = ""

    @property
    def question_ids(self) -> List[str]:
        return [qid for c in self.categories for qid in c.question_ids]

    @property
    def questions(self) -> List[Question]:
        return [q for c in self.categories for q in c.questions]


@dataclass(frozen=True)
class MaturityLevel:
    level: int
    name: str
    description: str
    color: str
    min_score: int
    max_score: int


@dataclass(frozen=True)
class Framework:
    id: str
    name: str
    version: str
    sections: Tuple[Section, ...]
    maturity_levels: Tuple[MaturityLevel, ...] = ()
    description: str = ""

    def question_ids(self) -> List[str]:
        return [qid for s in self.sections for qid in s.question_ids]

    def iter_questions(self) -> Iterator[Tuple[Section, Category, Question]]:
        for s in self.sections:
            for c in s.categories:
                for q in c.questions:
                    yield s, c, q

    def question(self, question_id: str) -> Optional[Question]:
        for _, _, q in self.iter_questions():
            if q.id == question_id:
                return q
        return None

    @property
    def total_questions(self) -> int:
        return sum(len(s.question_ids) for s in self.sections)

    def summary(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Framework":
        """
        Build a framework from the nested dict layout used in
        ``cyberassess.frameworks``.

        Questions without an ``options`` list get the standard four-step
        implementation scale.
        """
        sections = []
        for s in data.get("sections", []):
            categories = []
            for c in s.get("categories", []):
                questions = tuple(
                    Question(
                        id=q["id"],
                        text=q["text"],
                        options=tuple(
                            Option(**o) for o in q.get("options", DEFAULT_OPTIONS)
                        ),
                        guidance=q.get("guidance", ""),
                        references=tuple(q.get("references", ())),
                    )
                    for q in c.get("questions", [])
                )
                categories.append(Category(id=c["id"], name=c["name"], questions=questions))
            sections.append(
                Section(
                    id=s["id"],
                    name=s["name"],
                    weight=float(s.get("weight", 0)),
                    categories=tuple(categories),
                    description=s.get("description", ""),
                )
            )
        return cls(
            id=data["id"],
            name=data["name"],
            version=data.get("version", ""),
            sections=tuple(sections),
            maturity_levels=tuple(
                MaturityLevel(**m) for m in data.get("maturity_levels", [])
            ),
            description=data.get("description", ""),
        )


# ----------- Computed results -------------
@dataclass
class SectionScore:
    section_id: str
    name: str
    score: int
    answered: int
    total: int


@dataclass
class GapAnalysisResult:
    section_id: str
    section_name: str
    current_score: int
    target_score: int
    gap: int
    priority: str
    estimated_effort: str
    timeframe: str
    business_impact: str
    recommendations: List[str] = field(default_factory=list)
    required_actions: List[str] = field(default_factory=list)


# ----------- Assessment records -------------
def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class OrganizationInfo(_Record):
    name: str = ""
    industry: str = ""
    size: str = ""
    location: str = ""
    assessor: str = ""
    department: Optional[str] = None
    contact_email: Optional[str] = None

    REQUIRED: ClassVar[Tuple[str, ...]] = ("name", "assessor")

    def missing_fields(self) -> List[str]:
        return [f for f in self.REQUIRED if not (getattr(self, f) or "").strip()]


class ChangeLogEntry(_Record):
    timestamp: datetime = Field(default_factory=utcnow)
    action: str
    question_id: Optional[str] = None
    old_value: Optional[int] = None
    new_value: Optional[int] = None
    user_id: Optional[str] = None


class AssessmentRecord(_Record):
    id: str = Field(min_length=1)
    framework_id: str = Field(min_length=1)
    framework_name: str = ""
    responses: Dict[str, StrictInt] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    last_modified: datetime = Field(default_factory=utcnow)
    is_complete: bool = False
    version: str = "1.0"
    organization_info: Optional[OrganizationInfo] = None
    notes: str = ""
    tags: List[str] = Field(default_factory=list)
    question_notes: Dict[str, str] = Field(default_factory=dict)
    question_evidence: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict)
    change_log: List[ChangeLogEntry] = Field(default_factory=list)

    @field_validator(
        "responses", "question_notes", "question_evidence", mode="before"
    )
    @classmethod
    def _none_as_empty_dict(cls, v):
        return {} if v is None else v

    @field_validator("tags", "change_log", mode="before")
    @classmethod
    def _none_as_empty_list(cls, v):
        return [] if v is None else v

    @field_validator("notes", mode="before")
    @classmethod
    def _none_as_empty_str(cls, v):
        return "" if v is None else v

    @field_validator("created_at", "last_modified")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v

    @field_validator("responses")
    @classmethod
    def _check_responses(cls, v: Dict[str, int]) -> Dict[str, int]:
        bad = {k: r for k, r in v.items() if not MIN_RESPONSE <= r <= MAX_RESPONSE}
        if bad:
            raise ValueError(
                f"response values must be between {MIN_RESPONSE} and "
                f"{MAX_RESPONSE}: {sorted(bad)}"
            )
        return v

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def parse_record(data: Any) -> AssessmentRecord:
    """Validate ``data`` into an AssessmentRecord, raising our ValidationError."""
    if isinstance(data, AssessmentRecord):
        return data
    if not isinstance(data, dict):
        raise ValidationError(f"Assessment must be an object, got {type(data).__name__}")
    try:
        return AssessmentRecord.model_validate(data)
    except pydantic.ValidationError as e:
        ident = data.get("id") or "<no id>"
        raise ValidationError(f"Invalid assessment {ident}: {e}") from e


def check_response_value(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"Response must be a number, got {value!r}")
    if int(value) != value or not MIN_RESPONSE <= int(value) <= MAX_RESPONSE:
        raise ValidationError(
            f"Response must be an integer between {MIN_RESPONSE} and {MAX_RESPONSE}"
        )
    return int(value)
