"""Assessment lifecycle operations used by the dashboard."""

import functools
import logging
import uuid
from typing import Any, Dict, List, Optional, Union

import pydantic

from .errors import ValidationError
from .frameworks import get_framework
from .models import (
    AssessmentRecord,
    ChangeLogEntry,
    OrganizationInfo,
    check_response_value,
    utcnow,
)
from .storage import AssessmentRepository

logger = logging.getLogger(__name__)

OrganizationLike = Union[OrganizationInfo, Dict[str, Any], None]


def new_assessment_id() -> str:
    return uuid.uuid4().hex


def _organization(org: OrganizationLike) -> Optional[OrganizationInfo]:
    if org is None:
        return None
    try:
        info = org if isinstance(org, OrganizationInfo) else OrganizationInfo.model_validate(org)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid organization: {e}") from e
    missing = info.missing_fields()
    if missing:
        raise ValidationError(
            f"Organization is missing required fields: {', '.join(missing)}"
        )
    return info


def _locked(method):
    """Run ``method`` holding the repository lock, so reads and saves stay paired."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.repository.lock:
            return method(self, *args, **kwargs)

    return wrapper


class AssessmentService:
    """
    Create and edit assessments through an AssessmentRepository.

    Every mutation re-saves the whole record, bumps ``last_modified`` and, for
    response changes, appends to the change log. The log is append-only.
    """

    def __init__(self, repository: AssessmentRepository):
        self.repository = repository

    @property
    def local_only(self) -> bool:
        return self.repository.local_only

    def _require(self, assessment_id: str) -> AssessmentRecord:
        record = self.repository.get_assessment(assessment_id)
        if record is None:
            raise ValidationError(f"Assessment {assessment_id} not found")
        return record

    def _touch_and_save(self, record: AssessmentRecord) -> AssessmentRecord:
        record.last_modified = utcnow()
        return self.repository.save_assessment(record)

    def create_assessment(
        self,
        framework_id: Optional[str] = None,
        organization: OrganizationLike = None,
        user_id: Optional[str] = None,
    ) -> AssessmentRecord:
        """
        Start a new, empty assessment and persist it.

        :param framework_id: catalog id; unknown ids fall back to the empty
            fallback framework
        :param organization: optional profile; when given, name and assessor
            are required
        :param user_id: recorded in the change log
        :return: the stored record
        """
        fw = get_framework(framework_id)
        now = utcnow()
        record = AssessmentRecord(
            id=new_assessment_id(),
            framework_id=fw.id,
            framework_name=fw.name,
            created_at=now,
            last_modified=now,
            organization_info=_organization(organization),
            change_log=[ChangeLogEntry(timestamp=now, action="created", user_id=user_id)],
        )
        saved = self.repository.save_assessment(record)
        logger.info("Created assessment %s for %s", saved.id, fw.id)
        return saved

    @_locked
    def set_response(
        self,
        assessment_id: str,
        question_id: str,
        value: Optional[int],
        user_id: Optional[str] = None,
    ) -> AssessmentRecord:
        """Record (or with ``value=None`` clear) the answer to one question."""
        record = self._require(assessment_id)
        fw = get_framework(record.framework_id)
        if fw.question(question_id) is None:
            raise ValidationError(
                f"Question {question_id} is not part of framework {record.framework_id}"
            )
        old = record.responses.get(question_id)
        if value is None:
            if old is None:
                return record
            del record.responses[question_id]
            action = "response_cleared"
        else:
            value = check_response_value(value)
            if old == value:
                return record
            record.responses[question_id] = value
            action = "response_changed"
        record.change_log.append(
            ChangeLogEntry(
                action=action,
                question_id=question_id,
                old_value=old,
                new_value=value,
                user_id=user_id,
            )
        )
        return self._touch_and_save(record)

    @_locked
    def set_responses(
        self, assessment_id: str, responses: Dict[str, int], user_id: Optional[str] = None
    ) -> AssessmentRecord:
        """Apply several answers at once; all values are checked before any change."""
        record = self._require(assessment_id)
        fw = get_framework(record.framework_id)
        checked = {}
        for qid, value in responses.items():
            if fw.question(qid) is None:
                raise ValidationError(
                    f"Question {qid} is not part of framework {record.framework_id}"
                )
            checked[qid] = check_response_value(value)
        changed = False
        for qid, value in checked.items():
            old = record.responses.get(qid)
            if old == value:
                continue
            record.responses[qid] = value
            record.change_log.append(
                ChangeLogEntry(
                    action="response_changed",
                    question_id=qid,
                    old_value=old,
                    new_value=value,
                    user_id=user_id,
                )
            )
            changed = True
        return self._touch_and_save(record) if changed else record

    @_locked
    def set_note(self, assessment_id: str, question_id: str, note: str) -> AssessmentRecord:
        record = self._require(assessment_id)
        note = (note or "").strip()
        if note:
            record.question_notes[question_id] = note
        elif question_id in record.question_notes:
            del record.question_notes[question_id]
        else:
            return record
        return self._touch_and_save(record)

    @_locked
    def update_organization(
        self, assessment_id: str, organization: OrganizationLike
    ) -> AssessmentRecord:
        record = self._require(assessment_id)
        record.organization_info = _organization(organization)
        return self._touch_and_save(record)

    @_locked
    def mark_complete(
        self, assessment_id: str, complete: bool = True, user_id: Optional[str] = None
    ) -> AssessmentRecord:
        record = self._require(assessment_id)
        if record.is_complete == complete:
            return record
        record.is_complete = complete
        record.change_log.append(
            ChangeLogEntry(
                action="completed" if complete else "reopened", user_id=user_id
            )
        )
        saved = self._touch_and_save(record)
        if complete:
            self.repository.record_version(saved, "Marked complete")
        return saved

    def duplicate_assessment(
        self, assessment_id: str, new_name: Optional[str] = None, user_id: Optional[str] = None
    ) -> AssessmentRecord:
        """
        Copy an assessment's framework and profile into a fresh record.

        Answers, notes, evidence and history are not copied.
        """
        source = self._require(assessment_id)
        now = utcnow()
        copy = source.model_copy(
            update={
                "id": new_assessment_id(),
                "framework_name": new_name or f"{source.framework_name} (Copy)",
                "created_at": now,
                "last_modified": now,
                "is_complete": False,
                "responses": {},
                "question_notes": {},
                "question_evidence": {},
                "change_log": [
                    ChangeLogEntry(timestamp=now, action="duplicated", user_id=user_id)
                ],
            },
            deep=True,
        )
        saved = self.repository.save_assessment(copy)
        logger.info("Duplicated assessment %s as %s", assessment_id, saved.id)
        return saved

    def delete_assessment(self, assessment_id: str) -> bool:
        deleted = self.repository.delete_assessment(assessment_id)
        if deleted:
            logger.info("Deleted assessment %s", assessment_id)
        return deleted

    def list_assessments(self, framework_id: Optional[str] = None) -> List[AssessmentRecord]:
        """Stored assessments, most recently modified first."""
        records = self.repository.get_assessments()
        if framework_id:
            records = [r for r in records if r.framework_id == framework_id]
        return sorted(records, key=lambda r: r.last_modified, reverse=True)

    def latest_assessment(self, framework_id: Optional[str] = None) -> Optional[AssessmentRecord]:
        records = self.list_assessments(framework_id)
        return records[0] if records else None
