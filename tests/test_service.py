import threading
from datetime import timedelta

import pytest

from cyberassess import backend, service as service_module
from cyberassess.backend import SupabaseMirror
from cyberassess.config import Settings
from cyberassess.errors import ValidationError
from cyberassess.frameworks import FALLBACK_FRAMEWORK
from cyberassess.models import AssessmentRecord
from cyberassess.service import AssessmentService
from cyberassess.storage import AssessmentRepository, LocalAssessmentStore

from conftest import FIXED_NOW


def test_create_in_local_only_mode_never_touches_network(tmp_path, monkeypatch):
    def no_network(*_args, **_kwargs):
        raise AssertionError("network attempted")

    monkeypatch.setattr(backend, "create_client", no_network)
    settings = Settings(data_dir=tmp_path)
    repo = AssessmentRepository(
        LocalAssessmentStore(settings.data_dir), SupabaseMirror.from_settings(settings)
    )
    svc = AssessmentService(repo)
    assert svc.local_only

    record = svc.create_assessment("nist-csf-v2")
    assert isinstance(record, AssessmentRecord)
    assert record.framework_name == "NIST CSF v2.0 - Quick Check"
    assert record.responses == {}
    assert record.change_log[0].action == "created"
    assert repo.get_assessment(record.id) is not None


def test_create_with_organization(service):
    record = service.create_assessment(
        "cmmc", {"name": "Acme", "assessor": "Jo", "industry": "Defense"}
    )
    assert record.organization_info.industry == "Defense"
    assert record.framework_id == "cmmc"


def test_create_with_incomplete_organization_is_rejected(service, repository):
    with pytest.raises(ValidationError, match="assessor"):
        service.create_assessment("nist-csf-v2", {"name": "Acme"})
    assert repository.get_assessments() == []


def test_unknown_framework_uses_fallback(service):
    record = service.create_assessment("no-such-framework")
    assert record.framework_id == FALLBACK_FRAMEWORK.id


def test_set_response_appends_to_change_log(service):
    record = service.create_assessment("nist-csf-v2")
    service.set_response(record.id, "gv.oc-q1", 2, user_id="u1")
    updated = service.set_response(record.id, "gv.oc-q1", 3)

    assert updated.responses == {"gv.oc-q1": 3}
    actions = [(e.action, e.old_value, e.new_value) for e in updated.change_log]
    assert actions == [
        ("created", None, None),
        ("response_changed", None, 2),
        ("response_changed", 2, 3),
    ]
    assert updated.change_log[1].user_id == "u1"


def test_change_log_is_append_only(service):
    record = service.create_assessment("nist-csf-v2")
    first = service.set_response(record.id, "gv.oc-q1", 1).change_log
    later = service.set_response(record.id, "id.am-q1", 2).change_log
    assert [e.model_dump() for e in later[: len(first)]] == [e.model_dump() for e in first]


def test_unchanged_response_is_not_logged(service):
    record = service.create_assessment("nist-csf-v2")
    service.set_response(record.id, "gv.oc-q1", 1)
    again = service.set_response(record.id, "gv.oc-q1", 1)
    assert len(again.change_log) == 2


def test_clear_response(service):
    record = service.create_assessment("nist-csf-v2")
    service.set_response(record.id, "gv.oc-q1", 1)
    cleared = service.set_response(record.id, "gv.oc-q1", None)
    assert cleared.responses == {}
    assert cleared.change_log[-1].action == "response_cleared"


@pytest.mark.parametrize("value", [4, -1, 1.5, True, "2"])
def test_invalid_response_rejected(service, repository, value):
    record = service.create_assessment("nist-csf-v2")
    with pytest.raises(ValidationError):
        service.set_response(record.id, "gv.oc-q1", value)
    assert repository.get_assessment(record.id).responses == {}


def test_response_for_foreign_question_rejected(service):
    record = service.create_assessment("nist-csf-v2")
    with pytest.raises(ValidationError):
        service.set_response(record.id, "cmmc.ac.3.1.1", 2)


def test_set_responses_validates_everything_first(service, repository):
    record = service.create_assessment("nist-csf-v2")
    with pytest.raises(ValidationError):
        service.set_responses(record.id, {"gv.oc-q1": 2, "gv.oc-q2": 9})
    assert repository.get_assessment(record.id).responses == {}

    updated = service.set_responses(record.id, {"gv.oc-q1": 2, "gv.oc-q2": 3})
    assert updated.responses == {"gv.oc-q1": 2, "gv.oc-q2": 3}


def test_missing_assessment(service):
    with pytest.raises(ValidationError, match="not found"):
        service.set_response("nope", "gv.oc-q1", 1)


def test_set_note(service):
    record = service.create_assessment("nist-csf-v2")
    assert service.set_note(record.id, "gv.oc-q1", "  see policy doc ").question_notes == {
        "gv.oc-q1": "see policy doc"
    }
    assert service.set_note(record.id, "gv.oc-q1", "").question_notes == {}


def test_mark_complete(service):
    record = service.create_assessment("nist-csf-v2")
    done = service.mark_complete(record.id)
    assert done.is_complete
    assert done.change_log[-1].action == "completed"
    assert not service.mark_complete(record.id, False).is_complete


def test_mark_complete_records_version_on_mirror(store, fake_client):
    svc = AssessmentService(AssessmentRepository(store, SupabaseMirror(fake_client)))
    record = svc.create_assessment("privacy")
    svc.mark_complete(record.id)
    assert len(fake_client.table("assessment_versions").rows) == 1


def test_duplicate_starts_fresh(service):
    source = service.create_assessment("nist-csf-v2", {"name": "Acme", "assessor": "Jo"})
    service.set_response(source.id, "gv.oc-q1", 3)
    service.set_note(source.id, "gv.oc-q1", "note")

    copy = service.duplicate_assessment(source.id)
    assert copy.id != source.id
    assert copy.framework_name == "NIST CSF v2.0 - Quick Check (Copy)"
    assert copy.responses == {}
    assert copy.question_notes == {}
    assert copy.organization_info.name == "Acme"
    assert [e.action for e in copy.change_log] == ["duplicated"]
    assert service.repository.get_assessment(source.id).responses == {"gv.oc-q1": 3}

    named = service.duplicate_assessment(source.id, new_name="Q3 review")
    assert named.framework_name == "Q3 review"


def test_list_latest_and_delete(service, monkeypatch):
    times = iter(FIXED_NOW + timedelta(minutes=i) for i in range(10))
    monkeypatch.setattr(service_module, "utcnow", lambda: next(times))

    a = service.create_assessment("nist-csf-v2")
    b = service.create_assessment("cmmc")
    assert [r.id for r in service.list_assessments()] == [b.id, a.id]
    assert service.latest_assessment().id == b.id
    assert service.latest_assessment("nist-csf-v2").id == a.id

    service.set_response(a.id, "gv.oc-q1", 1)
    assert service.latest_assessment().id == a.id

    assert service.delete_assessment(a.id)
    assert not service.delete_assessment(a.id)
    assert [r.id for r in service.list_assessments()] == [b.id]
    assert service.latest_assessment("privacy") is None


@pytest.mark.parametrize("organization", ["Acme", {"name": ["Acme"], "assessor": "Jo"}])
def test_malformed_organization_is_rejected(service, organization):
    with pytest.raises(ValidationError, match="Invalid organization"):
        service.create_assessment("cmmc", organization)


def test_concurrent_answers_are_all_kept(service, repository, nist):
    other = service.create_assessment("cmmc")
    record = service.create_assessment("nist-csf-v2")
    qids = nist.question_ids()
    errors = []
    start = threading.Barrier(len(qids))

    def answer(qid):
        start.wait()
        try:
            service.set_response(record.id, qid, 2)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=answer, args=(qid,)) for qid in qids]
    for t in threads:
        t.start()
    for t in threads:
        t.join(10)

    assert errors == []
    stored = repository.get_assessment(record.id)
    assert stored.responses == {qid: 2 for qid in qids}
    assert len(stored.change_log) == len(qids) + 1
    assert repository.get_assessment(other.id) is not None
    assert [p.name for p in repository.store.data_dir.iterdir()] == [repository.store.path.name]
