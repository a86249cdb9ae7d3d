from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from cyberassess.frameworks import get_framework
from cyberassess.models import AssessmentRecord, OrganizationInfo
from cyberassess.service import AssessmentService
from cyberassess.storage import AssessmentRepository, LocalAssessmentStore

FIXED_NOW = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)


class FakeQuery:
    def __init__(self, table, op, payload=None):
        self.table = table
        self.op = op
        self.payload = payload
        self.filters = []

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def _matches(self, row):
        return all(row.get(c) == v for c, v in self.filters)

    def execute(self):
        client = self.table.client
        client.calls.append((self.table.name, self.op, self.payload, list(self.filters)))
        if client.fail:
            raise RuntimeError("network down")
        rows = self.table.rows
        if self.op == "select":
            return SimpleNamespace(data=[r for r in rows if self._matches(r)])
        if self.op == "upsert":
            rows[:] = [r for r in rows if r.get("id") != self.payload.get("id")]
            rows.append(self.payload)
            return SimpleNamespace(data=[self.payload])
        if self.op == "insert":
            rows.append(self.payload)
            return SimpleNamespace(data=[self.payload])
        if self.op == "delete":
            removed = [r for r in rows if self._matches(r)]
            rows[:] = [r for r in rows if not self._matches(r)]
            return SimpleNamespace(data=removed)
        raise AssertionError(f"unexpected op {self.op}")


class FakeTable:
    def __init__(self, client, name):
        self.client = client
        self.name = name
        self.rows = []

    def select(self, *_cols):
        return FakeQuery(self, "select")

    def upsert(self, row):
        return FakeQuery(self, "upsert", row)

    def insert(self, row):
        return FakeQuery(self, "insert", row)

    def delete(self):
        return FakeQuery(self, "delete")


class FakeClient:
    """Just enough of the supabase-py client for the mirror."""

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []
        self.tokens = []
        self.tables = {}
        self.postgrest = SimpleNamespace(auth=self.tokens.append)

    def table(self, name):
        if name not in self.tables:
            self.tables[name] = FakeTable(self, name)
        return self.tables[name]


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def failing_client():
    return FakeClient(fail=True)


@pytest.fixture
def nist():
    return get_framework("nist-csf-v2")


@pytest.fixture
def store(tmp_path):
    return LocalAssessmentStore(tmp_path / "data")


@pytest.fixture
def repository(store):
    return AssessmentRepository(store)


@pytest.fixture
def service(repository):
    return AssessmentService(repository)


@pytest.fixture
def record():
    return AssessmentRecord(
        id="a1",
        framework_id="nist-csf-v2",
        framework_name="NIST CSF v2.0 - Quick Check",
        responses={"gv.oc-q1": 3, "gv.oc-q2": 2, "pr.ac-q1": 1, "de.ae-q1": 0},
        created_at=FIXED_NOW,
        last_modified=FIXED_NOW,
        organization_info=OrganizationInfo(name="Acme <Corp>", assessor="Jo Doe"),
        question_notes={"gv.oc-q1": "Mission statement reviewed & approved"},
    )
