import pytest

from cyberassess import backend
from cyberassess.backend import SupabaseMirror, from_backend_row, to_backend_row
from cyberassess.config import Settings


def _no_network(*_args, **_kwargs):
    raise AssertionError("create_client must not be called")


def test_unconfigured_settings_give_local_only_mirror(tmp_path, monkeypatch):
    monkeypatch.setattr(backend, "create_client", _no_network)
    mirror = SupabaseMirror.from_settings(Settings(data_dir=tmp_path))
    assert not mirror.is_ready


def test_client_creation_failure_gives_local_only_mirror(tmp_path, monkeypatch):
    def broken(url, key):
        raise ValueError("invalid url")

    monkeypatch.setattr(backend, "create_client", broken)
    settings = Settings(data_dir=tmp_path, supabase_url="bad", supabase_key="k")
    assert not SupabaseMirror.from_settings(settings).is_ready


def test_configured_settings_create_client(tmp_path, monkeypatch, fake_client):
    seen = []

    def create(url, key):
        seen.append((url, key))
        return fake_client

    monkeypatch.setattr(backend, "create_client", create)
    settings = Settings(data_dir=tmp_path, supabase_url="https://x.supabase.co", supabase_key="anon")
    mirror = SupabaseMirror.from_settings(settings)
    assert mirror.is_ready
    assert seen == [("https://x.supabase.co", "anon")]


def test_backend_row_uses_snake_case_columns(record):
    row = to_backend_row(record, "u1")
    assert row["user_id"] == "u1"
    assert row["framework_id"] == "nist-csf-v2"
    assert row["organization_info"]["name"] == "Acme <Corp>"
    assert row["updated_at"].startswith("2026-01-15")
    assert "last_modified" not in row

    back = from_backend_row(row)
    assert back.id == record.id
    assert back.responses == record.responses
    assert back.last_modified == record.last_modified


def test_not_ready_mirror_skips_calls(record):
    mirror = SupabaseMirror(None)
    assert mirror.upsert_assessment(record) is False
    assert mirror.delete_assessment("a1") is False
    assert mirror.record_version(record, "1.0") is False
    assert mirror.fetch_assessments() == []
    assert mirror.last_error is None


def test_failures_are_swallowed_once(record, failing_client):
    mirror = SupabaseMirror(failing_client)
    assert mirror.upsert_assessment(record) is False
    assert len(failing_client.calls) == 1
    assert mirror.last_error.retryable
    assert "upsert_assessment" in str(mirror.last_error)


def test_fetch_filters_by_user_and_skips_bad_rows(record, fake_client):
    table = fake_client.table("assessments")
    table.rows.extend(
        [
            to_backend_row(record, "u1"),
            to_backend_row(record.model_copy(update={"id": "other"}), "u2"),
            {"id": "", "user_id": "u1", "framework_id": "nist-csf-v2"},
        ]
    )
    mirror = SupabaseMirror(fake_client, user_id="u1")
    records = mirror.fetch_assessments()
    assert [r.id for r in records] == ["a1"]
    assert fake_client.calls[0][3] == [("user_id", "u1")]


def test_record_version_inserts_snapshot(record, fake_client):
    mirror = SupabaseMirror(fake_client, user_id="u1")
    assert mirror.record_version(record, "1.0", "Marked complete")
    (row,) = fake_client.table("assessment_versions").rows
    assert row["assessment_id"] == "a1"
    assert row["responses_snapshot"] == record.responses
    assert row["created_by"] == "u1"


@pytest.mark.parametrize("token,expected", [("tok", ["tok"]), (None, []), ("", [])])
def test_set_auth_token(fake_client, token, expected):
    SupabaseMirror(fake_client).set_auth_token(token)
    assert fake_client.tokens == expected
