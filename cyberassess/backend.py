"""Optional hosted mirror on Supabase.

Local storage is the source of truth. The mirror is attempted once per call
and degrades silently: every public method checks ``is_ready`` first, and any
failure is logged and reported through the return value, never raised.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from supabase import Client, create_client

from .config import Settings
from .errors import AssessmentError, BackendError
from .models import AssessmentRecord, parse_record, utcnow

logger = logging.getLogger(__name__)

ASSESSMENTS_TABLE = "assessments"
VERSIONS_TABLE = "assessment_versions"
PROFILES_TABLE = "profiles"


def to_backend_row(record: AssessmentRecord, user_id: Optional[str] = None) -> Dict[str, Any]:
    """Map a record to the snake_case columns of the hosted ``assessments`` table."""
    data = record.model_dump(mode="json")
    return {
        "id": data["id"],
        "user_id": user_id,
        "framework_id": data["framework_id"],
        "framework_name": data["framework_name"],
        "responses": data["responses"],
        "organization_info": data["organization_info"] or {},
        "is_complete": data["is_complete"],
        "version": data["version"],
        "tags": data["tags"],
        "notes": data["notes"],
        "question_notes": data["question_notes"],
        "question_evidence": data["question_evidence"],
        "created_at": data["created_at"],
        "updated_at": data["last_modified"],
    }


def from_backend_row(row: Dict[str, Any]) -> AssessmentRecord:
    data = dict(row)
    data["last_modified"] = data.pop("updated_at", None) or data.get("created_at")
    data.pop("user_id", None)
    return parse_record(data)


class SupabaseMirror:
    """
    Thin wrapper around a Supabase client.

    Construct with ``from_settings`` in the app, or pass any object with the
    supabase-py ``table(...)`` interface in tests.
    """

    def __init__(self, client: Optional[Client] = None, user_id: Optional[str] = None):
        self._client = client
        self.user_id = user_id
        self.last_error: Optional[BackendError] = None

    @property
    def is_ready(self) -> bool:
        return self._client is not None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseMirror":
        if not settings.backend_configured:
            logger.warning(
                "Supabase environment variables not found. Running in local-only mode."
            )
            return cls(None)
        try:
            client = create_client(settings.supabase_url, settings.supabase_key)
        except Exception as e:
            logger.warning(
                "Failed to initialize Supabase client, running in local-only mode: %s", e
            )
            return cls(None)
        logger.info("Supabase mirror enabled")
        return cls(client)

    def set_auth_token(self, token: Optional[str]) -> None:
        """Apply a bearer token for PostgREST operations."""
        if self._client is None or not token:
            return
        self._client.postgrest.auth(token)

    def _run(self, op: str, fn: Callable[[Client], Any]):
        if not self.is_ready:
            logger.debug("Skipping %s: backend not ready", op)
            return None
        try:
            result = fn(self._client)
        except Exception as e:
            self.last_error = BackendError(f"{op} failed: {e}")
            logger.warning("Backend %s failed, keeping local copy only: %s", op, e)
            return None
        self.last_error = None
        return result

    def upsert_assessment(self, record: AssessmentRecord) -> bool:
        row = to_backend_row(record, self.user_id)
        res = self._run(
            "upsert_assessment",
            lambda c: c.table(ASSESSMENTS_TABLE).upsert(row).execute(),
        )
        return res is not None

    def delete_assessment(self, assessment_id: str) -> bool:
        res = self._run(
            "delete_assessment",
            lambda c: c.table(ASSESSMENTS_TABLE).delete().eq("id", assessment_id).execute(),
        )
        return res is not None

    def record_version(
        self, record: AssessmentRecord, version_number: str, description: str = ""
    ) -> bool:
        """Append a snapshot of the responses to ``assessment_versions``."""
        row = {
            "assessment_id": record.id,
            "version_number": version_number,
            "version_type": "snapshot",
            "description": description,
            "responses_snapshot": dict(record.responses),
            "metadata": {"is_complete": record.is_complete},
            "created_by": self.user_id or "local-user",
            "created_at": utcnow().isoformat(),
        }
        res = self._run(
            "record_version",
            lambda c: c.table(VERSIONS_TABLE).insert(row).execute(),
        )
        return res is not None

    def fetch_assessments(self) -> List[AssessmentRecord]:
        def query(c):
            q = c.table(ASSESSMENTS_TABLE).select("*")
            if self.user_id:
                q = q.eq("user_id", self.user_id)
            return q.execute()

        res = self._run("fetch_assessments", query)
        rows = getattr(res, "data", None) or []
        out = []
        for row in rows:
            try:
                out.append(from_backend_row(row))
            except AssessmentError as e:
                logger.warning("Skipping invalid backend row: %s", e)
        return out
