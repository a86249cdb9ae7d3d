"""Local persistence for assessment records.

Records live as a JSON array in ``<data_dir>/cybersecurity-assessments.json``.
Writes go to a uniquely named temp file first and are swapped in with
``os.replace``, so a crash or a concurrent writer never leaves a half-written
list behind. AssessmentRepository serialises its load-modify-save cycles.
"""

import hashlib
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from .backend import SupabaseMirror
from .config import ASSESSMENTS_KEY, DATA_VERSION
from .errors import StorageError, ValidationError
from .models import AssessmentRecord, parse_record, utcnow

logger = logging.getLogger(__name__)


class LocalAssessmentStore:
    def __init__(self, data_dir):
        self.data_dir = Path(data_dir)

    @property
    def path(self) -> Path:
        return self.data_dir / f"{ASSESSMENTS_KEY}.json"

    def load(self) -> List[AssessmentRecord]:
        """
        Read every stored record.

        A missing file is an empty list. An unreadable or corrupt file is
        logged and also read as empty; invalid entries are skipped one by one.
        """
        p = self.path
        if not p.exists():
            return []
        try:
            with p.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Failed to load assessments from %s: %s", p, e)
            return []
        if not isinstance(raw, list):
            logger.error("Ignoring %s: expected a JSON array", p)
            return []
        records = []
        for item in raw:
            try:
                records.append(parse_record(item))
            except ValidationError as e:
                logger.warning("Skipping stored assessment: %s", e)
        return records

    def save_all(self, records: List[AssessmentRecord]) -> None:
        p = self.path
        tmp_name = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.data_dir), prefix=p.stem, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump([r.to_json_dict() for r in records], f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, str(p))
            tmp_name = None
        except OSError as e:
            logger.error("Failed to save assessments to %s: %s", p, e)
            raise StorageError(f"Could not save assessments: {e}") from e
        finally:
            if tmp_name and os.path.exists(tmp_name):
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.warning("Could not remove temp file %s", tmp_name)


def checksum(records: List[Dict[str, Any]]) -> str:
    blob = json.dumps(records, sort_keys=True, ensure_ascii=False).encode("utf-8")
    return hashlib.sha256(blob).hexdigest()


class AssessmentRepository:
    """
    Assessment CRUD over the local store with an optional hosted mirror.

    The local write always happens first and decides success; the mirror is
    tried once afterwards and its failure only gets logged.

    ``lock`` guards every load-modify-save cycle on the local file. It is
    re-entrant so callers can hold it across a read and the following save.
    """

    def __init__(self, store: LocalAssessmentStore, mirror: Optional[SupabaseMirror] = None):
        self.store = store
        self.mirror = mirror
        self.lock = threading.RLock()

    @property
    def local_only(self) -> bool:
        return self.mirror is None or not self.mirror.is_ready

    def get_assessments(self) -> List[AssessmentRecord]:
        return self.store.load()

    def get_assessment(self, assessment_id: str) -> Optional[AssessmentRecord]:
        for r in self.store.load():
            if r.id == assessment_id:
                return r
        return None

    def save_assessment(self, record) -> AssessmentRecord:
        record = parse_record(
            record.model_dump() if isinstance(record, AssessmentRecord) else record
        )
        with self.lock:
            records = self.store.load()
            for i, r in enumerate(records):
                if r.id == record.id:
                    records[i] = record
                    break
            else:
                records.append(record)
            self.store.save_all(records)
        if not self.local_only:
            self.mirror.upsert_assessment(record)
        return record

    def delete_assessment(self, assessment_id: str) -> bool:
        with self.lock:
            records = self.store.load()
            kept = [r for r in records if r.id != assessment_id]
            if len(kept) == len(records):
                return False
            self.store.save_all(kept)
        if not self.local_only:
            self.mirror.delete_assessment(assessment_id)
        return True

    def reset(self) -> None:
        with self.lock:
            self.store.save_all([])

    def record_version(self, record: AssessmentRecord, description: str = "") -> bool:
        """Snapshot the record's responses on the mirror; a no-op when local-only."""
        if self.local_only:
            return False
        return self.mirror.record_version(record, record.version, description)

    def export_all(self) -> Dict[str, Any]:
        """Full backup of the local list with a checksum over the records."""
        records = [r.to_json_dict() for r in self.store.load()]
        return {
            "version": DATA_VERSION,
            "backupDate": utcnow().isoformat(),
            "assessments": records,
            "checksum": checksum(records),
        }

    def import_all(self, payload: Dict[str, Any], replace: bool = True) -> int:
        """
        Restore a backup made by ``export_all``.

        Every record is validated before anything is written; one bad record
        rejects the whole import and leaves stored data untouched. Returns
        the number of records imported.
        """
        if not isinstance(payload, dict) or not payload.get("version"):
            raise ValidationError("Invalid backup format - missing version")
        items = payload.get("assessments")
        if not isinstance(items, list):
            raise ValidationError("Invalid backup format - assessments must be a list")
        if payload.get("checksum") and payload["checksum"] != checksum(items):
            logger.warning("Backup checksum mismatch - data may be corrupted")
        incoming = [parse_record(item) for item in items]

        with self.lock:
            if replace:
                merged = incoming
            else:
                by_id = {r.id: r for r in self.store.load()}
                by_id.update({r.id: r for r in incoming})
                merged = list(by_id.values())
            self.store.save_all(merged)
        logger.info("Imported %d assessments (replace=%s)", len(incoming), replace)
        return len(incoming)

    def pull_from_backend(self) -> int:
        """
        Merge records from the mirror that are newer than (or missing from)
        the local list. Returns how many local records changed.
        """
        if self.local_only:
            return 0
        remote = self.mirror.fetch_assessments()
        if not remote:
            return 0
        with self.lock:
            by_id = {r.id: r for r in self.store.load()}
            changed = 0
            for r in remote:
                local = by_id.get(r.id)
                if local is None or r.last_modified > local.last_modified:
                    by_id[r.id] = r
                    changed += 1
            if changed:
                self.store.save_all(list(by_id.values()))
        return changed
