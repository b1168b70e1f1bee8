from __future__ import annotations

import copy
import threading
from typing import Any, Dict, List, Optional, Protocol

from agent_ready.app.errors import InvalidScanTransitionError, ScanNotFoundError
from agent_ready.core.clock import utc_now
from agent_ready.db.mongo import connect_mongo, ensure_indexes
from agent_ready.db.repositories import ScanRepo
from agent_ready.db.schemas import ScanRecord
from agent_ready.scans.state_machine import assert_transition, is_terminal


class ScanStore(Protocol):
    """Keyed by scan id. Status changes go through `transition`, never a raw update."""

    def create(self, record: ScanRecord) -> ScanRecord: ...

    def get(self, scan_id: str) -> ScanRecord: ...

    def transition(self, scan_id: str, status: str, **fields: Any) -> ScanRecord: ...

    def list_recent(self, limit: int = 20) -> List[ScanRecord]: ...


def _terminal_fields(status: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(fields)
    out["status"] = status
    if is_terminal(status):
        out.setdefault("completed_at", utc_now())
    return out


class InMemoryScanStore:
    """
    Process-local store. Records are copied in and out so callers never hold a
    reference to the stored object.
    """

    def __init__(self):
        self._records: Dict[str, ScanRecord] = {}
        self._lock = threading.Lock()

    def create(self, record: ScanRecord) -> ScanRecord:
        with self._lock:
            self._records[record.id] = record.model_copy(deep=True)
        return record

    def get(self, scan_id: str) -> ScanRecord:
        with self._lock:
            rec = self._records.get(scan_id)
            if rec is None:
                raise ScanNotFoundError(f"Scan not found: {scan_id}")
            return rec.model_copy(deep=True)

    def transition(self, scan_id: str, status: str, **fields: Any) -> ScanRecord:
        with self._lock:
            rec = self._records.get(scan_id)
            if rec is None:
                raise ScanNotFoundError(f"Scan not found: {scan_id}")
            assert_transition(rec.status, status)
            update = _terminal_fields(status, fields)
            update["updated_at"] = utc_now()
            updated = rec.model_copy(update=copy.deepcopy(update))
            self._records[scan_id] = updated
            return updated.model_copy(deep=True)

    def list_recent(self, limit: int = 20) -> List[ScanRecord]:
        with self._lock:
            recs = sorted(self._records.values(), key=lambda r: r.created_at, reverse=True)
            return [r.model_copy(deep=True) for r in recs[:limit]]


class MongoScanStore:
    """
    Mongo-backed store. Transitions are compare-and-set on the current status,
    so two workers cannot both move the same scan.
    """

    def __init__(self, repo: ScanRepo):
        self.repo = repo

    def create(self, record: ScanRecord) -> ScanRecord:
        self.repo.insert_scan(record.to_doc())
        return record

    def get(self, scan_id: str) -> ScanRecord:
        doc = self.repo.get_scan(scan_id)
        if not doc:
            raise ScanNotFoundError(f"Scan not found: {scan_id}")
        return ScanRecord.model_validate(doc)

    def transition(self, scan_id: str, status: str, **fields: Any) -> ScanRecord:
        current = self.get(scan_id)
        assert_transition(current.status, status)
        applied = self.repo.update_scan(scan_id, _terminal_fields(status, fields), expected_status=current.status)
        if not applied:
            latest = self.get(scan_id)
            raise InvalidScanTransitionError(
                f"Scan {scan_id} moved to {latest.status} before {current.status} -> {status} applied"
            )
        return self.get(scan_id)

    def list_recent(self, limit: int = 20) -> List[ScanRecord]:
        return [ScanRecord.model_validate(d) for d in self.repo.list_recent_scans(limit=limit)]


def store_from_settings(mongo_uri: Optional[str], mongo_db: str) -> ScanStore:
    """MongoScanStore when a URI is configured, else an in-memory store."""
    if not mongo_uri:
        return InMemoryScanStore()
    handles = connect_mongo(mongo_uri, mongo_db)
    ensure_indexes(handles)
    return MongoScanStore(ScanRepo(handles["scans"]))
