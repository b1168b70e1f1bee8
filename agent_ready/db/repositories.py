from __future__ import annotations
from typing import Any, Dict, List, Optional
from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from agent_ready.app.errors import DatabaseError
from agent_ready.core.clock import utc_now


class ScanRepo:
    def __init__(self, scans: Collection):
        self.scans = scans

    def insert_scan(self, doc: Dict[str, Any]) -> str:
        try:
            self.scans.insert_one(doc)
        except PyMongoError as e:
            raise DatabaseError(f"Insert scan failed: {e}") from e
        return doc["_id"]

    def get_scan(self, scan_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self.scans.find_one({"_id": scan_id})
        except PyMongoError as e:
            raise DatabaseError(f"Read scan failed: {e}") from e

    def update_scan(self, scan_id: str, fields: Dict[str, Any], *, expected_status: Optional[str] = None) -> bool:
        """
        $set `fields` (plus updated_at). With `expected_status`, the update only
        applies if the stored status still matches; returns whether a doc changed.
        """
        query: Dict[str, Any] = {"_id": scan_id}
        if expected_status is not None:
            query["status"] = expected_status
        update = {**fields, "updated_at": utc_now()}
        try:
            res = self.scans.update_one(query, {"$set": update})
        except PyMongoError as e:
            raise DatabaseError(f"Update scan failed: {e}") from e
        return res.matched_count > 0

    def list_recent_scans(self, limit: int = 20, status: Optional[str] = None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {"status": status} if status else {}
        try:
            cur = self.scans.find(query).sort("created_at", DESCENDING).limit(limit)
            return list(cur)
        except PyMongoError as e:
            raise DatabaseError(f"List scans failed: {e}") from e
