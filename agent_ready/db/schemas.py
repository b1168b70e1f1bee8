from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Literal, Optional
from datetime import datetime

ScanStatus = Literal["queued", "cloning", "scanning", "completed", "failed"]
Language = Literal["en", "zh"]


class ScanRecord(BaseModel):
    """
    One scan request and its lifecycle. `result` holds the report as JSON
    (Report.model_dump(mode="json")) once completed; `error` the failure reason.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    repo_url: str
    branch: Optional[str] = None
    profile: str = "factory_compat"
    language: Language = "en"
    level: Optional[str] = None
    status: ScanStatus = "queued"
    created_at: datetime
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    def to_doc(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    def public_view(self) -> Dict[str, Any]:
        """Shape returned to pollers (scan_id instead of _id)."""
        return {
            "scan_id": self.id,
            "repo_url": self.repo_url,
            "status": self.status,
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "result": self.result,
            "error": self.error,
        }
