from __future__ import annotations

from typing import Any, Dict, Optional
from dotenv import load_dotenv

load_dotenv()  # Load .env file

from agent_ready.app.settings import load_settings
from agent_ready.app.logging import setup_logging
from agent_ready.graph.build_graph import run_pipeline
from agent_ready.scans.git_service import GitCloneAcquirer
from agent_ready.scans.scan_manager import ScanManager
from agent_ready.scans.scan_store import store_from_settings


def run_local_scan(
    *,
    path: str,
    profile: Optional[str] = None,
    language: Optional[str] = None,
    level: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Minimal callable entrypoint for a local checkout:
    - defaults come from settings (.env / environment)
    - run the LangGraph pipeline
    - return the report as JSON-ready dict
    """
    s = load_settings()
    setup_logging(s.log_level)

    report = run_pipeline(
        path,
        profile=profile or s.default_profile,
        language=language or s.default_language,
        level=level,
        max_workers=s.max_workers,
    )
    return report.model_dump(mode="json")


def run_remote_scan(
    *,
    repo_url: str,
    branch: Optional[str] = None,
    profile: Optional[str] = None,
    language: Optional[str] = None,
    level: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Clone + scan a hosted repository through the scan lifecycle:
    - record is stored in Mongo when MONGO_URI is set, in memory otherwise
    - returns {scan_id, status, ..., result | error}
    """
    s = load_settings()
    setup_logging(s.log_level)

    manager = ScanManager(
        store=store_from_settings(s.mongo_uri, s.mongo_db),
        acquirer=GitCloneAcquirer(s.allowed_hosts, timeout_s=s.clone_timeout_s),
        max_workers=s.max_workers,
    )
    record = manager.run(
        repo_url,
        branch=branch,
        profile=profile or s.default_profile,
        language=language or s.default_language,
        level=level,
    )
    return record.public_view()
