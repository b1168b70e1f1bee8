from __future__ import annotations

"""
Scan lifecycle layer:
- explicit state machine (queued -> cloning -> scanning -> completed|failed)
- scan stores (in-memory, Mongo)
- repository acquisition (git clone, local path)
- scan manager driving the pipeline
"""

from agent_ready.scans import git_service, scan_manager, scan_store, state_machine

__all__ = [
    "git_service",
    "scan_manager",
    "scan_store",
    "state_machine",
]
