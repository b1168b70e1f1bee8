from __future__ import annotations

from agent_ready.tools.checks import base, engine, file_checks, manifest_checks, workflow_checks
from agent_ready.tools.checks.engine import execute_check

__all__ = [
    "base",
    "engine",
    "execute_check",
    "file_checks",
    "manifest_checks",
    "workflow_checks",
]
