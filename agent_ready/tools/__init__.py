from __future__ import annotations

"""
Tools package for agent-ready.

This package contains the deterministic predicate engine used by the pillar agents:
- checks: one handler per check type plus the dispatching engine
"""

from agent_ready.tools import checks

__all__ = [
    "checks",
]
