from __future__ import annotations

"""
LangGraph scan pipeline topology + rubric profile registry.
"""

from agent_ready.graph import build_graph, profiles

__all__ = [
    "build_graph",
    "profiles",
]
