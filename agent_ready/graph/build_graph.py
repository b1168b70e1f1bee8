from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from langgraph.graph import StateGraph, START, END

from agent_ready.agents.nodes import (
    build_context_node,
    evaluate_node,
    load_profile_node,
    report_node,
    run_pillars_node,
)
from agent_ready.agents.state import PipelineMeta, ScanState
from agent_ready.core.clock import now_ms
from agent_ready.graph.profiles import DEFAULT_PROFILE
from agent_ready.schemas.check_schema import LEVELS
from agent_ready.schemas.report_schema import Report

logger = logging.getLogger(__name__)


def build_graph() -> "StateGraph":
    """
    Scan pipeline:
    - START -> load_profile (rubric, optionally capped at a level)
    - load_profile -> build_context (read-only repository snapshot)
    - build_context -> run_pillars (all pillar agents in parallel)
    - run_pillars -> evaluate (cross-pillar verdict)
    - evaluate -> report -> END
    Any node error aborts the run; there is no partial report.
    """
    g = StateGraph(ScanState)

    g.add_node("load_profile", load_profile_node)
    g.add_node("build_context", build_context_node)
    g.add_node("run_pillars", run_pillars_node)
    g.add_node("evaluate", evaluate_node)
    g.add_node("report", report_node)

    g.add_edge(START, "load_profile")
    g.add_edge("load_profile", "build_context")
    g.add_edge("build_context", "run_pillars")
    g.add_edge("run_pillars", "evaluate")
    g.add_edge("evaluate", "report")
    g.add_edge("report", END)

    return g


_COMPILED = None


def get_app():
    """Compiled graph, built once per process."""
    global _COMPILED
    if _COMPILED is None:
        _COMPILED = build_graph().compile()
    return _COMPILED


def run_scan(
    path: str,
    profile: str = DEFAULT_PROFILE,
    language: str = "en",
    level: Optional[str] = None,
    max_workers: int = 8,
) -> Dict[str, Any]:
    """Invoke the compiled graph and return the final state."""
    if level is not None and level not in LEVELS:
        raise ValueError(f"Unknown level: {level} (expected one of {', '.join(LEVELS)})")

    initial: ScanState = {
        "path": str(path),
        "profile_name": profile,
        "language": language,
        "target_level": level,
        "max_workers": max_workers,
        "started_ms": now_ms(),
        "pipeline": PipelineMeta(),
    }
    logger.info("scan started", extra={"path": str(path), "profile": profile, "level": level})
    return get_app().invoke(initial)


def run_pipeline(
    path: str,
    profile: str = DEFAULT_PROFILE,
    language: str = "en",
    level: Optional[str] = None,
    max_workers: int = 8,
) -> Report:
    final = run_scan(path, profile=profile, language=language, level=level, max_workers=max_workers)
    report: Report = final["report"]
    logger.info(
        "scan finished",
        extra={
            "repo": report.meta.repo,
            "level": report.executive_summary.level,
            "score": report.executive_summary.score,
            "timings_ms": final["pipeline"].timings_ms,
        },
    )
    return report
