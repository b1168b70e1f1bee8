from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List

from agent_ready.agents.evaluator_agent import EvaluatorAgent
from agent_ready.agents.pillar_agent import PillarAgent
from agent_ready.agents.reporter_agent import ReporterAgent
from agent_ready.agents.state import PillarAgentResult, PipelineMeta, ScanState
from agent_ready.context.builder import build_snapshot
from agent_ready.core.clock import now_ms
from agent_ready.graph.profiles import DEFAULT_PROFILE, load_profile
from agent_ready.app.errors import EmptyRubricError
from agent_ready.schemas.check_schema import PILLARS
from agent_ready.schemas.report_schema import ReportInput

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


def _pipeline(state: ScanState, node: str) -> PipelineMeta:
    """Fresh copy of the pipeline meta with `node` recorded as run."""
    current = state.get("pipeline") or PipelineMeta()
    pipeline = current.model_copy(deep=True)
    pipeline.agents_run.append(node)
    return pipeline


def load_profile_node(state: ScanState) -> Dict[str, Any]:
    t0 = now_ms()
    pipeline = _pipeline(state, "load_profile")

    name = state.get("profile_name") or DEFAULT_PROFILE
    profile = load_profile(name).filter_to_level(state.get("target_level"))
    if not profile.checks:
        raise EmptyRubricError(f"Profile {name} has no checks at or below {state.get('target_level')}")

    pipeline.timings_ms["load_profile"] = now_ms() - t0
    return {"profile": profile, "pipeline": pipeline}


def build_context_node(state: ScanState) -> Dict[str, Any]:
    t0 = now_ms()
    pipeline = _pipeline(state, "build_context")

    snapshot = build_snapshot(state["path"])

    pipeline.timings_ms["build_context"] = now_ms() - t0
    return {"snapshot": snapshot, "pipeline": pipeline}


def run_pillars_node(state: ScanState) -> Dict[str, Any]:
    """
    Fan out one PillarAgent per pillar the profile covers. Pillars run on one
    pool and their checks on another so a pillar waiting on its checks never
    holds a worker its checks need. Results keep PILLARS order.
    """
    t0 = now_ms()
    pipeline = _pipeline(state, "run_pillars")

    profile = state["profile"]
    snapshot = state["snapshot"]
    max_workers = int(state.get("max_workers") or DEFAULT_MAX_WORKERS)

    agents: List[PillarAgent] = []
    for pillar in PILLARS:
        agent = PillarAgent(pillar)
        agent.set_checks(profile.checks)
        if agent.checks:
            agents.append(agent)

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="check") as check_pool:
        with ThreadPoolExecutor(max_workers=len(agents) or 1, thread_name_prefix="pillar") as pillar_pool:
            pillar_results: List[PillarAgentResult] = list(
                pillar_pool.map(lambda a: a.analyze(snapshot, executor=check_pool), agents)
            )

    pipeline.timings_ms["run_pillars"] = now_ms() - t0
    logger.info(
        "pillars analyzed",
        extra={"pillars": len(pillar_results), "checks": sum(r.checks_total for r in pillar_results)},
    )
    return {"pillar_results": pillar_results, "pipeline": pipeline}


def evaluate_node(state: ScanState) -> Dict[str, Any]:
    t0 = now_ms()
    pipeline = _pipeline(state, "evaluate")

    evaluation = EvaluatorAgent().evaluate(state["pillar_results"], state.get("language") or "en")

    pipeline.timings_ms["evaluate"] = now_ms() - t0
    return {"evaluation": evaluation, "pipeline": pipeline}


def report_node(state: ScanState) -> Dict[str, Any]:
    t0 = now_ms()
    pipeline = _pipeline(state, "report")

    profile = state["profile"]
    snapshot = state["snapshot"]
    started = state.get("started_ms") or t0

    report = ReporterAgent().generate_report(
        ReportInput(
            repo_name=snapshot.repo_name,
            commit_sha=snapshot.commit_sha,
            profile=profile.name,
            profile_version=profile.version,
            pillar_results=state["pillar_results"],
            evaluation=state["evaluation"],
            language=state.get("language") or "en",
            scan_duration_ms=now_ms() - started,
            agents_used=len(state["pillar_results"]),
            is_monorepo=snapshot.is_monorepo,
            monorepo_apps=[app.path for app in snapshot.monorepo_apps],
        )
    )

    pipeline.timings_ms["report"] = now_ms() - t0
    return {"report": report, "pipeline": pipeline}
