from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional, TypedDict

from agent_ready.schemas.check_schema import CheckResult, Level, Pillar


InsightType = Literal["risk", "opportunity", "strength"]


class PillarAgentResult(BaseModel):
    """
    Outcome of one pillar agent: score, gated level and the facts behind them.
    """
    pillar: Pillar
    name: str
    name_zh: str
    icon: str
    level_achieved: Optional[Level] = None
    score: int = Field(ge=0, le=100)
    checks_passed: int = 0
    checks_total: int = 0
    checks: List[CheckResult] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    execution_time_ms: int = 0


class CrossPillarInsight(BaseModel):
    type: InsightType
    pillars: List[Pillar]
    insight_zh: str
    insight_en: str
    recommendation_zh: str
    recommendation_en: str


class Evaluation(BaseModel):
    """
    Cross-pillar verdict consumed by the reporter.
    """
    level: Optional[Level] = None
    overall_score: int = Field(ge=0, le=100)
    progress_to_next: float = Field(ge=0.0, le=1.0)
    cross_pillar_insights: List[CrossPillarInsight] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    tech_debt_score: int = Field(ge=0, le=100)


class PipelineMeta(BaseModel):
    graph_version: str = "v1"
    agents_run: List[str] = Field(default_factory=list)
    timings_ms: Dict[str, int] = Field(default_factory=dict)


class ScanState(TypedDict, total=False):
    """
    LangGraph state for one scan. Each node returns only the keys it writes.
    """
    # Input
    path: str
    profile_name: str
    language: str
    target_level: Optional[str]
    max_workers: int
    started_ms: int

    # Produced by nodes
    profile: Any  # graph.profiles.Profile
    snapshot: Any  # context.snapshot.RepoSnapshot
    pillar_results: List[PillarAgentResult]
    evaluation: Evaluation
    report: Any  # schemas.report_schema.Report
    pipeline: PipelineMeta
