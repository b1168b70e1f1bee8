from __future__ import annotations

from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from agent_ready.agents.state import CrossPillarInsight, Evaluation, PillarAgentResult
from agent_ready.schemas.check_schema import Level, Pillar

# -----------------------------
# Core Types
# -----------------------------

Priority = Literal["critical", "high", "medium", "low"]
PRIORITIES: tuple = ("critical", "high", "medium", "low")

Language = Literal["en", "zh"]


def priority_rank(priority: str) -> int:
    return PRIORITIES.index(priority)


# -----------------------------
# Report sections
# -----------------------------

class ReportMeta(BaseModel):
    repo: str
    commit: str
    timestamp: str
    profile: str
    profile_version: str
    scan_duration_ms: int = 0
    agents_used: int = 0
    language: Language = "en"
    is_monorepo: bool = False
    monorepo_apps: List[str] = Field(default_factory=list)


class ExecutiveSummary(BaseModel):
    level: Optional[Level] = None
    score: int = Field(..., ge=0, le=100)
    headline_zh: str
    headline_en: str
    key_strengths: List[str] = Field(default_factory=list)
    critical_gaps: List[str] = Field(default_factory=list)
    next_steps: List[str] = Field(default_factory=list)


class PillarDetail(BaseModel):
    pillar: Pillar
    name: str
    name_zh: str
    icon: str
    level_achieved: Optional[Level] = None
    score: int = Field(..., ge=0, le=100)
    checks_passed: int
    checks_total: int


class DetailedAnalysis(BaseModel):
    pillars: List[PillarDetail] = Field(default_factory=list)
    cross_pillar_insights: List[CrossPillarInsight] = Field(default_factory=list)
    tech_debt_score: int = Field(..., ge=0, le=100)


class ActionItem(BaseModel):
    """One failed fact turned into a remediation step."""
    priority: Priority
    pillar: Pillar
    level: Level
    check_id: str
    action_zh: str
    action_en: str
    template: Optional[str] = None


class ImprovementRoadmap(BaseModel):
    quick_wins: List[ActionItem] = Field(default_factory=list)
    short_term: List[ActionItem] = Field(default_factory=list)
    medium_term: List[ActionItem] = Field(default_factory=list)
    # reserved for horizon planning; always empty for now
    long_term: List[ActionItem] = Field(default_factory=list)


class PillarRadarPoint(BaseModel):
    pillar: str
    score: int


class LevelProgress(BaseModel):
    level: Level
    achieved: bool
    score: int


class Charts(BaseModel):
    pillar_radar: List[PillarRadarPoint] = Field(default_factory=list)
    level_progress: List[LevelProgress] = Field(default_factory=list)


class Report(BaseModel):
    """
    Wire contract of a scan. Serialize with `model_dump(mode="json")`.
    """
    model_config = ConfigDict(extra="forbid")

    meta: ReportMeta
    executive_summary: ExecutiveSummary
    detailed_analysis: DetailedAnalysis
    improvement_roadmap: ImprovementRoadmap
    charts: Charts


# -----------------------------
# Reporter input
# -----------------------------

class ReportInput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    repo_name: str
    commit_sha: str
    profile: str
    profile_version: str
    pillar_results: List[PillarAgentResult]
    evaluation: Evaluation
    language: Language = "en"
    scan_duration_ms: int = 0
    agents_used: int = 0
    is_monorepo: bool = False
    monorepo_apps: List[str] = Field(default_factory=list)
