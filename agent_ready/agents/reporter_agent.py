from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from agent_ready.agents.state import Evaluation, PillarAgentResult
from agent_ready.core.clock import utc_now_iso
from agent_ready.core.utils import round_half_up
from agent_ready.i18n import level_name, pillar_name
from agent_ready.schemas.check_schema import LEVELS, CheckResult, level_rank
from agent_ready.schemas.report_schema import (
    ActionItem,
    Charts,
    DetailedAnalysis,
    ExecutiveSummary,
    ImprovementRoadmap,
    LevelProgress,
    PillarDetail,
    PillarRadarPoint,
    Report,
    ReportInput,
    ReportMeta,
    priority_rank,
)

logger = logging.getLogger(__name__)

LEVEL_PROGRESS_THRESHOLD = 60
QUICK_WINS = 3
SHORT_TERM = 5
MEDIUM_TERM = 5
MAX_NEXT_STEPS = 3

# overall level -> fixed (zh, en) guidance; L3 and above derive steps from failing checks
NEXT_STEPS: Dict[Optional[str], List[Tuple[str, str]]] = {
    None: [
        ("添加 README.md 文件", "Add a README.md file"),
        ("创建 package.json 或其他包管理文件", "Create package.json or other package manifest"),
    ],
    "L1": [
        ("添加 CONTRIBUTING.md 贡献指南", "Add CONTRIBUTING.md guide"),
        ("配置代码格式化工具", "Configure code formatter"),
    ],
    "L2": [
        ("添加 CI/CD 工作流", "Add CI/CD workflow"),
        ("创建 AGENTS.md 文件", "Create AGENTS.md file"),
    ],
}


def classify_priority(check: CheckResult) -> str:
    """
    required at the lowest level -> critical, other required -> high,
    optional at L2 or below -> medium, everything else -> low.
    """
    rank = level_rank(check.level)
    if check.required:
        return "critical" if rank == 0 else "high"
    return "medium" if rank <= level_rank("L2") else "low"


def generate_action_items(pillar_results: Sequence[PillarAgentResult]) -> List[ActionItem]:
    items: List[ActionItem] = []
    for pillar in pillar_results:
        for check in pillar.checks:
            if check.passed:
                continue
            suggestion = check.suggestions[0] if check.suggestions else None
            template = (check.details or {}).get("template")
            items.append(
                ActionItem(
                    priority=classify_priority(check),
                    pillar=pillar.pillar,
                    level=check.level,
                    check_id=check.check_id,
                    action_zh=suggestion or f"修复: {check.check_name}",
                    action_en=suggestion or f"Fix: {check.check_name}",
                    template=template if isinstance(template, str) else None,
                )
            )
    # stable: ties keep pillar order, then check definition order
    items.sort(key=lambda a: priority_rank(a.priority))
    return items


def build_roadmap(items: Sequence[ActionItem]) -> ImprovementRoadmap:
    return ImprovementRoadmap(
        quick_wins=[a for a in items if a.priority in ("critical", "high")][:QUICK_WINS],
        short_term=[a for a in items if a.priority == "medium"][:SHORT_TERM],
        medium_term=[a for a in items if a.priority == "low"][:MEDIUM_TERM],
        long_term=[],
    )


def build_level_progress(pillar_results: Sequence[PillarAgentResult]) -> List[LevelProgress]:
    """
    Flat per-level view across all pillars: achieved iff the level's score is
    at least 60. This ignores required checks and is not the gated level.
    """
    progress: List[LevelProgress] = []
    for level in LEVELS:
        level_checks = [c for p in pillar_results for c in p.checks if c.level == level]
        passed = sum(1 for c in level_checks if c.passed)
        total = len(level_checks)
        score = round_half_up(passed / total * 100) if total > 0 else 0
        progress.append(LevelProgress(level=level, achieved=score >= LEVEL_PROGRESS_THRESHOLD, score=score))
    return progress


def generate_next_steps(evaluation: Evaluation, items: Sequence[ActionItem], language: str = "en") -> List[str]:
    if evaluation.level in NEXT_STEPS:
        pairs = NEXT_STEPS[evaluation.level]
        texts = [zh if language == "zh" else en for zh, en in pairs]
    else:
        lowest_first = sorted(items, key=lambda a: level_rank(a.level))
        texts = [a.action_zh if language == "zh" else a.action_en for a in lowest_first[:MAX_NEXT_STEPS]]
    return [f"{i}. {text}" for i, text in enumerate(texts, start=1)]


def build_headlines(level: Optional[str]) -> Tuple[str, str]:
    if level:
        return (
            f"您的仓库已达到 {level} {level_name(level, 'zh')}",
            f"Your repository achieved {level} {level_name(level, 'en')}",
        )
    return "您的仓库尚未达到 L1 基础级", "Your repository has not yet reached L1 Functional"


class ReporterAgent:
    """
    Pure assembly of the final Report from pillar results and the evaluation.
    """

    def generate_report(self, data: ReportInput) -> Report:
        evaluation = data.evaluation
        headline_zh, headline_en = build_headlines(evaluation.level)

        pillar_details = [
            PillarDetail(
                pillar=p.pillar,
                name=pillar_name(p.pillar, "en"),
                name_zh=pillar_name(p.pillar, "zh"),
                icon=p.icon or "📦",
                level_achieved=p.level_achieved,
                score=p.score,
                checks_passed=p.checks_passed,
                checks_total=p.checks_total,
            )
            for p in data.pillar_results
        ]

        items = generate_action_items(data.pillar_results)

        report = Report(
            meta=ReportMeta(
                repo=data.repo_name,
                commit=data.commit_sha,
                timestamp=utc_now_iso(),
                profile=data.profile,
                profile_version=data.profile_version,
                scan_duration_ms=data.scan_duration_ms,
                agents_used=data.agents_used,
                language=data.language,
                is_monorepo=data.is_monorepo,
                monorepo_apps=list(data.monorepo_apps),
            ),
            executive_summary=ExecutiveSummary(
                level=evaluation.level,
                score=evaluation.overall_score,
                headline_zh=headline_zh,
                headline_en=headline_en,
                key_strengths=list(evaluation.strengths),
                critical_gaps=list(evaluation.weaknesses),
                next_steps=generate_next_steps(evaluation, items, data.language),
            ),
            detailed_analysis=DetailedAnalysis(
                pillars=pillar_details,
                cross_pillar_insights=list(evaluation.cross_pillar_insights),
                tech_debt_score=evaluation.tech_debt_score,
            ),
            improvement_roadmap=build_roadmap(items),
            charts=Charts(
                pillar_radar=[PillarRadarPoint(pillar=d.name, score=d.score) for d in pillar_details],
                level_progress=build_level_progress(data.pillar_results),
            ),
        )
        logger.info(
            "report assembled",
            extra={"repo": data.repo_name, "level": evaluation.level, "action_items": len(items)},
        )
        return report
