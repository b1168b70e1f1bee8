from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from agent_ready.app.errors import EvaluationError
from agent_ready.agents.state import CrossPillarInsight, Evaluation, PillarAgentResult
from agent_ready.core.utils import round_half_up
from agent_ready.i18n import pillar_name
from agent_ready.schemas.check_schema import LEVELS, level_rank, next_level

logger = logging.getLogger(__name__)

STRENGTH_THRESHOLD = 70
TOP_N = 3


@dataclass(frozen=True)
class CrossPillarRule:
    """
    (pillar pair, score predicate) -> insight. Both pillars must be present for
    the rule to be considered.
    """
    type: str
    pillars: Tuple[str, str]
    when: Callable[[int, int], bool]
    insight_zh: str
    insight_en: str
    recommendation_zh: str
    recommendation_en: str


CROSS_PILLAR_RULES: List[CrossPillarRule] = [
    CrossPillarRule(
        type="risk",
        pillars=("test", "build"),
        when=lambda test, build: test < 50 and build < 50,
        insight_zh="检测到测试覆盖率低且无 CI/CD，代码变更风险高",
        insight_en="Low test coverage with no CI/CD detected - high risk for code changes",
        recommendation_zh="优先建立 CI 流水线并添加基础测试",
        recommendation_en="Prioritize CI pipeline setup and add basic tests",
    ),
    CrossPillarRule(
        type="opportunity",
        pillars=("docs", "env"),
        when=lambda docs, env: docs > 70 and env < 50,
        insight_zh="文档完善但缺少开发环境配置，新人上手有障碍",
        insight_en="Good docs but missing dev environment setup - onboarding friction",
        recommendation_zh="添加 devcontainer 或 docker-compose 配置",
        recommendation_en="Add devcontainer or docker-compose configuration",
    ),
    CrossPillarRule(
        type="strength",
        pillars=("security", "style"),
        when=lambda security, style: security > 80 and style > 80,
        insight_zh="安全配置和代码风格都很完善，代码质量高",
        insight_en="Strong security and code style configurations - high code quality",
        recommendation_zh="继续保持当前标准",
        recommendation_en="Maintain current standards",
    ),
    CrossPillarRule(
        type="risk",
        pillars=("observability", "test"),
        when=lambda observability, test: observability < 50 and test < 50,
        insight_zh="缺少测试且运行时可观测性不足，故障难以发现和定位",
        insight_en="Few tests and little runtime visibility - failures are hard to catch and diagnose",
        recommendation_zh="先接入结构化日志，再为关键路径补充测试",
        recommendation_en="Add structured logging first, then cover critical paths with tests",
    ),
    CrossPillarRule(
        type="strength",
        pillars=("task_discovery", "docs"),
        when=lambda tasks, docs: tasks > 70 and docs > 70,
        insight_zh="任务清晰且文档完善，Agent 可以自主找到并理解工作",
        insight_en="Clear task tracking and strong docs - agents can find and understand work on their own",
        recommendation_zh="为 Agent 补充 AGENTS.md 中的任务约定",
        recommendation_en="Capture task conventions for agents in AGENTS.md",
    ),
    CrossPillarRule(
        type="risk",
        pillars=("security", "build"),
        when=lambda security, build: security < 50 and build > 70,
        insight_zh="交付流水线成熟但缺少安全防护，问题会被快速发布",
        insight_en="Mature delivery pipeline without security gates - issues ship quickly",
        recommendation_zh="在 CI 中加入依赖扫描和密钥检测",
        recommendation_en="Add dependency scanning and secret detection to CI",
    ),
]


def determine_overall_level(pillar_results: Sequence[PillarAgentResult]) -> Optional[str]:
    """
    Same gated scan as a pillar, but a level holds only when every pillar
    reached at least that level. Any pillar at None drags the result to None.
    """
    for idx, level in enumerate(LEVELS):
        all_achieved = all(
            p.level_achieved is not None and level_rank(p.level_achieved) >= idx
            for p in pillar_results
        )
        if not all_achieved:
            return LEVELS[idx - 1] if idx > 0 else None
    return LEVELS[-1]


def calculate_progress_to_next(pillar_results: Sequence[PillarAgentResult], current: Optional[str]) -> float:
    target = next_level(current)
    if target is None:
        return 1.0

    passed = 0
    total = 0
    for pillar in pillar_results:
        at_target = [c for c in pillar.checks if c.level == target]
        total += len(at_target)
        passed += sum(1 for c in at_target if c.passed)
    return passed / total if total > 0 else 0.0


def generate_cross_pillar_insights(
    pillar_results: Sequence[PillarAgentResult],
    rules: Sequence[CrossPillarRule] = CROSS_PILLAR_RULES,
) -> List[CrossPillarInsight]:
    scores: Dict[str, int] = {p.pillar: p.score for p in pillar_results}
    insights: List[CrossPillarInsight] = []
    for rule in rules:
        a, b = rule.pillars
        if a not in scores or b not in scores:
            continue
        if rule.when(scores[a], scores[b]):
            insights.append(
                CrossPillarInsight(
                    type=rule.type,
                    pillars=list(rule.pillars),
                    insight_zh=rule.insight_zh,
                    insight_en=rule.insight_en,
                    recommendation_zh=rule.recommendation_zh,
                    recommendation_en=rule.recommendation_en,
                )
            )
    return insights


def identify_strengths_weaknesses(
    pillar_results: Sequence[PillarAgentResult], language: str = "en"
) -> Tuple[List[str], List[str]]:
    # sorted() is stable: equal scores keep input order
    ranked = sorted(pillar_results, key=lambda p: p.score, reverse=True)

    def label(p: PillarAgentResult) -> str:
        return f"{p.icon} {pillar_name(p.pillar, language)}: {p.score}%"

    strengths = [label(p) for p in ranked[:TOP_N] if p.score >= STRENGTH_THRESHOLD]
    weaknesses = [label(p) for p in reversed(ranked[-TOP_N:]) if p.score < STRENGTH_THRESHOLD]
    return strengths, weaknesses


def calculate_tech_debt_score(pillar_results: Sequence[PillarAgentResult]) -> int:
    if not pillar_results:
        return 0
    avg = sum(p.score for p in pillar_results) / len(pillar_results)
    return 100 - round_half_up(avg)


class EvaluatorAgent:
    def __init__(self, rules: Optional[Sequence[CrossPillarRule]] = None):
        self.rules = list(rules) if rules is not None else list(CROSS_PILLAR_RULES)

    def evaluate(self, pillar_results: Sequence[PillarAgentResult], language: str = "en") -> Evaluation:
        if not pillar_results:
            raise EvaluationError("No pillar results to evaluate")

        total_passed = sum(p.checks_passed for p in pillar_results)
        total_checks = sum(p.checks_total for p in pillar_results)
        overall_score = round_half_up(total_passed / total_checks * 100) if total_checks > 0 else 0

        level = determine_overall_level(pillar_results)
        strengths, weaknesses = identify_strengths_weaknesses(pillar_results, language)

        evaluation = Evaluation(
            level=level,
            overall_score=overall_score,
            progress_to_next=calculate_progress_to_next(pillar_results, level),
            cross_pillar_insights=generate_cross_pillar_insights(pillar_results, self.rules),
            strengths=strengths,
            weaknesses=weaknesses,
            tech_debt_score=calculate_tech_debt_score(pillar_results),
        )
        logger.info(
            "evaluation complete",
            extra={"level": level, "overall_score": overall_score, "insights": len(evaluation.cross_pillar_insights)},
        )
        return evaluation
