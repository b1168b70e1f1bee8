from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from agent_ready.context.snapshot import RepoSnapshot
from agent_ready.core.clock import now_ms
from agent_ready.core.utils import round_half_up
from agent_ready.i18n import pillar_name
from agent_ready.schemas.check_schema import LEVELS, BaseCheck, CheckResult, level_rank
from agent_ready.agents.state import PillarAgentResult
from agent_ready.tools.checks.engine import execute_check

logger = logging.getLogger(__name__)

PASS_RATE_THRESHOLD = 0.6
MAX_RECOMMENDATIONS = 3


@dataclass(frozen=True)
class PillarMeta:
    name: str
    name_zh: str
    icon: str


PILLAR_ICONS: Dict[str, str] = {
    "docs": "📖",
    "style": "✨",
    "build": "🔧",
    "test": "🧪",
    "security": "🔒",
    "observability": "📊",
    "env": "🌍",
    "task_discovery": "📋",
    "product": "🚀",
}

# names come from the i18n table
PILLAR_META: Dict[str, PillarMeta] = {
    pillar: PillarMeta(pillar_name(pillar, "en"), pillar_name(pillar, "zh"), icon)
    for pillar, icon in PILLAR_ICONS.items()
}


def calculate_score(results: Sequence[CheckResult]) -> int:
    if not results:
        return 0
    passed = sum(1 for r in results if r.passed)
    return round_half_up(passed / len(results) * 100)


def calculate_level_achieved(results: Sequence[CheckResult]) -> Optional[str]:
    """
    Gated scan L1 -> L5. A level is satisfied when at least 60% of its facts
    pass and every required fact passes. The first unsatisfied level stops the
    scan and the previous level is returned (None below L1).
    A level with no facts counts as satisfied and the scan continues; a pillar
    with no facts at all has achieved nothing.
    """
    if not results:
        return None

    for idx, level in enumerate(LEVELS):
        level_checks = [r for r in results if r.level == level]
        if not level_checks:
            continue

        passed = sum(1 for r in level_checks if r.passed)
        required_total = sum(1 for r in level_checks if r.required)
        required_passed = sum(1 for r in level_checks if r.required and r.passed)

        pass_rate = passed / len(level_checks)
        if pass_rate < PASS_RATE_THRESHOLD or required_passed < required_total:
            return LEVELS[idx - 1] if idx > 0 else None

    return LEVELS[-1]


class PillarAgent:
    """
    Evaluates the checks of a single pillar. One instance per pillar; display
    metadata comes from PILLAR_META so no per-pillar subclasses are needed.
    """

    def __init__(self, pillar: str):
        if pillar not in PILLAR_META:
            raise ValueError(f"Unknown pillar: {pillar}")
        self.pillar = pillar
        meta = PILLAR_META[pillar]
        self.name = meta.name
        self.name_zh = meta.name_zh
        self.icon = meta.icon
        self.checks: List[BaseCheck] = []

    def set_checks(self, checks: Sequence[BaseCheck]) -> None:
        self.checks = [c for c in checks if c.pillar == self.pillar]

    def analyze(self, snapshot: RepoSnapshot, executor: Optional[Executor] = None) -> PillarAgentResult:
        t0 = now_ms()

        # executor.map yields in submission order, so results follow definition order
        if executor is not None:
            results = list(executor.map(lambda c: execute_check(c, snapshot), self.checks))
        elif self.checks:
            with ThreadPoolExecutor(max_workers=min(8, len(self.checks))) as pool:
                results = list(pool.map(lambda c: execute_check(c, snapshot), self.checks))
        else:
            results = []

        passed = sum(1 for r in results if r.passed)
        result = PillarAgentResult(
            pillar=self.pillar,
            name=self.name,
            name_zh=self.name_zh,
            icon=self.icon,
            level_achieved=calculate_level_achieved(results),
            score=calculate_score(results),
            checks_passed=passed,
            checks_total=len(results),
            checks=results,
            insights=self.generate_insights(results),
            recommendations=self.generate_recommendations(results),
            execution_time_ms=now_ms() - t0,
        )
        logger.debug(
            "pillar analyzed",
            extra={"pillar": self.pillar, "score": result.score, "level": result.level_achieved},
        )
        return result

    def generate_insights(self, results: Sequence[CheckResult]) -> List[str]:
        insights: List[str] = []
        passed = [r for r in results if r.passed]

        if len(passed) == len(results):
            insights.append(f"{self.icon} {self.name}: All {len(results)} checks passed")
        else:
            insights.append(f"{self.icon} {self.name}: {len(passed)}/{len(results)} checks passed")

        required_failures = [r for r in results if r.required and not r.passed]
        if required_failures:
            insights.append(f"⚠️ {len(required_failures)} required checks failed")

        return insights

    def generate_recommendations(self, results: Sequence[CheckResult]) -> List[str]:
        failed = [r for r in results if not r.passed]
        # required first, then lowest level; sorted() is stable for ties
        failed = sorted(failed, key=lambda r: (not r.required, level_rank(r.level)))

        recommendations: List[str] = []
        for check in failed[:MAX_RECOMMENDATIONS]:
            if check.suggestions:
                recommendations.append(check.suggestions[0])
            else:
                recommendations.append(f"Fix: {check.check_name}")
        return recommendations
