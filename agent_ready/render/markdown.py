from __future__ import annotations

from typing import List

from agent_ready.i18n import level_name, pillar_name, t
from agent_ready.schemas.report_schema import ActionItem, Report


def _action_line(item: ActionItem, language: str) -> str:
    text = item.action_zh if language == "zh" else item.action_en
    line = f"- [{item.priority}] **{pillar_name(item.pillar, language)}** {item.level}: {text} (`{item.check_id}`)"
    if item.template:
        line += f" - template: `{item.template}`"
    return line


def render_markdown(report: Report, language: str = "en") -> str:
    """Human-readable rendering of a Report. The JSON dump stays the contract."""
    meta = report.meta
    summary = report.executive_summary
    lines: List[str] = []

    lines.append(f"# {t('title', language)}")
    lines.append("")
    lines.append(f"**Repository:** `{meta.repo}`")
    if meta.commit and meta.commit != "unknown":
        lines.append(f"**Commit:** `{meta.commit[:12]}`")
    lines.append(f"**Profile:** {meta.profile} v{meta.profile_version}")
    lines.append(f"**Generated:** {meta.timestamp}")
    if meta.is_monorepo:
        apps = ", ".join(f"`{a}`" for a in meta.monorepo_apps) or "-"
        lines.append(f"**Monorepo apps:** {apps}")
    lines.append("")

    lines.append(f"## {t('report.summary', language)}")
    lines.append("")
    lines.append(f"### {summary.headline_zh if language == 'zh' else summary.headline_en}")
    lines.append("")
    lines.append(f"- **Level:** {summary.level or '-'} {level_name(summary.level, language)}")
    lines.append(f"- **Score:** {summary.score}%")
    lines.append(f"- **{t('report.tech_debt', language)}:** {report.detailed_analysis.tech_debt_score}")
    lines.append("")
    if summary.key_strengths:
        lines.append(f"**{t('report.strengths', language)}:**")
        lines.extend(f"- {s}" for s in summary.key_strengths)
        lines.append("")
    if summary.critical_gaps:
        lines.append(f"**{t('report.weaknesses', language)}:**")
        lines.extend(f"- {s}" for s in summary.critical_gaps)
        lines.append("")
    if summary.next_steps:
        lines.append(f"**{t('report.next_steps', language)}:**")
        lines.extend(summary.next_steps)
        lines.append("")

    lines.append(f"## {t('report.details', language)}")
    lines.append("")
    lines.append("| Pillar | Level | Score | Checks |")
    lines.append("|---|---|---:|---:|")
    for p in report.detailed_analysis.pillars:
        name = p.name_zh if language == "zh" else p.name
        lines.append(f"| {p.icon} {name} | {p.level_achieved or '-'} | {p.score}% | {p.checks_passed}/{p.checks_total} |")
    lines.append("")

    lines.append(f"### {t('report.level_progress', language)}")
    lines.append("")
    lines.append("| Level | Name | Score | Achieved |")
    lines.append("|---|---|---:|:---:|")
    for lp in report.charts.level_progress:
        mark = "yes" if lp.achieved else "no"
        lines.append(f"| {lp.level} | {level_name(lp.level, language)} | {lp.score}% | {mark} |")
    lines.append("")

    insights = report.detailed_analysis.cross_pillar_insights
    if insights:
        lines.append(f"### {t('report.insights', language)}")
        lines.append("")
        for ins in insights:
            text = ins.insight_zh if language == "zh" else ins.insight_en
            rec = ins.recommendation_zh if language == "zh" else ins.recommendation_en
            lines.append(f"- **{ins.type}** ({' + '.join(ins.pillars)}): {text}. {rec}")
        lines.append("")

    roadmap = report.improvement_roadmap
    lines.append(f"## {t('report.roadmap', language)}")
    lines.append("")
    for key in ("quick_wins", "short_term", "medium_term", "long_term"):
        items = getattr(roadmap, key)
        if not items:
            continue
        lines.append(f"### {t('report.' + key, language)}")
        lines.append("")
        lines.extend(_action_line(a, language) for a in items)
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"
