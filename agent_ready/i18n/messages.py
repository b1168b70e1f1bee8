from __future__ import annotations

from typing import Any, Dict, Literal

Language = Literal["en", "zh"]

MESSAGES: Dict[str, Dict[str, Any]] = {
    "zh": {
        "title": "Agent Ready - AI Agent 就绪度检测",
        "pillars": {
            "docs": "文档",
            "style": "代码风格",
            "build": "构建系统",
            "test": "测试",
            "security": "安全",
            "observability": "可观测性",
            "env": "开发环境",
            "task_discovery": "任务发现",
            "product": "产品",
        },
        "levels": {
            "none": "未达标",
            "L1": "基础级",
            "L2": "文档级",
            "L3": "标准级",
            "L4": "优化级",
            "L5": "自治级",
        },
        "report": {
            "title": "扫描报告",
            "summary": "执行摘要",
            "details": "详细分析",
            "roadmap": "改进路线图",
            "quick_wins": "快速改进",
            "short_term": "短期目标",
            "medium_term": "中期目标",
            "long_term": "长期目标",
            "strengths": "优势",
            "weaknesses": "待改进",
            "tech_debt": "技术债务",
            "insights": "跨维度洞察",
            "level_progress": "等级进度",
            "next_steps": "下一步",
        },
    },
    "en": {
        "title": "Agent Ready - AI Agent Readiness Scanner",
        "pillars": {
            "docs": "Documentation",
            "style": "Style & Validation",
            "build": "Build System",
            "test": "Testing",
            "security": "Security",
            "observability": "Observability",
            "env": "Environment",
            "task_discovery": "Task Discovery",
            "product": "Product",
        },
        "levels": {
            "none": "Not Achieved",
            "L1": "Functional",
            "L2": "Documented",
            "L3": "Standardized",
            "L4": "Optimized",
            "L5": "Autonomous",
        },
        "report": {
            "title": "Scan Report",
            "summary": "Executive Summary",
            "details": "Detailed Analysis",
            "roadmap": "Improvement Roadmap",
            "quick_wins": "Quick Wins",
            "short_term": "Short Term",
            "medium_term": "Medium Term",
            "long_term": "Long Term",
            "strengths": "Strengths",
            "weaknesses": "Areas for Improvement",
            "tech_debt": "Tech Debt",
            "insights": "Cross-Pillar Insights",
            "level_progress": "Level Progress",
            "next_steps": "Next Steps",
        },
    },
}


def t(key: str, lang: str = "en") -> str:
    """Dotted lookup, e.g. t("levels.L2", "zh"). Unknown keys come back unchanged."""
    value: Any = MESSAGES.get(lang, MESSAGES["en"])
    for part in key.split("."):
        if not isinstance(value, dict) or part not in value:
            return key
        value = value[part]
    return value if isinstance(value, str) else key


def pillar_name(pillar: str, lang: str = "en") -> str:
    return t(f"pillars.{pillar}", lang)


def level_name(level: str | None, lang: str = "en") -> str:
    return t(f"levels.{level or 'none'}", lang)
