from __future__ import annotations

"""
Bilingual (en/zh) display strings for pillars, levels and report sections.
"""

from agent_ready.i18n.messages import MESSAGES, Language, level_name, pillar_name, t

__all__ = [
    "MESSAGES",
    "Language",
    "level_name",
    "pillar_name",
    "t",
]
