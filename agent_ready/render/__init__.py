from __future__ import annotations

"""
Report presentation helpers.
"""

from agent_ready.render.markdown import render_markdown

__all__ = [
    "render_markdown",
]
