from __future__ import annotations

"""
Repository snapshot layer:
- globs: repository glob -> regex translation
- snapshot: read-only, memoized view of a checkout
- builder: walks a checkout once and produces the snapshot
"""

from agent_ready.context import builder, globs, snapshot

__all__ = [
    "builder",
    "globs",
    "snapshot",
]
