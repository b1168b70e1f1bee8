from __future__ import annotations

"""
Entry points: callable runners and the `agent-ready` CLI.
"""
