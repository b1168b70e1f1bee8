from __future__ import annotations

"""
Scan agents:
- pillar agent (one per pillar, level gating)
- evaluator (cross-pillar verdict)
- reporter (final report assembly)
- LangGraph node wrappers and pipeline state
"""
