from __future__ import annotations

"""
Pydantic models for check definitions, facts and reports.
"""
