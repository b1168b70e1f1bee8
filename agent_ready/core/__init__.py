from __future__ import annotations

"""
This module provides core functionality for the application.

It includes utilities for clock operations, ID generation, and general utilities.
"""

from agent_ready.core import clock, ids, utils

__all__ = [
    "clock",
    "ids",
    "utils"
]
