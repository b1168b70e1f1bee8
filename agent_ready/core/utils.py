from __future__ import annotations
import math
from typing import Iterable, List, TypeVar

T = TypeVar("T")


def dedupe(items: Iterable[T]) -> List[T]:
    """Drop repeats, keeping first-seen order."""
    seen = set()
    out: List[T] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def round_half_up(value: float) -> int:
    """Nearest integer with .5 going up (12.5 -> 13), unlike round()'s banker's rounding."""
    return int(math.floor(value + 0.5))
