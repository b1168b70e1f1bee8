from __future__ import annotations

import re
from functools import lru_cache
from typing import List, Pattern

from agent_ready.app.errors import CheckDefinitionError


def _expand_braces(pattern: str) -> List[str]:
    """`src/{a,b}/*.py` -> [`src/a/*.py`, `src/b/*.py`]. Nested braces are expanded recursively."""
    start = pattern.find("{")
    if start == -1:
        if "}" in pattern:
            raise CheckDefinitionError(f"Unbalanced '}}' in glob: {pattern!r}")
        return [pattern]

    depth = 0
    for i in range(start, len(pattern)):
        ch = pattern[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                end = i
                break
    else:
        raise CheckDefinitionError(f"Unbalanced '{{' in glob: {pattern!r}")

    # split the brace body on top-level commas
    body = pattern[start + 1 : end]
    options: List[str] = []
    depth = 0
    cur = ""
    for ch in body:
        if ch == "," and depth == 0:
            options.append(cur)
            cur = ""
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        cur += ch
    options.append(cur)

    head, tail = pattern[:start], pattern[end + 1 :]
    out: List[str] = []
    for opt in options:
        out.extend(_expand_braces(head + opt + tail))
    return out


def _translate(pattern: str) -> str:
    i, n = 0, len(pattern)
    res = ""
    while i < n:
        ch = pattern[i]
        if ch == "*":
            if pattern[i : i + 3] == "**/":
                res += "(?:.*/)?"
                i += 3
                continue
            if pattern[i : i + 2] == "**":
                res += ".*"
                i += 2
                continue
            res += "[^/]*"
        elif ch == "?":
            res += "[^/]"
        elif ch == "[":
            j = pattern.find("]", i + 1)
            if j == -1:
                raise CheckDefinitionError(f"Unbalanced '[' in glob: {pattern!r}")
            body = pattern[i + 1 : j]
            if body.startswith("!"):
                body = "^" + body[1:]
            if not body:
                raise CheckDefinitionError(f"Empty character class in glob: {pattern!r}")
            res += "[" + body.replace("\\", "\\\\") + "]"
            i = j
        else:
            res += re.escape(ch)
        i += 1
    return res


@lru_cache(maxsize=512)
def compile_glob(pattern: str) -> Pattern[str]:
    """
    Compile a repository glob into a regex over POSIX relative paths.

    Supports `**` (any depth, including zero directories), `*` and `?` (single
    path segment), `[...]` classes and `{a,b}` alternation. Raises
    CheckDefinitionError for malformed patterns.
    """
    if not pattern or not pattern.strip():
        raise CheckDefinitionError("Empty glob pattern")
    pat = pattern.strip()
    if pat.startswith("./"):
        pat = pat[2:]
    alternatives = [_translate(p.lstrip("/")) for p in _expand_braces(pat)]
    try:
        return re.compile("^(?:" + "|".join(alternatives) + ")$")
    except re.error as e:
        raise CheckDefinitionError(f"Invalid glob {pattern!r}: {e}") from e
