from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from agent_ready.context.globs import compile_glob

MAX_READ_BYTES = 512_000

WORKFLOW_DIR = ".github/workflows"


@dataclass(frozen=True)
class MonorepoApp:
    path: str  # relative, POSIX
    name: str
    kind: str  # "node" | "python" | "go" | "rust" | "unknown"


@dataclass(frozen=True)
class RepoSnapshot:
    """
    Read-only view of a repository handed to the predicate engine.

    The file list is materialized once by the builder. Glob matches and file
    contents are memoized here behind a lock so concurrent checks share one
    cache; check code only reads through these accessors.
    """

    root_path: Path
    repo_name: str
    commit_sha: str
    files: FrozenSet[str]
    package_json: Optional[Dict[str, Any]] = None
    is_monorepo: bool = False
    monorepo_apps: Tuple[MonorepoApp, ...] = ()
    dirs: FrozenSet[str] = frozenset()

    _glob_cache: Dict[str, Tuple[str, ...]] = field(default_factory=dict, init=False, repr=False, compare=False)
    _text_cache: Dict[str, Optional[str]] = field(default_factory=dict, init=False, repr=False, compare=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.dirs:
            derived = set()
            for f in self.files:
                parts = f.split("/")[:-1]
                for i in range(1, len(parts) + 1):
                    derived.add("/".join(parts[:i]))
            object.__setattr__(self, "dirs", frozenset(derived))

    @staticmethod
    def normalize(path: str) -> str:
        p = path.strip().replace("\\", "/")
        while p.startswith("./"):
            p = p[2:]
        return p.strip("/")

    def exists(self, path: str) -> bool:
        rel = self.normalize(path)
        return rel in self.files or rel in self.dirs

    def glob(self, pattern: str) -> List[str]:
        """Sorted relative paths matching `pattern`. Raises CheckDefinitionError for a bad pattern."""
        with self._lock:
            hit = self._glob_cache.get(pattern)
        if hit is not None:
            return list(hit)

        rx = compile_glob(pattern)
        matches = tuple(sorted(f for f in self.files if rx.match(f)))
        with self._lock:
            self._glob_cache.setdefault(pattern, matches)
        return list(matches)

    def read_text(self, path: str) -> Optional[str]:
        """File content (first MAX_READ_BYTES, utf-8 with replacement) or None if absent/unreadable."""
        rel = self.normalize(path)
        if rel not in self.files:
            return None
        with self._lock:
            if rel in self._text_cache:
                return self._text_cache[rel]

        text: Optional[str]
        try:
            with open(self.root_path / rel, "rb") as fh:
                data = fh.read(MAX_READ_BYTES)
            text = data.decode("utf-8", errors="replace")
        except OSError:
            text = None

        with self._lock:
            self._text_cache.setdefault(rel, text)
        return text

    def workflow_files(self) -> List[str]:
        return self.glob(f"{WORKFLOW_DIR}/*.{{yml,yaml}}")
