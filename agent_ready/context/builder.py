from __future__ import annotations

import json
import logging
import os
import re
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from agent_ready.app.errors import ScanContextError
from agent_ready.context.snapshot import MonorepoApp, RepoSnapshot

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    ".venv",
    "venv",
    ".tox",
    ".pytest_cache",
    "__pycache__",
    ".mypy_cache",
    ".ruff_cache",
    ".next",
    ".turbo",
    "target",
    ".idea",
}

MAX_FILES = 100_000

# manifest file -> app kind, in precedence order
APP_MANIFESTS: List[Tuple[str, str]] = [
    ("package.json", "node"),
    ("pyproject.toml", "python"),
    ("setup.py", "python"),
    ("go.mod", "go"),
    ("Cargo.toml", "rust"),
]

APP_CONTAINER_DIRS = ("packages", "apps", "services", "libs")


def _run_git(repo_root: Path, args: List[str]) -> Tuple[int, str]:
    try:
        p = subprocess.run(
            ["git", "-C", str(repo_root), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
            timeout=15,
        )
        return p.returncode, (p.stdout or "").strip()
    except (OSError, subprocess.SubprocessError) as e:
        return 1, str(e)


def _list_files(root: Path, exclude_dirs: set) -> List[str]:
    out: List[str] = []
    for cur, dirs, files in os.walk(root):
        dirs[:] = sorted(d for d in dirs if d not in exclude_dirs)
        rel_dir = os.path.relpath(cur, root).replace(os.sep, "/")
        for name in files:
            rel = name if rel_dir == "." else f"{rel_dir}/{name}"
            out.append(rel)
            if len(out) >= MAX_FILES:
                logger.warning("file listing truncated", extra={"root": str(root), "max_files": MAX_FILES})
                return out
    return out


def _load_package_json(root: Path) -> Optional[Dict[str, Any]]:
    p = root / "package.json"
    if not p.is_file():
        return None
    try:
        data = json.loads(p.read_text(encoding="utf-8", errors="replace"))
    except (OSError, ValueError) as e:
        logger.warning("package.json unreadable", extra={"error": str(e)})
        return None
    return data if isinstance(data, dict) else None


def detect_repo_name(repo_root: Path) -> str:
    # Prefer remote origin repo name, fallback to folder name.
    rc, out = _run_git(repo_root, ["remote", "get-url", "origin"])
    if rc == 0 and out:
        m = re.search(r"[:/](?P<org>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?$", out.strip())
        if m:
            return m.group("repo")
    return repo_root.name


def detect_commit_sha(repo_root: Path) -> str:
    rc, out = _run_git(repo_root, ["rev-parse", "HEAD"])
    if rc == 0 and re.fullmatch(r"[0-9a-f]{7,64}", out):
        return out
    return "unknown"


def discover_apps(files: set, package_json: Optional[Dict[str, Any]]) -> Tuple[bool, List[MonorepoApp]]:
    """Sub-applications one level under the usual container dirs (packages/*, apps/*, ...)."""
    candidates = set()
    for rel in files:
        parts = rel.split("/")
        if len(parts) == 3 and parts[0] in APP_CONTAINER_DIRS:
            candidates.add(f"{parts[0]}/{parts[1]}")

    apps: List[MonorepoApp] = []
    for app_path in sorted(candidates):
        for manifest, kind in APP_MANIFESTS:
            if f"{app_path}/{manifest}" in files:
                apps.append(MonorepoApp(path=app_path, name=app_path.split("/")[1], kind=kind))
                break

    declared = bool(package_json and package_json.get("workspaces"))
    marker = any(m in files for m in ("pnpm-workspace.yaml", "lerna.json", "nx.json", "turbo.json"))
    return (declared or marker or len(apps) > 1), apps


def build_snapshot(path: str | os.PathLike, exclude_dirs: Optional[set] = None) -> RepoSnapshot:
    """
    Materialize a RepoSnapshot for a local checkout.
    Raises ScanContextError if `path` is not a readable directory.
    """
    root = Path(path).expanduser().resolve()
    if not root.is_dir():
        raise ScanContextError(f"Repository path is not a directory: {root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise ScanContextError(f"Repository path is not readable: {root}")

    try:
        files = set(_list_files(root, exclude_dirs or DEFAULT_EXCLUDE_DIRS))
    except OSError as e:
        raise ScanContextError(f"Failed to list repository files: {e}") from e

    package_json = _load_package_json(root)
    is_monorepo, apps = discover_apps(files, package_json)

    snapshot = RepoSnapshot(
        root_path=root,
        repo_name=detect_repo_name(root),
        commit_sha=detect_commit_sha(root),
        files=frozenset(files),
        package_json=package_json,
        is_monorepo=is_monorepo,
        monorepo_apps=tuple(apps),
    )
    logger.info(
        "snapshot built",
        extra={"repo": snapshot.repo_name, "files": len(files), "monorepo": is_monorepo},
    )
    return snapshot
