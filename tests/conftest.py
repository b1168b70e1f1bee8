"""Pytest configuration and fixtures."""

import json
from pathlib import Path
from typing import Dict, Optional

import pytest

from agent_ready.agents.pillar_agent import PILLAR_META
from agent_ready.agents.state import PillarAgentResult
from agent_ready.context.builder import build_snapshot
from agent_ready.graph import profiles
from agent_ready.schemas.check_schema import CheckResult


CI_WORKFLOW = """\
name: CI
on:
  push:
    branches: [main]
  pull_request:
jobs:
  test:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
      - uses: actions/setup-node@v4
        with:
          node-version: 20
      - run: npm ci
      - run: npm test
"""

PACKAGE_JSON = {
    "name": "demo-app",
    "version": "1.0.0",
    "scripts": {"build": "tsc -p .", "test": "vitest run", "lint": "eslint ."},
    "dependencies": {"pino": "^9.0.0"},
    "devDependencies": {"typescript": "^5.4.0", "vitest": "^1.6.0", "eslint": "^9.0.0"},
}


@pytest.fixture(autouse=True)
def reset_profile_registry():
    """Profiles registered by one test must not leak into the next."""
    profiles.clear_registry()
    yield
    profiles.clear_registry()


@pytest.fixture
def make_repo(tmp_path):
    """Write a {relative_path: content} mapping under tmp_path and return the root."""

    def _make(files: Dict[str, str], name: str = "repo") -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        for rel, content in files.items():
            p = root / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(content, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def snapshot_of(make_repo):
    """Build a RepoSnapshot straight from a files mapping."""

    def _snap(files: Dict[str, str]):
        return build_snapshot(make_repo(files))

    return _snap


@pytest.fixture
def node_repo_files() -> Dict[str, str]:
    """A reasonably well-kept TypeScript service."""
    return {
        "README.md": "# Demo\n\n## Getting Started\n\nRun `npm install`.\n",
        "CONTRIBUTING.md": "# Contributing\n",
        "AGENTS.md": "# Agents\n",
        ".gitignore": "node_modules\n.env\n",
        ".editorconfig": "root = true\n",
        ".env.example": "PORT=3000\n",
        ".nvmrc": "20\n",
        "package.json": json.dumps(PACKAGE_JSON, indent=2),
        "package-lock.json": "{}",
        "tsconfig.json": "{}",
        "eslint.config.js": "export default [];\n",
        ".prettierrc": "{}\n",
        "src/index.ts": "export const x = 1;\n",
        "src/index.test.ts": "import { x } from './index';\n",
        ".github/workflows/ci.yml": CI_WORKFLOW,
        "node_modules/left-pad/index.js": "module.exports = 1;\n",
    }


@pytest.fixture
def bare_repo_files() -> Dict[str, str]:
    return {"main.py": "print('hi')\n"}


@pytest.fixture
def make_fact():
    def _fact(
        level: str = "L1",
        passed: bool = True,
        required: bool = False,
        pillar: str = "docs",
        check_id: Optional[str] = None,
        suggestions=None,
        details=None,
    ) -> CheckResult:
        cid = check_id or f"{pillar}.{level.lower()}.{'ok' if passed else 'fail'}"
        return CheckResult(
            check_id=cid,
            check_name=cid,
            pillar=pillar,
            level=level,
            required=required,
            passed=passed,
            message="",
            suggestions=suggestions,
            details=details,
        )

    return _fact


@pytest.fixture
def make_pillar_result():
    def _result(pillar: str, score: int, level: Optional[str] = None, checks=None) -> PillarAgentResult:
        checks = list(checks or [])
        meta = PILLAR_META[pillar]
        return PillarAgentResult(
            pillar=pillar,
            name=meta.name,
            name_zh=meta.name_zh,
            icon=meta.icon,
            level_achieved=level,
            score=score,
            checks_passed=sum(1 for c in checks if c.passed),
            checks_total=len(checks),
            checks=checks,
        )

    return _result
