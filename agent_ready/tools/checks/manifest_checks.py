from __future__ import annotations

from typing import Any, Dict, List

from agent_ready.context.snapshot import RepoSnapshot
from agent_ready.schemas.check_schema import BuildCommandDetectCheck, CheckResult, DependencyDetectCheck
from agent_ready.tools.checks.base import make_result

MANIFEST = "package.json"

DEPENDENCY_TABLES = ("dependencies", "devDependencies", "peerDependencies", "optionalDependencies")


def _table(manifest: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = manifest.get(key)
    return value if isinstance(value, dict) else {}


def check_build_command(check: BuildCommandDetectCheck, snapshot: RepoSnapshot) -> CheckResult:
    manifest = snapshot.package_json
    if manifest is None:
        return make_result(check, False, "No package manifest found")

    scripts = _table(manifest, "scripts")
    found: List[str] = [c for c in check.commands if c in scripts]
    if not found:
        return make_result(
            check,
            False,
            f"None of {', '.join(check.commands)} defined in {MANIFEST} scripts",
        )
    return make_result(
        check,
        True,
        f"Script(s) found: {', '.join(found)}",
        matched_files=[MANIFEST],
        details={"commands": found},
    )


def check_dependency(check: DependencyDetectCheck, snapshot: RepoSnapshot) -> CheckResult:
    manifest = snapshot.package_json
    if manifest is None:
        return make_result(check, False, "No package manifest found")

    declared = set()
    for key in DEPENDENCY_TABLES:
        declared.update(_table(manifest, key).keys())

    found = [p for p in check.packages if p in declared]
    if not found:
        return make_result(check, False, f"None of {', '.join(check.packages)} declared in {MANIFEST}")
    return make_result(
        check,
        True,
        f"Dependency found: {', '.join(found)}",
        matched_files=[MANIFEST],
        details={"packages": found},
    )
