from __future__ import annotations

from typing import Any, Dict, List, Optional

from agent_ready.schemas.check_schema import BaseCheck, CheckResult


def make_result(
    check: BaseCheck,
    passed: bool,
    message: str = "",
    *,
    matched_files: Optional[List[str]] = None,
    details: Optional[Dict[str, Any]] = None,
) -> CheckResult:
    """Build the fact for `check`, carrying its identity, remediation suggestions and template."""
    merged: Dict[str, Any] = dict(details or {})
    if check.template:
        merged.setdefault("template", check.template)
    return CheckResult(
        check_id=check.id,
        check_name=check.name,
        pillar=check.pillar,
        level=check.level,
        required=check.required,
        passed=passed,
        message=message,
        matched_files=matched_files,
        details=merged or None,
        suggestions=list(check.suggestions) or None,
    )


def error_result(check: BaseCheck, error: str) -> CheckResult:
    """Failed fact for a check that could not be evaluated."""
    return make_result(check, False, f"Check could not be evaluated: {error}", details={"error": error})
