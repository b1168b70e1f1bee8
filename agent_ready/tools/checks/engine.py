from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List

from agent_ready.app.errors import CheckDefinitionError
from agent_ready.context.snapshot import RepoSnapshot
from agent_ready.core.utils import dedupe
from agent_ready.schemas.check_schema import AnyOfCheck, BaseCheck, CheckResult, UnsupportedCheck
from agent_ready.tools.checks.base import error_result, make_result
from agent_ready.tools.checks.file_checks import check_file_exists, check_path_glob
from agent_ready.tools.checks.manifest_checks import check_build_command, check_dependency
from agent_ready.tools.checks.workflow_checks import check_action_present, check_workflow_event

logger = logging.getLogger(__name__)

CheckHandler = Callable[[BaseCheck, RepoSnapshot], CheckResult]


def check_any_of(check: AnyOfCheck, snapshot: RepoSnapshot) -> CheckResult:
    """
    Evaluate every nested check against the same snapshot.
    Passes when at least `min_pass` nested checks pass; matched files are the
    union of the passing ones, in nested-definition order.
    """
    nested: List[CheckResult] = [execute_check(c, snapshot) for c in check.checks]
    passing = [r for r in nested if r.passed]
    matched = dedupe(f for r in passing for f in (r.matched_files or []))

    details = {
        "nested": [
            {"check_id": r.check_id, "passed": r.passed, "message": r.message}
            for r in nested
        ],
    }
    if len(passing) >= check.min_pass:
        names = ", ".join(r.check_name for r in passing)
        return make_result(check, True, f"Satisfied by: {names}", matched_files=matched or None, details=details)
    return make_result(
        check,
        False,
        f"{len(passing)}/{len(nested)} alternatives passed, need {check.min_pass}",
        matched_files=matched or None,
        details=details,
    )


def check_unsupported(check: UnsupportedCheck, snapshot: RepoSnapshot) -> CheckResult:
    raise CheckDefinitionError(f"Unsupported check type: {check.declared_type}")


_HANDLERS: Dict[str, CheckHandler] = {
    "file_exists": check_file_exists,
    "path_glob": check_path_glob,
    "any_of": check_any_of,
    "github_workflow_event": check_workflow_event,
    "github_action_present": check_action_present,
    "build_command_detect": check_build_command,
    "dependency_detect": check_dependency,
    "unsupported": check_unsupported,
}


def execute_check(check: BaseCheck, snapshot: RepoSnapshot) -> CheckResult:
    """
    Evaluate one check definition against a read-only snapshot.

    Expected negatives come back as `passed=False`. A malformed definition
    (bad glob, bad regex, unknown type) or any other fault inside a predicate
    is returned as a failed fact with the diagnostic in `details.error`.
    """
    kind = getattr(check, "type", None)
    handler = _HANDLERS.get(kind)
    try:
        if handler is None:
            raise CheckDefinitionError(f"Unsupported check type: {kind}")
        return handler(check, snapshot)
    except (CheckDefinitionError, re.error, ValueError) as e:
        logger.warning("check definition error", extra={"check_id": check.id, "error": str(e)})
        return error_result(check, str(e))
    except Exception as e:
        logger.warning("check raised", extra={"check_id": check.id, "error": str(e)}, exc_info=True)
        return error_result(check, f"{e.__class__.__name__}: {e}")
