from __future__ import annotations

import re

from agent_ready.context.snapshot import RepoSnapshot
from agent_ready.schemas.check_schema import CheckResult, FileExistsCheck, PathGlobCheck
from agent_ready.tools.checks.base import make_result


def check_file_exists(check: FileExistsCheck, snapshot: RepoSnapshot) -> CheckResult:
    # compile before the existence test so a bad regex fails the same way whether or not the file exists
    rx = None
    if check.content_regex:
        flags = re.MULTILINE if check.case_sensitive else re.MULTILINE | re.IGNORECASE
        rx = re.compile(check.content_regex, flags)

    if not snapshot.exists(check.path):
        return make_result(check, False, f"File not found: {check.path}")

    path = snapshot.normalize(check.path)
    if rx is None:
        return make_result(check, True, f"Found {path}", matched_files=[path])

    content = snapshot.read_text(path)
    if content is None:
        return make_result(check, False, f"File unreadable: {path}")
    if not rx.search(content):
        return make_result(
            check,
            False,
            f"{path} does not match /{check.content_regex}/",
            details={"content_regex": check.content_regex},
        )
    return make_result(check, True, f"{path} matches /{check.content_regex}/", matched_files=[path])


def check_path_glob(check: PathGlobCheck, snapshot: RepoSnapshot) -> CheckResult:
    matches = snapshot.glob(check.pattern)
    count = len(matches)
    details = {"pattern": check.pattern, "match_count": count, "min_matches": check.min_matches}

    if count < check.min_matches:
        return make_result(
            check,
            False,
            f"Found {count} match(es) for {check.pattern}, need at least {check.min_matches}",
            matched_files=matches or None,
            details=details,
        )
    if check.max_matches is not None and count > check.max_matches:
        details["max_matches"] = check.max_matches
        return make_result(
            check,
            False,
            f"Found {count} match(es) for {check.pattern}, allowed at most {check.max_matches}",
            matched_files=matches,
            details=details,
        )
    return make_result(check, True, f"Found {count} match(es) for {check.pattern}", matched_files=matches, details=details)
