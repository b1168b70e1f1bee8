from __future__ import annotations

import logging
import re
from typing import Any, Iterator, List, Optional

import yaml

from agent_ready.context.snapshot import RepoSnapshot
from agent_ready.schemas.check_schema import CheckResult, GitHubActionPresentCheck, GitHubWorkflowEventCheck
from agent_ready.tools.checks.base import make_result

logger = logging.getLogger(__name__)


def _load_workflow(snapshot: RepoSnapshot, path: str) -> Optional[Any]:
    text = snapshot.read_text(path)
    if text is None:
        return None
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        logger.debug("workflow is not valid YAML", extra={"path": path, "error": str(e)})
        return None


def workflow_events(doc: Any) -> List[str]:
    """
    Trigger names declared under `on:`.
    YAML 1.1 reads a bare `on` key as boolean True, so both spellings are accepted.
    """
    if not isinstance(doc, dict):
        return []
    triggers = doc.get("on", doc.get(True))
    if isinstance(triggers, str):
        return [triggers]
    if isinstance(triggers, list):
        return [str(t) for t in triggers]
    if isinstance(triggers, dict):
        return [str(k) for k in triggers.keys()]
    return []


def workflow_uses(doc: Any) -> Iterator[str]:
    """Every `uses:` reference in a workflow: step actions and reusable-workflow jobs."""
    if not isinstance(doc, dict):
        return
    jobs = doc.get("jobs") or {}
    if not isinstance(jobs, dict):
        return
    for job in jobs.values():
        if not isinstance(job, dict):
            continue
        if isinstance(job.get("uses"), str):
            yield job["uses"].strip()
        steps = job.get("steps")
        if not isinstance(steps, list):
            continue
        for step in steps:
            if isinstance(step, dict) and isinstance(step.get("uses"), str):
                yield step["uses"].strip()


def action_matches(reference: str, action: str) -> bool:
    """
    `actions/checkout@v4` matches only that pin; `actions/checkout` matches any pin.
    Comparison ignores case (GitHub owner/repo names are case-insensitive).
    """
    ref = reference.lower()
    want = action.strip().lower()
    if "@" in want:
        return ref == want
    return ref.split("@", 1)[0] == want


def check_workflow_event(check: GitHubWorkflowEventCheck, snapshot: RepoSnapshot) -> CheckResult:
    workflows = snapshot.workflow_files()
    if not workflows:
        return make_result(check, False, "No GitHub workflows found")

    # crude word match for workflows that do not parse as YAML
    fallback = re.compile(rf"(?<![\w-]){re.escape(check.event)}(?![\w-])")
    hits: List[str] = []
    for wf in workflows:
        doc = _load_workflow(snapshot, wf)
        if doc is not None:
            if check.event in workflow_events(doc):
                hits.append(wf)
        else:
            text = snapshot.read_text(wf) or ""
            if fallback.search(text):
                hits.append(wf)

    if not hits:
        return make_result(
            check,
            False,
            f"No workflow triggers on '{check.event}'",
            details={"workflows_scanned": len(workflows)},
        )
    return make_result(check, True, f"'{check.event}' trigger found in {len(hits)} workflow(s)", matched_files=hits)


def check_action_present(check: GitHubActionPresentCheck, snapshot: RepoSnapshot) -> CheckResult:
    workflows = snapshot.workflow_files()
    if not workflows:
        return make_result(check, False, "No GitHub workflows found")

    hits: List[str] = []
    for wf in workflows:
        doc = _load_workflow(snapshot, wf)
        if doc is not None:
            if any(action_matches(ref, check.action) for ref in workflow_uses(doc)):
                hits.append(wf)
        else:
            text = (snapshot.read_text(wf) or "").lower()
            if f"uses: {check.action.lower()}" in text:
                hits.append(wf)

    if not hits:
        return make_result(
            check,
            False,
            f"Action '{check.action}' not used by any workflow",
            details={"workflows_scanned": len(workflows)},
        )
    return make_result(check, True, f"'{check.action}' used in {len(hits)} workflow(s)", matched_files=hits)
