"""Tests for the predicate engine: one class per check kind."""

import json

import pytest

from agent_ready.schemas.check_schema import CHECK_TYPES, AnyOfCheck, UnsupportedCheck, parse_check
from agent_ready.tools.checks.engine import _HANDLERS, execute_check
from agent_ready.tools.checks.workflow_checks import action_matches, workflow_events


def _check(**raw):
    raw.setdefault("id", "t.check")
    raw.setdefault("name", "Test check")
    raw.setdefault("pillar", "docs")
    raw.setdefault("level", "L1")
    return parse_check(raw)


class TestFileExists:
    def test_present(self, snapshot_of):
        snap = snapshot_of({"README.md": "# Hi"})
        r = execute_check(_check(type="file_exists", path="README.md"), snap)
        assert r.passed
        assert r.matched_files == ["README.md"]

    def test_absent(self, snapshot_of):
        snap = snapshot_of({"README.md": "# Hi"})
        r = execute_check(_check(type="file_exists", path="NOPE.md"), snap)
        assert not r.passed
        assert "not found" in r.message

    def test_content_regex_match(self, snapshot_of):
        snap = snapshot_of({"README.md": "# Demo\n\n## Installation\n"})
        r = execute_check(_check(type="file_exists", path="README.md", content_regex=r"^## Installation"), snap)
        assert r.passed

    def test_content_regex_miss(self, snapshot_of):
        snap = snapshot_of({"README.md": "# Demo\n"})
        r = execute_check(_check(type="file_exists", path="README.md", content_regex="Installation"), snap)
        assert not r.passed
        assert r.details["content_regex"] == "Installation"

    def test_case_insensitive(self, snapshot_of):
        snap = snapshot_of({"README.md": "## getting started\n"})
        strict = execute_check(_check(type="file_exists", path="README.md", content_regex="Getting Started"), snap)
        loose = execute_check(
            _check(type="file_exists", path="README.md", content_regex="Getting Started", case_sensitive=False), snap
        )
        assert not strict.passed
        assert loose.passed

    def test_invalid_regex_is_a_failed_fact(self, snapshot_of):
        snap = snapshot_of({"README.md": "x"})
        r = execute_check(_check(type="file_exists", path="README.md", content_regex="(unclosed"), snap)
        assert not r.passed
        assert "error" in r.details

    def test_directory_counts_as_existing(self, snapshot_of):
        snap = snapshot_of({".devcontainer/devcontainer.json": "{}"})
        assert execute_check(_check(type="file_exists", path=".devcontainer"), snap).passed


class TestPathGlob:
    def test_min_matches(self, snapshot_of):
        snap = snapshot_of({"a.test.ts": "", "src/b.test.ts": ""})
        assert execute_check(_check(type="path_glob", pattern="**/*.test.ts", min_matches=2), snap).passed
        assert not execute_check(_check(type="path_glob", pattern="**/*.test.ts", min_matches=3), snap).passed

    def test_matched_files_sorted(self, snapshot_of):
        snap = snapshot_of({"src/b.test.ts": "", "a.test.ts": ""})
        r = execute_check(_check(type="path_glob", pattern="**/*.test.ts"), snap)
        assert r.matched_files == ["a.test.ts", "src/b.test.ts"]

    def test_max_matches_zero_forbids(self, snapshot_of):
        check = _check(type="path_glob", pattern="{.env,**/.env}", min_matches=0, max_matches=0)
        assert execute_check(check, snapshot_of({".env.example": ""})).passed
        leaked = execute_check(check, snapshot_of({"api/.env": "SECRET=1"}))
        assert not leaked.passed
        assert leaked.matched_files == ["api/.env"]

    def test_invalid_glob_is_a_failed_fact(self, snapshot_of):
        snap = snapshot_of({"README.md": ""})
        r = execute_check(_check(type="path_glob", pattern="docs/[abc"), snap)
        assert not r.passed
        assert "Unbalanced" in r.details["error"]


class TestAnyOf:
    def _any_of(self, *nested, **kw):
        return _check(type="any_of", checks=list(nested), **kw)

    def test_passes_if_one_nested_passes(self, snapshot_of):
        snap = snapshot_of({".prettierrc": "{}"})
        check = self._any_of(
            {"type": "path_glob", "pattern": ".eslintrc*"},
            {"type": "path_glob", "pattern": ".prettierrc*"},
        )
        r = execute_check(check, snap)
        assert r.passed
        assert r.matched_files == [".prettierrc"]

    def test_fails_if_none_pass(self, snapshot_of):
        snap = snapshot_of({"README.md": ""})
        check = self._any_of(
            {"type": "path_glob", "pattern": ".eslintrc*"},
            {"type": "path_glob", "pattern": ".prettierrc*"},
        )
        r = execute_check(check, snap)
        assert not r.passed
        assert [n["passed"] for n in r.details["nested"]] == [False, False]

    @pytest.mark.parametrize("a,b", [(True, True), (True, False), (False, True), (False, False)])
    def test_is_logical_or(self, snapshot_of, a, b):
        files = {"keep.txt": ""}
        if a:
            files["A.md"] = ""
        if b:
            files["B.md"] = ""
        snap = snapshot_of(files)
        check = self._any_of({"type": "file_exists", "path": "A.md"}, {"type": "file_exists", "path": "B.md"})
        assert execute_check(check, snap).passed == (a or b)

    def test_union_of_matched_files_is_deduped(self, snapshot_of):
        snap = snapshot_of({"a.md": "", "b.md": ""})
        check = self._any_of(
            {"type": "path_glob", "pattern": "*.md"},
            {"type": "file_exists", "path": "a.md"},
        )
        assert execute_check(check, snap).matched_files == ["a.md", "b.md"]

    def test_min_pass(self, snapshot_of):
        snap = snapshot_of({"A.md": ""})
        check = self._any_of(
            {"type": "file_exists", "path": "A.md"},
            {"type": "file_exists", "path": "B.md"},
            min_pass=2,
        )
        assert not execute_check(check, snap).passed

    def test_nested_inherit_parent_fields(self):
        check = self._any_of({"type": "file_exists", "path": "A.md"}, pillar="style", level="L3", id="style.x")
        assert isinstance(check, AnyOfCheck)
        child = check.checks[0]
        assert (child.pillar, child.level, child.id) == ("style", "L3", "style.x.0")

    def test_bad_nested_check_does_not_abort(self, snapshot_of):
        snap = snapshot_of({"A.md": ""})
        check = self._any_of({"type": "path_glob", "pattern": "[oops"}, {"type": "file_exists", "path": "A.md"})
        assert execute_check(check, snap).passed


class TestWorkflowEvent:
    def test_push_and_pull_request(self, snapshot_of, node_repo_files):
        snap = snapshot_of(node_repo_files)
        assert execute_check(_check(type="github_workflow_event", event="push"), snap).passed
        assert execute_check(_check(type="github_workflow_event", event="pull_request"), snap).passed

    def test_missing_event(self, snapshot_of, node_repo_files):
        snap = snapshot_of(node_repo_files)
        assert not execute_check(_check(type="github_workflow_event", event="schedule"), snap).passed

    def test_no_workflows(self, snapshot_of):
        r = execute_check(_check(type="github_workflow_event", event="push"), snapshot_of({"README.md": ""}))
        assert not r.passed
        assert "No GitHub workflows" in r.message

    def test_list_and_scalar_triggers(self, snapshot_of):
        snap = snapshot_of({
            ".github/workflows/a.yml": "on: [push, workflow_dispatch]\njobs: {}\n",
            ".github/workflows/b.yaml": "on: schedule\njobs: {}\n",
        })
        r = execute_check(_check(type="github_workflow_event", event="schedule"), snap)
        assert r.passed
        assert r.matched_files == [".github/workflows/b.yaml"]

    def test_bare_on_key_parsed_as_true(self):
        assert workflow_events({True: {"push": None}}) == ["push"]

    def test_invalid_yaml_uses_text_fallback(self, snapshot_of):
        snap = snapshot_of({".github/workflows/ci.yml": "on:\n  push:\n   bad: [unclosed\n"})
        assert execute_check(_check(type="github_workflow_event", event="push"), snap).passed


class TestActionPresent:
    def test_any_pin(self, snapshot_of, node_repo_files):
        snap = snapshot_of(node_repo_files)
        assert execute_check(_check(type="github_action_present", action="actions/checkout"), snap).passed

    def test_missing(self, snapshot_of, node_repo_files):
        snap = snapshot_of(node_repo_files)
        assert not execute_check(_check(type="github_action_present", action="codecov/codecov-action"), snap).passed

    def test_action_matches(self):
        assert action_matches("actions/checkout@v4", "actions/checkout")
        assert action_matches("Actions/Checkout@v4", "actions/checkout@v4")
        assert not action_matches("actions/checkout@v3", "actions/checkout@v4")
        assert not action_matches("actions/checkout-extra@v1", "actions/checkout")

    def test_non_list_steps_are_skipped(self, snapshot_of):
        snap = snapshot_of({".github/workflows/ci.yml": "on: push\njobs:\n  a:\n    steps: 5\n  b:\n    uses: org/shared/.github/workflows/ci.yml@main\n"})
        r = execute_check(_check(type="github_action_present", action="actions/checkout"), snap)
        assert not r.passed
        assert "error" not in (r.details or {})
        assert execute_check(_check(type="github_action_present", action="org/shared/.github/workflows/ci.yml"), snap).passed


class TestBuildCommand:
    def test_script_present(self, snapshot_of):
        snap = snapshot_of({"package.json": json.dumps({"scripts": {"build": "tsc"}})})
        r = execute_check(_check(type="build_command_detect", commands=["compile", "build"]), snap)
        assert r.passed
        assert r.details["commands"] == ["build"]
        assert r.matched_files == ["package.json"]

    def test_script_absent(self, snapshot_of):
        snap = snapshot_of({"package.json": json.dumps({"scripts": {"start": "node ."}})})
        assert not execute_check(_check(type="build_command_detect", commands=["deploy"]), snap).passed

    def test_no_manifest(self, snapshot_of):
        r = execute_check(_check(type="build_command_detect", commands=["build"]), snapshot_of({"README.md": ""}))
        assert not r.passed
        assert "No package manifest" in r.message


class TestDependency:
    def test_dev_dependency(self, snapshot_of, node_repo_files):
        snap = snapshot_of(node_repo_files)
        assert execute_check(_check(type="dependency_detect", packages=["typescript"]), snap).passed

    def test_peer_dependency(self, snapshot_of):
        snap = snapshot_of({"package.json": json.dumps({"peerDependencies": {"react": "^18"}})})
        assert execute_check(_check(type="dependency_detect", packages=["react"]), snap).passed

    def test_absent(self, snapshot_of, node_repo_files):
        snap = snapshot_of(node_repo_files)
        assert not execute_check(_check(type="dependency_detect", packages=["@opentelemetry/api"]), snap).passed


class TestUnsupported:
    def test_unknown_type_is_coerced(self):
        check = _check(type="sbom_present", path="sbom.json")
        assert isinstance(check, UnsupportedCheck)
        assert check.declared_type == "sbom_present"

    def test_unknown_type_fails_with_diagnostic(self, snapshot_of):
        r = execute_check(_check(type="sbom_present"), snapshot_of({"README.md": ""}))
        assert not r.passed
        assert "sbom_present" in r.details["error"]


class TestResultShape:
    def test_fact_carries_identity_and_template(self, snapshot_of):
        check = _check(
            type="file_exists",
            path="AGENTS.md",
            id="docs.agents_md",
            pillar="docs",
            level="L3",
            required=True,
            template="AGENTS.md",
            suggestions=["Create AGENTS.md"],
        )
        r = execute_check(check, snapshot_of({"README.md": ""}))
        assert (r.check_id, r.pillar, r.level, r.required) == ("docs.agents_md", "docs", "L3", True)
        assert r.details["template"] == "AGENTS.md"
        assert r.suggestions == ["Create AGENTS.md"]


class TestHandlerTable:
    def test_every_check_type_has_a_handler(self):
        assert set(_HANDLERS) == set(CHECK_TYPES) | {"unsupported"}

    def test_unexpected_fault_becomes_failed_fact(self, snapshot_of, monkeypatch):
        def explode(check, snapshot):
            raise TypeError("'int' object is not iterable")

        monkeypatch.setitem(_HANDLERS, "file_exists", explode)
        r = execute_check(_check(type="file_exists", path="README.md"), snapshot_of({"README.md": ""}))
        assert not r.passed
        assert r.details["error"] == "TypeError: 'int' object is not iterable"
