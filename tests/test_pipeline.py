"""End-to-end tests for the LangGraph scan pipeline."""

import json

import pytest

from agent_ready.app.errors import EmptyRubricError, ProfileNotFoundError, ScanContextError
from agent_ready.graph.build_graph import run_pipeline, run_scan
from agent_ready.graph.profiles import Profile, profile_from_dict, register_profile
from agent_ready.render.markdown import render_markdown


def _strip_volatile(data):
    data = json.loads(json.dumps(data))
    data["meta"].pop("timestamp")
    data["meta"].pop("scan_duration_ms")
    return data


class TestRunPipeline:
    def test_well_kept_repo(self, make_repo, node_repo_files):
        report = run_pipeline(str(make_repo(node_repo_files)))
        summary = report.executive_summary

        assert report.meta.profile == "factory_compat"
        assert report.meta.agents_used == 9
        assert len(report.detailed_analysis.pillars) == 9
        assert 0 < summary.score < 100
        assert summary.headline_en.startswith("Your repository")
        docs = next(p for p in report.detailed_analysis.pillars if p.pillar == "docs")
        assert docs.level_achieved is not None

    def test_bare_repo_has_no_level(self, make_repo, bare_repo_files):
        report = run_pipeline(str(make_repo(bare_repo_files)), language="zh")
        assert report.executive_summary.level is None
        assert report.executive_summary.next_steps[0] == "1. 添加 README.md 文件"
        assert report.improvement_roadmap.quick_wins[0].priority == "critical"

    def test_deterministic(self, make_repo, node_repo_files):
        root = str(make_repo(node_repo_files))
        first = run_pipeline(root, max_workers=1).model_dump(mode="json")
        second = run_pipeline(root, max_workers=16).model_dump(mode="json")
        assert _strip_volatile(first) == _strip_volatile(second)

    def test_level_filter(self, make_repo, node_repo_files):
        report = run_pipeline(str(make_repo(node_repo_files)), level="L1")
        progress = {p.level: p.score for p in report.charts.level_progress}
        assert progress["L3"] == 0 and progress["L5"] == 0
        pillars = {p.pillar for p in report.detailed_analysis.pillars}
        # observability, task_discovery and product define nothing at L1
        assert pillars == {"docs", "style", "build", "test", "security", "env"}

    def test_bad_check_does_not_abort(self, make_repo):
        register_profile(profile_from_dict({
            "name": "with_bad_check",
            "checks": [
                {"id": "docs.readme", "name": "README", "type": "file_exists", "path": "README.md",
                 "pillar": "docs", "level": "L1"},
                {"id": "docs.broken", "name": "Broken", "type": "path_glob", "pattern": "{unbalanced",
                 "pillar": "docs", "level": "L2"},
            ],
        }))
        report = run_pipeline(str(make_repo({"README.md": "# x"})), profile="with_bad_check")
        docs = report.detailed_analysis.pillars[0]
        assert (docs.checks_passed, docs.checks_total, docs.level_achieved) == (1, 2, "L1")

    def test_pipeline_meta(self, make_repo, bare_repo_files):
        final = run_scan(str(make_repo(bare_repo_files)), profile="minimal")
        assert final["pipeline"].agents_run == ["load_profile", "build_context", "run_pillars", "evaluate", "report"]
        assert set(final["pipeline"].timings_ms) == set(final["pipeline"].agents_run)


class TestPipelineErrors:
    def test_missing_path(self, tmp_path):
        with pytest.raises(ScanContextError):
            run_pipeline(str(tmp_path / "missing"))

    def test_unknown_profile(self, make_repo, bare_repo_files):
        with pytest.raises(ProfileNotFoundError):
            run_pipeline(str(make_repo(bare_repo_files)), profile="does_not_exist")

    def test_empty_profile(self, make_repo, bare_repo_files):
        register_profile(Profile(name="empty", version="1", description="", checks=()))
        with pytest.raises(EmptyRubricError):
            run_pipeline(str(make_repo(bare_repo_files)), profile="empty")

    def test_level_filter_to_nothing(self, make_repo, bare_repo_files):
        register_profile(profile_from_dict({
            "name": "only_l5",
            "checks": [{"id": "x", "name": "x", "type": "file_exists", "path": "x", "pillar": "docs", "level": "L5"}],
        }))
        with pytest.raises(EmptyRubricError):
            run_pipeline(str(make_repo(bare_repo_files)), profile="only_l5", level="L1")

    def test_unknown_level(self, make_repo, bare_repo_files):
        with pytest.raises(ValueError):
            run_pipeline(str(make_repo(bare_repo_files)), level="L7")


class TestRenderMarkdown:
    def test_sections(self, make_repo, node_repo_files):
        report = run_pipeline(str(make_repo(node_repo_files)))
        md = render_markdown(report, "en")
        assert md.startswith("# Agent Ready")
        assert "## Executive Summary" in md
        assert "| Pillar | Level | Score | Checks |" in md
        assert "## Improvement Roadmap" in md

    def test_chinese(self, make_repo, bare_repo_files):
        report = run_pipeline(str(make_repo(bare_repo_files)), language="zh")
        md = render_markdown(report, "zh")
        assert "您的仓库尚未达到 L1 基础级" in md
        assert "## 执行摘要" in md
