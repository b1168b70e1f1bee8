"""Tests for the agent-ready command line."""

import json

import pytest

from agent_ready.api_stub.cli import EXIT_FAILED, EXIT_OK, EXIT_USAGE, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("AGENT_READY_PROFILE", "AGENT_READY_LANGUAGE", "AGENT_READY_MAX_WORKERS", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("agent_ready.api_stub.cli.load_dotenv", lambda: None)


class TestScanCommand:
    def test_json_output(self, make_repo, node_repo_files, capsys):
        root = make_repo(node_repo_files)
        assert main(["scan", str(root), "--output", "json"]) == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data["meta"]["profile"] == "factory_compat"
        assert len(data["detailed_analysis"]["pillars"]) == 9

    def test_markdown_to_file(self, make_repo, bare_repo_files, tmp_path):
        out = tmp_path / "report.md"
        code = main(["scan", str(make_repo(bare_repo_files)), "--language", "zh", "--output-file", str(out)])
        assert code == EXIT_OK
        assert "您的仓库尚未达到 L1 基础级" in out.read_text(encoding="utf-8")

    def test_both(self, make_repo, bare_repo_files, capsys):
        assert main(["scan", str(make_repo(bare_repo_files)), "-o", "both", "--level", "L1"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "## Executive Summary" in out
        assert "```json" in out

    def test_missing_path_fails(self, tmp_path, capsys):
        assert main(["scan", str(tmp_path / "missing")]) == EXIT_FAILED
        assert "error:" in capsys.readouterr().err

    def test_unknown_profile_fails(self, make_repo, bare_repo_files):
        assert main(["scan", str(make_repo(bare_repo_files)), "--profile", "nope"]) == EXIT_FAILED

    def test_bad_level_is_usage_error(self):
        with pytest.raises(SystemExit) as exc:
            main(["scan", ".", "--level", "L9"])
        assert exc.value.code == EXIT_USAGE

    def test_bad_env_is_usage_error(self, monkeypatch, make_repo, bare_repo_files):
        monkeypatch.setenv("AGENT_READY_MAX_WORKERS", "many")
        assert main(["scan", str(make_repo(bare_repo_files))]) == EXIT_USAGE


class TestOtherCommands:
    def test_profiles(self, capsys):
        assert main(["profiles"]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.splitlines()[0].startswith("factory_compat\t")

    def test_no_command(self):
        assert main([]) == EXIT_USAGE
