from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from agent_ready import __version__
from agent_ready.app.errors import AppError
from agent_ready.app.logging import setup_logging
from agent_ready.app.settings import SUPPORTED_LANGUAGES, load_settings
from agent_ready.graph.build_graph import run_pipeline
from agent_ready.graph.profiles import list_profiles, maybe_get_profile
from agent_ready.render.markdown import render_markdown
from agent_ready.schemas.check_schema import LEVELS

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="agent-ready", description="Score a repository's readiness for AI coding agents.")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = ap.add_subparsers(dest="command")

    scan = sub.add_parser("scan", help="Scan a local repository")
    scan.add_argument("path", nargs="?", default=".", help="Path to repository root (default: .)")
    scan.add_argument("--profile", "-p", default=None, help="Rubric profile (default: AGENT_READY_PROFILE or factory_compat)")
    scan.add_argument("--language", "-l", choices=SUPPORTED_LANGUAGES, default=None, help="Report language")
    scan.add_argument("--level", choices=LEVELS, default=None, help="Only evaluate checks at or below this level")
    scan.add_argument("--output", "-o", choices=("json", "markdown", "both"), default="markdown")
    scan.add_argument("--output-file", default=None, help="Write the report here instead of stdout")
    scan.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    sub.add_parser("profiles", help="List available rubric profiles")
    return ap


def _render(report, output: str, language: str) -> str:
    as_json = json.dumps(report.model_dump(mode="json"), indent=2, ensure_ascii=False)
    if output == "json":
        return as_json + "\n"
    md = render_markdown(report, language)
    if output == "markdown":
        return md
    return md + "\n---\n\n```json\n" + as_json + "\n```\n"


def cmd_scan(args: argparse.Namespace) -> int:
    s = load_settings()
    setup_logging("DEBUG" if args.verbose else s.log_level)
    language = args.language or s.default_language

    try:
        report = run_pipeline(
            args.path,
            profile=args.profile or s.default_profile,
            language=language,
            level=args.level,
            max_workers=s.max_workers,
        )
    except AppError as e:
        logger.error("scan failed", extra={"error": str(e), "error_type": e.__class__.__name__})
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILED

    text = _render(report, args.output, language)
    if args.output_file:
        Path(args.output_file).write_text(text, encoding="utf-8")
        print(f"Report written to {args.output_file}", file=sys.stderr)
    else:
        sys.stdout.write(text)
    return EXIT_OK


def cmd_profiles(args: argparse.Namespace) -> int:
    for name in list_profiles():
        profile = maybe_get_profile(name)
        if profile is None:
            continue
        info = profile.summary()
        print(f"{info['name']}\tv{info['version']}\t{info['check_count']} checks\t{info['description']}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.command is None:
        ap.print_help(sys.stderr)
        return EXIT_USAGE

    try:
        if args.command == "scan":
            return cmd_scan(args)
        return cmd_profiles(args)
    except AppError as e:
        # bad configuration surfaces before the pipeline starts
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    raise SystemExit(main())
