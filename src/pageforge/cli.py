# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""pageforge CLI: build, rules commands.

Usage:
    python -m pageforge.cli build CONTENT_DIR --theme THEME.yaml [-o PATH] [--format text|json]
                                  [--documents DIR] [--workers N]
    python -m pageforge.cli rules

Exit codes (build):
    0  every page produced a document (non-fatal findings only)
    1  at least one page hit a fatal finding
    2  content or theme could not be loaded, or the build crashed
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

EXIT_OK = 0
EXIT_PAGE_FAILED = 1
EXIT_CONFIG = 2

WORKERS_ENV = "PAGEFORGE_WORKERS"

_CLI_HINTS: dict[str, str] = {
    "ConfigError": "Check the file against the descriptor/theme format (see README).",
    "DuplicateTokenError": "A token name appears in two categories with different values; rename one.",
}


def _error_text(exc: Exception) -> str:
    """Human-friendly CLI error message.

    Format::

        Error: <detail>
        Hint: <hint>
    """
    lines = [f"Error: {exc}"]
    hint = _CLI_HINTS.get(type(exc).__name__, "")
    if hint:
        lines.append(f"Hint: {hint}")
    return "\n".join(lines)


def _validate_output_path(path_str: str | None) -> Path | None:
    """Return the output file path, creating its parent directory."""
    if not path_str:
        return None
    p = Path(path_str)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def _default_workers() -> int:
    from .site import DEFAULT_MAX_WORKERS

    raw = os.environ.get(WORKERS_ENV, "").strip()
    if raw.isdigit() and int(raw) > 0:
        return int(raw)
    return DEFAULT_MAX_WORKERS


def cmd_build(args: argparse.Namespace) -> int:
    """Build every page in the content directory and write the findings report."""
    from .errors import PageForgeError
    from .loader import load_pages, load_theme
    from .report import document_to_json, to_json, to_text
    from .site import build_site

    try:
        theme = load_theme(args.theme)
        pages = load_pages(args.content_dir)
    except PageForgeError as e:
        print(_error_text(e), file=sys.stderr)
        return EXIT_CONFIG

    result = build_site(pages, theme, max_workers=args.workers)

    report = to_json(result) if args.format == "json" else to_text(result)
    output_path = _validate_output_path(args.output)
    if output_path is not None:
        output_path.write_text(report + "\n", encoding="utf-8")
        print(f"Report saved to {output_path}", file=sys.stderr)
    else:
        print(report)

    if args.documents:
        doc_dir = Path(args.documents)
        doc_dir.mkdir(parents=True, exist_ok=True)
        for page in result.pages:
            if page.document is not None:
                (doc_dir / f"{page.page_id}.json").write_text(document_to_json(page.document), encoding="utf-8")
        print(f"Documents saved to {doc_dir}", file=sys.stderr)

    if not result.ok:
        failed = ", ".join(p.page_id for p in result.failed)
        print(f"Build failed for: {failed}", file=sys.stderr)
        return EXIT_PAGE_FAILED
    return EXIT_OK


def cmd_rules(args: argparse.Namespace) -> int:
    """List every rule id with its severity."""
    from tabulate import tabulate

    from .findings import RuleId

    rows = [[str(r), str(r.severity), r.title] for r in RuleId]
    print(tabulate(rows, headers=["Rule", "Severity", "Description"], tablefmt="simple"))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Static page asset-and-layout build",
        prog="pageforge",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    subparsers = parser.add_subparsers(dest="command", required=True)

    _build_epilog = """\
examples:
  %(prog)s content/ --theme theme.yaml                    Text report to stdout
  %(prog)s content/ --theme theme.yaml --format json      JSON report to stdout
  %(prog)s content/ --theme theme.yaml -o out/report.json Save report to file
  %(prog)s content/ --theme theme.yaml --documents out/   Also write page documents
"""
    p_build = subparsers.add_parser(
        "build",
        help="Build page documents and a findings report",
        epilog=_build_epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p_build.add_argument("content_dir", metavar="CONTENT_DIR", help="Directory of page descriptors")
    p_build.add_argument("--theme", required=True, metavar="PATH", help="Theme token YAML file")
    p_build.add_argument("-o", "--output", type=str, metavar="PATH", help="Write the report to PATH instead of stdout")
    p_build.add_argument("--format", choices=["text", "json"], default="text", help="Report format (default: text)")
    p_build.add_argument("--documents", type=str, metavar="DIR", help="Write one <page>.json document per page")
    p_build.add_argument(
        "--workers",
        type=int,
        default=_default_workers(),
        metavar="N",
        help=f"Parallel page builds (default: ${WORKERS_ENV} or 4)",
    )

    subparsers.add_parser("rules", help="List rule ids and severities")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    from .logging_config import configure

    configure(json_output=args.json_logs, level="DEBUG" if args.verbose else None)

    commands = {"build": cmd_build, "rules": cmd_rules}
    try:
        return commands[args.command](args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    except Exception as e:
        print(_error_text(e), file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc(file=sys.stderr)
        return EXIT_CONFIG


if __name__ == "__main__":
    sys.exit(main())
