# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Build report serialization: JSON and human-readable text.

Two output formats:
- JSON: findings report + per-page outcomes for programmatic consumption
- Text: findings list grouped by page with a summary table
Documents serialize separately (``document_to_json``) for the rendering stage.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from tabulate import tabulate

from . import Document, Node
from .site import SiteBuildResult


@dataclass(frozen=True, slots=True)
class ReportEntry:
    page_id: str
    rule_id: str
    severity: str
    message: str


def report_entries(result: SiteBuildResult) -> list[ReportEntry]:
    """Ordered ``(page_id, rule_id, severity, message)`` entries."""
    return [ReportEntry(f.page_id, str(f.rule_id), str(f.severity), f.message) for f in result.findings]


def _node_to_dict(node: Node) -> dict[str, Any]:
    d: dict[str, Any] = {"kind": node.kind}
    if node.attrs:
        d["attrs"] = node.attrs
    if node.text:
        d["text"] = node.text
    if node.style:
        d["style"] = node.style
    if node.children:
        d["children"] = [_node_to_dict(c) for c in node.children]
    return d


def document_to_dict(document: Document) -> dict[str, Any]:
    head = document.head
    return {
        "page_id": document.page_id,
        "title": document.title,
        "lang": document.lang,
        "head": {
            "preconnect": head.preconnect,
            "blocking": head.blocking,
            "deferred": head.deferred,
            **({"description": head.description} if head.description else {}),
            "custom_properties": head.custom_properties,
        },
        "body": [_node_to_dict(n) for n in document.landmarks],
    }


def document_to_json(document: Document, indent: int = 2) -> str:
    return json.dumps(document_to_dict(document), ensure_ascii=False, indent=indent)


def to_dict(result: SiteBuildResult) -> dict[str, Any]:
    return {
        "ok": result.ok,
        "summary": result.severity_counts(),
        "pages": [
            {
                "page_id": p.page_id,
                "status": "ok" if p.ok else "failed",
                **({"aborted_at": p.error.stage} if p.error is not None and p.error.stage else {}),
                "findings": len(p.findings),
            }
            for p in result.pages
        ],
        "findings": [f.to_dict() for f in result.findings],
    }


def to_json(result: SiteBuildResult, indent: int = 2) -> str:
    """Serialize the findings report to a JSON string."""
    return json.dumps(to_dict(result), ensure_ascii=False, indent=indent)


def to_text(result: SiteBuildResult) -> str:
    """Human-readable report.

    Format:
        ## index
        [warning] UnpinnedVersion: Script https://cdn.example/x.js has no pinned version ...
        [info] AutoHeadingInserted: Section 2 (services) had no heading; ...

        Page     Status  Errors  Warnings  Info
        -------  ------  ------  --------  ----
        index    ok           0         1     1
    """
    lines: list[str] = []
    rows = []
    for page in result.pages:
        counts = {"error": 0, "warning": 0, "info": 0}
        if page.findings:
            lines.append(f"## {page.page_id}")
            for f in page.findings:
                counts[str(f.severity)] += 1
                lines.append(f"[{f.severity}] {f.rule_id}: {f.message}")
            lines.append("")
        rows.append([page.page_id, "ok" if page.ok else "FAILED", counts["error"], counts["warning"], counts["info"]])

    lines.append(tabulate(rows, headers=["Page", "Status", "Errors", "Warnings", "Info"], tablefmt="simple"))
    return "\n".join(lines)
