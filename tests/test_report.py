# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for report serialization (JSON, text, documents)."""

from __future__ import annotations

import json

from pageforge.report import document_to_dict, document_to_json, report_entries, to_dict, to_json, to_text
from pageforge.site import build_site
from tests._page_helpers import footer, hero, page, services


def _site(theme):
    broken = page(id="broken", sections=[hero(), hero(), services(), footer()])
    sparse = page(id="sparse", description="")
    return build_site([page(), sparse, broken], theme)


class TestReportEntries:
    def test_entries_in_page_order(self, theme):
        entries = report_entries(_site(theme))
        assert [(e.page_id, e.rule_id, e.severity) for e in entries] == [
            ("sparse", "MissingMetaDescription", "warning"),
            ("broken", "StructuralConflict", "error"),
        ]


class TestJson:
    def test_to_dict_shape(self, theme):
        d = to_dict(_site(theme))
        assert d["ok"] is False
        assert d["summary"] == {"info": 0, "warning": 1, "error": 1}
        statuses = {p["page_id"]: p for p in d["pages"]}
        assert statuses["index"] == {"page_id": "index", "status": "ok", "findings": 0}
        assert statuses["broken"]["status"] == "failed"
        assert statuses["broken"]["aborted_at"] == "structure"
        assert d["findings"][1]["rule_id"] == "StructuralConflict"

    def test_to_json_parses(self, theme):
        parsed = json.loads(to_json(_site(theme)))
        assert len(parsed["pages"]) == 3


class TestText:
    def test_sections_and_table(self, theme):
        text = to_text(_site(theme))
        assert "## sparse" in text
        assert "[warning] MissingMetaDescription:" in text
        assert "## index" not in text
        lines = text.splitlines()
        assert lines[-5].split() == ["Page", "Status", "Errors", "Warnings", "Info"]
        assert lines[-1].split() == ["broken", "FAILED", "1", "0", "0"]


class TestDocument:
    def test_document_dict(self, theme):
        doc = build_site([page()], theme).page("index").document
        d = document_to_dict(doc)
        assert [n["attrs"]["role"] for n in d["body"]] == ["banner", "main", "contentinfo"]
        assert d["head"]["description"].startswith("Business cards")
        assert d["head"]["custom_properties"]["--md"] == "1rem"

    def test_document_json_round_trips(self, theme):
        doc = build_site([page()], theme).page("index").document
        assert json.loads(document_to_json(doc))["page_id"] == "index"
