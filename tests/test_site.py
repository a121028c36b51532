# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for build_site — page isolation, ordering, cross-page contacts."""

from __future__ import annotations

import pytest

from pageforge.findings import RuleId, Severity
from pageforge.site import build_site
from tests._page_helpers import footer, hero, page, services


def _ambiguous_page():
    return page(
        id="broken",
        sections=[hero(blocks=[{"type": "button", "icon": "fa fa-bars"}]), services(), footer()],
    )


class TestIsolation:
    def test_fatal_error_stays_page_local(self, theme):
        result = build_site([page(), _ambiguous_page()], theme)
        assert not result.ok
        assert result.page("index").ok
        assert result.page("index").document is not None

        broken = result.page("broken")
        assert not broken.ok
        assert broken.document is None
        assert [f.rule_id for f in broken.findings] == [RuleId.AMBIGUOUS_CONTROL]
        assert broken.findings[0].severity is Severity.ERROR
        assert broken.findings[0].page_id == "broken"
        assert broken.error.stage == "controls"
        assert [p.page_id for p in result.failed] == ["broken"]

    def test_all_clean(self, theme):
        result = build_site([page(), page(id="about")], theme)
        assert result.ok
        assert result.findings == []

    def test_empty_batch(self, theme):
        result = build_site([], theme)
        assert result.ok
        assert result.pages == []

    def test_unknown_page_lookup(self, theme):
        with pytest.raises(KeyError):
            build_site([page()], theme).page("missing")


class TestOrdering:
    def test_outcomes_keep_input_order(self, theme):
        ids = [f"page-{i:02d}" for i in range(10)]
        result = build_site([page(id=i) for i in ids], theme, max_workers=4)
        assert [p.page_id for p in result.pages] == ids

    def test_findings_grouped_by_page(self, theme):
        pages = [page(id="a", description=""), page(id="b"), page(id="c", description="")]
        result = build_site(pages, theme)
        assert [f.page_id for f in result.findings] == ["a", "c"]
        assert result.severity_counts() == {"info": 0, "warning": 2, "error": 0}


class TestSharedState:
    def test_theme_frozen_after_build(self, theme):
        build_site([page()], theme)
        assert theme.frozen

    def test_contact_inconsistency_across_pages(self, theme):
        first = page(id="index", contacts=[{"type": "email", "value": "a@x.com"}])
        second = page(id="privacy", contacts=[{"type": "email", "value": "b@x.com"}])
        result = build_site([first, second], theme)

        assert result.page("index").findings == []
        privacy = result.page("privacy")
        assert [f.rule_id for f in privacy.findings] == [RuleId.INCONSISTENT_CONTACT_INFO]
        contact = privacy.document.footer.find_all("contact")[0]
        assert contact.text == "a@x.com"
        assert result.contacts.canonical["email"].value == "a@x.com"

    def test_obfuscation_on_any_page_hides_address_everywhere(self, theme):
        first = page(id="index", contacts=[{"type": "email", "value": "hello@print.example"}])
        second = page(
            id="privacy", contacts=[{"type": "email", "value": "hello@print.example", "obfuscate": True}]
        )
        result = build_site([first, second], theme)

        assert result.findings == []
        for page_id in ("index", "privacy"):
            contact = result.page(page_id).document.footer.find_all("contact")[0]
            assert contact.text == ""
            assert "href" not in contact.attrs
            assert contact.attrs["data-render"] == "deferred"
            assert all("hello@print.example" not in v for v in contact.attrs.values())
