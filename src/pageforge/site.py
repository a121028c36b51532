# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Batch build: every page built independently, fatal errors stay page-local.

Contact channels are resolved once across the whole batch before any page
is built, so every page renders the same canonical values.  The theme
registry is frozen before pages are dispatched to worker threads; after
that it is only read.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import structlog

from . import BuildResult, Document
from .builder import PageStructureBuilder
from .contact import ContactResolution, resolve_contacts
from .descriptor import PageDescriptor
from .errors import FatalBuildError
from .findings import Finding, Severity, make_finding
from .theme import ThemeTokenRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


@dataclass
class PageOutcome:
    """Per-page result: a document, or the fatal error that stopped it."""

    page_id: str
    document: Document | None = None
    findings: list[Finding] = field(default_factory=list)
    error: FatalBuildError | None = None
    timings: dict[str, float] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SiteBuildResult:
    pages: list[PageOutcome] = field(default_factory=list)
    contacts: ContactResolution = field(default_factory=ContactResolution)

    @property
    def ok(self) -> bool:
        return all(p.ok for p in self.pages)

    @property
    def failed(self) -> list[PageOutcome]:
        return [p for p in self.pages if not p.ok]

    @property
    def findings(self) -> list[Finding]:
        """All findings, page order then stage order."""
        return [f for p in self.pages for f in p.findings]

    def page(self, page_id: str) -> PageOutcome:
        for p in self.pages:
            if p.page_id == page_id:
                return p
        raise KeyError(page_id)

    def severity_counts(self) -> dict[str, int]:
        counts = {str(s): 0 for s in Severity}
        for f in self.findings:
            counts[str(f.severity)] += 1
        return counts


def _build_one(builder: PageStructureBuilder, descriptor: PageDescriptor) -> PageOutcome:
    with structlog.contextvars.bound_contextvars(page_id=descriptor.id):
        try:
            result: BuildResult = builder.build(descriptor)
        except FatalBuildError as e:
            fatal = make_finding(e.rule_id, str(e), page_id=descriptor.id, subject=e.subject)
            return PageOutcome(page_id=descriptor.id, findings=[fatal], error=e)
        return PageOutcome(
            page_id=descriptor.id,
            document=result.document,
            findings=result.findings,
            timings=result.timings,
        )


def build_site(
    descriptors: Sequence[PageDescriptor],
    theme: ThemeTokenRegistry,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> SiteBuildResult:
    """Build every page in *descriptors*; outcomes keep input order."""
    theme.freeze()
    contacts = resolve_contacts((d.id, c) for d in descriptors for c in d.contacts)
    builder = PageStructureBuilder(theme, contacts=contacts)

    workers = max(1, min(max_workers, len(descriptors) or 1))
    logger.info("Building %d page(s) with %d worker(s)", len(descriptors), workers)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pageforge") as pool:
        futures = [pool.submit(_build_one, builder, d) for d in descriptors]
        outcomes = [f.result() for f in futures]

    result = SiteBuildResult(pages=outcomes, contacts=contacts)
    logger.info(
        "Site build finished: %d ok, %d failed, findings=%s",
        len(outcomes) - len(result.failed),
        len(result.failed),
        result.severity_counts(),
    )
    return result
