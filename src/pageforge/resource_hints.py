# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Resource hint planning for third-party scripts, stylesheets and fonts.

Pure function of the resource list:
- preconnect: every distinct external origin, once, in first-appearance order
- scripts: deferred unless marked critical or declared blocking; unpinned versions are flagged
- fonts: always non-blocking stylesheet strategy; missing display swap is flagged
- stylesheets: follow their declared load strategy
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from urllib.parse import urlparse

from .descriptor import ExternalResource, LoadStrategy, ResourceKind
from .findings import Finding, RuleId, make_finding

logger = logging.getLogger(__name__)

_UNPINNED_VERSIONS = frozenset({"", "latest", "*", "x"})

# CDN path conventions: jsdelivr/unpkg "@latest", cdnjs-style "/latest/"
_URL_LATEST_RE = re.compile(r"(?:@latest\b|/latest/)", re.IGNORECASE)


@dataclass
class HintPlan:
    """Ordered load directives for one page's external resources."""

    preconnect: list[str] = field(default_factory=list)
    deferred: list[ExternalResource] = field(default_factory=list)
    blocking: list[ExternalResource] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)


def origin_of(url: str) -> str | None:
    """Return ``scheme://host[:port]`` for absolute URLs, None for same-origin ones.

    Protocol-relative URLs (``//cdn.example.com/x.js``) are treated as https.
    """
    parsed = urlparse(url.strip())
    if not parsed.netloc:
        return None
    scheme = (parsed.scheme or "https").lower()
    if scheme not in ("http", "https"):
        return None
    return f"{scheme}://{parsed.netloc.lower()}"


def is_pinned(resource: ExternalResource) -> bool:
    version = (resource.version or "").strip().lower()
    if version in _UNPINNED_VERSIONS:
        return False
    return not _URL_LATEST_RE.search(resource.url)


def dedupe_resources(resources: Iterable[ExternalResource]) -> list[ExternalResource]:
    """Keep the first resource per url."""
    seen: set[str] = set()
    unique: list[ExternalResource] = []
    for res in resources:
        if res.url in seen:
            continue
        seen.add(res.url)
        unique.append(res)
    return unique


def plan_resources(resources: Iterable[ExternalResource]) -> HintPlan:
    """Plan preconnect / deferred / blocking directives for *resources*."""
    plan = HintPlan()
    seen_origins: set[str] = set()

    for res in dedupe_resources(resources):
        origin = origin_of(res.url)
        if origin is not None and origin not in seen_origins:
            seen_origins.add(origin)
            plan.preconnect.append(origin)

        if res.kind is ResourceKind.SCRIPT:
            if not is_pinned(res):
                plan.findings.append(
                    make_finding(
                        RuleId.UNPINNED_VERSION,
                        f"Script {res.url} has no pinned version ({res.version or 'absent'}); "
                        "pin an exact release.",
                        subject=res.url,
                    )
                )
            blocking = res.critical or res.load is LoadStrategy.BLOCKING
            target = plan.blocking if blocking else plan.deferred
        elif res.kind is ResourceKind.FONT:
            if not res.font_display_swap:
                plan.findings.append(
                    make_finding(
                        RuleId.BLOCKING_FONT_LOAD,
                        f"Font {res.url} does not use display swap; text stays invisible until it loads.",
                        subject=res.url,
                    )
                )
            target = plan.deferred
        else:
            blocking = res.critical or res.load is LoadStrategy.BLOCKING
            target = plan.blocking if blocking else plan.deferred
        target.append(res)

    logger.debug(
        "Resource plan: %d origins, %d deferred, %d blocking",
        len(plan.preconnect),
        len(plan.deferred),
        len(plan.blocking),
    )
    return plan
