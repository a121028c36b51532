# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Rule taxonomy for build findings.

Every diagnostic the pipeline emits carries a stable ``RuleId`` so that
downstream tooling and tests can assert on exact rule sets instead of
free-text messages.  The module is a leaf (stdlib only) so it can be
imported from any layer.

Key public API:

- ``RuleId``   — StrEnum rule taxonomy (non-fatal + fatal rules).
- ``Severity`` — info / warning / error.
- ``Finding``  — frozen dataclass (→ dict / report entry).
- ``make_finding()`` — build a Finding with the rule's default severity.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

# ── Taxonomy ─────────────────────────────────────────────────────────


class Severity(StrEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"  # fatal: page produced no document


class RuleId(StrEnum):
    """Stable rule identifiers."""

    # Resource loading
    UNPINNED_VERSION = "UnpinnedVersion"
    BLOCKING_FONT_LOAD = "BlockingFontLoad"

    # Images
    LAYOUT_SHIFT_RISK = "LayoutShiftRisk"
    INACCESSIBLE_IMAGE = "InaccessibleImage"
    MISSING_RESPONSIVE_SOURCE = "MissingResponsiveSource"

    # Structure / accessibility
    DEAD_NAVIGATION_LINK = "DeadNavigationLink"
    AUTO_HEADING_INSERTED = "AutoHeadingInserted"
    MISSING_ACCESSIBLE_LABEL = "MissingAccessibleLabel"

    # Contact
    INCONSISTENT_CONTACT_INFO = "InconsistentContactInfo"

    # Styling / SEO
    INVALID_STYLE_PROPERTY = "InvalidStyleProperty"
    MISSING_META_DESCRIPTION = "MissingMetaDescription"
    MISSING_PRIMARY_HEADING = "MissingPrimaryHeading"

    # Fatal (abort the page)
    STRUCTURAL_CONFLICT = "StructuralConflict"
    AMBIGUOUS_CONTROL = "AmbiguousControl"
    UNKNOWN_TOKEN = "UnknownToken"
    DUPLICATE_TOKEN = "DuplicateToken"

    @property
    def severity(self) -> Severity:
        return _RULE_METADATA[self][0]

    @property
    def title(self) -> str:
        return _RULE_METADATA[self][1]

    @property
    def is_fatal(self) -> bool:
        return self.severity is Severity.ERROR


# ── Per-rule metadata: (severity, title) ─────────────────────────────

_RULE_METADATA: dict[RuleId, tuple[Severity, str]] = {
    RuleId.UNPINNED_VERSION: (Severity.WARNING, "Script version is not pinned"),
    RuleId.BLOCKING_FONT_LOAD: (Severity.WARNING, "Font loads without display swap"),
    RuleId.LAYOUT_SHIFT_RISK: (Severity.WARNING, "Image has no intrinsic dimensions"),
    RuleId.INACCESSIBLE_IMAGE: (Severity.WARNING, "Image lacks meaningful alt text"),
    RuleId.MISSING_RESPONSIVE_SOURCE: (Severity.WARNING, "Image has no responsive source set"),
    RuleId.DEAD_NAVIGATION_LINK: (Severity.WARNING, "Navigation link goes nowhere"),
    RuleId.AUTO_HEADING_INSERTED: (Severity.INFO, "Visually-hidden heading inserted"),
    RuleId.MISSING_ACCESSIBLE_LABEL: (Severity.WARNING, "Control has no accessible label"),
    RuleId.INCONSISTENT_CONTACT_INFO: (Severity.WARNING, "Contact channel differs across pages"),
    RuleId.INVALID_STYLE_PROPERTY: (Severity.WARNING, "Unknown CSS property"),
    RuleId.MISSING_META_DESCRIPTION: (Severity.WARNING, "Page has no meta description"),
    RuleId.MISSING_PRIMARY_HEADING: (Severity.WARNING, "Page has no primary heading"),
    RuleId.STRUCTURAL_CONFLICT: (Severity.ERROR, "Landmark structure conflict"),
    RuleId.AMBIGUOUS_CONTROL: (Severity.ERROR, "Control has no name"),
    RuleId.UNKNOWN_TOKEN: (Severity.ERROR, "Unknown theme token"),
    RuleId.DUPLICATE_TOKEN: (Severity.ERROR, "Conflicting theme token"),
}


# ── Finding ──────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Finding:
    """A single rule-tagged diagnostic."""

    rule_id: RuleId
    severity: Severity
    message: str
    page_id: str = ""
    subject: str = ""  # url, token name, block text, ... (what the rule fired on)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "page_id": self.page_id,
            "rule_id": str(self.rule_id),
            "severity": str(self.severity),
            "message": self.message,
        }
        if self.subject:
            d["subject"] = self.subject
        return d

    def with_page(self, page_id: str) -> Finding:
        if self.page_id == page_id:
            return self
        return Finding(self.rule_id, self.severity, self.message, page_id, self.subject)


def make_finding(rule_id: RuleId, message: str, *, page_id: str = "", subject: str = "") -> Finding:
    """Build a Finding carrying the rule's default severity."""
    return Finding(rule_id=rule_id, severity=rule_id.severity, message=message, page_id=page_id, subject=subject)
