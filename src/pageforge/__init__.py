# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""pageforge: asset-and-layout assembly for static marketing pages.

Turns page descriptors + theme tokens into validated semantic documents:
- document: landmark tree (header/nav, main, footer) ready for rendering
- findings: rule-tagged diagnostics (performance, accessibility, SEO, CSS)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .findings import Finding, RuleId, Severity

__all__ = [
    "BuildResult",
    "Document",
    "Finding",
    "HeadDirectives",
    "Node",
    "RuleId",
    "Severity",
]

__version__ = "0.1.0"


@dataclass
class Node:
    """A single element of the semantic document tree."""

    kind: str  # header, nav, main, footer, section, heading, text, image, button, link, contact
    attrs: dict[str, str] = field(default_factory=dict)
    text: str = ""
    children: list[Node] = field(default_factory=list)
    style: dict[str, str] = field(default_factory=dict)  # resolved CSS declarations
    data: dict[str, Any] = field(default_factory=dict)  # directive payload (image, contact)

    def iter(self):
        """Depth-first pre-order walk, self included."""
        yield self
        for child in self.children:
            yield from child.iter()

    def find_all(self, kind: str) -> list[Node]:
        return [n for n in self.iter() if n.kind == kind]

    @property
    def role(self) -> str:
        return self.attrs.get("role", "")


@dataclass
class HeadDirectives:
    """Document head contents produced by resource planning and theming."""

    preconnect: list[str] = field(default_factory=list)  # origins, first-appearance order
    blocking: list[str] = field(default_factory=list)  # resource urls
    deferred: list[str] = field(default_factory=list)  # resource urls
    description: str = ""
    custom_properties: dict[str, str] = field(default_factory=dict)  # :root { --name: value }


@dataclass
class Document:
    """Semantic page tree: exactly one header, main and footer landmark."""

    page_id: str
    title: str
    lang: str
    head: HeadDirectives
    header: Node
    main: Node
    footer: Node

    @property
    def landmarks(self) -> list[Node]:
        return [self.header, self.main, self.footer]

    def landmark_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for landmark in self.landmarks:
            for node in landmark.iter():
                if node.role:
                    counts[node.role] = counts.get(node.role, 0) + 1
        return counts

    @property
    def sections(self) -> list[Node]:
        """All section nodes in document order."""
        return [n for landmark in self.landmarks for n in landmark.find_all("section")]


@dataclass
class BuildResult:
    """Successful page build."""

    document: Document
    findings: list[Finding] = field(default_factory=list)
    timings: dict[str, float] = field(default_factory=dict)  # stage -> ms

    def rule_ids(self) -> list[RuleId]:
        return [f.rule_id for f in self.findings]
