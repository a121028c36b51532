# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Image loading directives.

Policy over image metadata only; images are never fetched or decoded.

Rules:
  - above fold → eager, below fold → lazy
  - missing width/height → LayoutShiftRisk (dimension defaults to 0)
  - empty alt, or alt equal to the file name → InaccessibleImage
  - fewer than two width candidates → MissingResponsiveSource
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from urllib.parse import unquote, urlparse

from .descriptor import ImageBlock
from .findings import Finding, RuleId, make_finding


@dataclass(frozen=True, slots=True)
class ImageCandidate:
    url: str
    width: int = 0  # w descriptor; 0 = fixed-width sole source

    def __str__(self) -> str:
        return f"{self.url} {self.width}w" if self.width else self.url


@dataclass(frozen=True, slots=True)
class ImageDirective:
    loading: str  # eager | lazy
    width: int
    height: int
    decoding: str  # auto | async
    candidates: tuple[ImageCandidate, ...]
    sizes: str = ""

    @property
    def srcset(self) -> str:
        if len(self.candidates) < 2:
            return ""
        return ", ".join(str(c) for c in self.candidates)

    @property
    def src(self) -> str:
        return self.candidates[0].url if self.candidates else ""

    def to_attrs(self) -> dict[str, str]:
        attrs = {
            "src": self.src,
            "loading": self.loading,
            "decoding": self.decoding,
            "width": str(self.width),
            "height": str(self.height),
        }
        if self.srcset:
            attrs["srcset"] = self.srcset
        if self.sizes:
            attrs["sizes"] = self.sizes
        return attrs


def _file_name(url: str) -> str:
    path = unquote(urlparse(url).path)
    return posixpath.basename(path)


def is_generic_alt(alt: str | None, src: str) -> bool:
    """True when *alt* is empty or merely repeats the image file name."""
    text = (alt or "").strip().lower()
    if not text:
        return True
    name = _file_name(src).lower()
    if not name:
        return False
    stem, _ext = posixpath.splitext(name)
    return text in (name, stem)


def resolve_image(block: ImageBlock, *, above_fold: bool) -> tuple[ImageDirective, list[Finding]]:
    """Compute the loading directive for *block* at the given placement."""
    findings: list[Finding] = []

    if not block.width or not block.height:
        findings.append(
            make_finding(
                RuleId.LAYOUT_SHIFT_RISK,
                f"Image {block.src} has no explicit width/height; reserve its box to avoid layout shift.",
                subject=block.src,
            )
        )

    if is_generic_alt(block.alt, block.src):
        findings.append(
            make_finding(
                RuleId.INACCESSIBLE_IMAGE,
                f"Image {block.src} needs alt text describing its content.",
                subject=block.src,
            )
        )

    if len(block.sources) >= 2:
        candidates = tuple(
            ImageCandidate(s.url, s.width) for s in sorted(block.sources, key=lambda s: s.width)
        )
    else:
        sole = block.sources[0].url if block.sources else block.src
        candidates = (ImageCandidate(sole),)
        findings.append(
            make_finding(
                RuleId.MISSING_RESPONSIVE_SOURCE,
                f"Image {block.src} ships a single fixed-width source; add width candidates.",
                subject=block.src,
            )
        )

    directive = ImageDirective(
        loading="eager" if above_fold else "lazy",
        width=block.width or 0,
        height=block.height or 0,
        decoding="auto" if above_fold else "async",
        candidates=candidates,
        sizes=block.sizes or "",
    )
    return directive, findings
