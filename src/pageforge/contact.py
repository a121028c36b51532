# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Site-wide contact channel resolution.

Pages sharing a site identity must agree on every contact channel.  The
first page that defines a channel type wins; every divergent value seen
later is reported against the page it came from.

Obfuscated emails are never emitted as a joined address: the directive
carries the (user, domain) pair and a ``deferred`` render mode so that the
output stage assembles the address on interaction only.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .descriptor import ChannelType, ContactChannel
from .findings import Finding, RuleId, make_finding

logger = logging.getLogger(__name__)

_PHONE_STRIP_RE = re.compile(r"[^\d]")

RENDER_INLINE = "inline"
RENDER_DEFERRED = "deferred"


def normalize_value(channel_type: ChannelType, value: str) -> str:
    """Canonical form used for comparison across pages."""
    value = value.strip()
    if channel_type is ChannelType.EMAIL:
        return value.removeprefix("mailto:").lower()
    if channel_type is ChannelType.PHONE:
        value = value.removeprefix("tel:")
        prefix = "+" if value.startswith("+") else ""
        return prefix + _PHONE_STRIP_RE.sub("", value)
    return value


@dataclass(frozen=True, slots=True)
class ContactDirective:
    """How the output stage renders one canonical channel."""

    type: ChannelType
    value: str  # canonical (normalized) value; not for static markup when deferred
    render: str  # inline | deferred
    user: str = ""
    domain: str = ""
    href: str = ""  # inline only

    def to_attrs(self) -> dict[str, str]:
        if self.render == RENDER_DEFERRED:
            return {"data-user": self.user, "data-domain": self.domain, "data-render": self.render}
        attrs = {"data-render": self.render}
        if self.href:
            attrs["href"] = self.href
        return attrs

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": str(self.type), "render": self.render}
        if self.render == RENDER_DEFERRED:
            d["user"] = self.user
            d["domain"] = self.domain
        else:
            d["value"] = self.value
        return d


@dataclass
class ContactResolution:
    canonical: dict[ChannelType, ContactChannel] = field(default_factory=dict)
    directives: dict[ChannelType, ContactDirective] = field(default_factory=dict)
    findings: list[Finding] = field(default_factory=list)

    def findings_for(self, page_id: str) -> list[Finding]:
        return [f for f in self.findings if f.page_id == page_id]


def _directive(channel: ContactChannel) -> ContactDirective:
    value = normalize_value(channel.type, channel.value)
    if channel.type is ChannelType.EMAIL:
        if channel.obfuscate and "@" in value:
            user, _, domain = value.partition("@")
            return ContactDirective(channel.type, value, RENDER_DEFERRED, user=user, domain=domain)
        return ContactDirective(channel.type, value, RENDER_INLINE, href=f"mailto:{value}")
    if channel.type is ChannelType.PHONE:
        return ContactDirective(channel.type, value, RENDER_INLINE, href=f"tel:{value}")
    return ContactDirective(channel.type, value, RENDER_INLINE, href=value)


def resolve_contacts(entries: Iterable[tuple[str, ContactChannel]]) -> ContactResolution:
    """Canonicalize (page_id, channel) pairs collected across a site build."""
    result = ContactResolution()
    origin: dict[ChannelType, str] = {}

    for page_id, channel in entries:
        first = result.canonical.get(channel.type)
        if first is None:
            result.canonical[channel.type] = channel
            result.directives[channel.type] = _directive(channel)
            origin[channel.type] = page_id
            continue
        if normalize_value(channel.type, channel.value) == normalize_value(first.type, first.value):
            # any page asking for obfuscation hides the address on every page
            if channel.obfuscate and not first.obfuscate:
                upgraded = first.model_copy(update={"obfuscate": True})
                result.canonical[channel.type] = upgraded
                result.directives[channel.type] = _directive(upgraded)
            continue
        result.findings.append(
            make_finding(
                RuleId.INCONSISTENT_CONTACT_INFO,
                f"{channel.type} '{channel.value}' differs from '{first.value}' "
                f"defined on page '{origin[channel.type]}'",
                page_id=page_id,
                subject=str(channel.type),
            )
        )

    if result.findings:
        logger.info("Contact resolution: %d inconsistent channel(s)", len(result.findings))
    return result
