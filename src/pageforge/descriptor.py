# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Pydantic input models for page descriptors.

Descriptors are loaded from YAML/JSON content files and are immutable after
construction (``frozen=True``).  A PageDescriptor owns its sections and
content blocks exclusively; nothing is shared between pages.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# ---------------------------------------------------------------------------
# Content blocks
# ---------------------------------------------------------------------------


class TextBlock(_Frozen):
    type: Literal["text"] = "text"
    text: str


class ImageSource(_Frozen):
    """One candidate of a responsive source set."""

    url: str
    width: int = Field(gt=0, description="Intrinsic width in pixels (w descriptor)")


class ImageBlock(_Frozen):
    type: Literal["image"] = "image"
    src: str
    alt: str | None = None
    width: int | None = Field(None, ge=0, description="Intended display width in pixels")
    height: int | None = Field(None, ge=0, description="Intended display height in pixels")
    below_fold: bool = False
    sources: tuple[ImageSource, ...] = ()
    sizes: str | None = Field(None, description="sizes attribute for the source set")


class ButtonBlock(_Frozen):
    type: Literal["button"] = "button"
    text: str = ""
    label: str | None = None  # explicit accessible label (aria-label)
    href: str | None = None  # button-styled link; None = in-page action
    icon: str | None = None  # icon class from the external icon set


class LinkBlock(_Frozen):
    type: Literal["link"] = "link"
    text: str = ""
    href: str
    label: str | None = None
    new_context: bool = False  # opens a new tab/window


ContentBlock = Annotated[
    TextBlock | ImageBlock | ButtonBlock | LinkBlock,
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Sections + page
# ---------------------------------------------------------------------------


class SectionKind(StrEnum):
    HERO = "hero"
    SERVICES = "services"
    FEATURES = "features"
    FOOTER = "footer"
    GENERIC = "generic"


class Landmark(StrEnum):
    HEADER = "header"
    MAIN = "main"
    FOOTER = "footer"


class Section(_Frozen):
    kind: SectionKind = SectionKind.GENERIC
    id: str | None = Field(None, description="In-page anchor target")
    heading: str | None = None
    landmark: Landmark | None = Field(None, description="Override for the kind's default landmark")
    blocks: tuple[ContentBlock, ...] = ()
    style: dict[str, str] = Field(default_factory=dict, description="CSS declarations; values may use var(--token)")

    @property
    def has_body(self) -> bool:
        return bool(self.blocks)


class NavLink(_Frozen):
    label: str
    href: str


class ResourceKind(StrEnum):
    SCRIPT = "script"
    STYLESHEET = "stylesheet"
    FONT = "font"


class LoadStrategy(StrEnum):
    BLOCKING = "blocking"
    DEFERRED = "deferred"


class ExternalResource(_Frozen):
    url: str
    kind: ResourceKind
    version: str | None = None
    load: LoadStrategy = LoadStrategy.DEFERRED
    critical: bool = False
    font_display_swap: bool = False  # font-display: swap (fonts only)


class ChannelType(StrEnum):
    EMAIL = "email"
    PHONE = "phone"
    FORM = "form"


class ContactChannel(_Frozen):
    type: ChannelType
    value: str
    obfuscate: bool = False


class PageDescriptor(_Frozen):
    id: str = Field(min_length=1)
    title: str
    description: str = ""
    lang: str = "en"
    sections: tuple[Section, ...] = ()
    nav: tuple[NavLink, ...] = ()
    contacts: tuple[ContactChannel, ...] = ()
    resources: tuple[ExternalResource, ...] = ()
