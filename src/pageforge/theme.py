# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""ThemeTokenRegistry — design tokens shared by every page build.

Populated once at start-up from theme configuration, then frozen.  After
``freeze()`` the registry is read-only, so concurrent ``resolve`` calls from
worker threads need no locking; the only requirement is that ``freeze()``
happens-before the first concurrent build.

Token references in style values use CSS custom property syntax:
``var(--primary)``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError, DuplicateTokenError, ThemeFrozenError, UnknownTokenError


class TokenCategory(StrEnum):
    COLOR = "color"
    SPACING = "spacing"
    BREAKPOINT = "breakpoint"


@dataclass(frozen=True, slots=True)
class ThemeToken:
    name: str
    value: str
    category: TokenCategory

    @property
    def custom_property(self) -> str:
        return f"--{self.name}"


TOKEN_NAME_RE = re.compile(r"^[a-z][a-z0-9-]*$")
VAR_REF_RE = re.compile(r"var\(\s*--([A-Za-z0-9_-]+)\s*(?:,[^)]*)?\)")


class ThemeTokenRegistry:
    """Name → token mapping; read-only once frozen."""

    __slots__ = ("_tokens", "_frozen")

    def __init__(self) -> None:
        self._tokens: dict[str, ThemeToken] = {}
        self._frozen = False

    def define(self, name: str, value: str, category: TokenCategory | str) -> ThemeToken:
        """Add a token.  Redefining with an identical value is a no-op."""
        if self._frozen:
            raise ThemeFrozenError(f"Theme is frozen; cannot define token '{name}'")
        token = ThemeToken(name=name, value=str(value).strip(), category=TokenCategory(category))
        existing = self._tokens.get(name)
        if existing is not None:
            if existing.value != token.value:
                raise DuplicateTokenError(
                    f"Token '{name}' already defined as '{existing.value}', got '{token.value}'",
                    subject=name,
                )
            return existing
        self._tokens[name] = token
        return token

    def resolve(self, name: str) -> str:
        """Return the value of token *name*."""
        token = self._tokens.get(name)
        if token is None:
            raise UnknownTokenError(f"Unknown theme token '{name}'", subject=name)
        return token.value

    def resolve_value(self, text: str) -> str:
        """Substitute every ``var(--name)`` reference in *text*."""
        return VAR_REF_RE.sub(lambda m: self.resolve(m.group(1)), text)

    def references(self, text: str) -> list[str]:
        return VAR_REF_RE.findall(text)

    def freeze(self) -> ThemeTokenRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def custom_properties(self) -> dict[str, str]:
        """``--name: value`` pairs for the document ``:root`` block."""
        return {t.custom_property: t.value for t in self._tokens.values()}

    def by_category(self, category: TokenCategory) -> list[ThemeToken]:
        return [t for t in self._tokens.values() if t.category is category]

    def __contains__(self, name: object) -> bool:
        return name in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[ThemeToken]:
        return iter(self._tokens.values())

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> ThemeTokenRegistry:
        """Build a frozen registry from a parsed theme configuration."""
        try:
            config = ThemeConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid theme configuration: {e.error_count()} error(s)\n{e}") from e
        registry = cls()
        for category, tokens in (
            (TokenCategory.COLOR, config.tokens.color),
            (TokenCategory.SPACING, config.tokens.spacing),
            (TokenCategory.BREAKPOINT, config.tokens.breakpoint),
        ):
            for name, value in tokens.items():
                registry.define(name, value, category)
        return registry.freeze()


# ---------------------------------------------------------------------------
# Configuration schema
# ---------------------------------------------------------------------------

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FUNC_COLOR_RE = re.compile(r"^(?:rgb|rgba|hsl|hsla)\([^()]*\)$", re.IGNORECASE)
_NAMED_COLOR_RE = re.compile(r"^[a-zA-Z]+$")
_LENGTH_RE = re.compile(r"^(?:0|-?\d*\.?\d+(?:px|rem|em|%|vh|vw|ch))$")
_SCALE_RE = re.compile(r"^\d*\.?\d+$")


def _check_names(values: dict[str, str]) -> dict[str, str]:
    for name in values:
        if not TOKEN_NAME_RE.match(name):
            raise ValueError(f"invalid token name '{name}' (lowercase letters, digits, '-')")
    return values


class TokenSet(BaseModel):
    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    color: dict[str, str] = Field(default_factory=dict)
    spacing: dict[str, str] = Field(default_factory=dict)
    breakpoint: dict[str, str] = Field(default_factory=dict)

    @field_validator("color")
    @classmethod
    def _colors(cls, v: dict[str, str]) -> dict[str, str]:
        for name, value in _check_names(v).items():
            value = value.strip()
            if not (_HEX_COLOR_RE.match(value) or _FUNC_COLOR_RE.match(value) or _NAMED_COLOR_RE.match(value)):
                raise ValueError(f"color token '{name}' has invalid value '{value}'")
        return v

    @field_validator("spacing")
    @classmethod
    def _spacing(cls, v: dict[str, str]) -> dict[str, str]:
        for name, value in _check_names(v).items():
            value = value.strip()
            if not (_LENGTH_RE.match(value) or _SCALE_RE.match(value)):
                raise ValueError(f"spacing token '{name}' has invalid value '{value}'")
        return v

    @field_validator("breakpoint")
    @classmethod
    def _breakpoints(cls, v: dict[str, str]) -> dict[str, str]:
        for name, value in _check_names(v).items():
            if not _LENGTH_RE.match(value.strip()):
                raise ValueError(f"breakpoint token '{name}' has invalid value '{value}'")
        return v


class ThemeConfig(BaseModel):
    """Theme configuration file schema."""

    model_config = ConfigDict(extra="forbid")

    name: str = "default"
    tokens: TokenSet = Field(default_factory=TokenSet)
