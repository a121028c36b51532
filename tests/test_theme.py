# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for ThemeTokenRegistry and theme configuration validation."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from pageforge.errors import ConfigError, DuplicateTokenError, ThemeFrozenError, UnknownTokenError
from pageforge.findings import RuleId
from pageforge.theme import ThemeTokenRegistry, TokenCategory


@pytest.fixture
def registry():
    reg = ThemeTokenRegistry()
    reg.define("primary", "#1f6feb", "color")
    reg.define("md", "1rem", TokenCategory.SPACING)
    return reg


class TestDefineResolve:
    def test_resolve(self, registry):
        assert registry.resolve("primary") == "#1f6feb"
        assert registry.resolve("md") == "1rem"

    def test_resolve_is_idempotent(self, registry):
        assert {registry.resolve("primary") for _ in range(50)} == {"#1f6feb"}

    def test_unknown_token(self, registry):
        with pytest.raises(UnknownTokenError) as exc_info:
            registry.resolve("accent")
        assert exc_info.value.rule_id is RuleId.UNKNOWN_TOKEN
        assert exc_info.value.subject == "accent"

    def test_duplicate_with_different_value(self, registry):
        with pytest.raises(DuplicateTokenError) as exc_info:
            registry.define("primary", "#000000", "color")
        assert exc_info.value.rule_id is RuleId.DUPLICATE_TOKEN
        assert registry.resolve("primary") == "#1f6feb"

    def test_identical_redefinition_is_noop(self, registry):
        registry.define("primary", "#1f6feb", "color")
        assert len(registry) == 2

    def test_by_category(self, registry):
        assert [t.name for t in registry.by_category(TokenCategory.COLOR)] == ["primary"]


class TestFreeze:
    def test_define_after_freeze_rejected(self, registry):
        registry.freeze()
        with pytest.raises(ThemeFrozenError):
            registry.define("accent", "#ff0000", "color")

    def test_resolve_after_freeze(self, registry):
        registry.freeze()
        assert registry.frozen
        assert registry.resolve("primary") == "#1f6feb"

    def test_concurrent_resolution(self, registry):
        registry.freeze()
        with ThreadPoolExecutor(max_workers=8) as pool:
            values = list(pool.map(lambda _: registry.resolve("md"), range(200)))
        assert set(values) == {"1rem"}


class TestReferences:
    def test_resolve_value_substitutes_all(self, registry):
        assert registry.resolve_value("var(--md) solid var(--primary)") == "1rem solid #1f6feb"

    def test_resolve_value_with_fallback_syntax(self, registry):
        assert registry.resolve_value("var(--primary, red)") == "#1f6feb"

    def test_resolve_value_plain_text_untouched(self, registry):
        assert registry.resolve_value("2px dashed #ccc") == "2px dashed #ccc"

    def test_resolve_value_unknown_raises(self, registry):
        with pytest.raises(UnknownTokenError):
            registry.resolve_value("var(--accent)")

    def test_references_listed_in_order(self, registry):
        assert registry.references("var(--md) var( --primary ) var(--md)") == ["md", "primary", "md"]

    def test_custom_properties(self, registry):
        assert registry.custom_properties() == {"--primary": "#1f6feb", "--md": "1rem"}


class TestFromConfig:
    def test_valid_config_is_frozen(self):
        reg = ThemeTokenRegistry.from_config(
            {
                "name": "print-shop",
                "tokens": {
                    "color": {"primary": "#1f6feb", "ink": "rgb(20, 20, 20)", "paper": "white"},
                    "spacing": {"md": "1rem", "scale": 1.25},
                    "breakpoint": {"tablet": "768px"},
                },
            }
        )
        assert reg.frozen
        assert len(reg) == 6
        assert reg.resolve("scale") == "1.25"

    def test_empty_config(self):
        assert len(ThemeTokenRegistry.from_config({})) == 0

    @pytest.mark.parametrize(
        "tokens",
        [
            {"color": {"primary": "not a color!"}},
            {"spacing": {"md": "wide"}},
            {"breakpoint": {"tablet": "1.5"}},
            {"color": {"Primary": "#fff"}},
            {"shadow": {"card": "0 1px 2px"}},
        ],
    )
    def test_invalid_config(self, tokens):
        with pytest.raises(ConfigError):
            ThemeTokenRegistry.from_config({"tokens": tokens})

    def test_conflicting_names_across_categories(self):
        with pytest.raises(DuplicateTokenError):
            ThemeTokenRegistry.from_config({"tokens": {"color": {"brand": "#fff"}, "spacing": {"brand": "2rem"}}})
