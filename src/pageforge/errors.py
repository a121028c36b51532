# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""pageforge exception hierarchy.

All pageforge-specific errors inherit from PageForgeError, allowing callers
to catch the base class for any build failure or specific subclasses
for targeted handling.  Fatal build errors carry the ``rule_id`` they are
reported under.
"""

from __future__ import annotations

from .findings import RuleId


class PageForgeError(Exception):
    """Base exception for all pageforge errors."""


class ConfigError(PageForgeError):
    """Theme configuration or page descriptor could not be loaded."""

    def __init__(self, message: str, *, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class FatalBuildError(PageForgeError):
    """Aborts the build of a single page."""

    rule_id: RuleId

    def __init__(self, message: str, *, subject: str = "") -> None:
        super().__init__(message)
        self.subject = subject
        self.stage = ""  # builder stage that raised, set by the builder


class StructuralConflictError(FatalBuildError):
    """Landmark invariant violated (duplicate or missing header/main/footer)."""

    rule_id = RuleId.STRUCTURAL_CONFLICT


class AmbiguousControlError(FatalBuildError):
    """Interactive element has neither a label nor visible text."""

    rule_id = RuleId.AMBIGUOUS_CONTROL


class ThemeError(FatalBuildError):
    """Theme token registry failure."""


class UnknownTokenError(ThemeError):
    """Referenced theme token is not defined."""

    rule_id = RuleId.UNKNOWN_TOKEN


class DuplicateTokenError(ThemeError):
    """Theme token redefined with a different value."""

    rule_id = RuleId.DUPLICATE_TOKEN


class ThemeFrozenError(PageForgeError):
    """Theme registry mutated after initialization."""
