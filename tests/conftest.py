# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import pageforge  # noqa: F401
except ImportError:
    raise ImportError("pageforge is not installed. Run: pip install -e '.[dev]'") from None

import logging

import pytest
import structlog


@pytest.fixture
def theme():
    """Frozen registry with the print-shop tokens."""
    from tests._page_helpers import theme as make_theme

    return make_theme()


@pytest.fixture(autouse=True)
def _reset_logging():
    """CLI tests reconfigure the root logger; restore it afterwards."""
    root = logging.getLogger()
    old_handlers = root.handlers[:]
    old_level = root.level
    yield
    root.handlers = old_handlers
    root.setLevel(old_level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
