# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""structlog + stdlib bridge. Terminal: ConsoleRenderer, CI/--json-logs: JSONRenderer.

Leaf module — no pageforge imports. Modules log through
``logging.getLogger(__name__)``; the batch build binds ``page_id`` via
structlog contextvars so it shows up on every line of a page build.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

LEVEL_ENV = "PAGEFORGE_LOG_LEVEL"


def resolve_level(level: str | None = None) -> int:
    """Explicit *level* → ``PAGEFORGE_LOG_LEVEL`` → WARNING."""
    name = level or os.environ.get(LEVEL_ENV, "") or "WARNING"
    return getattr(logging, name.strip().upper(), logging.WARNING)


def configure(*, json_output: bool = False, level: str | None = None) -> None:
    """Route stdlib logging through structlog processors to stderr.

    Args:
        json_output: True for JSON lines, False for human-readable console output.
        level: Root logger level name; falls back to the environment, then WARNING.
    """
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolve_level(level))
