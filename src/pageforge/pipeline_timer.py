# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Build stage timer for per-page latency and abort diagnostics.

Created before the first stage so that an aborted build can still report
which stage raised the fatal error.
"""

from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass(slots=True)
class StageRecord:
    name: str
    start_ns: int
    end_ns: int = 0


class PipelineTimer:
    """Track builder stage transitions for latency reporting."""

    __slots__ = ("_stages", "_current", "_start_ns")

    def __init__(self) -> None:
        self._stages: list[StageRecord] = []
        self._current: StageRecord | None = None
        self._start_ns: int = time.monotonic_ns()

    def stage(self, name: str) -> None:
        """End previous stage + start new stage."""
        now = time.monotonic_ns()
        if self._current is not None:
            self._current.end_ns = now
            self._stages.append(self._current)
        self._current = StageRecord(name=name, start_ns=now)

    def finalize(self) -> None:
        """End current stage. Call on success or error."""
        if self._current is not None:
            self._current.end_ns = time.monotonic_ns()
            self._stages.append(self._current)
            self._current = None

    @property
    def last_stage(self) -> str | None:
        if self._current is not None:
            return self._current.name
        return self._stages[-1].name if self._stages else None

    def elapsed_per_stage(self) -> dict[str, float]:
        """Return {stage_name: elapsed_ms} for all stages (including current)."""
        now = time.monotonic_ns()
        result: dict[str, float] = {}
        for s in self._stages:
            result[s.name] = round((s.end_ns - s.start_ns) / 1e6, 3)
        if self._current is not None:
            result[self._current.name] = round((now - self._current.start_ns) / 1e6, 3)
        return result

    def total_ms(self) -> float:
        return round((time.monotonic_ns() - self._start_ns) / 1e6, 3)

    def abort_report(self) -> dict:
        """Structured diagnostic for a page whose build raised a fatal error."""
        stage = self.last_stage or "unknown"
        return {
            "aborted_at": stage,
            "completed_stages": [s.name for s in self._stages if s.name != stage],
            "total_ms": self.total_ms(),
            "hint": self.hint_for_stage(stage),
        }

    @staticmethod
    def hint_for_stage(stage: str) -> str:
        hints = {
            "structure": "Each page needs one header, one main and one footer region.",
            "controls": "Give every button and new-tab link visible text or a label.",
            "styles": "Define every var(--token) used in section styles in the theme file.",
        }
        return hints.get(stage, f"Aborted during '{stage}' stage.")
