# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""First-order agent transition model.

Rows are keyed by ``(from_agent, scope)`` where scope is a workflow phase, a
situation label (``on_failure``, ``validation``...) or ``"default"``. Each
row maps candidate next agents to probabilities.

Row invariant, restored after seeding, every observation and every import:

- each probability lies in ``[min_probability, max_probability]``
- the row sums to at most 1.0

Both hold whenever ``len(row) * min_probability <= 1``. For longer rows
the sum bound wins and the lower clamp is relaxed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, NamedTuple

from omniroute.config.settings import Settings, get_settings
from omniroute.prediction.models import ModelTransition

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "default"

_SUM_TOLERANCE = 1e-9


class TransitionSeed(NamedTuple):
    from_agent: str
    to_agent: str
    probability: float
    scope: str = DEFAULT_SCOPE


DEFAULT_TRANSITIONS: tuple[TransitionSeed, ...] = (
    # Domain research
    TransitionSeed("domain-researcher", "oracle", 0.9),
    TransitionSeed("oracle", "eval", 0.7, "domain_research"),
    # Discovery
    TransitionSeed("pm", "architect", 0.85, "after_prd"),
    TransitionSeed("pm", "oracle", 0.8, "validation"),
    TransitionSeed("pm", "eval", 0.6, "test_foundation"),
    # Architecture
    TransitionSeed("architect", "oracle", 0.9, "validation"),
    TransitionSeed("architect", "validator", 0.7, "validation"),
    TransitionSeed("architect", "dev", 0.75, "after_architecture"),
    # Development
    TransitionSeed("dev", "eval", 0.95, "development"),
    TransitionSeed("dev", "oracle", 0.7, "semantic_check"),
    TransitionSeed("dev", "reflection", 0.3, "on_failure"),
    # Eval
    TransitionSeed("eval", "validator", 0.8, "coverage_check"),
    TransitionSeed("eval", "reflection", 0.6, "on_failure"),
    TransitionSeed("eval", "dev", 0.5, "on_failure"),
    # Reflection
    TransitionSeed("reflection", "oracle", 0.8, "truth_check"),
    TransitionSeed("reflection", "dev", 0.9, "after_analysis"),
    TransitionSeed("reflection", "pm", 0.4, "requirements_issue"),
)


def row_key(from_agent: str, scope: str | None) -> str:
    """Serialized row key, e.g. ``"pm:validation"``."""
    return f"{from_agent}:{scope or DEFAULT_SCOPE}"


class TransitionModel:
    """Sparse transition matrix with learning-rate updates.

    Not thread-safe on its own; PredictionEngine serializes access.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        seeds: Iterable[TransitionSeed] | None = DEFAULT_TRANSITIONS,
    ):
        self.settings = settings or get_settings()
        self._rows: dict[tuple[str, str], dict[str, float]] = {}
        if seeds:
            self.seed(seeds)

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, key: object) -> bool:
        return key in self._rows

    def keys(self) -> list[tuple[str, str]]:
        return list(self._rows)

    def seed(self, seeds: Iterable[TransitionSeed]) -> None:
        """Add seed probabilities, then normalize every touched row."""
        touched: set[tuple[str, str]] = set()
        for seed in seeds:
            key = (seed.from_agent, seed.scope or DEFAULT_SCOPE)
            self._rows.setdefault(key, {})[seed.to_agent] = float(seed.probability)
            touched.add(key)
        for key in touched:
            self._normalize(self._rows[key])

    def row(self, from_agent: str, scope: str | None = None) -> list[ModelTransition]:
        """Transitions of one row in insertion order (empty if unknown)."""
        cells = self._rows.get((from_agent, scope or DEFAULT_SCOPE), {})
        return [ModelTransition(agent=agent, probability=p) for agent, p in cells.items()]

    def observe(self, from_agent: str, to_agent: str, scope: str | None = None) -> None:
        """
        Move the row toward an observed transition.

        The observed target moves toward 1 by the learning rate and its
        siblings decay by the same factor; a target seen for the first time
        enters at the learning rate. The row is then clamped and rebalanced.
        """
        lr = self.settings.learning_rate
        cells = self._rows.setdefault((from_agent, scope or DEFAULT_SCOPE), {})

        for agent in cells:
            if agent != to_agent:
                cells[agent] *= 1.0 - lr

        if to_agent in cells:
            cells[to_agent] += lr * (1.0 - cells[to_agent])
        else:
            cells[to_agent] = lr

        self._normalize(cells)

    def _normalize(self, cells: dict[str, float]) -> None:
        if not cells:
            return
        low = self.settings.min_probability
        high = self.settings.max_probability

        for agent, p in cells.items():
            cells[agent] = min(high, max(low, p))

        total = sum(cells.values())
        if total <= 1.0 + _SUM_TOLERANCE:
            return

        floor_mass = low * len(cells)
        if floor_mass < 1.0:
            # Shrink only the mass above the floor so no cell drops below it
            excess = total - floor_mass
            scale = (1.0 - floor_mass) / excess
            for agent, p in cells.items():
                cells[agent] = low + (p - low) * scale
        else:
            logger.warning(
                "Transition row too long for min_probability; relaxing lower clamp",
                extra={"row_length": len(cells), "min_probability": low},
            )
            for agent, p in cells.items():
                cells[agent] = p / total

    # =========================================================================
    # Persistence
    # =========================================================================

    def export_rows(self) -> list[list[Any]]:
        """``[["from:scope", [{"agent", "probability"}, ...]], ...]``"""
        return [
            [
                row_key(from_agent, scope),
                [{"agent": agent, "probability": p} for agent, p in cells.items()],
            ]
            for (from_agent, scope), cells in self._rows.items()
        ]

    def import_rows(self, rows: Iterable[Any]) -> None:
        """
        Replace all rows from :meth:`export_rows` output.

        Raises:
            ValueError: If a row key or cell is malformed
        """
        imported: dict[tuple[str, str], dict[str, float]] = {}
        for key, cells in rows:
            from_agent, sep, scope = str(key).partition(":")
            if not from_agent:
                raise ValueError(f"Malformed transition row key: {key!r}")
            row: dict[str, float] = {}
            for cell in cells:
                if not isinstance(cell, Mapping):
                    raise ValueError(f"Malformed transition cell in row {key!r}: {cell!r}")
                try:
                    row[str(cell["agent"])] = float(cell["probability"])
                except (KeyError, TypeError) as e:
                    raise ValueError(
                        f"Malformed transition cell in row {key!r}: {cell!r}"
                    ) from e
            self._normalize(row)
            imported[(from_agent, scope if sep and scope else DEFAULT_SCOPE)] = row
        self._rows = imported


__all__ = [
    "DEFAULT_SCOPE",
    "DEFAULT_TRANSITIONS",
    "TransitionModel",
    "TransitionSeed",
    "row_key",
]
