# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Bounded routing history and the outcome learning loop.

Every routing decision is appended with a monotonic ``routing_id``. When the
buffer exceeds its capacity the oldest entry is evicted. Ids are never
reused, so a handle that outlived its entry is rejected instead of silently
addressing a newer one.

Reported outcomes feed a table of learned patterns keyed by the exact input
string:

- success: create the pattern (strength 0.6) or strengthen it by 0.1
- failure: weaken an existing pattern by 0.1; unknown inputs are ignored

Strength always stays within [0, 1].

Example:
    >>> history = RoutingHistory(capacity=2)
    >>> rid = history.record("create a prd", decision, phase="discovery")
    >>> history.update_outcome(rid, "success").outcome
    <EnumRoutingOutcome.SUCCESS: 'success'>
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from omniroute.config.settings import Settings, get_settings
from omniroute.lib.errors import EnumCoreErrorCode, ModelOnexError, invalid_input
from omniroute.routing.enums import EnumRoutingOutcome
from omniroute.routing.models import (
    ModelRoutingDecision,
    ModelRoutingHistoryEntry,
    ModelRoutingPattern,
    ModelRoutingStatistics,
)

logger = logging.getLogger(__name__)


class RoutingHistory:
    """Thread-safe FIFO of routing entries plus learned patterns."""

    def __init__(self, capacity: int | None = None, settings: Settings | None = None):
        """
        Initialize the history.

        Args:
            capacity: Maximum entries kept; defaults to settings.history_capacity
            settings: Learning parameters (defaults to get_settings())
        """
        self.settings = settings or get_settings()
        self.capacity = capacity if capacity is not None else self.settings.history_capacity
        if self.capacity < 1:
            raise invalid_input("History capacity must be at least 1", capacity=self.capacity)

        self._lock = threading.Lock()
        self._entries: OrderedDict[int, ModelRoutingHistoryEntry] = OrderedDict()
        self._patterns: dict[str, ModelRoutingPattern] = {}
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._entries)

    # =========================================================================
    # Recording
    # =========================================================================

    def record(
        self,
        input_text: str,
        decision: ModelRoutingDecision,
        phase: str | None = None,
    ) -> int:
        """
        Append a routing decision with no outcome.

        Returns:
            The routing id (handle) of the new entry
        """
        with self._lock:
            routing_id = self._next_id
            self._next_id += 1
            self._entries[routing_id] = ModelRoutingHistoryEntry(
                routing_id=routing_id,
                input=input_text,
                agents=decision.agents_key,
                mode=decision.collaboration_mode,
                confidence=decision.confidence.overall,
                context=phase,
            )
            self._evict_overflow()
        return routing_id

    def update_outcome(
        self,
        routing_id: int,
        outcome: EnumRoutingOutcome | str,
        feedback: Any = None,
    ) -> ModelRoutingHistoryEntry:
        """
        Attach an outcome to a recorded routing and learn from it.

        Args:
            routing_id: Handle returned by record()
            outcome: "success" or "failure"
            feedback: Free-form feedback stored with the entry

        Returns:
            The updated entry

        Raises:
            OnexError: INVALID_INPUT for an unknown outcome value,
                INDEX_OUT_OF_RANGE for an unknown or evicted routing id
        """
        try:
            resolved = EnumRoutingOutcome(outcome)
        except ValueError as e:
            raise invalid_input(
                f"Unknown routing outcome: {outcome!r}",
                allowed=[o.value for o in EnumRoutingOutcome],
            ) from e

        with self._lock:
            entry = self._entries.get(routing_id)
            if entry is None:
                raise ModelOnexError(
                    EnumCoreErrorCode.INDEX_OUT_OF_RANGE,
                    f"Routing id {routing_id} is unknown or was evicted from history",
                    {"routing_id": routing_id, "capacity": self.capacity},
                )
            entry.outcome = resolved
            entry.feedback = feedback
            self._learn(entry)
            updated = entry.model_copy()

        logger.info(
            f"Recorded {resolved.value} outcome for routing {routing_id}",
            extra={"routing_id": routing_id, "outcome": resolved.value, "agents": updated.agents},
        )
        return updated

    def _learn(self, entry: ModelRoutingHistoryEntry) -> None:
        step = self.settings.pattern_strength_step
        pattern = self._patterns.get(entry.input)

        if entry.outcome == EnumRoutingOutcome.SUCCESS:
            if pattern is None:
                self._patterns[entry.input] = ModelRoutingPattern(
                    input=entry.input,
                    agents=entry.agents,
                    context=entry.context,
                    success_count=1,
                    failure_count=0,
                    strength=self.settings.pattern_initial_strength,
                )
            else:
                pattern.success_count += 1
                pattern.strength = min(1.0, pattern.strength + step)

        elif entry.outcome == EnumRoutingOutcome.FAILURE and pattern is not None:
            pattern.failure_count += 1
            pattern.strength = max(0.0, pattern.strength - step)

    def _evict_overflow(self) -> None:
        while len(self._entries) > self.capacity:
            evicted_id, _ = self._entries.popitem(last=False)
            logger.debug("Evicted routing %s from history", evicted_id)

    # =========================================================================
    # Queries
    # =========================================================================

    def entries(self) -> list[ModelRoutingHistoryEntry]:
        """Snapshot of the entries, oldest first."""
        with self._lock:
            return [entry.model_copy() for entry in self._entries.values()]

    def get(self, routing_id: int) -> ModelRoutingHistoryEntry | None:
        with self._lock:
            entry = self._entries.get(routing_id)
            return entry.model_copy() if entry is not None else None

    def patterns(self) -> dict[str, ModelRoutingPattern]:
        with self._lock:
            return {key: pattern.model_copy() for key, pattern in self._patterns.items()}

    def get_pattern(self, input_text: str) -> ModelRoutingPattern | None:
        with self._lock:
            pattern = self._patterns.get(input_text)
            return pattern.model_copy() if pattern is not None else None

    def statistics(self) -> ModelRoutingStatistics:
        """Counts over the buffer; rates are relative to all entries, resolved or not."""
        with self._lock:
            entries = list(self._entries.values())
            pattern_count = len(self._patterns)

        total = len(entries)
        successful = sum(1 for e in entries if e.outcome == EnumRoutingOutcome.SUCCESS)
        failed = sum(1 for e in entries if e.outcome == EnumRoutingOutcome.FAILURE)

        return ModelRoutingStatistics(
            total_routings=total,
            successful=successful,
            failed=failed,
            success_rate=successful / total if total else 0.0,
            average_confidence=sum(e.confidence for e in entries) / total if total else 0.0,
            patterns=pattern_count,
        )

    # =========================================================================
    # Persistence
    # =========================================================================

    def export_data(self) -> dict[str, Any]:
        """
        Export history, patterns and statistics as JSON-compatible values.

        Returns:
            {"history": [...], "patterns": [[input, pattern], ...], "statistics": {...}}
        """
        with self._lock:
            history = [entry.model_dump(mode="json") for entry in self._entries.values()]
            patterns = [
                [key, pattern.model_dump(mode="json")] for key, pattern in self._patterns.items()
            ]
        return {
            "history": history,
            "patterns": patterns,
            "statistics": self.statistics().model_dump(mode="json"),
        }

    def import_data(self, data: Mapping[str, Any]) -> None:
        """
        Replace history and/or patterns from an export payload.

        Missing keys leave that part untouched. Only the newest ``capacity``
        entries are kept. Entries without an id get fresh ids and the id
        counter resumes above the highest imported id.

        Raises:
            OnexError: INVALID_INPUT if the payload is malformed
        """
        if not isinstance(data, Mapping):
            raise invalid_input(
                "Routing history import must be a mapping",
                received_type=type(data).__name__,
            )

        try:
            raw_history = data.get("history")
            raw_patterns = data.get("patterns")
            history = (
                [dict(item) for item in raw_history][-self.capacity :]
                if raw_history is not None
                else None
            )
            patterns = (
                [self._parse_pattern(item) for item in raw_patterns]
                if raw_patterns is not None
                else None
            )
        except (TypeError, ValueError) as e:
            raise invalid_input("Malformed routing history payload", cause=str(e)) from e

        with self._lock:
            if history is not None:
                self._import_history(history)
            if patterns is not None:
                self._patterns = {pattern.input: pattern for pattern in patterns}

        logger.info(
            "Imported routing data",
            extra={
                "history_entries": len(history) if history is not None else None,
                "patterns": len(patterns) if patterns is not None else None,
            },
        )

    def _import_history(self, raw_entries: list[dict[str, Any]]) -> None:
        entries: OrderedDict[int, ModelRoutingHistoryEntry] = OrderedDict()
        try:
            explicit_ids = [
                int(item["routing_id"])
                for item in raw_entries
                if item.get("routing_id") is not None
            ]
            next_id = max([self._next_id - 1, *explicit_ids]) + 1

            for item in raw_entries:
                if item.get("routing_id") is None:
                    item["routing_id"] = next_id
                    next_id += 1
                entry = ModelRoutingHistoryEntry.model_validate(item)
                entries[entry.routing_id] = entry
        except ValidationError as e:
            raise invalid_input(
                "Malformed routing history entry",
                fields=sorted({".".join(str(x) for x in err["loc"]) for err in e.errors()}),
            ) from e
        except (TypeError, ValueError) as e:
            raise invalid_input("Malformed routing id in history payload", cause=str(e)) from e

        self._entries = entries
        self._next_id = next_id
        self._evict_overflow()

    @staticmethod
    def _parse_pattern(item: Any) -> ModelRoutingPattern:
        key, raw = item
        payload = {"input": key, **dict(raw)}
        return ModelRoutingPattern.model_validate(payload)

    def clear(self) -> None:
        """Drop all entries and patterns. Ids keep increasing."""
        with self._lock:
            self._entries.clear()
            self._patterns.clear()


__all__ = ["RoutingHistory"]
