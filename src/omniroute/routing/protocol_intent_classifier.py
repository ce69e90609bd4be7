# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Protocol for intent and entity classification.

The input parser delegates intent and entity detection to an
``IntentClassifier``. The default implementation is the fixed-vocabulary
:class:`~omniroute.routing.input_parser.KeywordIntentClassifier`; a
model-based classifier can be dropped in without touching the matcher,
aggregator or scorer.

Implementations must be deterministic and must never return an empty
intent list (return ``[EnumIntent.GENERAL]`` instead).

Example:
    >>> class AlwaysPlan:
    ...     def extract_intents(self, text: str) -> list[EnumIntent]:
    ...         return [EnumIntent.PLAN]
    ...     def extract_entities(self, text: str) -> list[EnumEntity]:
    ...         return []
    >>> isinstance(AlwaysPlan(), ProtocolIntentClassifier)
    True
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from omniroute.routing.enums import EnumEntity, EnumIntent


@runtime_checkable
class ProtocolIntentClassifier(Protocol):
    """Extracts intents and entities from request text."""

    def extract_intents(self, text: str) -> list[EnumIntent]:
        """Return detected intents; never empty."""
        ...

    def extract_entities(self, text: str) -> list[EnumEntity]:
        """Return detected entities; may be empty."""
        ...


__all__ = ["ProtocolIntentClassifier"]
