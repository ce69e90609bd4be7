# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Input parser for routing requests.

Turns free-text user input into intents, entities, keywords and a clarity
rating using closed vocabularies and whole-word matching.

The clarity rating is an approximation: an input is "high" clarity when it
contains one of a handful of action verbs and is longer than ten
characters. It says nothing about whether the request is semantically
well-formed.

Future: a model-based classifier can replace KeywordIntentClassifier via
the ProtocolIntentClassifier seam.
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import ClassVar

from omniroute.lib.errors import invalid_input
from omniroute.routing.enums import EnumClarity, EnumEntity, EnumIntent
from omniroute.routing.models import ModelParsedInput
from omniroute.routing.protocol_intent_classifier import ProtocolIntentClassifier

logger = logging.getLogger(__name__)


def _word_pattern(words: tuple[str, ...]) -> re.Pattern[str]:
    """Compile a case-insensitive whole-word alternation."""
    alternation = "|".join(re.escape(word) for word in words)
    return re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)


class KeywordIntentClassifier:
    """Classify intents and entities with fixed word lists.

    Every category is tested independently; all matching categories are
    returned in declaration order (not input order).
    """

    INTENT_KEYWORDS: ClassVar[MappingProxyType[EnumIntent, tuple[str, ...]]] = (
        MappingProxyType(
            {
                EnumIntent.CREATE: ("create", "make", "build", "generate", "write", "add"),
                EnumIntent.VALIDATE: ("validate", "check", "verify", "ensure", "confirm"),
                EnumIntent.FIX: ("fix", "repair", "resolve", "debug", "correct"),
                EnumIntent.ANALYZE: ("analyze", "study", "examine", "investigate", "review"),
                EnumIntent.IMPROVE: ("improve", "optimize", "enhance", "refactor", "better"),
                EnumIntent.TEST: ("test", "eval", "evaluate", "assess", "coverage"),
                EnumIntent.PLAN: ("plan", "design", "architect", "strategy", "roadmap"),
            }
        )
    )

    ENTITY_KEYWORDS: ClassVar[MappingProxyType[EnumEntity, tuple[str, ...]]] = (
        MappingProxyType(
            {
                EnumEntity.PRD: ("prd", "requirements", "product requirements"),
                EnumEntity.ARCHITECTURE: ("architecture", "design", "system design"),
                EnumEntity.CODE: ("code", "implementation", "function", "class", "module"),
                EnumEntity.TESTS: ("test", "eval", "evaluation", "assertion"),
                EnumEntity.BUG: ("bug", "issue", "error", "defect", "problem"),
                EnumEntity.DOCUMENTATION: ("doc", "documentation", "readme", "guide"),
                EnumEntity.STORY: ("story", "epic", "user story", "feature"),
            }
        )
    )

    def __init__(self) -> None:
        self._intent_patterns = {
            intent: _word_pattern(words) for intent, words in self.INTENT_KEYWORDS.items()
        }
        self._entity_patterns = {
            entity: _word_pattern(words) for entity, words in self.ENTITY_KEYWORDS.items()
        }

    def extract_intents(self, text: str) -> list[EnumIntent]:
        detected = [
            intent for intent, pattern in self._intent_patterns.items() if pattern.search(text)
        ]
        return detected or [EnumIntent.GENERAL]

    def extract_entities(self, text: str) -> list[EnumEntity]:
        return [
            entity for entity, pattern in self._entity_patterns.items() if pattern.search(text)
        ]


class InputParser:
    """Parse raw request text into a ModelParsedInput.

    Never fails for string input: text with no recognisable vocabulary yields
    ``intents=[general]``, no entities and ``low`` clarity.
    """

    STOP_WORDS: ClassVar[frozenset[str]] = frozenset(
        {"the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"}
    )

    MIN_KEYWORD_LENGTH: ClassVar[int] = 3

    # Verbs that count towards clarity. Narrower than the intent vocabulary.
    CLARITY_VERBS: ClassVar[tuple[str, ...]] = (
        "create",
        "make",
        "validate",
        "check",
        "fix",
        "analyze",
        "improve",
        "test",
    )

    CLARITY_MIN_LENGTH: ClassVar[int] = 10

    def __init__(self, classifier: ProtocolIntentClassifier | None = None) -> None:
        """
        Initialize the parser.

        Args:
            classifier: Intent/entity classifier; defaults to
                KeywordIntentClassifier.
        """
        self.classifier: ProtocolIntentClassifier = classifier or KeywordIntentClassifier()
        self._clarity_pattern = _word_pattern(self.CLARITY_VERBS)

    def parse(self, raw_input: str) -> ModelParsedInput:
        """
        Parse a request.

        Args:
            raw_input: User's request text

        Returns:
            ModelParsedInput with intents, entities, keywords and clarity

        Raises:
            OnexError: INVALID_INPUT if raw_input is not a string
        """
        if not isinstance(raw_input, str):
            raise invalid_input(
                "Routing input must be a string",
                received_type=type(raw_input).__name__,
            )

        lowered = raw_input.lower()

        intents = list(dict.fromkeys(self.classifier.extract_intents(lowered)))
        if not intents:
            # Custom classifiers may forget the fallback
            intents = [EnumIntent.GENERAL]

        parsed = ModelParsedInput(
            raw_text=raw_input,
            intents=intents,
            entities=list(dict.fromkeys(self.classifier.extract_entities(lowered))),
            keywords=self.extract_keywords(lowered),
            clarity=self.assess_clarity(raw_input),
        )

        logger.debug(
            "Parsed routing input",
            extra={
                "intents": [i.value for i in parsed.intents],
                "entities": [e.value for e in parsed.entities],
                "keyword_count": len(parsed.keywords),
                "clarity": parsed.clarity.value,
            },
        )
        return parsed

    def extract_keywords(self, text: str) -> list[str]:
        """Whitespace tokens of 3+ chars that are not stop words; order and repeats kept."""
        return [
            word
            for word in text.lower().split()
            if len(word) >= self.MIN_KEYWORD_LENGTH and word not in self.STOP_WORDS
        ]

    def assess_clarity(self, text: str) -> EnumClarity:
        has_verb = bool(self._clarity_pattern.search(text))
        is_long_enough = len(text) > self.CLARITY_MIN_LENGTH

        if has_verb and is_long_enough:
            return EnumClarity.HIGH
        if has_verb or is_long_enough:
            return EnumClarity.MEDIUM
        return EnumClarity.LOW


__all__ = [
    "InputParser",
    "KeywordIntentClassifier",
]
