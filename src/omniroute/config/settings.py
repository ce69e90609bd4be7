# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""OmniRoute settings for the routing and prediction engines.

Every tunable constant of the router (confidence weights, action thresholds,
history capacity, pattern learning steps) and of the prediction engine
(learning rate, probability clamp) lives here so that a deployment can
change them through environment variables without touching code.

Environment variables use the OMNIROUTE_ prefix, e.g.::

    OMNIROUTE_HISTORY_CAPACITY=250
    OMNIROUTE_AUTO_ROUTE_THRESHOLD=0.85
    OMNIROUTE_REGISTRY_PATH=/etc/omniroute/agent_capabilities.yaml

Components never read the singleton implicitly: they take a ``Settings``
argument and only fall back to :func:`get_settings` when none is passed.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_and_load_env() -> None:
    """Load .env file from project root."""
    from dotenv import load_dotenv

    current = Path(__file__).resolve().parent
    for _ in range(10):
        env_file = current / ".env"
        if env_file.exists():
            load_dotenv(env_file, override=False)
            return
        parent = current.parent
        if parent == current:
            break
        current = parent


_find_and_load_env()

logger = logging.getLogger(__name__)

_WEIGHT_TOLERANCE = 1e-6


class Settings(BaseSettings):
    """Settings for the OmniRoute routing and prediction engines."""

    # =========================================================================
    # AGENT CAPABILITY REGISTRY
    # =========================================================================
    registry_path: Path | None = Field(
        default=None,
        description=(
            "Path to an agent capability registry YAML file. "
            "When unset, the packaged default registry is used."
        ),
    )

    # =========================================================================
    # ROUTING HISTORY / LEARNING LOOP
    # =========================================================================
    history_capacity: int = Field(
        default=100,
        ge=1,
        le=100_000,
        description="Maximum routing history entries kept (oldest evicted first)",
    )
    pattern_initial_strength: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Strength of a pattern created by its first successful outcome",
    )
    pattern_strength_step: float = Field(
        default=0.1,
        gt=0.0,
        le=1.0,
        description="Strength change applied per success (+) or failure (-)",
    )

    # =========================================================================
    # CANDIDATE MATCHING
    # =========================================================================
    keyword_primary_threshold: int = Field(
        default=2,
        ge=1,
        description="Keyword overlaps needed for a keyword candidate to be primary",
    )
    pattern_failure_threshold: int = Field(
        default=2,
        ge=1,
        description="Repeated failures of one kind that trigger the failure patterns",
    )

    # =========================================================================
    # CONFIDENCE SCORING
    # -------------------------------------------------------------------------
    # The four weights must sum to 1.0; see validate_weights().
    # =========================================================================
    weight_intent_clarity: float = Field(default=0.40, ge=0.0, le=1.0)
    weight_agent_match: float = Field(default=0.35, ge=0.0, le=1.0)
    weight_context_relevance: float = Field(default=0.15, ge=0.0, le=1.0)
    weight_historical_success: float = Field(default=0.10, ge=0.0, le=1.0)
    agent_match_divisor: float = Field(
        default=2.0,
        gt=0.0,
        description="Top candidate score that maps to full agent match strength",
    )
    default_historical_success: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Historical success used when no resolved matching routing exists",
    )
    auto_route_threshold: float = Field(
        default=0.9,
        ge=0.0,
        le=1.0,
        description="Overall confidence at or above which routing is automatic",
    )
    suggest_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Overall confidence at or above which routing is suggested",
    )

    # =========================================================================
    # PREDICTION ENGINE
    # =========================================================================
    learning_rate: float = Field(
        default=0.1,
        gt=0.0,
        lt=1.0,
        description="Step used to move transition probabilities toward observations",
    )
    min_probability: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Lower clamp for transition probabilities",
    )
    max_probability: float = Field(
        default=0.95,
        ge=0.0,
        le=1.0,
        description="Upper clamp for transition probabilities",
    )
    failure_prediction_probability: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Probability assigned to reflection when recent failures exist",
    )
    suggestion_acceptance_prior: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Acceptance rate assumed for suggestion types never offered",
    )
    test_coverage_target: float = Field(
        default=0.9,
        ge=0.0,
        le=1.0,
        description="Coverage below which a test coverage suggestion is raised",
    )

    # =========================================================================
    # LOGGING
    # =========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Level applied by omniroute.lib.logging_config.configure_logging",
    )

    # =========================================================================
    # PYDANTIC SETTINGS CONFIG
    # =========================================================================
    model_config = SettingsConfigDict(
        env_prefix="OMNIROUTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # VALIDATION
    # =========================================================================
    @model_validator(mode="after")
    def validate_weights(self) -> "Settings":
        """Confidence weights must sum to 1.0 so that overall stays in [0, 1]."""
        total = sum(self.confidence_weights.values())
        if abs(total - 1.0) > _WEIGHT_TOLERANCE:
            raise ValueError(f"Confidence weights must sum to 1.0, got {total:.6f}")
        return self

    @model_validator(mode="after")
    def validate_thresholds(self) -> "Settings":
        """Action thresholds and probability clamps must be ordered."""
        if self.suggest_threshold > self.auto_route_threshold:
            raise ValueError(
                "suggest_threshold must not exceed auto_route_threshold "
                f"({self.suggest_threshold} > {self.auto_route_threshold})"
            )
        if self.min_probability > self.max_probability:
            raise ValueError(
                "min_probability must not exceed max_probability "
                f"({self.min_probability} > {self.max_probability})"
            )
        return self

    # =========================================================================
    # HELPER METHODS
    # =========================================================================
    @property
    def confidence_weights(self) -> dict[str, float]:
        """Confidence weights keyed by breakdown component name."""
        return {
            "intent_clarity": self.weight_intent_clarity,
            "agent_match_strength": self.weight_agent_match,
            "context_relevance": self.weight_context_relevance,
            "historical_success": self.weight_historical_success,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get singleton settings instance.

    Returns a cached Settings instance created lazily on first call.

    Note:
        For test isolation, use `clear_settings_cache()` to reset the
        singleton before each test that needs fresh settings.
    """
    instance = Settings()
    logger.debug(
        "Loaded OmniRoute settings",
        extra={
            "history_capacity": instance.history_capacity,
            "registry_path": str(instance.registry_path) if instance.registry_path else None,
        },
    )
    return instance


def clear_settings_cache() -> None:
    """Clear the settings singleton cache for test isolation.

    Example:
        @pytest.fixture(autouse=True)
        def reset_settings():
            clear_settings_cache()
            yield
            clear_settings_cache()
    """
    get_settings.cache_clear()
