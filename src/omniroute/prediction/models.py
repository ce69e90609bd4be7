# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Data models for the prediction engine.

Inputs (workflow steps and signals) accept the camelCase spellings emitted
by JavaScript orchestrators as well as snake_case.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from omniroute.prediction.enums import (
    EnumPredictionSource,
    EnumPriority,
    EnumSuggestionType,
)

# =============================================================================
# Inputs
# =============================================================================


class ModelWorkflowStep(BaseModel):
    """One step of an observed workflow: which agent ran, in which phase."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    agent: str = Field(..., min_length=1)
    phase: str | None = Field(
        default=None,
        validation_alias=AliasChoices("phase", "context", "current_phase", "currentPhase"),
    )


class ModelTaskCharacteristics(BaseModel):
    """Characteristics of an upcoming task. Unknown values never trigger a bottleneck."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    complexity: float | None = None
    dependencies: int | None = Field(default=None, ge=0)
    integrations: int | None = Field(default=None, ge=0)
    prd_score: float | None = Field(
        default=None, validation_alias=AliasChoices("prd_score", "prdScore")
    )
    oracle_warnings: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("oracle_warnings", "oracleWarnings"),
    )


_CHARACTERISTIC_KEYS = frozenset(
    {
        "complexity",
        "dependencies",
        "integrations",
        "prd_score",
        "prdScore",
        "oracle_warnings",
        "oracleWarnings",
    }
)


class ModelWorkflowSignal(BaseModel):
    """Snapshot of workflow progress used for suggestions and bottlenecks.

    Task characteristics may be nested under ``task_characteristics`` or given
    inline at the top level.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    current_phase: str | None = Field(
        default=None,
        validation_alias=AliasChoices("current_phase", "currentPhase", "phase"),
    )
    phase_completed: bool = Field(
        default=False,
        validation_alias=AliasChoices("phase_completed", "phaseCompleted"),
    )
    validation_warnings: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("validation_warnings", "validationWarnings"),
    )
    test_coverage: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("test_coverage", "testCoverage"),
    )
    task_characteristics: ModelTaskCharacteristics = Field(
        default_factory=ModelTaskCharacteristics,
        validation_alias=AliasChoices("task_characteristics", "taskCharacteristics"),
    )

    @model_validator(mode="before")
    @classmethod
    def hoist_inline_characteristics(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if "task_characteristics" in data or "taskCharacteristics" in data:
            return data
        inline = {k: v for k, v in data.items() if k in _CHARACTERISTIC_KEYS}
        if not inline:
            return data
        return {**data, "task_characteristics": inline}


# =============================================================================
# Predictions
# =============================================================================


class ModelTransition(BaseModel):
    """One cell of a transition row."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    agent: str
    probability: float = Field(..., ge=0.0, le=1.0)


class ModelNextAgentPrediction(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    agent: str
    probability: float = Field(..., ge=0.0, le=1.0)
    source: EnumPredictionSource


class ModelArtifactPrediction(BaseModel):
    """An artifact worth pre-loading before the next agent runs."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    artifact: str
    probability: float = Field(..., ge=0.0, le=1.0)
    reason: str


class ModelValidationPrediction(BaseModel):
    """A validation agent expected to be triggered by a workflow event."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    agent: str
    reason: str
    priority: EnumPriority


class ModelBottleneckPrediction(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    pattern: str
    predictions: dict[str, float] = Field(default_factory=dict)
    recommendations: list[str] = Field(default_factory=list)


class ModelSuggestion(BaseModel):
    """A proactive suggestion for the user.

    Attributes:
        type: Suggestion kind; acceptance is tracked per kind.
        message: Text shown to the user.
        action: Action identifier the caller reports acceptance against.
        priority: Static priority of the suggestion kind.
        recommendations: Extra advice (bottleneck warnings only).
        acceptance_rate: Historical acceptance rate used for ranking.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: EnumSuggestionType
    message: str
    action: str
    priority: EnumPriority
    recommendations: list[str] = Field(default_factory=list)
    acceptance_rate: float = Field(default=0.5, ge=0.0, le=1.0)


class ModelSuggestionAcceptance(BaseModel):
    """Offered/accepted counters for one suggestion type."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    offered: int = Field(default=0, ge=0)
    accepted: int = Field(default=0, ge=0)
    rate: float = Field(default=0.0, ge=0.0, le=1.0)


class ModelPredictionStatistics(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    transition_rows: int = Field(default=0, ge=0)
    artifact_dependencies: int = Field(default=0, ge=0)
    validation_triggers: int = Field(default=0, ge=0)
    bottleneck_patterns: int = Field(default=0, ge=0)
    suggestion_acceptance: dict[str, ModelSuggestionAcceptance] = Field(default_factory=dict)


__all__ = [
    "ModelArtifactPrediction",
    "ModelBottleneckPrediction",
    "ModelNextAgentPrediction",
    "ModelPredictionStatistics",
    "ModelSuggestion",
    "ModelSuggestionAcceptance",
    "ModelTaskCharacteristics",
    "ModelTransition",
    "ModelValidationPrediction",
    "ModelWorkflowSignal",
    "ModelWorkflowStep",
]
