# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Prediction engine: next agents, artifacts, validations, bottlenecks, suggestions."""

from omniroute.prediction.bottlenecks import DEFAULT_BOTTLENECKS, BottleneckSignature
from omniroute.prediction.enums import EnumPredictionSource, EnumPriority, EnumSuggestionType
from omniroute.prediction.models import (
    ModelArtifactPrediction,
    ModelBottleneckPrediction,
    ModelNextAgentPrediction,
    ModelPredictionStatistics,
    ModelSuggestion,
    ModelSuggestionAcceptance,
    ModelTaskCharacteristics,
    ModelTransition,
    ModelValidationPrediction,
    ModelWorkflowSignal,
    ModelWorkflowStep,
)
from omniroute.prediction.prediction_engine import PHASE_SEQUENCE, PredictionEngine
from omniroute.prediction.transition_model import (
    DEFAULT_TRANSITIONS,
    TransitionModel,
    TransitionSeed,
)

__all__ = [
    "DEFAULT_BOTTLENECKS",
    "DEFAULT_TRANSITIONS",
    "PHASE_SEQUENCE",
    "BottleneckSignature",
    "EnumPredictionSource",
    "EnumPriority",
    "EnumSuggestionType",
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
    "PredictionEngine",
    "TransitionModel",
    "TransitionSeed",
]
