# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Data models for the routing pipeline.

Per-call models (parsed input, workflow context, candidates, decision) are
frozen. History entries and learned patterns are the only mutable models:
the history mutates them in place when outcomes are reported.

See Also:
    - omniroute.routing.enums for the closed vocabularies used here
    - omniroute.routing.smart_router for how the models flow together
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from omniroute.routing.enums import (
    EnumClarity,
    EnumCollaborationMode,
    EnumEntity,
    EnumIntent,
    EnumRole,
    EnumRoutingOutcome,
    EnumSuggestionAction,
)

# =============================================================================
# Input side
# =============================================================================


class ModelParsedInput(BaseModel):
    """Result of parsing one free-text request.

    Attributes:
        raw_text: The request exactly as received.
        intents: Detected intents in declaration order; never empty.
        entities: Detected entities in declaration order.
        keywords: Significant tokens in input order, duplicates retained.
        clarity: Approximate clarity rating.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    raw_text: str
    intents: list[EnumIntent] = Field(..., min_length=1)
    entities: list[EnumEntity] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    clarity: EnumClarity = EnumClarity.LOW


class ModelWorkflowContext(BaseModel):
    """Workflow state supplied by the orchestrator on each call.

    Every field is optional. Missing or ``None`` values fall back to
    ``"unknown"`` for strings and to empty lists for sequences. The
    camelCase spellings used by JavaScript orchestrators are accepted too.

    Attributes:
        phase: Current workflow phase (e.g. ``development``).
        project_type: Kind of project being worked on.
        recent_activity: Recent activity labels, most recent last.
        active_agents: Agents currently active (set semantics).
        recent_failures: Failure tags such as ``eval-timeout``.
        situation: Optional finer-grained label used to scope transition
            predictions (e.g. ``on_failure``).
        next_phase: Phase expected to start next, for artifact prediction.
        last_event: Last workflow event (e.g. ``prd_created``), for
            validation prediction.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    phase: str = Field(
        default="unknown",
        validation_alias=AliasChoices("phase", "current_phase", "currentPhase"),
    )
    project_type: str = Field(
        default="unknown",
        validation_alias=AliasChoices("project_type", "projectType"),
    )
    recent_activity: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("recent_activity", "recentActivity"),
    )
    active_agents: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("active_agents", "activeAgents"),
    )
    recent_failures: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("recent_failures", "recentFailures"),
    )
    situation: str | None = None
    next_phase: str | None = Field(
        default=None,
        validation_alias=AliasChoices("next_phase", "nextPhase"),
    )
    last_event: str | None = Field(
        default=None,
        validation_alias=AliasChoices("last_event", "lastEvent"),
    )

    @field_validator("phase", "project_type", mode="before")
    @classmethod
    def default_unknown(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return "unknown"
        return value

    @field_validator("recent_activity", "recent_failures", "active_agents", mode="before")
    @classmethod
    def default_empty(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (set, frozenset)):
            return sorted(value)
        return value

    @field_validator("active_agents")
    @classmethod
    def unique_agents(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


# =============================================================================
# Candidates
# =============================================================================


class ModelCandidateMatch(BaseModel):
    """A single proposal emitted by one matching strategy."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    agent: str = Field(..., min_length=1)
    role: EnumRole
    reason: str
    score: float = Field(default=1.0, ge=0.0)


class ModelRoutingCandidate(BaseModel):
    """An agent after aggregation of every proposal that named it.

    Attributes:
        agent: Agent identifier.
        roles: Distinct roles proposed for the agent, in encounter order.
        reasons: Reasons from every proposal, in encounter order.
        score: Sum of proposal scores.
        final_role: Highest-priority role held (or promoted to).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    agent: str
    roles: list[EnumRole] = Field(default_factory=list)
    reasons: list[str] = Field(default_factory=list)
    score: float = Field(default=0.0, ge=0.0)
    final_role: EnumRole = EnumRole.BACKGROUND


class ModelValidatedRouting(BaseModel):
    """Aggregated candidates after promotion, with mode and reasoning."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    agents: list[ModelRoutingCandidate] = Field(default_factory=list)
    mode: EnumCollaborationMode = EnumCollaborationMode.SEQUENTIAL
    reasoning: str = ""


# =============================================================================
# Decision
# =============================================================================


class ModelConfidenceBreakdown(BaseModel):
    """Four weighted sub-scores and their weighted sum."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    intent_clarity: float = Field(..., ge=0.0, le=1.0)
    agent_match_strength: float = Field(..., ge=0.0, le=1.0)
    context_relevance: float = Field(..., ge=0.0, le=1.0)
    historical_success: float = Field(..., ge=0.0, le=1.0)
    overall: float = Field(..., ge=0.0, le=1.0)


class ModelRoutingSuggestion(BaseModel):
    """Action recommendation derived from overall confidence."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    action: EnumSuggestionAction
    message: str


class ModelRoutingDecision(BaseModel):
    """Output of one routing call.

    ``agents`` is ordered primary first, then by score descending.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    agents: list[ModelRoutingCandidate] = Field(default_factory=list)
    collaboration_mode: EnumCollaborationMode
    confidence: ModelConfidenceBreakdown
    reasoning: str
    suggestion: ModelRoutingSuggestion

    @property
    def agent_ids(self) -> list[str]:
        return [candidate.agent for candidate in self.agents]

    @property
    def agents_key(self) -> str:
        """Comma-joined agent ids; the exact-match key used by learning."""
        return ",".join(self.agent_ids)

    @property
    def primary_agents(self) -> list[str]:
        return [c.agent for c in self.agents if c.final_role == EnumRole.PRIMARY]


class ModelRoutingResult(BaseModel):
    """A routing decision plus the handle used to report its outcome later.

    The handle is a monotonic routing id. It stays valid until the entry is
    evicted from the bounded history, after which reporting an outcome for
    it fails loudly instead of touching a different entry.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    handle: int = Field(..., ge=0)
    decision: ModelRoutingDecision


# =============================================================================
# History and learning
# =============================================================================


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ModelRoutingHistoryEntry(BaseModel):
    """One recorded routing, later annotated with its outcome.

    Attributes:
        routing_id: Monotonic id; the handle returned by ``route()``.
        timestamp: When the routing was recorded (UTC).
        input: Raw request text; the pattern key.
        agents: Comma-joined agent ids in decision order.
        mode: Collaboration mode of the decision.
        confidence: Overall confidence of the decision.
        context: Workflow phase at routing time.
        outcome: Reported outcome, None until reported.
        feedback: Free-form feedback supplied with the outcome.
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    routing_id: int = Field(..., ge=0)
    timestamp: datetime = Field(default_factory=_utc_now)
    input: str
    agents: str = ""
    mode: EnumCollaborationMode = EnumCollaborationMode.SEQUENTIAL
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    context: str | None = None
    outcome: EnumRoutingOutcome | None = None
    feedback: Any = None


class ModelRoutingPattern(BaseModel):
    """A learned association between an exact input string and an agent set."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    input: str
    agents: str = ""
    context: str | None = None
    success_count: int = Field(default=0, ge=0)
    failure_count: int = Field(default=0, ge=0)
    strength: float = Field(default=0.6, ge=0.0, le=1.0)


class ModelRoutingStatistics(BaseModel):
    """Aggregate view over the routing history."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    total_routings: int = Field(default=0, ge=0)
    successful: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    average_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    patterns: int = Field(default=0, ge=0)


__all__ = [
    "ModelCandidateMatch",
    "ModelConfidenceBreakdown",
    "ModelParsedInput",
    "ModelRoutingCandidate",
    "ModelRoutingDecision",
    "ModelRoutingHistoryEntry",
    "ModelRoutingPattern",
    "ModelRoutingResult",
    "ModelRoutingStatistics",
    "ModelRoutingSuggestion",
    "ModelValidatedRouting",
    "ModelWorkflowContext",
]
