# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Models for the agent capability registry.

The registry is static data: one capability record per agent, loaded once
at startup and never mutated afterwards. Both models are frozen.

Example:
    >>> registry = ModelCapabilityRegistry.model_validate(
    ...     {"agents": {"pm": {"keywords": ["PRD", "story"]}}}
    ... )
    >>> sorted(registry.get("pm").keywords)
    ['prd', 'story']
    >>> registry.get("unknown") is None
    True
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ModelAgentCapability(BaseModel):
    """Capabilities, operating domains and keyword triggers of one agent.

    Attributes:
        agent_id: Identifier the router dispatches to (e.g. ``pm``).
        capabilities: What the agent can do (e.g. ``create_prd``).
        domains: Areas the agent operates in.
        keywords: Lower-cased trigger words used by keyword matching.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    agent_id: str = Field(..., min_length=1)
    capabilities: frozenset[str] = Field(default_factory=frozenset)
    domains: frozenset[str] = Field(default_factory=frozenset)
    keywords: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("keywords", mode="before")
    @classmethod
    def lowercase_keywords(cls, value: Any) -> Any:
        """Keyword matching is case-insensitive, so store keywords lower-cased."""
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        # An empty keyword is a substring of every word.
        return frozenset(str(kw).strip().lower() for kw in value if str(kw).strip())

    @field_validator("capabilities", "domains", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        return value


class ModelCapabilityRegistry(BaseModel):
    """Ordered, immutable mapping of agent id to capability record.

    Iteration follows declaration order, which is the order the keyword
    matching strategy emits candidates in.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = Field(default="1.0.0", description="Registry document version")
    agents: dict[str, ModelAgentCapability] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def inject_agent_ids(cls, data: Any) -> Any:
        """Fill ``agent_id`` from the mapping key when the YAML omits it."""
        if not isinstance(data, dict):
            return data
        agents = data.get("agents")
        if not isinstance(agents, dict):
            return data
        normalized: dict[str, Any] = {}
        for agent_id, record in agents.items():
            if isinstance(record, dict):
                record = {"agent_id": agent_id, **record}
            normalized[agent_id] = record
        return {**data, "agents": normalized}

    @model_validator(mode="after")
    def validate_keys_match_ids(self) -> ModelCapabilityRegistry:
        """Mapping keys and record ids must agree."""
        for key, capability in self.agents.items():
            if key != capability.agent_id:
                raise ValueError(
                    f"Registry key '{key}' does not match agent_id '{capability.agent_id}'"
                )
        return self

    @property
    def agent_ids(self) -> list[str]:
        return list(self.agents)

    def get(self, agent_id: str) -> ModelAgentCapability | None:
        """Return the capability record, or None for an unknown agent id."""
        return self.agents.get(agent_id)

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self.agents

    def all(self) -> list[ModelAgentCapability]:
        """Capability records in declaration order."""
        return list(self.agents.values())

    def __len__(self) -> int:
        return len(self.agents)


__all__ = [
    "ModelAgentCapability",
    "ModelCapabilityRegistry",
]
