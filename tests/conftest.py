# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Shared fixtures for OmniRoute tests.

Every component is built from an explicit Settings instance that ignores
.env files, so tests never depend on the developer's environment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from omniroute.config.settings import Settings, clear_settings_cache
from omniroute.intelligence_system import IntelligenceSystem
from omniroute.prediction import PredictionEngine
from omniroute.registry import ModelCapabilityRegistry, load_capability_registry
from omniroute.routing import SmartRouter

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Generator[None, None, None]:
    """Drop the cached settings singleton around every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture(scope="session")
def registry() -> ModelCapabilityRegistry:
    """The packaged default registry (immutable, safe to share)."""
    return load_capability_registry()


@pytest.fixture
def router(registry: ModelCapabilityRegistry, settings: Settings) -> SmartRouter:
    return SmartRouter(registry=registry, settings=settings)


@pytest.fixture
def engine(settings: Settings) -> PredictionEngine:
    return PredictionEngine(settings=settings)


@pytest.fixture
def system(registry: ModelCapabilityRegistry, settings: Settings) -> IntelligenceSystem:
    return IntelligenceSystem(registry=registry, settings=settings)
