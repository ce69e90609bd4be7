# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""OmniRoute - intelligent agent routing and predictive orchestration.

This package decides which agent should handle a request inside a
multi-agent workflow, how confident that decision is, and which agents,
artifacts and validations are likely to be needed next.

Usage:
    from omniroute import IntelligenceSystem, SmartRouter, PredictionEngine

    router = SmartRouter()
    result = router.route("Create a PRD for checkout flow", {"phase": "discovery"})
    router.update_routing_outcome(result.handle, "success")
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from omniroute.intelligence_system import IntelligenceSystem
from omniroute.prediction import PredictionEngine
from omniroute.routing import SmartRouter

try:
    __version__ = version("omniroute")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    "IntelligenceSystem",
    "PredictionEngine",
    "SmartRouter",
    "__version__",
]
