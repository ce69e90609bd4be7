# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Agent capability registry: static per-agent capabilities, domains and keywords."""

from omniroute.registry.loader import (
    CapabilityRegistryLoader,
    RegistryLoadError,
    default_registry_path,
    load_capability_registry,
)
from omniroute.registry.models import ModelAgentCapability, ModelCapabilityRegistry

__all__ = [
    "CapabilityRegistryLoader",
    "ModelAgentCapability",
    "ModelCapabilityRegistry",
    "RegistryLoadError",
    "default_registry_path",
    "load_capability_registry",
]
