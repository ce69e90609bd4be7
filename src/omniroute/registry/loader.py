# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Capability registry loader.

Reads an agent capability registry YAML document and validates it against
:class:`ModelCapabilityRegistry`. Loading happens once, at router
construction; the result is immutable.

Usage:
    >>> from omniroute.registry.loader import load_capability_registry
    >>> registry = load_capability_registry()  # packaged default
    >>> "oracle" in registry
    True
"""

from __future__ import annotations

import logging
from importlib.resources import files
from pathlib import Path

import yaml
from pydantic import ValidationError

from omniroute.registry.models import ModelCapabilityRegistry

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_RESOURCE = "agent_capabilities.yaml"


class RegistryLoadError(Exception):
    """Raised when a capability registry fails to load or validate.

    Attributes:
        path: Path to the registry file that failed.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self, message: str, path: Path, cause: Exception | None = None
    ) -> None:
        """Initialize the error.

        Args:
            message: Error message.
            path: Path to the registry file.
            cause: The underlying exception.
        """
        super().__init__(message)
        self.path = path
        self.cause = cause


def default_registry_path() -> Path:
    """Return the path of the registry shipped with the package."""
    return Path(str(files("omniroute.registry") / DEFAULT_REGISTRY_RESOURCE))


class CapabilityRegistryLoader:
    """Loader for agent capability registry documents.

    Expected YAML layout::

        agents:
          <agent_id>:
            capabilities: [...]
            domains: [...]
            keywords: [...]
    """

    def load(self, path: Path) -> ModelCapabilityRegistry:
        """Load and validate a registry from a YAML file.

        Args:
            path: Path to the registry YAML file.

        Returns:
            Validated, frozen ModelCapabilityRegistry.

        Raises:
            RegistryLoadError: If the file cannot be read, parsed or validated.
        """
        logger.debug("Loading capability registry from: %s", path)

        try:
            with open(path, encoding="utf-8") as f:
                raw_data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise RegistryLoadError(
                f"Registry file not found: {path}",
                path=path,
                cause=e,
            ) from e
        except yaml.YAMLError as e:
            raise RegistryLoadError(
                f"Invalid YAML in registry file: {path}",
                path=path,
                cause=e,
            ) from e

        if raw_data is None:
            raise RegistryLoadError(f"Registry file is empty: {path}", path=path)

        if not isinstance(raw_data, dict):
            raise RegistryLoadError(
                f"Registry must be a YAML mapping, got {type(raw_data).__name__}: {path}",
                path=path,
            )

        try:
            registry = ModelCapabilityRegistry.model_validate(raw_data)
        except ValidationError as e:
            error_details = []
            for error in e.errors():
                loc = ".".join(str(x) for x in error["loc"])
                error_details.append(f"  - {loc}: {error['msg']}")

            raise RegistryLoadError(
                f"Registry validation failed for {path}:\n" + "\n".join(error_details),
                path=path,
                cause=e,
            ) from e

        logger.info(
            "Loaded capability registry (v%s) with %d agent(s) from %s",
            registry.version,
            len(registry),
            path.name,
        )
        return registry


def load_capability_registry(path: Path | str | None = None) -> ModelCapabilityRegistry:
    """Load a registry file, or the packaged default when ``path`` is None."""
    resolved = Path(path) if path is not None else default_registry_path()
    return CapabilityRegistryLoader().load(resolved)


__all__ = [
    "DEFAULT_REGISTRY_RESOURCE",
    "CapabilityRegistryLoader",
    "RegistryLoadError",
    "default_registry_path",
    "load_capability_registry",
]
