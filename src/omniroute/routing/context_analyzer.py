# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Context analyzer: normalizes the orchestrator's workflow context."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from omniroute.lib.errors import invalid_input
from omniroute.routing.models import ModelWorkflowContext

logger = logging.getLogger(__name__)


class ContextAnalyzer:
    """Substitute defaults for missing context fields.

    Accepts a ModelWorkflowContext, any mapping (snake_case or camelCase
    keys) or None. Pure defaulting; no routing logic lives here.
    """

    def analyze(
        self, context: ModelWorkflowContext | Mapping[str, Any] | None
    ) -> ModelWorkflowContext:
        """
        Normalize a workflow context.

        Args:
            context: Context supplied by the caller, or None

        Returns:
            ModelWorkflowContext with every field populated

        Raises:
            OnexError: INVALID_INPUT if the context is not a mapping or its
                fields have the wrong shape
        """
        if context is None:
            return ModelWorkflowContext()

        if isinstance(context, ModelWorkflowContext):
            return context

        if not isinstance(context, Mapping):
            raise invalid_input(
                "Workflow context must be a mapping or ModelWorkflowContext",
                received_type=type(context).__name__,
            )

        try:
            return ModelWorkflowContext.model_validate(dict(context))
        except ValidationError as e:
            fields = sorted({".".join(str(x) for x in err["loc"]) for err in e.errors()})
            logger.warning("Rejected malformed workflow context", extra={"fields": fields})
            raise invalid_input("Malformed workflow context", fields=fields) from e


__all__ = ["ContextAnalyzer"]
