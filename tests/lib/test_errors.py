# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Tests for omniroute.lib.errors module."""

from __future__ import annotations

import pytest

from omniroute.lib.errors import (
    EnumCoreErrorCode,
    ModelOnexError,
    OnexError,
    invalid_input,
)

# All tests in this module are unit tests
pytestmark = pytest.mark.unit


class TestErrorsImports:
    """Tests for error module exports."""

    def test_all_exports_defined(self) -> None:
        """Module __all__ contains expected exports."""
        from omniroute.lib import errors

        assert set(errors.__all__) == {
            "EnumCoreErrorCode",
            "ModelOnexError",
            "OnexError",
            "invalid_input",
        }


class TestEnumCoreErrorCode:
    """Tests for EnumCoreErrorCode enum values."""

    def test_only_raised_codes_exist(self) -> None:
        assert {code.value for code in EnumCoreErrorCode} == {
            "INVALID_INPUT",
            "INDEX_OUT_OF_RANGE",
        }

    def test_error_codes_are_strings(self) -> None:
        """Error codes compare equal to their string values."""
        assert EnumCoreErrorCode.INVALID_INPUT == "INVALID_INPUT"
        assert isinstance(EnumCoreErrorCode.INDEX_OUT_OF_RANGE.value, str)


class TestOnexError:
    """Tests for OnexError and ModelOnexError."""

    def test_onex_error_carries_code_message_and_details(self) -> None:
        error = OnexError(
            code=EnumCoreErrorCode.INDEX_OUT_OF_RANGE,
            message="boom",
            details={"routing_id": 3},
        )

        assert error.code == EnumCoreErrorCode.INDEX_OUT_OF_RANGE
        assert error.message == "boom"
        assert error.details == {"routing_id": 3}
        assert str(error) == "INDEX_OUT_OF_RANGE: boom"

    def test_details_default_to_empty_dict(self) -> None:
        error = OnexError(code=EnumCoreErrorCode.INVALID_INPUT, message="bad")
        assert error.details == {}

    def test_model_onex_error_is_onex_error(self) -> None:
        error = ModelOnexError(
            error_code=EnumCoreErrorCode.INVALID_INPUT,
            message="bad",
            context={"field": "phase"},
        )

        assert isinstance(error, OnexError)
        assert isinstance(error, Exception)
        assert error.code == EnumCoreErrorCode.INVALID_INPUT
        assert error.details == {"field": "phase"}

    def test_can_be_raised_and_caught_as_onex_error(self) -> None:
        with pytest.raises(OnexError) as exc_info:
            raise ModelOnexError(EnumCoreErrorCode.INDEX_OUT_OF_RANGE, "gone")
        assert exc_info.value.code == EnumCoreErrorCode.INDEX_OUT_OF_RANGE


class TestInvalidInput:
    """Tests for the invalid_input helper."""

    def test_builds_invalid_input_error_with_context(self) -> None:
        error = invalid_input("Routing input must be a string", received_type="int")

        assert isinstance(error, ModelOnexError)
        assert error.code == EnumCoreErrorCode.INVALID_INPUT
        assert error.details == {"received_type": "int"}

    def test_without_context_has_empty_details(self) -> None:
        assert invalid_input("nope").details == {}
