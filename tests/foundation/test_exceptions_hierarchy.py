"""Tests for the iracebind exception hierarchy."""

from __future__ import annotations

import pytest

from iracebind.foundation.exceptions import (
    ConfigurationError,
    DecodeError,
    DuplicateParameterError,
    EngineNotAvailableError,
    EvaluationError,
    IndexOutOfRangeError,
    IraceBindError,
    MissingInstanceError,
    MissingParameterError,
    TargetRunnerError,
    TypeMismatchError,
    UnknownParameterError,
    UnsupportedNestedError,
)


class TestIraceBindError:
    def test_message_only(self):
        err = IraceBindError("Something went wrong")
        assert str(err) == "Something went wrong"
        assert err.suggestion is None
        assert err.details == {}

    def test_suggestion_is_appended(self):
        err = IraceBindError("Something went wrong", suggestion="Try this instead")
        assert "Suggestion: Try this instead" in str(err)


class TestDecodeErrors:
    def test_unknown_parameter_lists_declared_names(self):
        err = UnknownParameterError("y", available=["x", "n"])
        assert "'y'" in str(err)
        assert "x, n" in str(err)

    def test_type_mismatch_carries_name_and_expected_kind(self):
        err = TypeMismatchError("n", "unsigned 32-bit integer", 3.5)
        assert (err.name, err.expected) == ("n", "unsigned 32-bit integer")
        assert "float" in str(err)

    def test_index_out_of_range_details(self):
        err = IndexOutOfRangeError("mode", 5, 3)
        assert err.details == {"name": "mode", "index": 5, "num_variants": 3}

    def test_nested_is_both_decode_and_configuration_error(self):
        err = UnsupportedNestedError("inner")
        assert isinstance(err, DecodeError)
        assert isinstance(err, ConfigurationError)
        assert "flatten" in str(err)

    def test_missing_parameter_is_a_key_error_with_readable_message(self):
        err = MissingParameterError("x")
        assert isinstance(err, KeyError)
        assert str(err) == "Missing parameter 'x'."


class TestRuntimeErrors:
    def test_target_runner_error_is_a_value_error(self):
        cause = MissingInstanceError(index=2, expected="ProblemInstance[Sphere]")
        err = TargetRunnerError("17", cause)
        assert isinstance(err, ValueError)
        assert isinstance(err, EvaluationError)
        assert err.details == {"experiment_id": "17", "cause": "MissingInstanceError"}
        assert "index 2" in str(err)

    def test_engine_not_available_suggests_home(self):
        err = EngineNotAvailableError("irace", "No module named 'irace'")
        assert "IRACEPY_HOME" in str(err)
        assert err.details["module"] == "irace"


@pytest.mark.parametrize(
    "err",
    [
        DuplicateParameterError("x"),
        UnknownParameterError("x"),
        MissingInstanceError(),
        EngineNotAvailableError("irace"),
    ],
)
def test_all_errors_share_the_base(err):
    assert isinstance(err, IraceBindError)
    assert err.message in str(err)
