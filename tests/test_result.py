"""Tests for result types and the error taxonomy."""

import pytest

from entropy_assessment.errors import (
    AllocationError,
    AssessmentError,
    BackendUnavailableError,
    DegenerateAlphabetError,
    InputError,
    InternalError,
    InvalidWordSize,
)
from entropy_assessment.result import AssessmentMode, EstimatorOutcome, error_result, success_result


class TestAssessmentMode:
    @pytest.mark.parametrize("text", ["iid", "IID", " iid "])
    def test_iid(self, text):
        assert AssessmentMode.parse(text) is AssessmentMode.IID

    @pytest.mark.parametrize("text", ["non-iid", "Non-IID", "non_iid", "noniid"])
    def test_non_iid(self, text):
        assert AssessmentMode.parse(text) is AssessmentMode.NON_IID

    def test_passthrough(self):
        assert AssessmentMode.parse(AssessmentMode.IID) is AssessmentMode.IID

    def test_invalid(self):
        with pytest.raises(ValueError):
            AssessmentMode.parse("maybe")


class TestEstimatorOutcome:
    def test_valid_estimate(self):
        o = EstimatorOutcome.from_estimate("Markov Test", 0.8)
        assert o.is_entropy_valid
        assert o.passed

    def test_sentinel(self):
        o = EstimatorOutcome.from_estimate("Markov Test", -1.0)
        assert not o.is_entropy_valid
        assert not o.passed

    def test_forced_pass(self):
        o = EstimatorOutcome.from_estimate("Most Common Value", -1.0, passed=True)
        assert o.passed
        assert not o.is_entropy_valid

    def test_confirmatory(self):
        o = EstimatorOutcome.from_test("Chi-Square Tests", False)
        assert o.entropy_estimate == -1.0
        assert not o.passed
        assert not o.is_entropy_valid


class TestResults:
    def test_success(self):
        r = success_result(AssessmentMode.IID, 4, 3.5, 0.9, 3.5, [], sample_size=10)
        assert r.ok
        assert r.min_entropy == 3.5
        assert r.to_dict()["mode"] == "IID"

    def test_error_zeroes_numerics(self):
        r = error_result(AssessmentMode.NON_IID, DegenerateAlphabetError("check_alphabet", "one symbol"))
        assert not r.ok
        assert not r.passed
        assert r.error_code == 2
        assert r.error_message == "check_alphabet: one symbol"
        assert (r.word_size, r.h_original, r.h_bitstring, r.h_assessed, r.min_entropy) == (0, 0.0, 0.0, 0.0, 0.0)


class TestErrors:
    @pytest.mark.parametrize("cls,code", [
        (InputError, 1),
        (InvalidWordSize, 1),
        (DegenerateAlphabetError, 2),
        (AllocationError, 3),
        (InternalError, 4),
        (BackendUnavailableError, 5),
    ])
    def test_codes(self, cls, code):
        err = cls("op", "detail")
        assert isinstance(err, AssessmentError)
        assert err.code == code

    def test_word_size_is_input_error(self):
        assert issubclass(InvalidWordSize, InputError)
        assert InvalidWordSize.kind == "word_size"

    def test_message_format(self):
        assert str(InputError("assess", "data is empty")) == "assess: data is empty"
        assert str(InputError("assess")) == "assess"

    def test_internal_message_verbatim(self):
        assert str(InternalError("lag[Literal]", "index out of range")) == "index out of range"
