"""Caller-facing assessment results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum

from entropy_assessment.errors import AssessmentError
from entropy_assessment.estimators.base import NOT_APPLICABLE


class AssessmentMode(str, Enum):
    IID = "IID"
    NON_IID = "Non-IID"

    @classmethod
    def parse(cls, value: str | AssessmentMode) -> AssessmentMode:
        if isinstance(value, AssessmentMode):
            return value
        if not isinstance(value, str):
            raise ValueError(f"invalid assessment mode: {value!r} (use iid or non-iid)")
        key = value.strip().lower().replace("_", "-")
        if key == "iid":
            return cls.IID
        if key in ("non-iid", "noniid"):
            return cls.NON_IID
        raise ValueError(f"invalid assessment mode: {value!r} (use iid or non-iid)")


@dataclass
class EstimatorOutcome:
    """Result of one estimator slot, run or skipped."""

    name: str
    entropy_estimate: float = NOT_APPLICABLE
    passed: bool = False
    is_entropy_valid: bool = False

    @classmethod
    def from_estimate(cls, name: str, estimate: float, passed: bool | None = None) -> EstimatorOutcome:
        valid = estimate >= 0.0
        return cls(
            name=name,
            entropy_estimate=float(estimate),
            passed=valid if passed is None else passed,
            is_entropy_valid=valid,
        )

    @classmethod
    def from_test(cls, name: str, passed: bool) -> EstimatorOutcome:
        """Confirmatory test: pass/fail only, no entropy value."""
        return cls(name=name, entropy_estimate=NOT_APPLICABLE, passed=bool(passed), is_entropy_valid=False)


@dataclass
class AssessmentResult:
    """Outcome of a single assessment call.

    ``error_code == 0`` means the numeric fields are meaningful. Any other
    code leaves them at ``0.0`` with an empty estimator list.
    """

    mode: AssessmentMode
    word_size: int = 0
    h_original: float = 0.0
    h_bitstring: float = 0.0
    h_assessed: float = 0.0
    min_entropy: float = 0.0
    initial_entropy: bool = True
    sample_size: int = 0
    estimators: list[EstimatorOutcome] = field(default_factory=list)
    error_code: int = 0
    error_message: str = ""

    @property
    def ok(self) -> bool:
        return self.error_code == 0

    @property
    def passed(self) -> bool:
        """All recorded estimators and confirmatory tests passed."""
        return self.ok and all(e.passed for e in self.estimators)

    def release(self) -> None:
        """Drop the per-estimator detail. Kept for callers that free results explicitly."""
        self.estimators = []

    def to_dict(self) -> dict:
        d = asdict(self)
        d["mode"] = self.mode.value
        return d


def success_result(
    mode: AssessmentMode,
    word_size: int,
    h_original: float,
    h_bitstring: float,
    h_assessed: float,
    estimators: list[EstimatorOutcome],
    initial_entropy: bool = True,
    sample_size: int = 0,
) -> AssessmentResult:
    return AssessmentResult(
        mode=mode,
        word_size=word_size,
        h_original=float(h_original),
        h_bitstring=float(h_bitstring),
        h_assessed=float(h_assessed),
        min_entropy=float(h_assessed),
        initial_entropy=initial_entropy,
        sample_size=sample_size,
        estimators=list(estimators),
    )


def error_result(
    mode: AssessmentMode,
    error: AssessmentError,
    initial_entropy: bool = True,
    sample_size: int = 0,
) -> AssessmentResult:
    """Tagged failure. Numeric fields stay at their non-meaningful default."""
    return AssessmentResult(
        mode=mode,
        initial_entropy=initial_entropy,
        sample_size=sample_size,
        error_code=error.code,
        error_message=str(error),
    )
