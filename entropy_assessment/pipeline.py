"""Assessment aggregation: channel selection and the combination rule.

Which channel each estimator runs on is described by a declarative plan
(one table per mode) and executed by a single dispatch loop. Per-channel
minima and the final assessed figure follow SP 800-90B §3.1.3:

    h_assessed = min(word_size, H_bitstring * word_size, H_original)

where each term participates only when its channel is in scope.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable

from entropy_assessment.errors import AssessmentError, InternalError
from entropy_assessment.estimators.base import NOT_APPLICABLE, Channel
from entropy_assessment.result import (
    AssessmentMode,
    AssessmentResult,
    EstimatorOutcome,
    success_result,
)
from entropy_assessment.symbols import NormalizedSample

logger = logging.getLogger(__name__)

Scope = Callable[[NormalizedSample, bool], bool]


# ── channel predicates: (sample, initial_entropy) -> bool ──

def _always(sample: NormalizedSample, initial_entropy: bool) -> bool:
    return True


def _never(sample: NormalizedSample, initial_entropy: bool) -> bool:
    return False


def _wider_than_binary(sample: NormalizedSample, initial_entropy: bool) -> bool:
    return sample.alph_size > 2


def _bitstring_scope(sample: NormalizedSample, initial_entropy: bool) -> bool:
    # only a binary initial-entropy source skips the bitstring channel
    return sample.alph_size > 2 or not initial_entropy


def _initial_entropy(sample: NormalizedSample, initial_entropy: bool) -> bool:
    return initial_entropy


def _initial_entropy_binary(sample: NormalizedSample, initial_entropy: bool) -> bool:
    return initial_entropy and sample.alph_size == 2


@dataclass(frozen=True)
class EstimatorSpec:
    """One row of an assessment plan."""

    key: str
    names: tuple[str, ...]
    literal: Scope
    bitstring: Scope = _never
    confirmatory: bool = False
    always_passes: bool = False


@dataclass(frozen=True)
class AssessmentPlan:
    mode: AssessmentMode
    estimators: tuple[EstimatorSpec, ...]
    literal_scope: Scope
    bitstring_scope: Scope

    @property
    def outcome_names(self) -> list[str]:
        return [name for spec in self.estimators for name in spec.names]


IID_PLAN = AssessmentPlan(
    mode=AssessmentMode.IID,
    estimators=(
        EstimatorSpec("most_common", ("Most Common Value",), _always, _wider_than_binary, always_passes=True),
        EstimatorSpec("chi_square", ("Chi-Square Tests",), _always, confirmatory=True),
        EstimatorSpec("lrs_test", ("Length of Longest Repeated Substring Test",), _always, confirmatory=True),
        EstimatorSpec("permutation", ("Permutation Tests",), _always, confirmatory=True),
    ),
    literal_scope=_always,
    bitstring_scope=_wider_than_binary,
)

NON_IID_PLAN = AssessmentPlan(
    mode=AssessmentMode.NON_IID,
    estimators=(
        EstimatorSpec("most_common", ("Most Common Value",), _initial_entropy, _bitstring_scope, always_passes=True),
        EstimatorSpec("collision", ("Collision Test",), _initial_entropy_binary, _bitstring_scope, always_passes=True),
        EstimatorSpec("markov", ("Markov Test",), _initial_entropy_binary, _bitstring_scope, always_passes=True),
        EstimatorSpec("compression", ("Compression Test",), _initial_entropy_binary, _bitstring_scope),
        EstimatorSpec("t_tuple_lrs", ("t-Tuple Test", "LRS Test"), _initial_entropy, _bitstring_scope),
        EstimatorSpec("multi_mcw", ("Multi Most Common in Window Test",), _initial_entropy_binary, _bitstring_scope),
        EstimatorSpec("lag", ("Lag Prediction Test",), _initial_entropy_binary, _bitstring_scope),
        EstimatorSpec("multi_mmc", ("Multi Markov Model with Counting Test",), _initial_entropy_binary, _bitstring_scope),
        EstimatorSpec("lz78y", ("LZ78Y Test",), _initial_entropy_binary, _bitstring_scope),
    ),
    literal_scope=_initial_entropy,
    bitstring_scope=_bitstring_scope,
)

PLANS = {AssessmentMode.IID: IID_PLAN, AssessmentMode.NON_IID: NON_IID_PLAN}


Job = tuple[EstimatorSpec, Channel]


class AssessmentAggregator:
    """Runs an estimator backend over a prepared sample and combines the results.

    Usage::

        agg = AssessmentAggregator(backend)
        result = agg.run(sample, AssessmentMode.NON_IID, initial_entropy=True)

    With ``parallel=True`` the independent (estimator, channel) jobs run on a
    thread pool. Results are folded in plan order, so the figures match a
    serial run exactly.
    """

    def __init__(self, backend, verbose: int = 0, parallel: bool = False, max_workers: int | None = None) -> None:
        self.backend = backend
        self.verbose = verbose
        self.parallel = parallel
        self.max_workers = max_workers

    # ── planning ──

    @staticmethod
    def plan_jobs(plan: AssessmentPlan, sample: NormalizedSample, initial_entropy: bool) -> list[Job]:
        """Every (estimator, channel) invocation the plan requires, bitstring first."""
        jobs: list[Job] = []
        for spec in plan.estimators:
            if spec.bitstring(sample, initial_entropy):
                jobs.append((spec, Channel.BITSTRING))
            if spec.literal(sample, initial_entropy):
                jobs.append((spec, Channel.LITERAL))
        return jobs

    # ── dispatch ──

    def _invoke(self, job: Job, sample: NormalizedSample):
        spec, channel = job
        if channel is Channel.BITSTRING:
            symbols, alph_size = sample.bit_stream, 2
        else:
            symbols, alph_size = sample.symbols, sample.alph_size

        logger.debug("running %s on %s channel (n=%d, k=%d)", spec.key, channel.value, len(symbols), alph_size)
        try:
            value = getattr(self.backend, spec.key)(symbols, alph_size, channel, self.verbose)
        except AssessmentError:
            raise
        except Exception as e:
            raise InternalError(f"{spec.key}[{channel.value}]", str(e) or type(e).__name__) from e

        if spec.confirmatory:
            return bool(value)
        values = tuple(float(v) for v in value) if isinstance(value, (tuple, list)) else (float(value),)
        if len(values) != len(spec.names):
            raise InternalError(
                spec.key, f"{spec.key} returned {len(values)} estimate(s), expected {len(spec.names)}"
            )
        return values

    def _dispatch(self, jobs: list[Job], sample: NormalizedSample) -> list:
        if self.parallel and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                return list(pool.map(lambda job: self._invoke(job, sample), jobs))
        return [self._invoke(job, sample) for job in jobs]

    # ── combination ──

    def run(self, sample: NormalizedSample, mode: AssessmentMode, initial_entropy: bool = True) -> AssessmentResult:
        plan = PLANS[AssessmentMode.parse(mode)]
        jobs = self.plan_jobs(plan, sample, initial_entropy)
        results = self._dispatch(jobs, sample)

        h_original = float(sample.word_size)
        h_bitstring = 1.0
        estimates: dict[str, float] = {}
        verdicts: dict[str, bool] = {}

        for (spec, channel), value in zip(jobs, results):
            if spec.confirmatory:
                verdicts[spec.names[0]] = value
                continue
            for name, estimate in zip(spec.names, value):
                if not estimate >= 0.0:
                    continue
                if channel is Channel.BITSTRING:
                    h_bitstring = min(h_bitstring, estimate)
                else:
                    h_original = min(h_original, estimate)
                estimates[name] = estimate

        outcomes: list[EstimatorOutcome] = []
        for spec in plan.estimators:
            for name in spec.names:
                if spec.confirmatory:
                    outcomes.append(EstimatorOutcome.from_test(name, verdicts.get(name, False)))
                    continue
                estimate = estimates.get(name, NOT_APPLICABLE)
                passed = True if spec.always_passes else estimate >= 0.0
                outcomes.append(EstimatorOutcome.from_estimate(name, estimate, passed))

        h_assessed = float(sample.word_size)
        if plan.bitstring_scope(sample, initial_entropy):
            h_assessed = min(h_assessed, h_bitstring * sample.word_size)
        if plan.literal_scope(sample, initial_entropy):
            h_assessed = min(h_assessed, h_original)

        logger.debug(
            "%s: H_original=%.6f H_bitstring=%.6f h_assessed=%.6f",
            plan.mode.value, h_original, h_bitstring, h_assessed,
        )
        return success_result(
            mode=plan.mode,
            word_size=sample.word_size,
            h_original=h_original,
            h_bitstring=h_bitstring,
            h_assessed=h_assessed,
            estimators=outcomes,
            initial_entropy=initial_entropy,
            sample_size=sample.length,
        )

    def run_iid(self, sample: NormalizedSample, initial_entropy: bool = True) -> AssessmentResult:
        return self.run(sample, AssessmentMode.IID, initial_entropy)

    def run_non_iid(self, sample: NormalizedSample, initial_entropy: bool = True) -> AssessmentResult:
        return self.run(sample, AssessmentMode.NON_IID, initial_entropy)
