"""
entropy-assessment: NIST SP 800-90B min-entropy assessment of noise-source samples.

Prepares raw bytes into literal and bitstring channels, dispatches the
IID or Non-IID estimator battery of a pluggable backend, and combines the
results into one conservative min-entropy figure.
"""

__version__ = "1.0.0"

from entropy_assessment.assess import (
    MIN_RECOMMENDED_SAMPLES,
    assess,
    assess_file,
    assess_reader,
    assess_strict,
)
from entropy_assessment.estimators import EstimatorBackend, load_backend
from entropy_assessment.result import AssessmentMode, AssessmentResult, EstimatorOutcome
from entropy_assessment.symbols import NormalizedSample, prepare_sample

__all__ = [
    "AssessmentMode",
    "AssessmentResult",
    "EstimatorBackend",
    "EstimatorOutcome",
    "MIN_RECOMMENDED_SAMPLES",
    "NormalizedSample",
    "assess",
    "assess_file",
    "assess_reader",
    "assess_strict",
    "load_backend",
    "prepare_sample",
    "__version__",
]
