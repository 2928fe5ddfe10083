"""Assessment entry points.

:func:`assess` never raises for a bad sample: every failure comes back as an
:class:`~entropy_assessment.result.AssessmentResult` with a non-zero
``error_code``. :func:`assess_strict` raises the underlying
:class:`~entropy_assessment.errors.AssessmentError` instead.
"""

from __future__ import annotations

import logging
import os
from typing import BinaryIO

import numpy as np

from entropy_assessment.errors import AssessmentError, InputError, InternalError
from entropy_assessment.estimators import load_backend
from entropy_assessment.pipeline import AssessmentAggregator
from entropy_assessment.result import AssessmentMode, AssessmentResult, error_result
from entropy_assessment.symbols import as_byte_array, check_alphabet, check_word_size, prepare_sample

logger = logging.getLogger(__name__)

MIN_RECOMMENDED_SAMPLES = 1_000_000


def _parse_mode(mode) -> AssessmentMode:
    try:
        return AssessmentMode.parse(mode)
    except ValueError as e:
        raise InputError("assess", str(e)) from e


def _result_mode(mode) -> AssessmentMode:
    """Mode to tag an error result with; unparseable modes fall back to Non-IID."""
    try:
        return AssessmentMode.parse(mode)
    except ValueError:
        return AssessmentMode.NON_IID


def _validate_request(data, word_size) -> np.ndarray:
    check_word_size(word_size, "assess")
    raw = as_byte_array(data)
    if raw.size == 0:
        raise InputError("assess", "data is empty")
    return raw


def assess_strict(
    data,
    word_size: int = 0,
    mode: AssessmentMode | str = AssessmentMode.NON_IID,
    initial_entropy: bool = True,
    verbose: int = 0,
    backend=None,
    parallel: bool = False,
) -> AssessmentResult:
    """Assess *data*, raising :class:`AssessmentError` on failure.

    Parameters
    ----------
    data:
        Raw sample, one symbol per byte.
    word_size:
        Bits per symbol (1-8); ``0`` auto-detects.
    mode:
        ``"iid"`` or ``"non-iid"``.
    initial_entropy:
        ``True`` for a raw noise source, ``False`` for conditioned output.
    verbose:
        Diagnostic level forwarded to the estimators.
    backend:
        Estimator backend; resolved with :func:`load_backend` when omitted.
    """
    mode = _parse_mode(mode)
    raw = _validate_request(data, word_size)

    if raw.size < MIN_RECOMMENDED_SAMPLES and verbose > 0:
        logger.warning("data contains less than %d samples (%d given)", MIN_RECOMMENDED_SAMPLES, raw.size)

    sample = prepare_sample(raw, word_size)
    check_alphabet(sample)

    if backend is None:
        backend = load_backend()
    aggregator = AssessmentAggregator(backend, verbose=verbose, parallel=parallel)
    try:
        return aggregator.run(sample, mode, initial_entropy)
    except AssessmentError:
        raise
    except Exception as e:
        raise InternalError("assess", str(e) or type(e).__name__) from e


def assess(
    data,
    word_size: int = 0,
    mode: AssessmentMode | str = AssessmentMode.NON_IID,
    initial_entropy: bool = True,
    verbose: int = 0,
    backend=None,
    parallel: bool = False,
) -> AssessmentResult:
    """Assess *data* and return a tagged result; see :func:`assess_strict`."""
    size = len(data) if isinstance(data, (bytes, bytearray, memoryview, np.ndarray)) else 0
    try:
        return assess_strict(data, word_size, mode, initial_entropy, verbose, backend, parallel)
    except AssessmentError as e:
        error = e
    except Exception as e:
        error = InternalError("assess", str(e) or type(e).__name__)
    tag = _result_mode(mode)
    logger.warning("%s assessment failed: %s", tag.value, error)
    return error_result(tag, error, initial_entropy=initial_entropy, sample_size=size)


def assess_reader(stream: BinaryIO, word_size: int = 0, mode: AssessmentMode | str = AssessmentMode.NON_IID,
                  **kwargs) -> AssessmentResult:
    """Read *stream* to the end and assess its bytes."""
    try:
        data = stream.read()
    except OSError as e:
        return error_result(_result_mode(mode), InputError("assess_reader", f"failed to read data: {e}"))
    return assess(data, word_size, mode, **kwargs)


def assess_file(path: str | os.PathLike, word_size: int = 0, mode: AssessmentMode | str = AssessmentMode.NON_IID,
                **kwargs) -> AssessmentResult:
    """Assess the contents of the file at *path*."""
    try:
        with open(path, "rb") as f:
            return assess_reader(f, word_size, mode, **kwargs)
    except OSError as e:
        return error_result(_result_mode(mode), InputError("assess_file", f"failed to open file: {path}: {e}"))
