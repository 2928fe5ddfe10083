"""Estimator backend discovery.

Backends are installed separately and advertise themselves under the
``entropy_assessment.backends`` entry-point group, or are named explicitly
as ``package.module:attribute``.
"""

from __future__ import annotations

import importlib
import logging
from importlib.metadata import entry_points

from entropy_assessment.errors import BackendUnavailableError
from entropy_assessment.estimators.base import (
    CONFIRMATORY_TESTS,
    ENTROPY_ESTIMATORS,
    NOT_APPLICABLE,
    REQUIRED_ESTIMATORS,
    Channel,
    EstimatorBackend,
)

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "entropy_assessment.backends"


def _instantiate(obj):
    return obj() if isinstance(obj, type) else obj


def available_backends() -> list[str]:
    """Names of the backends registered through entry points."""
    return sorted(ep.name for ep in entry_points(group=ENTRY_POINT_GROUP))


def validate_backend(backend) -> None:
    """Raise :class:`BackendUnavailableError` if *backend* lacks an estimator."""
    missing = [key for key in REQUIRED_ESTIMATORS if not callable(getattr(backend, key, None))]
    if missing:
        raise BackendUnavailableError(
            "validate_backend",
            f"{backend!r} is missing estimators: {', '.join(missing)}",
        )


def load_backend(spec: str | None = None):
    """Resolve an estimator backend.

    Parameters
    ----------
    spec:
        ``"package.module:attribute"`` to import directly, an entry-point
        name, or ``None`` for the first registered backend.
    """
    if spec and ":" in spec:
        module_name, _, attr = spec.partition(":")
        try:
            module = importlib.import_module(module_name)
            backend = _instantiate(getattr(module, attr))
        except (ImportError, AttributeError) as e:
            raise BackendUnavailableError("load_backend", f"cannot import {spec}: {e}") from e
    else:
        eps = sorted(entry_points(group=ENTRY_POINT_GROUP), key=lambda ep: ep.name)
        if spec:
            eps = [ep for ep in eps if ep.name == spec]
        if not eps:
            if spec:
                msg = f"estimator backend '{spec}' is not installed"
            else:
                msg = f"no estimator backend installed in group {ENTRY_POINT_GROUP}"
            raise BackendUnavailableError("load_backend", msg)
        try:
            backend = _instantiate(eps[0].load())
        except Exception as e:
            raise BackendUnavailableError("load_backend", f"cannot load {eps[0].name}: {e}") from e

    validate_backend(backend)
    logger.debug("using estimator backend %r", backend)
    return backend


__all__ = [
    "CONFIRMATORY_TESTS",
    "ENTROPY_ESTIMATORS",
    "ENTRY_POINT_GROUP",
    "NOT_APPLICABLE",
    "REQUIRED_ESTIMATORS",
    "Channel",
    "EstimatorBackend",
    "available_backends",
    "load_backend",
    "validate_backend",
]
