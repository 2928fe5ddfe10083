"""Prometheus instruments for assessment workloads.

Every family is labelled by ``test_type`` (``iid`` or ``non_iid``). The
module-level :data:`METRICS` registers on the default prometheus_client
registry; tests build their own :class:`AssessmentMetrics` on a private
:class:`~prometheus_client.CollectorRegistry`.
"""

from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from entropy_assessment.result import AssessmentMode

CONTENT_TYPE = CONTENT_TYPE_LATEST

DURATION_BUCKETS = tuple(0.01 * 2 ** i for i in range(10))  # 10ms to ~5s
DATA_SIZE_BUCKETS = tuple(1024 * 10 ** i for i in range(6))  # 1KiB to ~100MB
MIN_ENTROPY_BUCKETS = tuple(0.5 * i for i in range(17))  # 0 to 8 bits


def mode_label(mode: AssessmentMode | str) -> str:
    """``IID`` -> ``iid``, ``Non-IID`` -> ``non_iid``."""
    try:
        return AssessmentMode.parse(mode).name.lower()
    except ValueError:
        return "unknown"


class AssessmentMetrics:
    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        self.requests = Counter(
            "entropy_requests_total",
            "Total number of entropy assessment requests",
            ["test_type"],
            registry=self.registry,
        )
        self.duration = Histogram(
            "entropy_duration_seconds",
            "Duration of entropy assessment in seconds",
            ["test_type"],
            buckets=DURATION_BUCKETS,
            registry=self.registry,
        )
        self.errors = Counter(
            "entropy_errors_total",
            "Total number of entropy assessment errors",
            ["test_type", "error_type"],
            registry=self.registry,
        )
        self.data_size = Histogram(
            "entropy_data_size_bytes",
            "Size of data being assessed in bytes",
            ["test_type"],
            buckets=DATA_SIZE_BUCKETS,
            registry=self.registry,
        )
        self.min_entropy = Histogram(
            "entropy_min_entropy_value",
            "Minimum entropy values calculated",
            ["test_type"],
            buckets=MIN_ENTROPY_BUCKETS,
            registry=self.registry,
        )

    def record_request(self, mode: AssessmentMode | str, size_bytes: int) -> None:
        label = mode_label(mode)
        self.requests.labels(label).inc()
        self.data_size.labels(label).observe(size_bytes)

    def record_duration(self, mode: AssessmentMode | str, seconds: float) -> None:
        self.duration.labels(mode_label(mode)).observe(seconds)

    def record_error(self, mode: AssessmentMode | str, error_type: str) -> None:
        self.errors.labels(mode_label(mode), error_type).inc()

    def record_min_entropy(self, mode: AssessmentMode | str, value: float) -> None:
        self.min_entropy.labels(mode_label(mode)).observe(value)

    def exposition(self) -> bytes:
        """Text exposition format of every family in the registry."""
        return generate_latest(self.registry)


METRICS = AssessmentMetrics(REGISTRY)
