"""Error taxonomy for entropy assessment.

Every failure is raised as an :class:`AssessmentError` subclass inside the
core and converted to a tagged :class:`~entropy_assessment.result.AssessmentResult`
at the assessment boundary.
"""

from __future__ import annotations


class AssessmentError(Exception):
    """Base class. ``op`` names the operation that failed."""

    code: int = 1
    kind: str = "error"

    def __init__(self, op: str, msg: str = "") -> None:
        self.op = op
        self.msg = msg
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.msg:
            return f"{self.op}: {self.msg}"
        return self.op


class InputError(AssessmentError):
    """Null/empty data or an out-of-range request parameter."""

    code = 1
    kind = "input"


class InvalidWordSize(InputError):
    kind = "word_size"


class DegenerateAlphabetError(AssessmentError):
    """The sample holds a single distinct symbol. No entropy can be awarded."""

    code = 2
    kind = "degenerate_alphabet"


class AllocationError(AssessmentError):
    code = 3
    kind = "allocation"


class InternalError(AssessmentError):
    """Unexpected failure inside aggregation or an estimator call.

    ``msg`` carries the underlying diagnostic text verbatim.
    """

    code = 4
    kind = "internal"

    def __str__(self) -> str:
        return self.msg or self.op


class BackendUnavailableError(AssessmentError):
    """No estimator backend could be resolved."""

    code = 5
    kind = "backend"


class ConfigError(ValueError):
    """Invalid service configuration."""


ERROR_KINDS = {
    cls.code: cls.kind
    for cls in (InputError, DegenerateAlphabetError, AllocationError, InternalError, BackendUnavailableError)
}
