"""Abstract base class for estimator backends.

A backend bundles the SP 800-90B statistical estimators. Each estimator is a
pure function of the prepared symbols and must not mutate them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

import numpy as np


class Channel(str, Enum):
    """Measurement channel an estimator runs on."""

    LITERAL = "Literal"
    BITSTRING = "Bitstring"


# Negative estimate: the estimator does not apply to this input.
NOT_APPLICABLE = -1.0

ENTROPY_ESTIMATORS = (
    "most_common",
    "collision",
    "markov",
    "compression",
    "t_tuple_lrs",
    "multi_mcw",
    "lag",
    "multi_mmc",
    "lz78y",
)

CONFIRMATORY_TESTS = ("chi_square", "lrs_test", "permutation")

REQUIRED_ESTIMATORS = ENTROPY_ESTIMATORS + CONFIRMATORY_TESTS


class EstimatorBackend(ABC):
    """Base class for an estimator backend.

    Every estimator receives the symbol sequence (its length is
    ``len(symbols)``), the alphabet size in use, the channel label and the
    verbosity level, which is forwarded untouched from the caller.

    Entropy estimators return bits per symbol, or :data:`NOT_APPLICABLE`.
    Confirmatory tests return a pass/fail ``bool``.
    """

    name: str = "unnamed"
    description: str = ""

    @abstractmethod
    def most_common(self, symbols: np.ndarray, alph_size: int, channel: Channel, verbose: int = 0) -> float:
        """Most common value estimate (SP 800-90B §6.3.1)."""
        ...

    @abstractmethod
    def collision(self, symbols: np.ndarray, alph_size: int, channel: Channel, verbose: int = 0) -> float:
        """Collision estimate (§6.3.2). Binary alphabets only."""
        ...

    @abstractmethod
    def markov(self, symbols: np.ndarray, alph_size: int, channel: Channel, verbose: int = 0) -> float:
        """Markov estimate (§6.3.3). Binary alphabets only."""
        ...

    @abstractmethod
    def compression(self, symbols: np.ndarray, alph_size: int, channel: Channel, verbose: int = 0) -> float:
        """Compression estimate (§6.3.4). Binary alphabets only."""
        ...

    @abstractmethod
    def t_tuple_lrs(
        self, symbols: np.ndarray, alph_size: int, channel: Channel, verbose: int = 0
    ) -> tuple[float, float]:
        """t-Tuple and LRS estimates (§6.3.5, §6.3.6) from one suffix-array pass.

        Returns
        -------
        tuple
            ``(t_tuple, lrs)``; either may be :data:`NOT_APPLICABLE`.
        """
        ...

    @abstractmethod
    def multi_mcw(self, symbols: np.ndarray, alph_size: int, channel: Channel, verbose: int = 0) -> float:
        """Multi most common in window prediction estimate (§6.3.7)."""
        ...

    @abstractmethod
    def lag(self, symbols: np.ndarray, alph_size: int, channel: Channel, verbose: int = 0) -> float:
        """Lag prediction estimate (§6.3.8)."""
        ...

    @abstractmethod
    def multi_mmc(self, symbols: np.ndarray, alph_size: int, channel: Channel, verbose: int = 0) -> float:
        """Multi Markov model with counting prediction estimate (§6.3.9)."""
        ...

    @abstractmethod
    def lz78y(self, symbols: np.ndarray, alph_size: int, channel: Channel, verbose: int = 0) -> float:
        """LZ78Y prediction estimate (§6.3.10)."""
        ...

    @abstractmethod
    def chi_square(self, symbols: np.ndarray, alph_size: int, channel: Channel, verbose: int = 0) -> bool:
        """Chi-square independence and goodness-of-fit tests (§5.2)."""
        ...

    @abstractmethod
    def lrs_test(self, symbols: np.ndarray, alph_size: int, channel: Channel, verbose: int = 0) -> bool:
        """Length of the longest repeated substring test (§5.2.5)."""
        ...

    @abstractmethod
    def permutation(self, symbols: np.ndarray, alph_size: int, channel: Channel, verbose: int = 0) -> bool:
        """Permutation testing battery (§5.1)."""
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
