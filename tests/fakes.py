"""Deterministic estimator backend for tests."""

from __future__ import annotations

import threading
from dataclasses import dataclass

import numpy as np

from entropy_assessment.estimators.base import Channel, EstimatorBackend

DEFAULT_ESTIMATES = {
    "most_common": 0.9,
    "collision": 0.85,
    "markov": 0.8,
    "compression": 0.7,
    "t_tuple_lrs": (0.75, 0.95),
    "multi_mcw": 0.88,
    "lag": 0.92,
    "multi_mmc": 0.86,
    "lz78y": 0.83,
}


@dataclass
class Call:
    key: str
    channel: Channel
    alph_size: int
    length: int
    verbose: int
    symbols: np.ndarray


class FakeBackend(EstimatorBackend):
    """Returns canned estimates and records every call.

    An estimate may be a plain value or a ``{Channel: value}`` dict to give
    each channel its own figure.
    """

    name = "fake"
    description = "canned estimates"

    def __init__(self, estimates=None, verdicts=None, raise_on=None):
        self.estimates = dict(DEFAULT_ESTIMATES)
        self.estimates.update(estimates or {})
        self.verdicts = {"chi_square": True, "lrs_test": True, "permutation": True}
        self.verdicts.update(verdicts or {})
        self.raise_on = raise_on
        self.calls: list[Call] = []
        self._lock = threading.Lock()

    def _record(self, key, symbols, alph_size, channel, verbose):
        with self._lock:
            self.calls.append(Call(key, Channel(channel), alph_size, len(symbols), verbose, symbols))
        if key == self.raise_on:
            raise RuntimeError(f"{key} exploded")

    def _estimate(self, key, symbols, alph_size, channel, verbose):
        self._record(key, symbols, alph_size, channel, verbose)
        value = self.estimates[key]
        if isinstance(value, dict):
            value = value[Channel(channel)]
        return value

    def _verdict(self, key, symbols, alph_size, channel, verbose):
        self._record(key, symbols, alph_size, channel, verbose)
        return self.verdicts[key]

    # ── query helpers ──

    def keys_on(self, channel: Channel) -> list[str]:
        return [c.key for c in self.calls if c.channel is channel]

    def calls_for(self, key: str) -> list[Call]:
        return [c for c in self.calls if c.key == key]

    # ── estimators ──

    def most_common(self, symbols, alph_size, channel, verbose=0):
        return self._estimate("most_common", symbols, alph_size, channel, verbose)

    def collision(self, symbols, alph_size, channel, verbose=0):
        return self._estimate("collision", symbols, alph_size, channel, verbose)

    def markov(self, symbols, alph_size, channel, verbose=0):
        return self._estimate("markov", symbols, alph_size, channel, verbose)

    def compression(self, symbols, alph_size, channel, verbose=0):
        return self._estimate("compression", symbols, alph_size, channel, verbose)

    def t_tuple_lrs(self, symbols, alph_size, channel, verbose=0):
        return self._estimate("t_tuple_lrs", symbols, alph_size, channel, verbose)

    def multi_mcw(self, symbols, alph_size, channel, verbose=0):
        return self._estimate("multi_mcw", symbols, alph_size, channel, verbose)

    def lag(self, symbols, alph_size, channel, verbose=0):
        return self._estimate("lag", symbols, alph_size, channel, verbose)

    def multi_mmc(self, symbols, alph_size, channel, verbose=0):
        return self._estimate("multi_mmc", symbols, alph_size, channel, verbose)

    def lz78y(self, symbols, alph_size, channel, verbose=0):
        return self._estimate("lz78y", symbols, alph_size, channel, verbose)

    def chi_square(self, symbols, alph_size, channel, verbose=0):
        return self._verdict("chi_square", symbols, alph_size, channel, verbose)

    def lrs_test(self, symbols, alph_size, channel, verbose=0):
        return self._verdict("lrs_test", symbols, alph_size, channel, verbose)

    def permutation(self, symbols, alph_size, channel, verbose=0):
        return self._verdict("permutation", symbols, alph_size, channel, verbose)
