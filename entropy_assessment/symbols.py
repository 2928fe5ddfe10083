"""Symbol preparation: raw bytes to a normalized, alphabet-compacted sample.

The prepared sample carries two measurement channels:

- the *literal* channel (``symbols``), the sample in its native alphabet,
  remapped to dense indices ``0 .. alph_size - 1``;
- the *bitstring* channel (``bit_stream``), every masked raw value expanded
  MSB-first into ``word_size`` bits.

The bitstring is always built from the masked raw values, never from the
compacted indices, so per-bit statistics describe the real source.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from entropy_assessment.errors import (
    AllocationError,
    DegenerateAlphabetError,
    InputError,
    InvalidWordSize,
)

MAX_WORD_SIZE = 8


@dataclass(frozen=True)
class NormalizedSample:
    """Prepared data for one assessment call. All arrays are read-only."""

    word_size: int
    symbols: np.ndarray
    raw_values: np.ndarray
    bit_stream: np.ndarray
    alph_size: int
    max_symbol: int

    @property
    def length(self) -> int:
        return len(self.symbols)

    @property
    def bit_length(self) -> int:
        return len(self.bit_stream)

    @property
    def is_compacted(self) -> bool:
        return self.alph_size < self.max_symbol + 1

    def summary(self) -> dict:
        return {
            "word_size": self.word_size,
            "length": self.length,
            "alph_size": self.alph_size,
            "max_symbol": self.max_symbol,
            "bit_length": self.bit_length,
            "compacted": self.is_compacted,
        }


def as_byte_array(data) -> np.ndarray:
    """View *data* (bytes-like or array) as a flat uint8 array."""
    if data is None:
        raise InputError("prepare_sample", "data is None")
    if isinstance(data, (int, np.integer, str)):
        raise InputError("prepare_sample", f"expected bytes-like data, got {type(data).__name__}")
    if isinstance(data, np.ndarray):
        if data.dtype != np.uint8 and data.size and (
            not np.issubdtype(data.dtype, np.integer) or data.min() < 0 or data.max() > 255
        ):
            raise InputError("prepare_sample", "array values must be integers in range(0, 256)")
        return np.asarray(data, dtype=np.uint8).ravel()
    try:
        return np.frombuffer(bytes(data), dtype=np.uint8)
    except (TypeError, ValueError) as e:
        raise InputError("prepare_sample", f"invalid sample data: {e}") from e


def check_word_size(word_size, op: str = "prepare_sample") -> None:
    """Raise :class:`InvalidWordSize` unless *word_size* is an integer in ``0..8``."""
    if isinstance(word_size, bool) or not isinstance(word_size, (int, np.integer)):
        raise InvalidWordSize(op, f"bits per symbol must be an integer, got {word_size!r}")
    if not 0 <= word_size <= MAX_WORD_SIZE:
        raise InvalidWordSize(op, f"bits per symbol must be 0-8, got {word_size}")


def detect_word_size(raw: np.ndarray) -> int:
    """Minimal bit width spanning every observed value (1 for all-zero data)."""
    combined = int(np.bitwise_or.reduce(raw)) if len(raw) else 0
    return max(combined.bit_length(), 1)


def _expand_bits(values: np.ndarray, word_size: int) -> np.ndarray:
    """MSB-first expansion of each value into *word_size* bits."""
    bits = np.unpackbits(values[:, np.newaxis], axis=1)
    return np.ascontiguousarray(bits[:, 8 - word_size:]).ravel()


def prepare_sample(data, word_size: int = 0) -> NormalizedSample:
    """Build the :class:`NormalizedSample` for *data*.

    Parameters
    ----------
    data:
        Raw sample, one symbol per byte.
    word_size:
        Bits per symbol in ``1..8``; ``0`` auto-detects the width.
    """
    check_word_size(word_size)
    raw = as_byte_array(data)
    if raw.size == 0:
        raise InputError("prepare_sample", "data is empty")
    word_size = int(word_size) or detect_word_size(raw)

    mask = (1 << word_size) - 1
    try:
        raw_values = np.bitwise_and(raw, mask).astype(np.uint8)

        present = np.zeros(1 << word_size, dtype=bool)
        present[raw_values] = True
        alph_size = int(np.count_nonzero(present))
        max_symbol = int(raw_values.max())

        # dense index of each occurring value, increasing by raw value
        down_map = (np.cumsum(present) - 1).astype(np.uint8)

        if alph_size < max_symbol + 1:
            symbols = down_map[raw_values]
        else:
            symbols = raw_values

        if word_size == 1:
            bit_stream = symbols
        else:
            bit_stream = _expand_bits(raw_values, word_size)
    except MemoryError as e:
        raise AllocationError("prepare_sample", f"failed to allocate sample buffers: {e}") from e

    for arr in (symbols, raw_values, bit_stream):
        arr.flags.writeable = False

    return NormalizedSample(
        word_size=word_size,
        symbols=symbols,
        raw_values=raw_values,
        bit_stream=bit_stream,
        alph_size=alph_size,
        max_symbol=max_symbol,
    )


def check_alphabet(sample: NormalizedSample) -> None:
    """Raise :class:`DegenerateAlphabetError` when no entropy can be awarded."""
    if sample.alph_size <= 1:
        raise DegenerateAlphabetError(
            "check_alphabet", "Symbol alphabet consists of 1 symbol. No entropy awarded."
        )
