import logging

import numpy as np
import pytest

from fakes import FakeBackend


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def binary_data():
    rng = np.random.default_rng(90)
    return rng.integers(0, 2, 4096, dtype=np.uint8).tobytes()


@pytest.fixture
def byte_data():
    """Every 8-bit value, so the alphabet spans the full word."""
    rng = np.random.default_rng(800)
    return np.concatenate([np.arange(256, dtype=np.uint8), rng.integers(0, 256, 3840, dtype=np.uint8)]).tobytes()


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
