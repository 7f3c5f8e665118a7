import os
import sys

import numpy as np
import pytest

# Ensure project root is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@pytest.fixture
def list_path(tmp_path):
    """A path inside a fresh temp dir where no file exists yet."""
    return tmp_path / "lists" / "records.bin"


@pytest.fixture
def rng():
    return np.random.default_rng(20240601)


def random_records(rng, n, max_len=100):
    """``n`` random non-empty ASCII byte strings."""
    out = []
    for length in rng.integers(1, max_len + 1, size=n):
        out.append(rng.integers(ord("a"), ord("z") + 1, size=int(length), dtype=np.uint8).tobytes())
    return out
