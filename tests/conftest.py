"""
Pytest configuration and fixtures.
"""

import string
import tempfile

import numpy as np
import pytest

from tapboard.geometry.primitives import Bounds, Site
from tapboard.learning.collector import TapRecord


@pytest.fixture
def bounds():
    """Fixture providing a keyboard-sized rectangle."""
    return Bounds.from_size(300.0, 200.0)


@pytest.fixture
def sample_records():
    """Fixture providing taps for three keys over two iterations."""
    taps = {
        "a": [(20.0, 100.0), (24.0, 104.0)],
        "s": [(60.0, 98.0), (58.0, 102.0)],
        "q": [(15.0, 40.0), (19.0, 44.0)],
    }
    return {
        char: [TapRecord(char, pos, iteration + 1) for iteration, pos in enumerate(positions)]
        for char, positions in taps.items()
    }


@pytest.fixture
def random_sites():
    """Fixture providing a factory of reproducible random sites inside a rectangle."""
    def make(count, area, seed):
        rng = np.random.default_rng(seed)
        xs = rng.uniform(area.x0, area.x1, size=count)
        ys = rng.uniform(area.y0, area.y1, size=count)
        return [Site(string.ascii_lowercase[i], float(x), float(y)) for i, (x, y) in enumerate(zip(xs, ys))]
    return make


@pytest.fixture
def diagnostics():
    """Fixture collecting diagnostics passed to a callback."""
    class Sink(list):
        def __call__(self, diagnostic):
            self.append(diagnostic)

        def kinds(self):
            return [d.kind for d in self]

    return Sink()


@pytest.fixture
def temp_dir():
    """Fixture providing temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir
