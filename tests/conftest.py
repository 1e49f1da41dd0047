import numpy as np
import pytest

from dft_profiles.generators.grids_properties.k_and_r_space_box import planar_grid


class ScriptedOracle:
    """
    Functional oracle test double.

    `field_fn(profile, call)` returns the field of every segment (a scalar
    or an array); the bulk value is `bulk`. Every call is counted.
    """

    def __init__(self, segments, field_fn=None, bulk=0.0):
        self.segments = list(segments)
        self.field_fn = field_fn
        self.bulk = bulk
        self.calls = 0

    def evaluate(self, profile):
        self.calls += 1
        fields = {}
        for s in self.segments:
            value = 0.0 if self.field_fn is None else self.field_fn(profile, self.calls)
            fields[s] = np.broadcast_to(value, np.shape(profile[s])).astype(float)
        return fields, {s: self.bulk for s in self.segments}


class FailingOracle:
    def __init__(self, error):
        self.error = error
        self.calls = 0

    def evaluate(self, profile):
        self.calls += 1
        raise self.error


@pytest.fixture
def grid():
    return planar_grid(20.0, 128)


@pytest.fixture
def small_grid():
    return planar_grid(10.0, 64)


@pytest.fixture
def scripted_oracle():
    return ScriptedOracle


@pytest.fixture
def failing_oracle():
    return FailingOracle
