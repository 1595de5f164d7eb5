"""Emission-time distributions of sensors.

Placement only ever looks at the shortest interval a sensor can realistically produce, see :func:`worst_case_interval`.
Distributions remain iterators over sampled intervals so the same sensor definitions can drive a workload generator
or simulation of the deployment.
"""

import random
from abc import ABC, abstractmethod


class Distribution(ABC):

    def __iter__(self):
        return self

    @abstractmethod
    def __next__(self) -> float:
        pass


class DeterministicDistribution(Distribution):
    def __init__(self, value: float):
        self.value = value

    def __next__(self):
        return self.value


class NormalDistribution(Distribution):
    def __init__(self, mean: float, stddev: float):
        self.mean = mean
        self.stddev = stddev

    def __next__(self):
        return random.gauss(self.mean, self.stddev)


class UniformDistribution(Distribution):
    def __init__(self, min: float, max: float):
        self.min = min
        self.max = max

    def __next__(self):
        return random.uniform(self.min, self.max)


def worst_case_interval(distribution: Distribution) -> float:
    """Shortest emission interval of a distribution, i.e. its highest tuple rate.

    Deterministic distributions emit at their fixed value, normal distributions at three standard deviations below
    the mean, uniform distributions at their minimum.

    Raises:
        TypeError: Unknown distribution type
        ValueError: The worst case interval is not positive
    """
    if isinstance(distribution, DeterministicDistribution):
        interval = distribution.value
    elif isinstance(distribution, NormalDistribution):
        interval = distribution.mean - 3 * distribution.stddev
    elif isinstance(distribution, UniformDistribution):
        interval = distribution.min
    else:
        raise TypeError(f"Unknown distribution type '{distribution.__class__.__name__}'.")
    if interval <= 0:
        raise ValueError(f"{distribution.__class__.__name__} has a non-positive worst case interval ({interval}).")
    return interval
