import functools
from typing import Optional, Dict

import numpy as np

from pyfogplace.candidate import Candidate
from pyfogplace.config import Config
from pyfogplace.constraints import check_constraints, migration_latencies
from pyfogplace.cost import evaluate_cost, loop_latencies, operational_cost
from pyfogplace.model import Model


def compare(a: float, b: float, tolerance: float) -> int:
    """Compares two values of one objective, treating values within a relative tolerance band as equal."""
    if a * (1 + tolerance) < b:
        return -1
    if a * (1 - tolerance) > b:
        return 1
    return 0


@functools.total_ordering
class Solution:
    """A scored, frozen candidate.

    Solutions order lexicographically: fewer constraint violations first, then every objective in decreasing
    priority. Smaller solutions are better.

    Values within an objective's relative tolerance tie and defer to the next objective. The order is therefore only
    transitive when every tolerance is zero; with tolerances, sorting a set of solutions may depend on their input
    order. Searches only ever compare a candidate against the current best.
    """

    def __init__(self, candidate: Candidate, constraint: float, cost: np.ndarray, loop_latencies: np.ndarray,
                 migration_latencies: np.ndarray, operational_cost: float, config: Config):
        self.candidate = candidate
        self.constraint = constraint
        self.cost = cost
        self.loop_latencies = loop_latencies
        self.migration_latencies = migration_latencies
        self.operational_cost = operational_cost
        self.config = config

    @classmethod
    def evaluate(cls, model: Model, candidate: Candidate, config: Config) -> "Solution":
        """Scores a deep copy of ``candidate``; later changes to the original do not affect the solution.

        Raises:
            ValueError: The candidate's matrices do not fit the model
        """
        candidate = candidate.copy()
        for array in (candidate.placement, candidate.tuple_routing, candidate.migration_routing):
            array.flags.writeable = False
        constraint = check_constraints(model, candidate, config)
        arrays = [evaluate_cost(model, candidate, config), loop_latencies(model, candidate, config),
                  migration_latencies(model, candidate.migration_routing, config)]
        for array in arrays:
            array.flags.writeable = False
        return cls(candidate, constraint, *arrays, operational_cost(model, candidate), config)

    def __str__(self):
        costs = ", ".join(f"{name}={value:.4g}" for name, value in self.costs.items())
        return f"Solution(constraint={self.constraint:g}, {costs})"

    @property
    def is_valid(self) -> bool:
        return self.constraint == 0

    @property
    def costs(self) -> Dict[str, float]:
        return {name: float(value) for name, value in zip(Config.OBJECTIVE_NAMES, self.cost)}

    def compare_to(self, other: "Solution") -> int:
        """-1 if this solution is better than ``other``, 1 if it is worse, 0 if they tie."""
        result = compare(self.constraint, other.constraint, 0)
        if result != 0:
            return result
        for objective in self.config.objective_order:
            result = compare(self.cost[objective], other.cost[objective], self.config.relative_tolerances[objective])
            if result != 0:
                return result
        return 0

    def improves(self, best: Optional["Solution"]) -> bool:
        """Whether this solution should replace ``best``: it must be feasible and strictly better."""
        return self.is_valid and (best is None or self.compare_to(best) < 0)

    def __lt__(self, other: "Solution") -> bool:
        return self.compare_to(other) < 0

    def __eq__(self, other) -> bool:
        if not isinstance(other, Solution):
            return NotImplemented
        return self.compare_to(other) == 0

    __hash__ = None
