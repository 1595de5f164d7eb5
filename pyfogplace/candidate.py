import numpy as np


class Candidate:
    """Complete assignment the placement algorithms search over.

    Args:
        placement: N x M binary matrix, ``placement[n, m] == 1`` iff module ``m`` runs on node ``n``
        tuple_routing: D x N matrix, row ``d`` lists the node of dependency ``d``'s tuples at every hop slot
        migration_routing: M x N matrix, row ``m`` lists the node of module ``m``'s migration at every hop slot
    """

    def __init__(self, placement: np.ndarray, tuple_routing: np.ndarray, migration_routing: np.ndarray):
        self.placement = placement
        self.tuple_routing = tuple_routing
        self.migration_routing = migration_routing

    def copy(self) -> "Candidate":
        return Candidate(self.placement.copy(), self.tuple_routing.copy(), self.migration_routing.copy())

    @property
    def module_nodes(self) -> np.ndarray:
        """Node index of every module; only meaningful for single placements."""
        return self.placement.argmax(axis=0)
