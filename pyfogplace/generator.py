import logging
import random
from typing import Optional, Tuple

import numpy as np

from pyfogplace.candidate import Candidate
from pyfogplace.model import Model
from pyfogplace.topology import HopIndex

logger = logging.getLogger(__name__)


def tuple_endpoints(model: Model, placement: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Start and end node of every dependency under a placement."""
    nodes = placement.argmax(axis=0)
    return nodes[model.dependencies[:, 0]], nodes[model.dependencies[:, 1]]


def migration_endpoints(model: Model, placement: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Old and new node of every module; on a first optimization nothing moves."""
    new = placement.argmax(axis=0)
    if model.first_optimization:
        return new, new
    return model.current_placement.argmax(axis=0), new


def random_placement(model: Model, rng: random.Random) -> np.ndarray:
    placement = np.zeros((model.n_nodes, model.n_modules), dtype=int)
    for module in range(model.n_modules):
        nodes = np.flatnonzero(model.possible_deployment[:, module])
        placement[rng.choice(nodes), module] = 1
    return placement


def random_routing(index: HopIndex, starts: np.ndarray, ends: np.ndarray, n_nodes: int,
                   rng: random.Random) -> np.ndarray:
    """Routing matrix with one row per ``(start, end)`` pair.

    Every intermediate slot moves to a random neighbor from which the end is still reachable in the remaining
    slots; once the end is reached the row stays there. A row without any such neighbor stands still and is left
    for the constraint checker to reject.
    """
    routing = np.empty((len(starts), n_nodes), dtype=int)
    for row, (start, end) in enumerate(zip(starts, ends)):
        routing[row, 0] = start
        routing[row, -1] = end
        for slot in range(1, n_nodes - 1):
            previous = routing[row, slot - 1]
            if previous == end:
                routing[row, slot] = end
                continue
            options = index.next_hops(previous, end, n_nodes - 1 - slot)
            if not options:
                logger.debug(f"No route from node {previous} to node {end} in {n_nodes - 1 - slot} hops.")
            routing[row, slot] = rng.choice(options) if options else previous
    return routing


def generate_candidate(model: Model, index: Optional[HopIndex] = None, rng: Optional[random.Random] = None) -> Candidate:
    """Draws a random candidate that satisfies single placement, possible placement and routing endpoints.

    Resource, bandwidth and deadline constraints are not considered.

    Args:
        model: Problem to draw from
        index: Hop index of the model's topology, computed if omitted
        rng: Source of randomness, seed it for reproducible candidates
    """
    index = index if index is not None else HopIndex(model.latency)
    rng = rng if rng is not None else random.Random()
    placement = random_placement(model, rng)
    tuple_routing = random_routing(index, *tuple_endpoints(model, placement), model.n_nodes, rng)
    migration_routing = random_routing(index, *migration_endpoints(model, placement), model.n_nodes, rng)
    return Candidate(placement, tuple_routing, migration_routing)
