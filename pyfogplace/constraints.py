"""Scores how badly a candidate violates the hard constraints of the placement problem.

Every offending instance adds one :data:`PENALTY`; a candidate is feasible iff its score is zero. Malformed
candidates are programming errors and raise instead of being scored.
"""

import numpy as np

from pyfogplace.candidate import Candidate
from pyfogplace.config import Config
from pyfogplace.generator import tuple_endpoints, migration_endpoints
from pyfogplace.model import Model
from pyfogplace.utils import divide, hops

PENALTY = 1.0


def check_constraints(model: Model, candidate: Candidate, config: Config) -> float:
    """Total violation score of a candidate.

    Raises:
        ValueError: The candidate's matrices do not fit the model
    """
    check_shapes(model, candidate)
    return (check_resources(model, candidate.placement, config)
            + check_possible_placement(model, candidate.placement)
            + check_single_placement(candidate.placement)
            + check_dependencies(model, candidate.placement, candidate.tuple_routing)
            + check_bandwidth(model, candidate.tuple_routing, config)
            + check_migration(model, candidate.placement, candidate.migration_routing, config))


def check_shapes(model: Model, candidate: Candidate):
    expected = {
        "placement": (model.n_nodes, model.n_modules),
        "tuple_routing": (model.n_dependencies, model.n_nodes),
        "migration_routing": (model.n_modules, model.n_nodes),
    }
    for name, shape in expected.items():
        array = getattr(candidate, name)
        if array.shape != shape:
            raise ValueError(f"{name} has shape {array.shape}, expected {shape}.")
    if not np.isin(candidate.placement, (0, 1)).all():
        raise ValueError("placement must only contain 0 and 1.")
    for name in ("tuple_routing", "migration_routing"):
        array = getattr(candidate, name)
        if array.size and (array.min() < 0 or array.max() >= model.n_nodes):
            raise ValueError(f"{name} refers to nodes outside 0..{model.n_nodes - 1}.")


def check_resources(model: Model, placement: np.ndarray, config: Config) -> float:
    """One penalty per node and resource whose usage exceeds the usable capacity."""
    violations = 0
    for demand, capacity, ceiling in [(model.module_mips, model.node_mips, config.mips_ceiling),
                                      (model.module_ram, model.node_ram, config.ram_ceiling),
                                      (model.module_storage, model.node_storage, config.storage_ceiling)]:
        violations += np.count_nonzero(placement @ demand > capacity * ceiling)
    return violations * PENALTY


def check_possible_placement(model: Model, placement: np.ndarray) -> float:
    return np.count_nonzero((placement == 1) & (model.possible_deployment == 0)) * PENALTY


def check_single_placement(placement: np.ndarray) -> float:
    return np.count_nonzero(placement.sum(axis=0) != 1) * PENALTY


def check_dependencies(model: Model, placement: np.ndarray, tuple_routing: np.ndarray) -> float:
    """Every dependency must start at its source module's node, end at its destination's node and only use links."""
    return _check_routes(model, tuple_routing, *tuple_endpoints(model, placement))


def check_bandwidth(model: Model, tuple_routing: np.ndarray, config: Config) -> float:
    """One penalty per directed link carrying more than its usable bandwidth."""
    usage = link_usage(model, tuple_routing)
    return np.count_nonzero(usage > model.bandwidth * config.bandwidth_ceiling) * PENALTY


def check_migration(model: Model, placement: np.ndarray, migration_routing: np.ndarray, config: Config) -> float:
    """Migrations must run from the old to the new node over links and finish within the module's deadline."""
    violations = _check_routes(model, migration_routing, *migration_endpoints(model, placement))
    late = migration_latencies(model, migration_routing, config) > model.module_migration_deadline
    return violations + np.count_nonzero(late) * PENALTY


def link_usage(model: Model, tuple_routing: np.ndarray) -> np.ndarray:
    """Bandwidth in bytes/s every directed link carries under a tuple routing."""
    usage = np.zeros((model.n_nodes, model.n_nodes))
    for dependency, row in enumerate(tuple_routing):
        for _, source, destination in hops(row):
            usage[source, destination] += model.dependency_bandwidth[dependency]
    return usage


def migration_latencies(model: Model, migration_routing: np.ndarray, config: Config) -> np.ndarray:
    """Worst-case migration time of every module in seconds.

    Each moving hop costs its link latency plus the module size over the link share reserved for migrations.
    Modules that move at all additionally pay the VM setup time.
    """
    available = model.bandwidth * config.migration_bandwidth_share
    latencies = np.zeros(model.n_modules)
    for module, row in enumerate(migration_routing):
        steps = hops(row)
        if not steps:
            continue
        transfer = sum(model.latency[s, e] + divide(model.module_size[module], available[s, e]) for _, s, e in steps)
        latencies[module] = config.setup_vm_time + transfer
    return latencies


def _check_routes(model: Model, routing: np.ndarray, starts: np.ndarray, ends: np.ndarray) -> float:
    violations = np.count_nonzero(routing[:, 0] != starts) + np.count_nonzero(routing[:, -1] != ends)
    if routing.shape[1] > 1:
        violations += np.count_nonzero(np.isinf(model.latency[routing[:, :-1], routing[:, 1:]]))
    return violations * PENALTY
