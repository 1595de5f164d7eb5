import numpy as np

from pyfogplace.candidate import Candidate
from pyfogplace.config import Config
from pyfogplace.model import Model
from pyfogplace.utils import divide, hops


def evaluate_cost(model: Model, candidate: Candidate, config: Config) -> np.ndarray:
    """Objective vector of a candidate, indexed by the ``Config.*_COST`` constants. Lower is better everywhere."""
    cost = np.zeros(Config.NR_OBJECTIVES)
    cost[Config.QOS_COST] = np.count_nonzero(loop_latencies(model, candidate, config) > model.loop_deadlines)
    cost[Config.POWER_COST] = power_cost(model, candidate, config)
    cost[Config.PROCESSING_COST] = processing_cost(model, candidate.placement, config)
    cost[Config.BANDWIDTH_COST] = bandwidth_cost(model, candidate.tuple_routing, config)
    cost[Config.MIGRATION_COST] = migration_cost(model, candidate.migration_routing, config)
    return cost


def power_cost(model: Model, candidate: Candidate, config: Config) -> float:
    """Dynamic power of the busy nodes plus radio power of mobile nodes sending tuples, in normalized units."""
    busy, idle, tx = model.normalized_power()
    load = _placed(candidate.placement, divide(model.module_mips[np.newaxis, :], model.node_mips[:, np.newaxis]))
    processing = ((busy - idle)[:, np.newaxis] * load).sum()
    sources, destinations = _links(candidate.tuple_routing)
    usable = model.bandwidth[sources, destinations] * config.bandwidth_ceiling
    transmission = divide(tx[sources] * model.dependency_bandwidth[:, np.newaxis], usable).sum()
    return float(processing + transmission)


def processing_cost(model: Model, placement: np.ndarray, config: Config) -> float:
    """Summed CPU utilization every module causes on its node."""
    usable = model.node_mips[:, np.newaxis] * config.mips_ceiling
    return float(_placed(placement, divide(model.module_mips[np.newaxis, :], usable)).sum())


def bandwidth_cost(model: Model, tuple_routing: np.ndarray, config: Config) -> float:
    """Summed link utilization of every dependency over every hop it takes."""
    sources, destinations = _links(tuple_routing)
    usable = model.bandwidth[sources, destinations] * config.bandwidth_ceiling
    return float(divide(model.dependency_bandwidth[:, np.newaxis], usable).sum())


def migration_cost(model: Model, migration_routing: np.ndarray, config: Config) -> float:
    """Normalized transfer time of every migration, weighted by how many modules consume the migrating module."""
    sources, destinations = _links(migration_routing)
    available = model.bandwidth[sources, destinations] * config.migration_bandwidth_share
    weight = model.normalized_size() * model.dependents
    return float(divide(weight[:, np.newaxis], available).sum())


def loop_latencies(model: Model, candidate: Candidate, config: Config) -> np.ndarray:
    """Worst-case latency of every application loop in seconds.

    Each step ``a -> b`` of a loop costs the processing latency of ``a``'s node plus the transmission latency of
    the dependency ``a -> b``.
    """
    nodes = candidate.module_nodes
    latencies = np.zeros(model.n_loops)
    for i, loop in enumerate(model.loops):
        for source, destination in zip(loop, loop[1:]):
            if model.module_mips[source] > 0:
                latencies[i] += processing_latency(model, candidate.placement, nodes[source], config)
            dependency = model.dependency_index(source, destination)
            latencies[i] += transmission_latency(model, candidate.tuple_routing, dependency, config)
    return latencies


def processing_latency(model: Model, placement: np.ndarray, node: int, config: Config) -> float:
    """Time the node needs to process one tuple of every module placed on it."""
    colocated = (placement[node] == 1) & (model.module_mips > 0)
    return float(divide(model.module_cpu[colocated].sum(), model.node_mips[node] * config.mips_ceiling))


def transmission_latency(model: Model, tuple_routing: np.ndarray, dependency: int, config: Config) -> float:
    """Time a tuple of a dependency needs along its route.

    Every hop costs the link latency plus the tuples of all dependencies that cross the same link at the same hop
    slot over the usable link bandwidth.
    """
    latency = 0.0
    for slot, source, destination in hops(tuple_routing[dependency]):
        sharing = (tuple_routing[:, slot] == source) & (tuple_routing[:, slot + 1] == destination)
        size = model.dependency_tuple_size[sharing].sum()
        latency += model.latency[source, destination]
        latency += float(divide(size, model.bandwidth[source, destination] * config.bandwidth_ceiling))
    return latency


def operational_cost(model: Model, candidate: Candidate) -> float:
    """Price of the resources a candidate uses. Reported alongside the objectives, never optimized."""
    per_module = (model.node_price_mips[:, np.newaxis] * model.module_mips[np.newaxis, :]
                  + model.node_price_ram[:, np.newaxis] * model.module_ram[np.newaxis, :]
                  + model.node_price_storage[:, np.newaxis] * model.module_storage[np.newaxis, :])
    sources, destinations = _links(candidate.tuple_routing)
    moving = sources != destinations
    traffic = model.node_price_bw[sources] * model.dependency_bandwidth[:, np.newaxis] * moving
    return float(_placed(candidate.placement, per_module).sum() + traffic.sum())


def _links(routing: np.ndarray):
    """Source and destination node of every hop slot of a routing matrix."""
    return routing[:, :-1], routing[:, 1:]


def _placed(placement: np.ndarray, values: np.ndarray) -> np.ndarray:
    """Per node and module values where the module is placed, zero elsewhere."""
    return np.where(placement == 1, values, 0.0)
