import logging
from typing import Dict, Iterable

import numpy as np

from pyfogplace.application import Application, EdgeKind, Sensor
from pyfogplace.distribution import worst_case_interval

logger = logging.getLogger(__name__)


class Demand:
    """Steady-state load the applications put on their modules and module pairs.

    All per-pair matrices are indexed ``[source module, destination module]``.
    """

    def __init__(self, n_modules: int):
        self.module_mips = np.zeros(n_modules)  # MI/s processed by each module
        self.module_bw = np.zeros(n_modules)  # bytes/s received by each module
        self.dependency_rate = np.zeros((n_modules, n_modules))  # tuples/s
        self.dependency_bw = np.zeros((n_modules, n_modules))  # bytes/s
        self.cpu_length = np.zeros((n_modules, n_modules))  # MI per tuple
        self.nw_length = np.zeros((n_modules, n_modules))  # bytes per tuple


def propagate_demand(application: Application, sensors: Iterable[Sensor], modules: Dict[str, int], demand: Demand):
    """Propagates the worst-case tuple rates of an application from its sources along its edges.

    Sensors and periodic edges seed the propagation. Tuple types are processed in lexicographic order; each edge
    is visited exactly once and passes ``probability / interval`` tuples per second on to its destination, which
    in turn emits the tuple types of its selectivity with the probability scaled by the selectivity fraction.

    Args:
        application: Application whose edges are walked
        sensors: All sensors of the deployment, only those of ``application`` are used
        modules: Index of every module, sensor and actuator name
        demand: Accumulator shared by all applications of the deployment

    Raises:
        ValueError: An emitted tuple type has no edge, some edge is fed by no source or a periodicity is not
            positive
    """
    if len({edge.tuple_type for edge in application.edges}) != len(application.edges):
        raise ValueError(f"{application} declares the same tuple type on multiple edges.")

    pending = {}
    for sensor in sensors:
        if sensor.application == application.name:
            pending[sensor.tuple_type] = (worst_case_interval(sensor.distribution), 1.0)
    for edge in application.edges:
        if edge.is_periodic:
            if edge.periodicity <= 0:
                raise ValueError(f"{edge} has a non-positive periodicity ({edge.periodicity}).")
            pending[edge.tuple_type] = (edge.periodicity, 1.0)

    visited = set()
    while len(visited) < len(application.edges):
        if not pending:
            unvisited = ", ".join(str(edge) for edge in application.edges if edge.tuple_type not in visited)
            raise ValueError(f"{application} has edges that no sensor or periodic edge feeds: {unvisited}.")
        tuple_type = min(pending)
        interval, probability = pending.pop(tuple_type)
        if tuple_type in visited:
            logger.debug(f"{application}: tuple type '{tuple_type}' already propagated.")
            continue
        edge = application.get_edge(tuple_type)
        if edge is None:
            raise ValueError(f"{application} emits tuple type '{tuple_type}' but no edge carries it.")
        visited.add(tuple_type)

        source, destination = modules[edge.source], modules[edge.destination]
        rate = probability / interval
        demand.dependency_rate[source, destination] += rate
        demand.cpu_length[source, destination] += edge.cpu_length
        module = application.get_module(edge.destination)
        if module is not None:
            demand.module_mips[destination] += rate * edge.cpu_length
        if edge.kind != EdgeKind.SENSOR:
            demand.dependency_bw[source, destination] += rate * edge.nw_length
            demand.nw_length[source, destination] += edge.nw_length
            if module is not None:
                demand.module_bw[destination] += rate * edge.nw_length
        logger.debug(f"{application}: {edge} carries {rate:.4f} tuples/s.")

        if module is not None:
            for out_type, fraction in module.outputs(tuple_type):
                pending[out_type] = (interval, probability * fraction)
