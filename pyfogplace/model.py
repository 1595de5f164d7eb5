"""Turns a topology and its applications into the immutable numeric model every placement algorithm works on."""

import logging
from typing import List, Dict, Optional, Sequence, Tuple

import networkx as nx
import numpy as np

from pyfogplace.application import Application, Sensor, Actuator, EdgeKind, AppModule
from pyfogplace.demand import Demand, propagate_demand
from pyfogplace.resource import Node
from pyfogplace.topology import link_matrices
from pyfogplace.utils import freeze, normalize

logger = logging.getLogger(__name__)


class Model:
    """Read-only numeric view of one placement problem.

    Nodes are indexed ``0..N-1`` in topology order, modules ``0..M-1`` with application modules first and the
    sensor and actuator endpoints after them. All arrays are frozen numpy arrays.
    """

    def __init__(self, nodes: List[Node], module_names: List[str], latency: np.ndarray, bandwidth: np.ndarray,
                 module_ram: np.ndarray, module_storage: np.ndarray, module_migration_deadline: np.ndarray,
                 possible_deployment: np.ndarray, current_placement: np.ndarray, demand: Demand,
                 loops: Sequence[Tuple[int, ...]], loop_deadlines: Sequence[float]):
        self.nodes = list(nodes)
        self.node_names = [node.name for node in nodes]
        self.module_names = list(module_names)

        self.node_mips = freeze([node.mips for node in nodes], dtype=float)
        self.node_ram = freeze([node.ram for node in nodes], dtype=float)
        self.node_storage = freeze([node.storage for node in nodes], dtype=float)
        self.node_busy_power = freeze([node.busy_power for node in nodes], dtype=float)
        self.node_idle_power = freeze([node.idle_power for node in nodes], dtype=float)
        self.node_tx_power = freeze([node.tx_power for node in nodes], dtype=float)
        self.node_price_mips = freeze([node.price_mips for node in nodes], dtype=float)
        self.node_price_ram = freeze([node.price_ram for node in nodes], dtype=float)
        self.node_price_storage = freeze([node.price_storage for node in nodes], dtype=float)
        self.node_price_bw = freeze([node.price_bw for node in nodes], dtype=float)
        self.latency = freeze(latency)
        self.bandwidth = freeze(bandwidth)

        self.module_mips = freeze(demand.module_mips)
        self.module_ram = freeze(module_ram)
        self.module_storage = freeze(module_storage)
        self.module_bw = freeze(demand.module_bw)
        self.module_migration_deadline = freeze(module_migration_deadline)
        self.possible_deployment = freeze(possible_deployment)
        self.current_placement = freeze(current_placement)

        self.dependency_rate = freeze(demand.dependency_rate)
        self.dependency_bw = freeze(demand.dependency_bw)
        self.cpu_length = freeze(demand.cpu_length)
        self.nw_length = freeze(demand.nw_length)
        self.dependencies = freeze(np.argwhere(demand.dependency_rate != 0).reshape(-1, 2))
        sources, destinations = self.dependencies[:, 0], self.dependencies[:, 1]
        self.dependency_bandwidth = freeze(self.dependency_bw[sources, destinations])  # bytes/s per dependency
        self.dependency_tuple_size = freeze(self.nw_length[sources, destinations])  # bytes per tuple
        self.loops = [tuple(loop) for loop in loops]
        self.loop_deadlines = freeze(np.asarray(loop_deadlines, dtype=float))

        self._node_index = {name: i for i, name in enumerate(self.node_names)}
        self._module_index = {name: i for i, name in enumerate(self.module_names)}
        self._dependency_index = {(int(s), int(d)): i for i, (s, d) in enumerate(self.dependencies)}

    def __str__(self):
        return f"Model({self.n_nodes} nodes, {self.n_modules} modules, {self.n_dependencies} dependencies, {self.n_loops} loops)"

    @property
    def n_nodes(self) -> int:
        return len(self.node_names)

    @property
    def n_modules(self) -> int:
        return len(self.module_names)

    @property
    def n_dependencies(self) -> int:
        return len(self.dependencies)

    @property
    def n_loops(self) -> int:
        return len(self.loops)

    @property
    def first_optimization(self) -> bool:
        """True unless every module already has a current node."""
        return bool((self.current_placement.sum(axis=0) != 1).any())

    @property
    def module_size(self) -> np.ndarray:
        """Amount of data moved when a module migrates (RAM plus storage)."""
        return self.module_ram + self.module_storage

    @property
    def module_cpu(self) -> np.ndarray:
        """Summed processing length of all tuple types a module receives."""
        return self.cpu_length.sum(axis=0)

    @property
    def dependents(self) -> np.ndarray:
        """Number of other modules consuming the output of each module."""
        consumers = self.dependency_rate != 0
        np.fill_diagonal(consumers, False)
        return consumers.sum(axis=1)

    def node_index(self, name: str) -> int:
        try:
            return self._node_index[name]
        except KeyError:
            raise ValueError(f"Unknown node '{name}'.") from None

    def module_index(self, name: str) -> int:
        try:
            return self._module_index[name]
        except KeyError:
            raise ValueError(f"Unknown module '{name}'.") from None

    def dependency_index(self, source: int, destination: int) -> int:
        try:
            return self._dependency_index[source, destination]
        except KeyError:
            raise ValueError(f"No dependency from '{self.module_names[source]}' to '{self.module_names[destination]}'.") from None

    def normalized_power(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Busy, idle and transmission power scaled by the largest finite busy power."""
        busy = self.node_busy_power
        return normalize(busy), normalize(self.node_idle_power, busy), normalize(self.node_tx_power, busy)

    def normalized_size(self) -> np.ndarray:
        return normalize(self.module_size)


def extract(network: nx.Graph, applications: List[Application], sensors: Sequence[Sensor] = (),
            actuators: Sequence[Actuator] = (), current_placement: Optional[Dict[str, str]] = None) -> Model:
    """Builds the numeric model of a deployment.

    Args:
        network: Topology whose nodes are :class:`Node` objects and whose edges carry a ``"link"`` attribute
        applications: Applications to place
        sensors: Sensors feeding the applications
        actuators: Actuators consuming application output
        current_placement: Node name of every module placed by a previous run, if any

    Raises:
        ValueError: Inconsistent or incomplete input
    """
    nodes = list(network.nodes)
    if len({node.name for node in nodes}) != len(nodes):
        raise ValueError("Node names must be unique.")
    node_index = {node: i for i, node in enumerate(nodes)}
    latency, bandwidth = link_matrices(network, nodes)

    modules = _collect_modules(applications)
    endpoints = _collect_endpoints(applications, sensors, actuators, modules)
    module_names = list(modules) + list(endpoints)
    module_index = {name: i for i, name in enumerate(module_names)}

    possible_deployment = np.ones((len(nodes), len(module_names)), dtype=int)
    placement = np.zeros((len(nodes), len(module_names)), dtype=int)
    for i, name in enumerate(module_names):
        pin = endpoints[name] if name in endpoints else modules[name].client_node
        if pin is None:
            continue
        if pin not in node_index:
            raise ValueError(f"'{name}' is pinned to {pin}, which is not part of the network.")
        possible_deployment[:, i] = 0
        possible_deployment[node_index[pin], i] = 1
        if name in endpoints:
            placement[node_index[pin], i] = 1

    node_by_name = {node.name: i for node, i in node_index.items()}
    for module_name, node_name in (current_placement or {}).items():
        if module_name not in module_index or node_name not in node_by_name:
            raise ValueError(f"Current placement of '{module_name}' on '{node_name}' refers to an unknown name.")
        placement[:, module_index[module_name]] = 0
        placement[node_by_name[node_name], module_index[module_name]] = 1

    demand = Demand(len(module_names))
    for app in applications:
        propagate_demand(app, sensors, module_index, demand)

    loops, deadlines = [], []
    for app in applications:
        for loop in app.loops:
            if any(name not in module_index for name in loop.modules):
                raise ValueError(f"{loop} of {app} refers to an unknown module.")
            indices = tuple(module_index[name] for name in loop.modules)
            for source, destination in zip(indices, indices[1:]):
                if demand.dependency_rate[source, destination] == 0:
                    raise ValueError(f"{loop} of {app} follows '{module_names[source]}' -> "
                                     f"'{module_names[destination]}', which is no dependency.")
            loops.append(indices)
            deadlines.append(loop.deadline)

    module_ram = [modules[name].ram if name in modules else 0 for name in module_names]
    module_storage = [modules[name].storage if name in modules else 0 for name in module_names]
    migration_deadline = [modules[name].migration_deadline if name in modules else np.inf for name in module_names]

    model = Model(nodes, module_names, latency, bandwidth, np.asarray(module_ram, dtype=float),
                  np.asarray(module_storage, dtype=float), np.asarray(migration_deadline, dtype=float),
                  possible_deployment, placement, demand, loops, deadlines)
    logger.info(f"Extracted {model}.")
    return model


def _collect_modules(applications: List[Application]) -> Dict[str, AppModule]:
    modules = {}
    for app in applications:
        for module in app.modules:
            known = modules.get(module.name)
            if known is None:
                modules[module.name] = module
            elif not (known.is_global and module.is_global):
                raise ValueError(f"Module '{module.name}' is declared more than once but is not global.")
    return modules


def _collect_endpoints(applications: List[Application], sensors: Sequence[Sensor], actuators: Sequence[Actuator],
                       modules: Dict[str, AppModule]) -> Dict[str, Node]:
    """Gateway node of every sensor and actuator referenced by an edge."""
    sensors_by_name = {sensor.name: sensor for sensor in sensors}
    actuators_by_name = {actuator.name: actuator for actuator in actuators}
    endpoints = {}
    for app in applications:
        for edge in app.edges:
            if edge.kind == EdgeKind.SENSOR:
                if edge.source not in sensors_by_name:
                    raise ValueError(f"{edge} of {app} starts at unknown sensor '{edge.source}'.")
                endpoints[edge.source] = sensors_by_name[edge.source].gateway
            elif edge.kind == EdgeKind.ACTUATOR:
                if edge.destination not in actuators_by_name:
                    raise ValueError(f"{edge} of {app} ends at unknown actuator '{edge.destination}'.")
                endpoints[edge.destination] = actuators_by_name[edge.destination].gateway
    for name in endpoints:
        if name in modules:
            raise ValueError(f"'{name}' names both a module and a sensor or actuator.")
    for app in applications:
        for edge in app.edges:
            for name in (edge.source, edge.destination):
                if name not in modules and name not in endpoints:
                    raise ValueError(f"{edge} of {app} refers to unknown module '{name}'.")
    return endpoints
