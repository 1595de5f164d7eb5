from enum import Enum
from typing import List, Optional, Dict, Tuple, Sequence

from pyfogplace.distribution import Distribution
from pyfogplace.resource import Node


class EdgeKind(Enum):
    SENSOR = "sensor"
    ACTUATOR = "actuator"
    MODULE = "module"


class AppModule:
    """Placeable processing unit of an application.

    Args:
        name: Module name, unique within the deployment unless the module is global
        ram: Memory footprint in MB
        storage: Storage footprint in MB
        client_node: Node the module is pinned to. Setting it makes the module a client module.
        is_global: Whether the module is shared among all applications declaring it
        selectivity: Maps an incoming tuple type to the tuple types emitted in response and the fraction of incoming
            tuples that triggers each of them
        migration_deadline: Longest tolerated migration time in seconds
    """

    def __init__(self, name: str, ram: float = 0, storage: float = 0, client_node: Optional[Node] = None,
                 is_global: bool = False, selectivity: Optional[Dict[str, List[Tuple[str, float]]]] = None,
                 migration_deadline: float = float("inf")):
        self.name = name
        self.ram = ram
        self.storage = storage
        self.client_node = client_node
        self.is_global = is_global
        self.selectivity = selectivity if selectivity else {}
        self.migration_deadline = migration_deadline

    def __str__(self):
        return f"AppModule(\"{self.name}\")"

    @property
    def is_client(self) -> bool:
        return self.client_node is not None

    def outputs(self, tuple_type: str) -> List[Tuple[str, float]]:
        """Tuple types emitted when a tuple of the given type is processed."""
        return self.selectivity.get(tuple_type, [])


class AppEdge:
    """Directed data dependency carrying tuples of one type (AppEdge in iFogSim).

    Sensor edges start at a sensor name, actuator edges end at an actuator name.

    Args:
        source: Name of the emitting module or sensor
        destination: Name of the receiving module or actuator
        tuple_type: Type of the tuples sent along this edge
        cpu_length: Processing length of one tuple in million instructions
        nw_length: Network size of one tuple in bytes
        kind: Whether the edge starts at a sensor, ends at an actuator, or connects two modules
        periodicity: Emission period in seconds of a periodic edge
    """

    def __init__(self, source: str, destination: str, tuple_type: str, cpu_length: float = 0, nw_length: float = 0,
                 kind: EdgeKind = EdgeKind.MODULE, periodicity: Optional[float] = None):
        self.source = source
        self.destination = destination
        self.tuple_type = tuple_type
        self.cpu_length = cpu_length
        self.nw_length = nw_length
        self.kind = kind
        self.periodicity = periodicity

    def __str__(self):
        return f"AppEdge({self.source}->{self.destination}, \"{self.tuple_type}\")"

    @property
    def is_periodic(self) -> bool:
        return self.periodicity is not None


class AppLoop:
    """Ordered chain of module names whose end-to-end latency must stay within a deadline (in seconds)."""

    def __init__(self, modules: Sequence[str], deadline: float):
        self.modules = list(modules)
        self.deadline = deadline

    def __str__(self):
        return f"AppLoop({' -> '.join(self.modules)})"


class Application:
    """Defined by a directed graph of modules connected by edges, plus the loops its users care about.

    Args:
        name: Application name, unique within the same deployment.
    """

    def __init__(self, name: str, modules: List[AppModule], edges: List[AppEdge], loops: Sequence[AppLoop] = ()):
        self.name = name
        self.modules = modules
        self.edges = edges
        self.loops = list(loops)

    def __str__(self):
        return f"Application(\"{self.name}\")"

    def get_module(self, name: str) -> Optional[AppModule]:
        return next((module for module in self.modules if module.name == name), None)

    def get_edge(self, tuple_type: str) -> Optional[AppEdge]:
        return next((edge for edge in self.edges if edge.tuple_type == tuple_type), None)


class Sensor:
    """Tuple source attached to a gateway node.

    Args:
        name: Sensor name, used as the source of its sensor edge
        tuple_type: Type of the emitted tuples
        gateway: Node the sensor is connected to
        distribution: Emission interval distribution
        application: Name of the application consuming the tuples
        latency: Latency between the sensor and its gateway in seconds
    """

    def __init__(self, name: str, tuple_type: str, gateway: Node, distribution: Distribution, application: str,
                 latency: float = 0):
        self.name = name
        self.tuple_type = tuple_type
        self.gateway = gateway
        self.distribution = distribution
        self.application = application
        self.latency = latency

    def __str__(self):
        return f"Sensor(\"{self.name}\")"


class Actuator:
    """Tuple sink attached to a gateway node; its name is the destination of its actuator edge."""

    def __init__(self, name: str, actuator_type: str, gateway: Node, application: str, latency: float = 0):
        self.name = name
        self.actuator_type = actuator_type
        self.gateway = gateway
        self.application = application
        self.latency = latency

    def __str__(self):
        return f"Actuator(\"{self.name}\")"
