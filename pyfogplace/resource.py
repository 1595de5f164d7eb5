import math
from typing import Optional


class Link:
    """Directed network link between two nodes.

    Args:
        latency: Propagation latency in seconds
        bandwidth: Bandwidth in bytes per second
    """

    def __init__(self, latency: float, bandwidth: float):
        self.latency = latency
        self.bandwidth = bandwidth

    def __str__(self):
        return f"{self.__class__.__name__}({self.latency}s, {self.bandwidth}B/s)"


class Link4G(Link):
    def __init__(self):
        super().__init__(latency=0.02, bandwidth=37.5e6)


class LinkCable(Link):
    def __init__(self):
        super().__init__(latency=0.005, bandwidth=125e6)


class Node:
    """Computing device of the fog topology.

    Capacities may be ``math.inf`` for cloud-like nodes.

    Args:
        name: Unique node name
        mips: Processing capacity in million instructions per second
        ram: Memory in MB
        storage: Storage in MB
        busy_power: Power draw at full load in watts
        idle_power: Power draw when idle in watts
        tx_power: Transmission power of the node's radio in watts (mobile devices only)
        price_mips, price_ram, price_storage, price_bw: Prices per unit of resource used
        id: Identifier used by serialized topologies, defaults to the name
    """

    def __init__(self, name: str, mips: float, ram: float, storage: float, busy_power: float, idle_power: float,
                 tx_power: float = 0, price_mips: float = 0, price_ram: float = 0, price_storage: float = 0,
                 price_bw: float = 0, id: Optional[str] = None):
        self.name = name
        self.mips = mips
        self.ram = ram  # MB
        self.storage = storage  # MB
        self.busy_power = busy_power
        self.idle_power = idle_power
        self.tx_power = tx_power
        self.price_mips = price_mips
        self.price_ram = price_ram
        self.price_storage = price_storage
        self.price_bw = price_bw
        self.id = id if id is not None else name

    def __str__(self):
        return f"{self.__class__.__name__}({self.name})"

    def __repr__(self):
        return str(self)


class Client(Node):
    """Mobile end device; the only node type with a transmission cost."""

    def __init__(self, name: str):
        super().__init__(name, mips=1000, ram=1000, storage=1000, busy_power=87.53, idle_power=82.44, tx_power=0.5)


class Fog(Node):
    def __init__(self, name: str):
        super().__init__(name, mips=2800, ram=4000, storage=10000, busy_power=107.339, idle_power=83.4333,
                         price_mips=0.001, price_ram=0.0005, price_storage=0.0001, price_bw=0.0001)


class Cloud(Node):
    def __init__(self, name: str):
        super().__init__(name, mips=44800, ram=40000, storage=math.inf, busy_power=1648, idle_power=1332,
                         price_mips=0.01, price_ram=0.005, price_storage=0.001, price_bw=0.001)
