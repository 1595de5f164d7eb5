"""
Small deployments shared by the test cases
"""

import math

import networkx as nx
import numpy as np

from pyfogplace.application import Application, AppModule, AppEdge, AppLoop, EdgeKind, Sensor
from pyfogplace.candidate import Candidate
from pyfogplace.distribution import DeterministicDistribution
from pyfogplace.model import Model
from pyfogplace.resource import Node, Link


def two_node_network(linked=True):
    """cloud (index 0) and edge (index 1), connected by a 10 ms, 100 MB/s link"""
    cloud = Node("cloud", mips=1000, ram=math.inf, storage=math.inf, busy_power=1648, idle_power=1332, price_mips=0.01)
    edge = Node("edge", mips=100, ram=1000, storage=1000, busy_power=107.339, idle_power=83.4333, price_mips=0.001)
    G = nx.Graph()
    G.add_nodes_from([cloud, edge])
    if linked:
        G.add_edge(cloud, edge, link=Link(latency=0.01, bandwidth=100e6))
    return G, cloud, edge


def chain_deployment(gateway, a_mips=50, b_mips=20, ab_size=1e6, pinned_to=None, migration_deadline=math.inf,
                     loop_deadline=None, distribution=None):
    """Sensor S (1 tuple/s) -> A -> B

    Module indices: A=0, B=1, S=2. Dependency indices: A->B=0, S->A=1.
    """
    a = AppModule("A", ram=10, storage=10, client_node=pinned_to, selectivity={"S_A": [("A_B", 1.0)]},
                  migration_deadline=migration_deadline)
    b = AppModule("B", ram=10, storage=10, client_node=pinned_to, migration_deadline=migration_deadline)
    edges = [
        AppEdge("S", "A", "S_A", cpu_length=a_mips, nw_length=100, kind=EdgeKind.SENSOR),
        AppEdge("A", "B", "A_B", cpu_length=b_mips, nw_length=ab_size),
    ]
    loops = [AppLoop(["S", "A", "B"], loop_deadline)] if loop_deadline is not None else []
    app = Application("app", modules=[a, b], edges=edges, loops=loops)
    sensor = Sensor("S", "S_A", gateway=gateway, distribution=distribution or DeterministicDistribution(1.0),
                    application="app")
    return [app], [sensor]


def line_network():
    """cloud - fog - gateway - mobile, indices 0 to 3"""
    cloud = Node("cloud", mips=10000, ram=100000, storage=100000, busy_power=1648, idle_power=1332)
    fog = Node("fog", mips=2800, ram=4000, storage=10000, busy_power=107.339, idle_power=83.4333)
    gateway = Node("gateway", mips=2800, ram=4000, storage=10000, busy_power=107.339, idle_power=83.4333)
    mobile = Node("mobile", mips=1000, ram=1000, storage=1000, busy_power=87.53, idle_power=82.44, tx_power=0.5)
    G = nx.Graph()
    G.add_nodes_from([cloud, fog, gateway, mobile])
    G.add_edge(cloud, fog, link=Link(latency=0.1, bandwidth=10e6))
    G.add_edge(fog, gateway, link=Link(latency=0.004, bandwidth=10e6))
    G.add_edge(gateway, mobile, link=Link(latency=0.002, bandwidth=10e6))
    return G, cloud, fog, gateway, mobile


def triangle_deployment(direct_bandwidth, tuple_size=10e3):
    """Nodes a, b and c (indices 0 to 2) with fat a-b and b-c links and a direct a-c link

    A is pinned to a, B to c; A sends one tuple of ``tuple_size`` bytes per second to B.
    """
    a, b, c = (Node(name, mips=1000, ram=1000, storage=1000, busy_power=100, idle_power=80) for name in "abc")
    G = nx.Graph()
    G.add_nodes_from([a, b, c])
    G.add_edge(a, b, link=Link(latency=0.01, bandwidth=100e6))
    G.add_edge(b, c, link=Link(latency=0.01, bandwidth=100e6))
    G.add_edge(a, c, link=Link(latency=0.01, bandwidth=direct_bandwidth))
    app = Application("app", modules=[AppModule("A", client_node=a), AppModule("B", client_node=c)],
                      edges=[AppEdge("A", "B", "A_B", cpu_length=10, nw_length=tuple_size, periodicity=1.0)])
    return G, [app]


def direct_candidate(model: Model, nodes: dict) -> Candidate:
    """Candidate placing every module on the named node, with single-hop routes (two-node models only)"""
    placement = np.zeros((model.n_nodes, model.n_modules), dtype=int)
    for module, node in nodes.items():
        placement[model.node_index(node), model.module_index(module)] = 1
    for module in range(model.n_modules):
        if placement[:, module].sum() == 0:
            placement[:, module] = model.possible_deployment[:, module]
    new = placement.argmax(axis=0)
    old = new if model.first_optimization else model.current_placement.argmax(axis=0)
    tuple_routing = np.array([[new[s], new[d]] for s, d in model.dependencies], dtype=int).reshape(-1, model.n_nodes)
    migration_routing = np.stack([old, new], axis=1)
    return Candidate(placement, tuple_routing, migration_routing)
