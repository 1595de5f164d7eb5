import logging
from typing import Dict, List, Tuple, Any

import networkx as nx
import numpy as np

from pyfogplace.resource import Node, Link

logger = logging.getLogger(__name__)

LINK = "link"  # Edge attribute holding the Link of a network edge
MB = 1e6


def load_network(data: Dict) -> nx.DiGraph:
    """Generates the topology from a node list.

    Every entry of ``data["nodes"]`` describes one node and its outgoing links::

        {"id": "1", "name": "cloud", "mips": 44800, "ram": 40000, "storageMB": 1e6,
         "busyPowerW": 1648, "idlePowerW": 1332, "neighbors": [{"nodeId": "2", "latencySec": 0.1, "bandwidthMBs": 10}]}

    Price keys (``priceMips``, ``priceRam``, ``priceStorage``, ``priceBw``) and ``txPowerW`` are optional.
    Link bandwidths are converted from MB/s to bytes per second.
    """
    G = nx.DiGraph()
    nodes = {}
    for entity in data["nodes"]:
        node = Node(name=entity["name"], mips=float(entity["mips"]), ram=float(entity["ram"]),
                    storage=float(entity["storageMB"]), busy_power=float(entity["busyPowerW"]),
                    idle_power=float(entity["idlePowerW"]), tx_power=float(entity.get("txPowerW", 0)),
                    price_mips=float(entity.get("priceMips", 0)), price_ram=float(entity.get("priceRam", 0)),
                    price_storage=float(entity.get("priceStorage", 0)), price_bw=float(entity.get("priceBw", 0)),
                    id=str(entity["id"]))
        if node.id in nodes:
            raise ValueError(f"Duplicate node id '{node.id}'.")
        nodes[node.id] = node
        G.add_node(node)
    for entity in data["nodes"]:
        source = nodes[str(entity["id"])]
        for neighbor in entity.get("neighbors", []):
            try:
                destination = nodes[str(neighbor["nodeId"])]
            except KeyError:
                raise ValueError(f"Node '{source.name}' links to unknown node id '{neighbor['nodeId']}'.") from None
            link = Link(latency=float(neighbor["latencySec"]), bandwidth=float(neighbor["bandwidthMBs"]) * MB)
            G.add_edge(source, destination, **{LINK: link})
    logger.debug(f"Loaded network with {len(G)} nodes and {G.number_of_edges()} links.")
    return G


def link_matrices(network: nx.Graph, nodes: List[Any]) -> Tuple[np.ndarray, np.ndarray]:
    """Latency and bandwidth matrices of the network in the order of ``nodes``.

    Missing links have infinite latency and zero bandwidth, a node reaches itself with zero latency and
    infinite bandwidth. Undirected graphs are treated as symmetric links.
    """
    if not network.is_directed():
        network = network.to_directed()
    index = {node: i for i, node in enumerate(nodes)}
    latency = np.full((len(nodes), len(nodes)), np.inf)
    bandwidth = np.zeros((len(nodes), len(nodes)))
    for source, destination, data in network.edges(data=True):
        if source == destination:
            continue
        link = data[LINK]
        latency[index[source], index[destination]] = link.latency
        bandwidth[index[source], index[destination]] = link.bandwidth
    np.fill_diagonal(latency, 0)
    np.fill_diagonal(bandwidth, np.inf)
    return latency, bandwidth


class HopIndex:
    """Minimum hop counts between all node pairs, computed once per model.

    Args:
        latency: Latency matrix, a finite off-diagonal entry denotes a directed link
    """

    def __init__(self, latency: np.ndarray):
        n = latency.shape[0]
        G = nx.DiGraph()
        G.add_nodes_from(range(n))
        G.add_edges_from((int(s), int(e)) for s, e in zip(*np.nonzero(np.isfinite(latency))) if s != e)
        self.neighbors = [sorted(G.successors(node)) for node in range(n)]
        self.hops = np.full((n, n), np.inf)
        for source, lengths in nx.all_pairs_shortest_path_length(G):
            for destination, length in lengths.items():
                self.hops[source, destination] = length
        self.hops.flags.writeable = False

    def hop_count(self, source: int, destination: int) -> float:
        """Minimum number of links between two nodes, ``inf`` if unreachable."""
        return self.hops[source, destination]

    def is_valid_hop(self, node: int, destination: int, budget: int) -> bool:
        """Whether ``destination`` is reachable from ``node`` within ``budget`` links."""
        return self.hops[node, destination] <= budget

    def next_hops(self, previous: int, destination: int, budget: int) -> List[int]:
        """Neighbors of ``previous`` from which ``destination`` is still reachable within ``budget`` links."""
        return [node for node in self.neighbors[previous] if self.hops[node, destination] <= budget]
