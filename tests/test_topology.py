"""
Test file for network loading and the hop index
"""

import math
import unittest

import numpy as np

from pyfogplace.topology import load_network, link_matrices, HopIndex, LINK
from tests.scenarios import line_network, two_node_network


class TestLoadNetwork(unittest.TestCase):
    """Test cases for load_network"""

    def setUp(self):
        self.data = {"nodes": [
            {"id": 1, "name": "cloud", "mips": 44800, "ram": 40000, "storageMB": 1e6, "busyPowerW": 1648,
             "idlePowerW": 1332, "priceMips": 0.01, "neighbors": [{"nodeId": 2, "latencySec": 0.1, "bandwidthMBs": 10}]},
            {"id": 2, "name": "proxy", "mips": 2800, "ram": 4000, "storageMB": 1e4, "busyPowerW": 107.339,
             "idlePowerW": 83.4333, "neighbors": [{"nodeId": 1, "latencySec": 0.1, "bandwidthMBs": 10}]},
        ]}

    def test_nodes_and_links(self):
        G = load_network(self.data)
        self.assertEqual(sorted(node.name for node in G), ["cloud", "proxy"])
        cloud = next(node for node in G if node.name == "cloud")
        self.assertEqual(cloud.price_mips, 0.01)
        self.assertEqual(cloud.id, "1")
        self.assertEqual(G.number_of_edges(), 2)
        for _, _, data in G.edges(data=True):
            self.assertEqual(data[LINK].bandwidth, 10e6)
            self.assertEqual(data[LINK].latency, 0.1)

    def test_unknown_neighbor(self):
        self.data["nodes"][0]["neighbors"].append({"nodeId": 7, "latencySec": 0.1, "bandwidthMBs": 10})
        with self.assertRaises(ValueError):
            load_network(self.data)

    def test_duplicate_id(self):
        self.data["nodes"][1]["id"] = 1
        with self.assertRaises(ValueError):
            load_network(self.data)


class TestLinkMatrices(unittest.TestCase):
    """Test cases for link_matrices"""

    def test_undirected_links_are_symmetric(self):
        G, cloud, edge = two_node_network()
        latency, bandwidth = link_matrices(G, [cloud, edge])
        np.testing.assert_array_equal(latency, [[0, 0.01], [0.01, 0]])
        np.testing.assert_array_equal(bandwidth, [[math.inf, 100e6], [100e6, math.inf]])

    def test_missing_link(self):
        G, cloud, edge = two_node_network(linked=False)
        latency, bandwidth = link_matrices(G, [cloud, edge])
        self.assertEqual(latency[0, 1], math.inf)
        self.assertEqual(bandwidth[0, 1], 0)


class TestHopIndex(unittest.TestCase):
    """Test cases for HopIndex"""

    def setUp(self):
        G, *nodes = line_network()
        latency, _ = link_matrices(G, nodes)
        self.index = HopIndex(latency)

    def test_hop_counts(self):
        self.assertEqual(self.index.hop_count(0, 3), 3)
        self.assertEqual(self.index.hop_count(3, 0), 3)
        self.assertEqual(self.index.hop_count(2, 2), 0)

    def test_valid_hop(self):
        self.assertTrue(self.index.is_valid_hop(1, 3, 2))
        self.assertFalse(self.index.is_valid_hop(0, 3, 2))

    def test_next_hops_respect_budget(self):
        self.assertEqual(self.index.next_hops(0, 3, 2), [1])
        self.assertEqual(self.index.next_hops(1, 3, 1), [2])
        self.assertEqual(self.index.next_hops(1, 2, 2), [0, 2])

    def test_unreachable(self):
        latency = np.array([[0, 1, np.inf], [1, 0, np.inf], [np.inf, np.inf, 0]])
        index = HopIndex(latency)
        self.assertEqual(index.hop_count(0, 2), math.inf)
        self.assertFalse(index.is_valid_hop(0, 2, 10))
        self.assertEqual(index.next_hops(0, 2, 10), [])


if __name__ == '__main__':
    unittest.main()
