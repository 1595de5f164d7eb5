"""
Test file for the exhaustive placement and its search log
"""

import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout

import numpy as np

from pyfogplace.config import Config
from pyfogplace.model import extract
from pyfogplace.placement import ExhaustivePlacement
from pyfogplace.stats import SearchLog
from tests.scenarios import two_node_network, chain_deployment, line_network, triangle_deployment


class TestExhaustivePlacement(unittest.TestCase):
    """Test cases for ExhaustivePlacement"""

    def setUp(self):
        self.G, self.cloud, self.edge = two_node_network()

    def _solve(self, current_placement=None, config=None, **kwargs):
        apps, sensors = chain_deployment(self.edge, **kwargs)
        model = extract(self.G, apps, sensors, current_placement=current_placement)
        algorithm = ExhaustivePlacement(model, config)
        return model, algorithm, algorithm.run()

    def _nodes(self, model, solution):
        nodes = solution.candidate.module_nodes
        return {name: model.node_names[nodes[i]] for i, name in enumerate(model.module_names)}

    def test_colocates_on_edge(self):
        model, algorithm, solution = self._solve()
        self.assertTrue(solution.is_valid)
        self.assertEqual(self._nodes(model, solution), {"A": "edge", "B": "edge", "S": "edge"})
        self.assertEqual(algorithm.iterations, 4)

    def test_log_records_every_improvement(self):
        model, algorithm, solution = self._solve()
        self.assertEqual(len(algorithm.log), 4)
        powers = [costs[Config.POWER_COST] for costs in algorithm.log.best_costs().values()]
        self.assertEqual(list(algorithm.log.best_costs()), [1, 2, 3, 4])
        self.assertEqual(powers, sorted(powers, reverse=True))

    def test_splits_when_node_is_full(self):
        model, algorithm, solution = self._solve(a_mips=80)
        self.assertEqual(self._nodes(model, solution), {"A": "edge", "B": "cloud", "S": "edge"})
        self.assertEqual(algorithm.iterations, 3)  # the overloaded edge-only placement is skipped

    def test_no_feasible_solution(self):
        model, algorithm, solution = self._solve(a_mips=90, b_mips=90, pinned_to=self.edge)
        self.assertIsNone(solution)
        self.assertIsNone(algorithm.best)
        self.assertEqual(len(algorithm.log), 0)

    def test_migration(self):
        model, algorithm, solution = self._solve(current_placement={"A": "cloud", "B": "cloud"})
        self.assertEqual(self._nodes(model, solution), {"A": "edge", "B": "edge", "S": "edge"})
        self.assertEqual(list(solution.candidate.migration_routing[0]), [0, 1])
        self.assertGreater(solution.cost[Config.MIGRATION_COST], 0)

    def test_migration_deadline_keeps_modules_in_place(self):
        model, algorithm, solution = self._solve(current_placement={"A": "cloud", "B": "cloud"}, migration_deadline=5)
        self.assertEqual(self._nodes(model, solution), {"A": "cloud", "B": "cloud", "S": "edge"})

    def test_loop_deadline_moves_processing_to_the_cloud(self):
        model, algorithm, solution = self._solve(loop_deadline=0.1)
        self.assertTrue(solution.is_valid)
        self.assertEqual(solution.cost[Config.QOS_COST], 0)
        self.assertLess(solution.loop_latencies[0], 0.1)
        self.assertEqual(self._nodes(model, solution), {"A": "cloud", "B": "edge", "S": "edge"})

    def test_search_can_stop_early(self):
        apps, sensors = chain_deployment(self.edge)
        algorithm = ExhaustivePlacement(extract(self.G, apps, sensors))
        first = next(algorithm.search())
        self.assertIs(algorithm.best, first)
        self.assertEqual(algorithm.iterations, 1)

    def test_rerun_resets_state(self):
        model, algorithm, solution = self._solve()
        algorithm.run()
        self.assertEqual(algorithm.iterations, 4)
        self.assertEqual(len(algorithm.log), 4)


class TestMultiHopRouting(unittest.TestCase):
    """Test cases for routing choices of ExhaustivePlacement on a triangle topology"""

    def _solve(self, direct_bandwidth):
        G, apps = triangle_deployment(direct_bandwidth)
        model = extract(G, apps)
        algorithm = ExhaustivePlacement(model)
        return model, algorithm, algorithm.run()

    def _assert_endpoints(self, model, solution):
        nodes = solution.candidate.module_nodes
        for (source, destination), row in zip(model.dependencies, solution.candidate.tuple_routing):
            self.assertEqual(row[0], nodes[source])
            self.assertEqual(row[-1], nodes[destination])
        for module, row in enumerate(solution.candidate.migration_routing):
            self.assertEqual(row[0], nodes[module])
            self.assertEqual(row[-1], nodes[module])

    def test_detour_around_thin_link(self):
        model, algorithm, solution = self._solve(direct_bandwidth=1e3)
        self.assertTrue(solution.is_valid)
        np.testing.assert_array_equal(solution.candidate.tuple_routing[model.dependency_index(0, 1)], [0, 1, 2])
        self._assert_endpoints(model, solution)
        self.assertEqual(algorithm.iterations, 2)

    def test_direct_link_when_it_fits(self):
        model, algorithm, solution = self._solve(direct_bandwidth=100e6)
        self.assertTrue(solution.is_valid)
        np.testing.assert_array_equal(solution.candidate.tuple_routing[model.dependency_index(0, 1)], [0, 2, 2])
        self._assert_endpoints(model, solution)
        self.assertEqual(len(algorithm.log), 2)  # the detour is found first, then beaten on bandwidth


class TestRoutes(unittest.TestCase):
    """Test cases for the route enumeration"""

    def setUp(self):
        G, cloud, fog, gateway, mobile = line_network()
        self.G = G
        apps, sensors = chain_deployment(mobile)
        self.algorithm = ExhaustivePlacement(extract(G, apps, sensors))

    def test_single_route(self):
        self.assertEqual(self.algorithm.routes(0, 3), [(0, 1, 2, 3)])

    def test_stationary_route(self):
        self.assertEqual(self.algorithm.routes(3, 3), [(3, 3, 3, 3)])

    def test_detours_within_budget(self):
        self.assertEqual(self.algorithm.routes(1, 2), [(1, 0, 1, 2), (1, 2, 2, 2)])


class TestSearchLog(unittest.TestCase):
    """Test cases for SearchLog"""

    def setUp(self):
        G, cloud, edge = two_node_network()
        apps, sensors = chain_deployment(edge)
        self.algorithm = ExhaustivePlacement(extract(G, apps, sensors))
        self.algorithm.run()

    def test_dataframe(self):
        df = self.algorithm.log.to_dataframe()
        self.assertEqual(list(df["iteration"]), [1, 2, 3, 4])
        self.assertEqual(list(df.columns), ["iteration", "constraint", *Config.OBJECTIVE_NAMES, "operational_cost"])
        self.assertTrue((df["constraint"] == 0).all())

    def test_write_and_load(self):
        with tempfile.TemporaryDirectory() as directory:
            self.algorithm.log.write(directory)
            self.assertTrue(os.path.exists(os.path.join(directory, SearchLog.SEARCH_LOG_FILE)))
            log = SearchLog()
            log.load(directory)
        self.assertEqual(log.best_costs(), self.algorithm.log.best_costs())
        self.assertEqual(list(log.to_dataframe()["iteration"]), [1, 2, 3, 4])

    def test_empty_log_is_not_written(self):
        with tempfile.TemporaryDirectory() as directory:
            SearchLog().write(os.path.join(directory, "empty"))
            self.assertFalse(os.path.exists(os.path.join(directory, "empty")))

    def test_report(self):
        out = io.StringIO()
        with redirect_stdout(out):
            self.algorithm.log.print_report(self.algorithm.iterations, self.algorithm.elapsed)
        self.assertIn("Best solution found in iteration 4", out.getvalue())


if __name__ == '__main__':
    unittest.main()
