"""This module ties the extraction of a deployment, the placement search and the reporting of its result together."""

import logging
import time
from typing import Optional, List, Dict, Sequence, Tuple

import networkx as nx

from pyfogplace.application import Application, Sensor, Actuator
from pyfogplace.config import Config
from pyfogplace.model import extract
from pyfogplace.placement import ExhaustivePlacement, Placement
from pyfogplace.solution import Solution
from pyfogplace.stats import SearchLog
from pyfogplace.utils import collapse


class ElapsedTimeFilter(logging.Filter):

    def __init__(self):
        super().__init__()
        self.start = time.time()

    def reset(self):
        self.start = time.time()

    def filter(self, record):
        record.elapsed = time.time() - self.start
        return True


logger = logging.getLogger(__name__)
logger.propagate = False
ch = logging.StreamHandler()
ch.setFormatter(logging.Formatter('%(elapsed).4f - %(name)s - %(levelname)s - %(message)s'))
elapsed_filter = ElapsedTimeFilter()


class PlacementResult:
    """Outcome of an optimization run.

    Args:
        feasible: Whether a solution without constraint violations exists
        solution: The best solution, None if infeasible
        placement_map: Node name to the names of the modules it hosts
        routing_map: (source module, destination module) to the nodes its tuples pass
        migration_map: Module name to the nodes its migration passes
        iterations: Number of scored candidates
        elapsed: Search time in seconds
        log: Improvements over the course of the search
    """

    def __init__(self, feasible: bool, solution: Optional[Solution], placement_map: Dict[str, List[str]],
                 routing_map: Dict[Tuple[str, str], List[str]], migration_map: Dict[str, List[str]], iterations: int,
                 elapsed: float, log: SearchLog):
        self.feasible = feasible
        self.solution = solution
        self.placement_map = placement_map
        self.routing_map = routing_map
        self.migration_map = migration_map
        self.iterations = iterations
        self.elapsed = elapsed
        self.log = log

    @property
    def cost(self) -> Dict[str, float]:
        return self.solution.costs if self.solution is not None else {}

    @property
    def operational_cost(self) -> Optional[float]:
        return self.solution.operational_cost if self.solution is not None else None

    @property
    def module_to_node(self) -> Dict[str, str]:
        """Node of every module, usable as ``current_placement`` of the next run."""
        return {module: node for node, modules in self.placement_map.items() for module in modules}


class Optimizer:
    """Finds the best placement of the applications' modules on a fog topology.

    Args:
        network: Topology whose nodes are :class:`Node` objects and whose edges carry a ``"link"`` attribute
        applications: Applications to place
        sensors: Sensors feeding the applications
        actuators: Actuators consuming application output
        config: Ceilings, priorities and tolerances
        current_placement: Module name to node name of the running deployment, if any
    """

    def __init__(self, network: nx.Graph, applications: List[Application], sensors: Sequence[Sensor] = (),
                 actuators: Sequence[Actuator] = (), config: Optional[Config] = None,
                 current_placement: Optional[Dict[str, str]] = None):
        elapsed_filter.reset()
        logger.addFilter(elapsed_filter)
        logger.addHandler(ch)
        self.config = config if config is not None else Config()
        self.model = extract(network, applications, sensors, actuators, current_placement)

    def run(self, results_path: Optional[str] = None, progress_bar: bool = True,
            algorithm: Optional[Placement] = None) -> PlacementResult:
        """Searches the placement and translates the best solution back to names.

        Args:
            results_path: Directory to write the search log to
            progress_bar: Show the search progress
            algorithm: Placement algorithm working on ``self.model``, exhaustive search by default
        """
        algorithm = algorithm if algorithm is not None else ExhaustivePlacement(self.model, self.config)
        solution = algorithm.run(progress_bar=progress_bar)
        if results_path:
            algorithm.log.write(results_path)
        if solution is None:
            logger.warning(f"No feasible placement for {self.model} after {algorithm.iterations} iterations.")
            return PlacementResult(False, None, {}, {}, {}, algorithm.iterations, algorithm.elapsed, algorithm.log)
        logger.info(f"Placed {self.model.n_modules} modules in {algorithm.elapsed} seconds: {solution}.")
        return PlacementResult(True, solution, self.placement_map(solution), self.routing_map(solution),
                               self.migration_map(solution), algorithm.iterations, algorithm.elapsed, algorithm.log)

    def placement_map(self, solution: Solution) -> Dict[str, List[str]]:
        """Names of the modules every node hosts; nodes without modules map to an empty list."""
        placement = solution.candidate.placement
        return {name: [self.model.module_names[m] for m in range(self.model.n_modules) if placement[n, m]]
                for n, name in enumerate(self.model.node_names)}

    def routing_map(self, solution: Solution) -> Dict[Tuple[str, str], List[str]]:
        result = {}
        for (source, destination), row in zip(self.model.dependencies, solution.candidate.tuple_routing):
            key = (self.model.module_names[source], self.model.module_names[destination])
            result[key] = [self.model.node_names[node] for node in collapse(row)]
        return result

    def migration_map(self, solution: Solution) -> Dict[str, List[str]]:
        return {name: [self.model.node_names[node] for node in collapse(row)]
                for name, row in zip(self.model.module_names, solution.candidate.migration_routing)}
