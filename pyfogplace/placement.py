import itertools
import logging
import time
from abc import abstractmethod, ABC
from typing import Iterator, List, Optional, Tuple, Dict

import numpy as np
from tqdm import tqdm

from pyfogplace.candidate import Candidate
from pyfogplace.config import Config
from pyfogplace.constraints import check_resources
from pyfogplace.generator import tuple_endpoints, migration_endpoints
from pyfogplace.model import Model
from pyfogplace.solution import Solution
from pyfogplace.stats import SearchLog
from pyfogplace.topology import HopIndex

logger = logging.getLogger(__name__)


class Placement(ABC):
    """A placement algorithm decides on which node every module runs and along which nodes tuples and module
    migrations travel, according to the constraints and objectives of the model.

    Args:
        model: Problem to solve
        config: Ceilings, priorities and tolerances; defaults to :class:`Config`
    """

    def __init__(self, model: Model, config: Optional[Config] = None):
        self.model = model
        self.config = config if config is not None else Config()
        self.index = HopIndex(model.latency)
        self.log = SearchLog()
        self.iterations = 0
        self.best = None
        self.elapsed = 0.0

    def run(self, progress_bar: bool = False) -> Optional[Solution]:
        """Runs the search to completion and returns the best feasible solution, or None if there is none."""
        start_time = time.time()
        for solution in self.search(progress_bar=progress_bar):
            logger.debug(f"Iteration {self.iterations}: new best {solution}.")
        self.elapsed = time.time() - start_time
        if self.best is None:
            logger.warning(f"{self.__class__.__name__} found no feasible solution in {self.iterations} iterations.")
        else:
            logger.info(f"{self.__class__.__name__} scored {self.iterations} candidates in {self.elapsed} seconds. Best: {self.best}.")
        return self.best

    @abstractmethod
    def search(self, progress_bar: bool = False) -> Iterator[Solution]:
        """Yields every solution that replaces the best one so far.

        Consumers may stop early and keep ``self.best``, which is the best solution among all scored candidates.
        """

    def _reset(self):
        self.log = SearchLog()
        self.iterations = 0
        self.best = None

    def _consider(self, candidate: Candidate) -> Optional[Solution]:
        """Scores a candidate and keeps it if it improves the best solution."""
        self.iterations += 1
        solution = Solution.evaluate(self.model, candidate, self.config)
        if not solution.improves(self.best):
            return None
        self.best = solution
        self.log.append(self.iterations, solution)
        return solution


class ExhaustivePlacement(Placement):
    """Scores every placement, tuple routing and migration routing and keeps the best feasible combination.

    Placements are enumerated over the nodes each module may run on; placements that already overload a node are
    skipped. Routes only use links and never stray further from their destination than the remaining hop slots
    allow; once a route reaches its destination it stays there. Exponential in the problem size, intended as the
    reference for small problems.
    """

    def __init__(self, model: Model, config: Optional[Config] = None):
        super().__init__(model, config)
        self._route_cache: Dict[Tuple[int, int], List[Tuple[int, ...]]] = {}

    def search(self, progress_bar: bool = False) -> Iterator[Solution]:
        self._reset()
        model = self.model
        options = [np.flatnonzero(model.possible_deployment[:, module]) for module in range(model.n_modules)]
        total = int(np.prod([len(nodes) for nodes in options]))
        logger.debug(f"ExhaustivePlacement enumerating {total} placements of {model}.")

        placement = np.zeros((model.n_nodes, model.n_modules), dtype=int)
        for nodes in tqdm(itertools.product(*options), total=total, disable=(not progress_bar)):
            placement[:] = 0
            placement[np.array(nodes, dtype=int), np.arange(model.n_modules)] = 1
            if check_resources(model, placement, self.config) > 0:
                continue
            for tuple_routing in self._routings(*tuple_endpoints(model, placement)):
                for migration_routing in self._routings(*migration_endpoints(model, placement)):
                    solution = self._consider(Candidate(placement, tuple_routing, migration_routing))
                    if solution is not None:
                        yield solution

    def routes(self, start: int, end: int) -> List[Tuple[int, ...]]:
        """Every routing row from ``start`` to ``end``, in the order the search visits them."""
        key = (int(start), int(end))
        if key not in self._route_cache:
            routes = []
            self._extend([key[0]], key[1], routes)
            self._route_cache[key] = routes
        return self._route_cache[key]

    def _extend(self, route: List[int], end: int, routes: List[Tuple[int, ...]]):
        n = self.model.n_nodes
        slot = len(route)
        if route[-1] == end:
            routes.append(tuple(route + [end] * (n - slot)))
        elif slot >= n - 1:
            routes.append(tuple(route + [end]))
        else:
            for hop in self.index.next_hops(route[-1], end, n - 1 - slot):
                self._extend(route + [hop], end, routes)

    def _routings(self, starts: np.ndarray, ends: np.ndarray) -> Iterator[np.ndarray]:
        options = [self.routes(start, end) for start, end in zip(starts, ends)]
        for rows in itertools.product(*options):
            yield np.array(rows, dtype=int).reshape(len(starts), self.model.n_nodes)
