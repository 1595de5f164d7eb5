import csv
import logging
import os
from typing import List, Dict

import pandas as pd

from pyfogplace.config import Config
from pyfogplace.solution import Solution

logger = logging.getLogger(__name__)


class SearchLog:
    """History of the best solution over the iterations of a search."""

    SEARCH_LOG_FILE = "search_log.csv"

    def __init__(self):
        self.rows = []

    def __len__(self):
        return len(self.rows)

    def load(self, path: str = "results") -> None:
        self.rows = _load_csv(path, self.SEARCH_LOG_FILE)

    def write(self, path: str = "results") -> None:
        _write_csv(path, self.SEARCH_LOG_FILE, self.rows)

    def append(self, iteration: int, solution: Solution) -> None:
        row = {"iteration": iteration, "constraint": solution.constraint}
        row.update(solution.costs)
        row["operational_cost"] = solution.operational_cost
        self.rows.append(row)

    def best_costs(self) -> Dict[int, List[float]]:
        """Maps every iteration that found a new best solution to its objective vector."""
        return {int(row["iteration"]): [float(row[name]) for name in Config.OBJECTIVE_NAMES] for row in self.rows}

    def to_dataframe(self) -> pd.DataFrame:
        columns = ["iteration", "constraint", *Config.OBJECTIVE_NAMES, "operational_cost"]
        return pd.DataFrame(self.rows, columns=columns).astype(float).astype({"iteration": int})

    def print_report(self, iterations: int, elapsed: float):
        print("\n------------ RESULTS ------------")
        print(f"Search time:        {elapsed:.3f}s")
        print(f"Scored candidates:  {iterations}")
        print(f"Improvements:       {len(self)}")
        print()

        if not self.rows:
            print("No feasible solution found.")
            return
        best = self.to_dataframe().iloc[-1]
        print(f"Best solution found in iteration {int(best['iteration'])}:")
        for name in Config.OBJECTIVE_NAMES:
            print(f"- {name + ':':<19}{best[name]:.4f}")
        print(f"Operational cost:   {best['operational_cost']:.4f}")


def _load_csv(directory: str, filename: str) -> List[Dict]:
    with open(os.path.join(directory, filename)) as f:
        return [dict(row) for row in csv.DictReader(f)]


def _write_csv(directory: str, filename: str, content: List[Dict]) -> None:
    if len(content) == 0:
        logger.warning("No stats to write: Empty content.")
        return
    os.makedirs(directory, exist_ok=True)
    with open(os.path.join(directory, filename), "w") as f:
        writer = csv.DictWriter(f, fieldnames=content[0].keys())
        writer.writeheader()
        writer.writerows(content)
