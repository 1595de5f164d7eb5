from itertools import groupby
from typing import List, Tuple, Sequence, Optional

import numpy as np
from networkx.utils import pairwise


def divide(numerator, denominator):
    """Elementwise division where a zero numerator always yields 0 and a positive numerator over 0 yields inf."""
    numerator = np.asarray(numerator, dtype=float)
    denominator = np.asarray(denominator, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        result = numerator / denominator
    return np.where(numerator == 0, 0.0, result)


def normalize(values: np.ndarray, reference: Optional[np.ndarray] = None) -> np.ndarray:
    """Scales values by the largest finite, positive entry of ``reference`` (``values`` itself by default).

    Infinite entries stay infinite.
    """
    reference = values if reference is None else reference
    finite = reference[np.isfinite(reference) & (reference > 0)]
    if finite.size == 0:
        return np.array(values, dtype=float)
    return np.asarray(values, dtype=float) / finite.max()


def hops(row: Sequence[int]) -> List[Tuple[int, int, int]]:
    """Moving hops ``(slot, source, destination)`` of a routing row; repeated slots mean the flow stands still."""
    return [(slot, int(s), int(e)) for slot, (s, e) in enumerate(pairwise(row)) if s != e]


def collapse(row: Sequence[int]) -> List[int]:
    """Route of a routing row with stationary slots removed."""
    return [int(node) for node, _ in groupby(row)]


def freeze(array, dtype=None) -> np.ndarray:
    """Read-only copy of an array."""
    array = np.array(array, dtype=dtype)
    array.flags.writeable = False
    return array
