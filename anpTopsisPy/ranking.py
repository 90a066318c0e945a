from __future__ import annotations
from typing import List, Sequence
import numpy as np
from .config import configure_parameters


def assign_ranks(values: Sequence[float], decimals: int | None = None) -> List[int]:
    """
    Returns the 1-based rank of every value, highest value first.

    Values equal after rounding to `decimals` places keep their input order,
    so ties never depend on floating-point noise.
    """
    final_decimals = decimals if decimals is not None else configure_parameters.RANK_TIE_DECIMALS
    rounded = np.round(np.asarray(values, dtype=float), final_decimals)

    # sorted() is stable: equal keys keep their original index order
    order = sorted(range(len(rounded)), key=lambda i: -rounded[i])

    ranks = [0] * len(rounded)
    for position, index in enumerate(order):
        ranks[index] = position + 1
    return ranks
