import numpy as np
import pandas as pd
from typing import Any, Dict, List
from .config import configure_parameters
from .consistency import Consistency
from .matrix_builder import create_matrix_from_list
from .weight_derivation import derive_weights


def _random_reciprocal_matrix(n: int, rng: np.random.Generator) -> np.ndarray:
    """Draws every upper-triangle judgment uniformly from the Saaty scale."""
    scale = np.array(configure_parameters.SAATY_SCALE_VALUES)
    judgments = rng.choice(scale, size=n * (n - 1) // 2)
    return create_matrix_from_list(judgments)


def estimate_random_index(n: int, trials: int = 1000, seed: int | None = None) -> float:
    """
    Estimates Saaty's Random Index for size n: the mean consistency index of
    random reciprocal matrices. Sizes 1 and 2 are always consistent.
    """
    if n < 1:
        raise ValueError("Matrix size must be at least 1.")
    if trials < 1:
        raise ValueError("At least one trial is required.")
    if n <= 2:
        return 0.0

    rng = np.random.default_rng(seed)
    total = 0.0
    for _ in range(trials):
        matrix = _random_reciprocal_matrix(n, rng)
        eigenvalue = derive_weights(matrix, method="eigenvector").principal_eigenvalue
        total += (eigenvalue - n) / (n - 1)
    return total / trials


class RandomIndexSimulation:
    """
    A tool for checking the Random Index table in the configuration against
    a Monte Carlo estimate.
    """
    def __init__(self, trials: int = 1000, seed: int | None = None):
        self.trials = trials
        self.seed = seed
        self.results: List[Dict[str, Any]] = []

    def run(self, sizes: List[int]) -> pd.DataFrame:
        """
        Estimates the RI for every size and compares it with the configured value.

        Returns:
            A DataFrame with columns size, estimated_ri, table_ri, difference.
        """
        self.results = []
        for n in sizes:
            print(f"\n--- Estimating RI for n = {n} ({self.trials} trials) ---")
            estimated = estimate_random_index(n, self.trials, self.seed)
            table = Consistency._get_random_index(n)
            self.results.append({
                "size": n,
                "estimated_ri": estimated,
                "table_ri": table,
                "difference": estimated - table,
            })
        return pd.DataFrame(self.results, columns=["size", "estimated_ri", "table_ri", "difference"])
