from __future__ import annotations
from typing import Any, Callable, Dict, List, Sequence
import numpy as np
from .config import configure_parameters
from .matrix_builder import rebuild_consistent_matrix
from .types import ConsistencyResult, PriorityVector
from .weight_derivation import derive_weights


class Registry(dict):
    """
    A custom dictionary that validates insertions to ensure only
    callable objects (functions, methods) are registered.
    """
    def __setitem__(self, key: str, value: Callable):
        if not callable(value):
            raise TypeError(
                f"Attempted to register a non-callable object of type '{type(value).__name__}' "
                f"for the key '{key}'. Only functions or methods can be registered."
            )
        super().__setitem__(key, value)

    def register(self, name: str) -> Callable:
        """Decorator factory for registering a function."""
        def decorator(func: Callable) -> Callable:
            self[name] = func
            return func
        return decorator

CONSISTENCY_METHODS = Registry()

def register_consistency_method(name: str) -> Callable:
    """
    A decorator to register a new consistency index. The function receives the
    matrix as its first argument and returns a float.
    """
    return CONSISTENCY_METHODS.register(name)


class Consistency:
    """
    A class with static methods to calculate, check, and analyze the
    consistency of pairwise comparison matrices.
    """

    @staticmethod
    def _get_random_index(n: int) -> float:
        """Retrieves Saaty's Random Consistency Index (RI) from the global config."""
        ri_values = configure_parameters.SAATY_RI_VALUES
        return ri_values.get(n, ri_values['default'])

    @staticmethod
    def _get_gci_threshold(n: int) -> float:
        return configure_parameters.GCI_THRESHOLDS.get(n, configure_parameters.GCI_THRESHOLDS['default'])

    @staticmethod
    def consistency_index(eigenvalue: float, size: int) -> float:
        """CI = (lambda_max - n) / (n - 1); 0 for n <= 2 and for values within float tolerance."""
        if size <= 2:
            return 0.0
        ci = (eigenvalue - size) / (size - 1)
        if ci < configure_parameters.FLOAT_TOLERANCE:
            ci = 0.0
        return ci

    @staticmethod
    def consistency_ratio(eigenvalue: float, size: int) -> float:
        """
        Calculates Saaty's Consistency Ratio CR = CI / RI.

        Two (or fewer) criteria are always perfectly consistent, so CR is 0
        for size <= 2. Sizes beyond the RI table use its last value.

        Args:
            eigenvalue: The principal eigenvalue (lambda_max) of the matrix.
            size: The matrix size n.

        Returns:
            The consistency ratio as a float.
        """
        if size <= 2:
            return 0.0
        ri = Consistency._get_random_index(size)
        if ri <= 0:
            return 0.0
        return Consistency.consistency_index(eigenvalue, size) / ri

    @staticmethod
    def check(
        matrix,
        threshold: float | None = None,
        method: str = "power_iteration"
    ) -> ConsistencyResult:
        """
        Solves the matrix and reports its full consistency metrics.

        Args:
            matrix: A positive reciprocal comparison matrix.
            threshold: Acceptable CR. Defaults to `DEFAULT_SAATY_CR_THRESHOLD` (0.10).
            method: Weight derivation method used to estimate lambda_max.

        Returns:
            A ConsistencyResult; `is_consistent` is True when CR < threshold.
        """
        return Consistency.evaluate(derive_weights(matrix, method=method), threshold)

    @staticmethod
    def evaluate(priority: PriorityVector, threshold: float | None = None) -> ConsistencyResult:
        """Builds the consistency metrics from an already solved priority vector."""
        final_threshold = threshold if threshold is not None else configure_parameters.DEFAULT_SAATY_CR_THRESHOLD

        n = priority.size
        cr = Consistency.consistency_ratio(priority.principal_eigenvalue, n)

        return ConsistencyResult(
            principal_eigenvalue=priority.principal_eigenvalue,
            consistency_index=Consistency.consistency_index(priority.principal_eigenvalue, n),
            random_index=Consistency._get_random_index(n),
            consistency_ratio=cr,
            is_consistent=cr < final_threshold,
            matrix_size=n
        )

    @CONSISTENCY_METHODS.register("saaty_cr")
    def calculate_saaty_cr(matrix, **kwargs) -> float:
        """Saaty's CR using the power-iteration eigenvalue."""
        priority = derive_weights(matrix, method="power_iteration")
        return Consistency.consistency_ratio(priority.principal_eigenvalue, priority.size)

    @CONSISTENCY_METHODS.register("gci")
    def calculate_gci(matrix, **kwargs) -> float:
        """
        Calculates the Geometric Consistency Index (GCI) for the matrix.
        A lower GCI value indicates better consistency.

        .. note::
            **Academic Note:** GCI is an alternative to Saaty's CR. Thresholds
            proposed by Aguarón & Moreno-Jiménez (2003) are often cited:
            GCI <= 0.31 for n=3, <= 0.35 for n=4, <= 0.37 for n>4.
        """
        crisp_matrix = np.asarray(matrix, dtype=float)
        n = crisp_matrix.shape[0]
        if n <= 2: return 0.0

        weights = derive_weights(crisp_matrix, method="geometric_mean").weights

        sum_of_squared_errors = 0.0
        for i in range(n):
            for j in range(i + 1, n):
                error = np.log(crisp_matrix[i, j]) - np.log(weights[i]) + np.log(weights[j])
                sum_of_squared_errors += error**2

        return float((2 / ((n - 1) * (n - 2))) * sum_of_squared_errors)

    @staticmethod
    def run_all_indices(matrix, threshold: float | None = None) -> Dict[str, Any]:
        """
        Runs every registered consistency index on the matrix and combines the
        CR and GCI thresholds into one `is_consistent` flag.
        """
        final_threshold = threshold if threshold is not None else configure_parameters.DEFAULT_SAATY_CR_THRESHOLD
        n = np.asarray(matrix).shape[0]
        results: Dict[str, Any] = {"matrix_size": n}

        for name, func in CONSISTENCY_METHODS.items():
            results[name] = func(matrix)

        consistent = True
        if results.get("saaty_cr", 0.0) >= final_threshold:
            consistent = False
        if results.get("gci", 0.0) > Consistency._get_gci_threshold(n):
            consistent = False
        results["is_consistent"] = consistent
        return results

    @staticmethod
    def get_consistency_recommendations(
        matrix,
        item_ids: Sequence[str] | None = None
    ) -> List[Dict[str, Any]]:
        """
        Ranks the judgments of a matrix by how far they stray from the
        perfectly consistent matrix implied by its own weights.

        Each entry holds the pair (as item ids), the logarithmic error, the
        current value and the value that would be fully consistent. The first
        entry is the judgment most worth revising.
        """
        crisp_matrix = np.asarray(matrix, dtype=float)
        n = crisp_matrix.shape[0]
        ids = list(item_ids) if item_ids is not None else [str(i) for i in range(n)]
        if len(ids) != n:
            raise ValueError(f"Expected {n} item ids, got {len(ids)}.")

        weights = derive_weights(crisp_matrix, method="power_iteration").weights
        expected = rebuild_consistent_matrix(weights)

        revisions = []
        for i in range(n):
            for j in range(i + 1, n):
                actual = crisp_matrix[i, j]
                revisions.append({
                    "pair": (ids[i], ids[j]),
                    "error": float(abs(np.log(actual / expected[i, j]))),
                    "current_value": float(actual),
                    "suggested_value": float(expected[i, j])
                })

        # Deterministic sort
        revisions.sort(key=lambda x: (-x['error'], x['pair']))
        return revisions
