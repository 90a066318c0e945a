from __future__ import annotations
from typing import Callable, Dict
import numpy as np
import warnings
from .config import configure_parameters
from .exceptions import ConvergenceWarning, InvalidInputError
from .types import PriorityVector


# ==============================================================================
# 1. REGISTRY FOR CUSTOMIZATION
# ==============================================================================

WEIGHT_DERIVATION_REGISTRY: Dict[str, Callable[..., PriorityVector]] = {}

def register_weight_method(method_name: str):
    """A decorator to register a new weight derivation method."""
    def decorator(func):
        if method_name in WEIGHT_DERIVATION_REGISTRY:
            warnings.warn(f"Overwriting existing weight method '{method_name}'")
        WEIGHT_DERIVATION_REGISTRY[method_name] = func
        return func
    return decorator


# ==============================================================================
# 2. HELPERS
# ==============================================================================

def _as_positive_square_matrix(matrix) -> np.ndarray:
    """
    Returns a float copy of the matrix after checking it is a non-empty,
    square array of finite, strictly positive values.
    """
    try:
        crisp_matrix = np.array(matrix, dtype=float, copy=True)
    except (ValueError, TypeError) as e:
        raise InvalidInputError(f"Matrix must be numerical: {e}") from e

    if crisp_matrix.ndim != 2 or crisp_matrix.shape[0] != crisp_matrix.shape[1]:
        raise InvalidInputError(f"Matrix must be a 2D square array. Found shape {crisp_matrix.shape}.")
    if crisp_matrix.shape[0] == 0:
        raise InvalidInputError("Matrix is empty.")
    if not np.all(np.isfinite(crisp_matrix)):
        raise InvalidInputError("Matrix contains non-finite values.")
    if np.any(crisp_matrix <= 0):
        raise InvalidInputError("All entries of a comparison matrix must be positive.")
    return crisp_matrix


def principal_eigenvalue(matrix: np.ndarray, weights: np.ndarray) -> float:
    """
    Estimates lambda_max as the mean of (M.w)_i / w_i.

    A term with w_i == 0 contributes 0 instead of dividing by zero.
    """
    n = len(weights)
    Aw = matrix @ weights
    ratios = np.zeros(n)
    nonzero = weights != 0
    ratios[nonzero] = Aw[nonzero] / weights[nonzero]
    return float(np.sum(ratios) / n)


# ==============================================================================
# 3. WEIGHT DERIVATION METHODS
# ==============================================================================

@register_weight_method('power_iteration')
def solve_priority_vector(
    matrix,
    max_iter: int | None = None,
    tolerance: float | None = None
) -> PriorityVector:
    """
    Derives the priority vector of a positive reciprocal matrix with the
    power method.

    Starting from the uniform vector, the matrix is repeatedly applied and the
    result renormalized to sum 1. Iteration stops when the L1 change between
    successive iterates is below `tolerance`, or after `max_iter` steps. The
    principal eigenvalue is then recovered from the converged vector.

    Args:
        matrix: A positive N x N matrix (list of lists or ndarray).
        max_iter: Iteration cap. Defaults to `POWER_ITERATION_MAX_ITER`.
        tolerance: L1 convergence threshold. Defaults to `POWER_ITERATION_TOLERANCE`.

    Returns:
        A PriorityVector. `converged` is False (and a ConvergenceWarning is
        emitted) when the cap was reached first.
    """
    final_max_iter = max_iter if max_iter is not None else configure_parameters.POWER_ITERATION_MAX_ITER
    final_tolerance = tolerance if tolerance is not None else configure_parameters.POWER_ITERATION_TOLERANCE

    crisp_matrix = _as_positive_square_matrix(matrix)
    n = crisp_matrix.shape[0]

    if n == 1:
        return PriorityVector(weights=np.array([1.0]), principal_eigenvalue=1.0, iterations=0, converged=True)

    weights = np.full(n, 1.0 / n)
    converged = False
    iterations = 0

    for iterations in range(1, final_max_iter + 1):
        new_weights = crisp_matrix @ weights
        new_weights = new_weights / np.sum(new_weights)

        diff = np.sum(np.abs(new_weights - weights))
        weights = new_weights
        if diff < final_tolerance:
            converged = True
            break

    if not converged:
        warnings.warn(
            f"Power iteration did not reach tolerance {final_tolerance:g} within {final_max_iter} iterations. "
            "The returned weights may be unconverged.",
            ConvergenceWarning
        )

    return PriorityVector(
        weights=weights,
        principal_eigenvalue=principal_eigenvalue(crisp_matrix, weights),
        iterations=iterations,
        converged=converged,
        method="power_iteration"
    )


@register_weight_method('eigenvector')
def eigenvector_method(matrix, **kwargs) -> PriorityVector:
    """
    Derives weights from the principal right eigenvector computed directly
    with `numpy.linalg.eig`. Useful as a reference for the power method.
    """
    crisp_matrix = _as_positive_square_matrix(matrix)

    eigenvalues, eigenvectors = np.linalg.eig(crisp_matrix)
    max_eig_index = np.argmax(np.real(eigenvalues))
    weights = np.abs(np.real(eigenvectors[:, max_eig_index]))
    normalized_weights = weights / np.sum(weights)

    return PriorityVector(
        weights=normalized_weights,
        principal_eigenvalue=float(np.real(eigenvalues[max_eig_index])),
        method="eigenvector"
    )


@register_weight_method('geometric_mean')
def geometric_mean_method(matrix, **kwargs) -> PriorityVector:
    """
    Derives weights as the normalized geometric means of the rows
    (the logarithmic least squares solution).
    """
    crisp_matrix = _as_positive_square_matrix(matrix)

    row_geometric_means = np.exp(np.mean(np.log(crisp_matrix), axis=1))
    weights = row_geometric_means / np.sum(row_geometric_means)

    return PriorityVector(
        weights=weights,
        principal_eigenvalue=principal_eigenvalue(crisp_matrix, weights),
        method="geometric_mean"
    )


@register_weight_method('normalized_column')
def normalized_column_method(matrix, **kwargs) -> PriorityVector:
    """
    The classic hand-calculation approximation: divide every cell by its
    column sum, then average each row.
    """
    crisp_matrix = _as_positive_square_matrix(matrix)

    normalized = crisp_matrix / np.sum(crisp_matrix, axis=0)
    weights = np.mean(normalized, axis=1)

    return PriorityVector(
        weights=weights,
        principal_eigenvalue=principal_eigenvalue(crisp_matrix, weights),
        method="normalized_column"
    )


# ==============================================================================
# 4. DISPATCHER
# ==============================================================================

def derive_weights(matrix, method: str = "power_iteration", **kwargs) -> PriorityVector:
    """
    Derives weights from a comparison matrix using the specified method.

    Args:
        matrix: The comparison matrix of shape (n, n).
        method: One of the registered methods:
            "power_iteration" (default), "eigenvector", "geometric_mean",
            "normalized_column".
        **kwargs: Passed through to the method (e.g. max_iter, tolerance).

    Returns:
        A PriorityVector.
    """
    derivation_func = WEIGHT_DERIVATION_REGISTRY.get(method)

    if derivation_func is None:
        raise ValueError(
            f"Method '{method}' is not registered. Available methods: {list(WEIGHT_DERIVATION_REGISTRY.keys())}"
        )

    result = derivation_func(matrix, **kwargs)

    if not isinstance(result, PriorityVector):
        raise TypeError(f"Registered method {derivation_func.__name__} returned an unexpected type: {type(result)}")
    return result
