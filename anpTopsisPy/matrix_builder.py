from __future__ import annotations
from typing import List, Sequence, TYPE_CHECKING
import numpy as np
import math
from .exceptions import InvalidInputError
from .types import COMPARISON_TYPES, ComparisonType

if TYPE_CHECKING:
    from .model import Criterion, PairwiseComparison


# ==============================================================================
# 1. MATRIX CREATION
# ==============================================================================

def _get_matrix_size_from_list_len(num_judgments: int) -> int:
    """
    Calculates the size 'n' of a square matrix given 'k' pairwise judgments
    from its upper triangle. Solves the equation n*(n-1)/2 = k.

    Returns:
        The integer size 'n' of the matrix.

    Raises:
        InvalidInputError: If the number of judgments does not correspond to a valid matrix.
    """
    # k = n*(n-1)/2  =>  n^2 - n - 2k = 0, positive root only
    discriminant = 1 + 8 * num_judgments
    if num_judgments < 0:
        raise InvalidInputError(f"Invalid number of judgments ({num_judgments}). Cannot form a square matrix.")

    root = math.isqrt(discriminant)
    if root * root != discriminant:
        raise InvalidInputError(f"Invalid number of judgments ({num_judgments}). Does not correspond to a full upper-triangle matrix.")

    return (1 + root) // 2


def create_comparison_matrix(size: int) -> np.ndarray:
    """
    Creates an (n x n) pairwise comparison matrix with every cell set to 1,
    i.e. every pair judged as equally important.
    """
    if size < 0:
        raise InvalidInputError("Matrix size cannot be negative.")
    return np.ones((size, size), dtype=float)


def create_matrix_from_comparisons(
    criteria: Sequence[Criterion],
    comparisons: Sequence[PairwiseComparison],
    comparison_type: ComparisonType = "criteria"
) -> np.ndarray:
    """
    Builds the complete reciprocal matrix for one comparison type.

    Each record writes both of its cells: M[i][j] = ratio and M[j][i] = 1/ratio,
    so the two directions can never disagree. Records of the other comparison
    type are ignored. Pairs without a record stay at 1 (equal importance);
    use `Validation.validate_completeness` beforehand to catch those.

    Args:
        criteria: The ordered criteria; row/column i belongs to criteria[i].
        comparisons: Pairwise judgments, possibly incomplete.
        comparison_type: 'criteria' or 'interdependency'.

    Returns:
        A new N x N float matrix.

    Raises:
        InvalidInputError: On an unknown criterion id or a duplicated pair.
    """
    if comparison_type not in COMPARISON_TYPES:
        raise InvalidInputError(f"Unknown comparison type '{comparison_type}'. Available: {list(COMPARISON_TYPES)}")

    n = len(criteria)
    index_map = {c.id: i for i, c in enumerate(criteria)}
    if len(index_map) != n:
        raise InvalidInputError("Criterion ids must be unique.")

    matrix = create_comparison_matrix(n)
    seen = set()

    for comparison in comparisons:
        if comparison.comparison_type != comparison_type:
            continue
        try:
            i, j = index_map[comparison.criterion_a_id], index_map[comparison.criterion_b_id]
        except KeyError as e:
            raise InvalidInputError(f"Criterion '{e.args[0]}' in comparisons not found in the list of criteria.") from e

        key = comparison.pair_key
        if key in seen:
            raise InvalidInputError(
                f"Duplicate {comparison_type} comparison for pair "
                f"('{comparison.criterion_a_id}', '{comparison.criterion_b_id}')."
            )
        seen.add(key)

        ratio = comparison.ratio
        matrix[i, j] = ratio
        matrix[j, i] = 1.0 / ratio

    return matrix


def create_matrix_from_list(judgments: Sequence[float]) -> np.ndarray:
    """
    Creates a complete, reciprocal comparison matrix from a flattened list of
    upper-triangle ratios (read row by row).

    Example: For a 4x4 matrix, the list should contain 6 judgments for the
    pairs (1,2), (1,3), (1,4), (2,3), (2,4), (3,4) in that order.

    [C1/C2, C1/C3, C1/C4, C2/C3, C2/C4, C3/C4]

    A value below 1 means the column criterion dominates (1/3 = three times
    less important).
    """
    size = _get_matrix_size_from_list_len(len(judgments))
    matrix = create_comparison_matrix(size)
    judgment_iterator = iter(judgments)

    for i in range(size):
        for j in range(i + 1, size):
            value = float(next(judgment_iterator))
            if not np.isfinite(value) or value <= 0:
                raise InvalidInputError(f"Judgment for pair ({i},{j}) must be a positive number. Found: {value}")
            matrix[i, j] = value

    return complete_matrix_from_upper_triangle(matrix)


def complete_matrix_from_upper_triangle(matrix: np.ndarray) -> np.ndarray:
    """
    Returns a copy whose diagonal is 1 and whose lower triangle is the
    reciprocal of the upper triangle. The input is left untouched.
    """
    completed = np.array(matrix, dtype=float, copy=True)
    if completed.ndim != 2 or completed.shape[0] != completed.shape[1]:
        raise InvalidInputError("Matrix must be a 2D square array.")

    n = completed.shape[0]
    for i in range(n):
        completed[i, i] = 1.0
        for j in range(i + 1, n):
            if completed[i, j] <= 0:
                raise InvalidInputError(f"Upper-triangle value at ({i},{j}) must be positive. Found: {completed[i, j]}")
            completed[j, i] = 1.0 / completed[i, j]

    return completed


# ==============================================================================
# 2. CONSISTENT RECONSTRUCTION
# ==============================================================================

def rebuild_consistent_matrix(weights: Sequence[float]) -> np.ndarray:
    """
    Creates the perfectly consistent matrix implied by a weight vector,
    a_ij = w_i / w_j. Its consistency ratio is 0. Cells whose denominator
    is (numerically) zero are set to 1.
    """
    w = np.asarray(weights, dtype=float)
    n = len(w)
    consistent_matrix = np.ones((n, n), dtype=float)
    for i in range(n):
        for j in range(n):
            if w[j] > 1e-9:
                consistent_matrix[i, j] = w[i] / w[j]
    return consistent_matrix


def matrix_to_upper_triangle(matrix: np.ndarray) -> List[float]:
    """Flattens the upper triangle row by row; the inverse of `create_matrix_from_list`."""
    n = matrix.shape[0]
    return [float(matrix[i, j]) for i in range(n) for j in range(i + 1, n)]
