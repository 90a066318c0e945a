"""
Analytic Network Process (ANP) synthesis.

ANP extends AHP by letting criteria influence one another. The independent
criteria weights are combined with an interdependency matrix into a
supermatrix, which is raised to a high power; the stable (limit) column of
that power gives the interdependency-adjusted weights.

.. note::
    The limit is approximated by a fixed number of successive squarings
    (at least 20, i.e. S^(2^20)). This is an empirical bound, not a proof
    of convergence: the change of the limit column over the last squaring
    is measured and reported through `NetworkWeights.converged`.
"""
from __future__ import annotations
from typing import List, Sequence, Tuple
import numpy as np
import warnings
from .config import configure_parameters
from .exceptions import ConvergenceWarning, InvalidInputError
from .ranking import assign_ranks
from .types import CriterionWeight, NetworkWeights

MIN_LIMIT_SQUARINGS = 20


def _as_weight_vector(criteria_weights) -> np.ndarray:
    try:
        w = np.array(criteria_weights, dtype=float, copy=True)
    except (ValueError, TypeError) as e:
        raise InvalidInputError(f"Criteria weights must be numerical: {e}") from e
    if w.ndim != 1 or w.size == 0:
        raise InvalidInputError("Criteria weights must be a non-empty 1D sequence.")
    if not np.all(np.isfinite(w)) or np.any(w < 0):
        raise InvalidInputError("Criteria weights must be finite and non-negative.")
    return w


def _normalized_first_column(matrix: np.ndarray) -> np.ndarray | None:
    column = matrix[:, 0]
    total = np.sum(column)
    if not np.isfinite(total) or total <= 0:
        return None
    return column / total


def create_supermatrix(criteria_weights, interdependency) -> np.ndarray:
    """
    Builds the supermatrix S[i][j] = interdependency[i][j] * w[j].

    Column j is the interdependency column of criterion j attenuated by that
    criterion's own weight.

    Raises:
        InvalidInputError: If the interdependency matrix is not an n x n array
            of finite, non-negative values for n weights.
    """
    w = _as_weight_vector(criteria_weights)
    n = w.size

    try:
        dependency = np.asarray(interdependency, dtype=float)
    except (ValueError, TypeError) as e:
        raise InvalidInputError(f"Interdependency matrix must be numerical: {e}") from e

    if dependency.shape != (n, n):
        raise InvalidInputError(
            f"Interdependency matrix has shape {dependency.shape}, but {n} criteria weights were given."
        )
    if not np.all(np.isfinite(dependency)) or np.any(dependency < 0):
        raise InvalidInputError("Interdependency matrix entries must be finite and non-negative.")

    # Broadcasting multiplies column j by w[j]
    return dependency * w[np.newaxis, :]


def calculate_limit_matrix(
    supermatrix: np.ndarray,
    squarings: int | None = None,
    tolerance: float | None = None
) -> Tuple[np.ndarray, bool, int]:
    """
    Raises the supermatrix to a limiting power by repeated squaring.

    After every squaring the matrix is divided by its total mass so that
    neither overflow nor underflow can occur. Scaling by a positive constant
    does not change the normalized columns, which are all that is read from
    the limit matrix; the returned matrix therefore sums to 1.

    Args:
        supermatrix: The square supermatrix. It is not modified.
        squarings: Number of squarings. Defaults to `LIMIT_MATRIX_SQUARINGS`;
            values below 20 are raised to 20.
        tolerance: L1 threshold on the change of the normalized first column
            over the last squaring. Defaults to `LIMIT_MATRIX_TOLERANCE`.

    Returns:
        (limit_matrix, converged, squarings_performed)
    """
    final_squarings = squarings if squarings is not None else configure_parameters.LIMIT_MATRIX_SQUARINGS
    final_squarings = max(MIN_LIMIT_SQUARINGS, int(final_squarings))
    final_tolerance = tolerance if tolerance is not None else configure_parameters.LIMIT_MATRIX_TOLERANCE

    current = np.array(supermatrix, dtype=float, copy=True)
    total = np.sum(current)
    if total > 0:
        current = current / total

    previous_column = _normalized_first_column(current)
    converged = False

    for _ in range(final_squarings):
        current = current @ current
        total = np.sum(current)
        if np.isfinite(total) and total > 0:
            current = current / total

        column = _normalized_first_column(current)
        if column is None or previous_column is None:
            converged = column is None and previous_column is None
        else:
            converged = bool(np.sum(np.abs(column - previous_column)) < final_tolerance)
        previous_column = column

    return current, converged, final_squarings


def synthesize_network_weights(
    criteria_weights,
    interdependency=None,
    squarings: int | None = None,
    tolerance: float | None = None
) -> NetworkWeights:
    """
    Folds criteria interdependencies into the criteria weights.

    - Without an interdependency matrix, ANP degenerates to AHP and the input
      weights are returned unchanged (as a new array).
    - With one, the supermatrix is built and raised to its limit; the first
      column of the limit matrix, normalized to sum 1, becomes the final
      weight vector. If that column sums to zero or less, the input weights
      are kept.

    Args:
        criteria_weights: Independent criteria weights (e.g. from `solve_priority_vector`).
        interdependency: Optional n x n matrix; entry [i][j] is how much
            criterion i's priority is influenced by criterion j.
        squarings: See `calculate_limit_matrix`.
        tolerance: See `calculate_limit_matrix`.

    Returns:
        NetworkWeights with the final weights and, when interdependencies
        were used, the supermatrix and limit matrix. The limit matrix is
        rescaled to total mass 1 (see `calculate_limit_matrix`), so its entries
        are proportional to, not equal to, the raw power of the supermatrix.
    """
    w = _as_weight_vector(criteria_weights)

    if interdependency is None:
        return NetworkWeights(weights=w)

    supermatrix = create_supermatrix(w, interdependency)
    limit_matrix, converged, performed = calculate_limit_matrix(supermatrix, squarings, tolerance)

    if not converged:
        warnings.warn(
            f"Limit matrix did not stabilize within {performed} squarings. "
            "The synthesized weights are an approximation.",
            ConvergenceWarning
        )

    limit_weights = _normalized_first_column(limit_matrix)
    final_weights = limit_weights if limit_weights is not None else w

    return NetworkWeights(
        weights=final_weights,
        supermatrix=supermatrix,
        limit_matrix=limit_matrix,
        converged=converged,
        squarings=performed
    )


def rank_criteria(
    criterion_ids: Sequence[str],
    weights: Sequence[float],
    limit_weights: Sequence[float] | None = None
) -> List[CriterionWeight]:
    """
    Ranks criteria by final weight (limit weight if given, else plain weight),
    highest first. Ties keep the original criteria order.

    Returns:
        CriterionWeight records sorted by rank.
    """
    if len(criterion_ids) != len(weights):
        raise InvalidInputError(f"{len(criterion_ids)} criteria but {len(weights)} weights.")
    if limit_weights is not None and len(limit_weights) != len(weights):
        raise InvalidInputError(f"{len(weights)} weights but {len(limit_weights)} limit weights.")

    final = limit_weights if limit_weights is not None else weights
    ranks = assign_ranks(final)

    records = [
        CriterionWeight(
            criterion_id=criterion_id,
            weight=float(weights[i]),
            limit_weight=None if limit_weights is None else float(limit_weights[i]),
            rank=ranks[i]
        )
        for i, criterion_id in enumerate(criterion_ids)
    ]
    return sorted(records, key=lambda r: r.rank)
