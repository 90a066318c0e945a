"""
TOPSIS ranking (Technique for Order Preference by Similarity to Ideal Solution).

Alternatives are ranked by their relative closeness to the ideal best
alternative in vector-normalized, weighted criteria space. All criteria are
treated as benefit criteria (higher is better); cost-type criteria are not
modelled.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence
import numpy as np
from .config import configure_parameters
from .exceptions import InvalidInputError
from .ranking import assign_ranks
from .types import TopsisResult, TopsisState
from .validation import Validation


def polygon_area(points: Sequence[Sequence[float]]) -> float:
    """
    Area of a simple polygon in pixels (shoelace formula).

    Fewer than three vertices give 0. The vertex order may be clockwise or
    counter-clockwise.
    """
    if len(points) < 3:
        return 0.0
    xy = np.asarray(points, dtype=float)
    if xy.ndim != 2 or xy.shape[1] != 2:
        raise InvalidInputError("Polygon vertices must be (x, y) pairs.")
    x, y = xy[:, 0], xy[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y)) / 2.0)


@dataclass(frozen=True)
class DetectionLabel:
    """One object-detection result on a damage photo."""
    label_id: str
    class_id: float
    confidence: float
    area: float

    @classmethod
    def from_polygon(cls, label_id: str, class_id: float, confidence: float,
                     points: Sequence[Sequence[float]]) -> 'DetectionLabel':
        return cls(label_id=label_id, class_id=class_id, confidence=confidence, area=polygon_area(points))

    def as_criteria_row(self) -> List[float]:
        return [float(self.class_id), float(self.confidence), float(self.area)]


class TOPSISCalculator:
    """
    Vector-normalization TOPSIS for benefit criteria.

    Example:
    >>> calculator = TOPSISCalculator(weights=[0.4, 0.4, 0.2])
    >>> state = calculator.calculate([[3, 2, 3], [2, 2, 2], [1, 1, 1]])
    >>> [r.rank for r in state.results]
    [1, 2, 3]
    """
    def __init__(self, weights):
        errors = Validation.validate_weight_vector(weights)
        if errors:
            raise InvalidInputError("; ".join(errors))
        self.weights = np.array(weights, dtype=float, copy=True)

    def __repr__(self) -> str:
        return f"TOPSISCalculator(criteria={len(self.weights)})"

    def calculate(self, decision_matrix, alternative_ids: Sequence[str] | None = None) -> TopsisState:
        """
        Runs TOPSIS and keeps every intermediate matrix.

        Args:
            decision_matrix: Alternatives x criteria; a list of rows, an
                ndarray or a pandas DataFrame (its index gives the ids).
            alternative_ids: Optional ids, one per row. Defaults to the
                DataFrame index or 'A1', 'A2', ...

        Returns:
            A TopsisState whose `results` are in input order.

        Raises:
            InvalidInputError: On empty, ragged, negative or non-finite input,
                or a weight/criteria count mismatch.
        """
        if alternative_ids is None and hasattr(decision_matrix, "to_numpy"):
            alternative_ids = [str(i) for i in decision_matrix.index]

        errors = Validation.validate_decision_matrix(decision_matrix, self.weights)
        if errors:
            raise InvalidInputError("; ".join(errors))

        x = np.asarray(decision_matrix, dtype=float)
        m = x.shape[0]

        if alternative_ids is None:
            alternative_ids = [f"A{i + 1}" for i in range(m)]
        elif len(alternative_ids) != m:
            raise InvalidInputError(f"{len(alternative_ids)} alternative ids for {m} alternatives.")

        # 1-2. Vector normalization; a zero-norm column stays 0
        norms = np.sqrt(np.sum(x ** 2, axis=0))
        normalized = np.zeros_like(x)
        nonzero = norms > 0
        normalized[:, nonzero] = x[:, nonzero] / norms[nonzero]

        # 3. Weighting
        weighted = normalized * self.weights

        # 4. Ideal best and worst (benefit criteria)
        ideal_best = np.max(weighted, axis=0)
        ideal_worst = np.min(weighted, axis=0)

        # 5. Distances
        distance_to_ideal = np.sqrt(np.sum((weighted - ideal_best) ** 2, axis=1))
        distance_to_anti_ideal = np.sqrt(np.sum((weighted - ideal_worst) ** 2, axis=1))

        # 6. Closeness coefficient; 0.5 when the alternative sits on both ideals
        denominator = distance_to_ideal + distance_to_anti_ideal
        scores = np.full(m, 0.5)
        separated = denominator > 0
        scores[separated] = distance_to_anti_ideal[separated] / denominator[separated]

        ranks = assign_ranks(scores)
        results = [
            TopsisResult(
                alternative_id=str(alternative_ids[i]),
                score=float(scores[i]),
                rank=ranks[i],
                distance_to_ideal=float(distance_to_ideal[i]),
                distance_to_anti_ideal=float(distance_to_anti_ideal[i])
            )
            for i in range(m)
        ]

        return TopsisState(
            normalized=normalized,
            weighted=weighted,
            ideal_best=ideal_best,
            ideal_worst=ideal_worst,
            distance_to_ideal=distance_to_ideal,
            distance_to_anti_ideal=distance_to_anti_ideal,
            scores=scores,
            results=results
        )


def rank_by_topsis(decision_matrix, weights, alternative_ids: Sequence[str] | None = None) -> List[TopsisResult]:
    """
    Ranks alternatives with TOPSIS.

    Args:
        decision_matrix: Alternatives x criteria, benefit-type, no missing values.
        weights: One weight per criterion. Must not be empty.
        alternative_ids: Optional ids, one per alternative.

    Returns:
        One TopsisResult per alternative, in input order. Scores lie in [0, 1]
        (higher is better); ranks are 1-based with ties kept in input order.

    Raises:
        InvalidInputError: If the weight vector is empty or the inputs are malformed.
    """
    return TOPSISCalculator(weights).calculate(decision_matrix, alternative_ids).results


def rank_detection_labels(labels: Sequence[DetectionLabel]) -> List[TopsisResult]:
    """
    Scores object-detection labels with fixed-weight TOPSIS.

    Each label (class id, confidence, polygon area) is placed in a three-row
    decision matrix next to a best and a worst reference detection from the
    configuration, and its closeness coefficient in that matrix is its score.
    The labels are then ranked against each other by score.

    Returns:
        One TopsisResult per label in input order; the distances are those of
        the label row. An empty input gives an empty list.
    """
    calculator = TOPSISCalculator(configure_parameters.DETECTION_WEIGHTS)
    best = configure_parameters.DETECTION_REFERENCE_BEST
    worst = configure_parameters.DETECTION_REFERENCE_WORST

    label_states = []
    for label in labels:
        state = calculator.calculate([label.as_criteria_row(), best, worst])
        label_states.append(state)

    scores = [float(state.scores[0]) for state in label_states]
    ranks = assign_ranks(scores)

    return [
        TopsisResult(
            alternative_id=label.label_id,
            score=scores[i],
            rank=ranks[i],
            distance_to_ideal=float(label_states[i].distance_to_ideal[0]),
            distance_to_anti_ideal=float(label_states[i].distance_to_anti_ideal[0])
        )
        for i, label in enumerate(labels)
    ]
