from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple, TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    import pandas as pd
    from .model import Criterion

ComparisonType = Literal["criteria", "interdependency"]
COMPARISON_TYPES: Tuple[str, ...] = ("criteria", "interdependency")

Favors = Literal["a", "b"]


# ==============================================================================
# 1. WEIGHT AND CONSISTENCY RESULTS
# ==============================================================================

@dataclass(frozen=True)
class PriorityVector:
    """Normalized weights and the principal eigenvalue of a comparison matrix."""
    weights: np.ndarray
    principal_eigenvalue: float
    iterations: int = 0
    converged: bool = True
    method: str = "power_iteration"

    @property
    def size(self) -> int:
        return len(self.weights)


@dataclass(frozen=True)
class ConsistencyResult:
    """Saaty consistency metrics for one comparison matrix."""
    principal_eigenvalue: float
    consistency_index: float
    random_index: float
    consistency_ratio: float
    is_consistent: bool
    matrix_size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "principalEigenvalue": self.principal_eigenvalue,
            "consistencyIndex": self.consistency_index,
            "randomIndex": self.random_index,
            "consistencyRatio": self.consistency_ratio,
            "isConsistent": self.is_consistent,
            "matrixSize": self.matrix_size,
        }


# ==============================================================================
# 2. COMPLETENESS
# ==============================================================================

@dataclass(frozen=True)
class MissingPair:
    criterion_a_id: str
    criterion_b_id: str
    comparison_type: ComparisonType = "criteria"


@dataclass(frozen=True)
class CompletenessReport:
    """Outcome of a completeness check for one comparison type."""
    complete: bool
    missing: List[MissingPair]
    expected_count: int
    provided_count: int
    comparison_type: ComparisonType = "criteria"


# ==============================================================================
# 3. NETWORK (ANP) RESULTS
# ==============================================================================

@dataclass(frozen=True)
class NetworkWeights:
    """
    Interdependency-adjusted weights. `supermatrix` and `limit_matrix` are
    None when no interdependency matrix was supplied.
    """
    weights: np.ndarray
    supermatrix: Optional[np.ndarray] = None
    limit_matrix: Optional[np.ndarray] = None
    converged: bool = True
    squarings: int = 0


@dataclass(frozen=True)
class CriterionWeight:
    criterion_id: str
    weight: float
    limit_weight: Optional[float] = None
    rank: int = 0

    @property
    def final_weight(self) -> float:
        """The limit weight when interdependencies were modelled, otherwise the plain weight."""
        return self.limit_weight if self.limit_weight is not None else self.weight


@dataclass(frozen=True)
class ANPResult:
    """
    The immutable outcome of one completed ANP analysis.

    `weights` is ordered by rank (1 = most important). Use `weight_vector()`
    to get the final weights back in criteria order for TOPSIS.
    """
    criteria: List[Criterion]
    weights: List[CriterionWeight]
    consistency_ratio: float
    is_consistent: bool
    has_interdependencies: bool
    created_at: str
    created_by: str
    consistency: Optional[ConsistencyResult] = None
    interdependency_consistency: Optional[ConsistencyResult] = None
    supermatrix: Optional[np.ndarray] = None
    limit_matrix: Optional[np.ndarray] = None

    def weight_for(self, criterion_id: str) -> CriterionWeight:
        for w in self.weights:
            if w.criterion_id == criterion_id:
                return w
        raise KeyError(f"Criterion '{criterion_id}' is not part of this result.")

    def weight_vector(self) -> np.ndarray:
        """Final weights in the original criteria order."""
        return np.array([self.weight_for(c.id).final_weight for c in self.criteria], dtype=float)

    def to_dict(self) -> Dict[str, Any]:
        """Serializes the result to a JSON-compatible dictionary.

        `limitMatrix` is the limit supermatrix rescaled to sum 1, not a raw
        matrix power; only its normalized columns carry meaning.
        """
        return {
            "criteria": [c.to_dict() for c in self.criteria],
            "weights": [
                {
                    "criterionId": w.criterion_id,
                    "weight": float(w.weight),
                    "limitWeight": None if w.limit_weight is None else float(w.limit_weight),
                    "rank": w.rank,
                }
                for w in self.weights
            ],
            "consistencyRatio": float(self.consistency_ratio),
            "isConsistent": bool(self.is_consistent),
            "hasInterdependencies": self.has_interdependencies,
            "supermatrix": None if self.supermatrix is None else self.supermatrix.tolist(),
            "limitMatrix": None if self.limit_matrix is None else self.limit_matrix.tolist(),
            "createdAt": self.created_at,
            "createdBy": self.created_by,
        }

    def to_dataframe(self) -> 'pd.DataFrame':
        """Exports the ranked criteria weights to a pandas DataFrame."""
        import pandas as pd

        names = {c.id: c.name for c in self.criteria}
        rows = [
            {
                "criterion_id": w.criterion_id,
                "name": names.get(w.criterion_id),
                "weight": w.weight,
                "limit_weight": w.limit_weight,
                "final_weight": w.final_weight,
                "rank": w.rank,
            }
            for w in self.weights
        ]
        return pd.DataFrame(rows).set_index("criterion_id")


# ==============================================================================
# 4. TOPSIS RESULTS
# ==============================================================================

@dataclass(frozen=True)
class TopsisResult:
    alternative_id: str
    score: float
    rank: int
    distance_to_ideal: float = 0.0
    distance_to_anti_ideal: float = 0.0


@dataclass
class TopsisState:
    """Every intermediate matrix of a TOPSIS run, kept for reporting."""
    normalized: np.ndarray
    weighted: np.ndarray
    ideal_best: np.ndarray
    ideal_worst: np.ndarray
    distance_to_ideal: np.ndarray
    distance_to_anti_ideal: np.ndarray
    scores: np.ndarray
    results: List[TopsisResult] = field(default_factory=list)
