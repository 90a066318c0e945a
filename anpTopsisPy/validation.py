from __future__ import annotations
from typing import Dict, List, Sequence, TYPE_CHECKING
import numpy as np
from .config import configure_parameters
from .types import COMPARISON_TYPES, ComparisonType, CompletenessReport, MissingPair

if TYPE_CHECKING:
    from .model import Criterion, PairwiseComparison


class Validation:
    """
    A class containing static methods to validate pairwise judgments,
    comparison matrices and TOPSIS inputs.

    Every method returns its findings instead of raising, so a host
    application can show them as form errors.
    """

    # --- Pairwise judgments ---

    @staticmethod
    def generate_required_comparisons(
        criteria: Sequence[Criterion],
        include_interdependencies: bool = False
    ) -> List[MissingPair]:
        """Lists every (A, B, type) triple that must be judged, upper triangle first by criteria order."""
        types: List[ComparisonType] = ["criteria"]
        if include_interdependencies:
            types.append("interdependency")

        required = []
        for comparison_type in types:
            for i in range(len(criteria)):
                for j in range(i + 1, len(criteria)):
                    required.append(MissingPair(criteria[i].id, criteria[j].id, comparison_type))
        return required

    @staticmethod
    def validate_completeness(
        criteria: Sequence[Criterion],
        comparisons: Sequence[PairwiseComparison],
        comparison_type: ComparisonType = "criteria"
    ) -> CompletenessReport:
        """
        Checks that every unordered criteria pair has a judgment of the given type.

        A record for (A, B) also covers (B, A). For N criteria N*(N-1)/2 pairs
        are expected; each pair without a record is reported as a MissingPair,
        in criteria order.

        Args:
            criteria: The ordered criteria.
            comparisons: The supplied judgments (any type; others are ignored).
            comparison_type: 'criteria' or 'interdependency'.

        Returns:
            A CompletenessReport. Missing judgments are reported, never raised.
        """
        if comparison_type not in COMPARISON_TYPES:
            raise ValueError(f"Unknown comparison type '{comparison_type}'. Available: {list(COMPARISON_TYPES)}")

        n = len(criteria)
        known_ids = {c.id for c in criteria}
        provided = {
            c.pair_key for c in comparisons
            if c.comparison_type == comparison_type
            and c.criterion_a_id in known_ids and c.criterion_b_id in known_ids
        }

        missing = []
        for i in range(n):
            for j in range(i + 1, n):
                if frozenset((criteria[i].id, criteria[j].id)) not in provided:
                    missing.append(MissingPair(criteria[i].id, criteria[j].id, comparison_type))

        return CompletenessReport(
            complete=not missing,
            missing=missing,
            expected_count=n * (n - 1) // 2,
            provided_count=len(provided),
            comparison_type=comparison_type
        )

    @staticmethod
    def validate_comparison_references(
        criteria: Sequence[Criterion],
        comparisons: Sequence[PairwiseComparison]
    ) -> List[str]:
        """Reports comparisons that name unknown criteria or repeat a pair of the same type."""
        errors = []
        known_ids = {c.id for c in criteria}
        seen = set()
        for comparison in comparisons:
            for criterion_id in (comparison.criterion_a_id, comparison.criterion_b_id):
                if criterion_id not in known_ids:
                    errors.append(f"Comparison references unknown criterion '{criterion_id}'.")
            key = (comparison.pair_key, comparison.comparison_type)
            if key in seen:
                errors.append(
                    f"Duplicate {comparison.comparison_type} comparison for pair "
                    f"('{comparison.criterion_a_id}', '{comparison.criterion_b_id}')."
                )
            seen.add(key)
        return errors

    @staticmethod
    def validate_judgment_scale(comparisons: Sequence[PairwiseComparison], tolerance: float = 1e-6) -> List[str]:
        """
        Lists judgments whose value is not on Saaty's 1-9 scale (or its reciprocals).
        Advisory only: off-scale values are still accepted by the matrix builder.
        """
        scale = np.array(configure_parameters.SAATY_SCALE_VALUES)
        warnings_list = []
        for comparison in comparisons:
            if not np.any(np.abs(scale - comparison.value) <= tolerance):
                warnings_list.append(
                    f"Judgment ('{comparison.criterion_a_id}', '{comparison.criterion_b_id}') "
                    f"value {comparison.value} is not on the Saaty 1-9 scale."
                )
        return warnings_list

    # --- Comparison matrices ---

    @staticmethod
    def validate_matrix_properties(matrix, tolerance: float = 1e-6) -> List[str]:
        """
        Validates a single comparison matrix for dimensions, positivity,
        diagonal, and reciprocity.

        Args:
            matrix: The comparison matrix to validate.
            tolerance: Tolerance for floating-point reciprocity checks.

        Returns:
            A list of error strings. An empty list means the matrix is valid.
        """
        errors = []

        try:
            crisp_matrix = np.asarray(matrix, dtype=float)
        except (ValueError, TypeError):
            return ["Matrix must be numerical."]

        # 1. Validate Dimensions
        if crisp_matrix.ndim != 2 or crisp_matrix.shape[0] != crisp_matrix.shape[1]:
            errors.append("Matrix must be a 2D square array.")
            return errors  # Stop further checks if dimensions are wrong

        n = crisp_matrix.shape[0]
        if n == 0:
            errors.append("Matrix is empty.")
            return errors

        # 2. Validate Positivity
        if not np.all(np.isfinite(crisp_matrix)) or np.any(crisp_matrix <= 0):
            errors.append("All entries must be finite and positive.")
            return errors

        # 3. Validate Diagonal
        for i in range(n):
            if abs(crisp_matrix[i, i] - 1.0) > tolerance:
                errors.append(f"Diagonal element at ({i},{i}) is not 1. Found: {crisp_matrix[i, i]}")

        # 4. Validate Reciprocity
        for i in range(n):
            for j in range(i + 1, n):
                if abs(crisp_matrix[i, j] * crisp_matrix[j, i] - 1.0) > tolerance:
                    errors.append(f"Reciprocity failed between ({i},{j}) and ({j},{i}). "
                                  f"Values: {crisp_matrix[i, j]}, {crisp_matrix[j, i]}")

        return errors

    # --- TOPSIS inputs ---

    @staticmethod
    def validate_weight_vector(weights, expected_size: int | None = None) -> List[str]:
        """Validates that a weight vector is non-empty, finite and non-negative."""
        errors = []
        try:
            w = np.asarray(weights, dtype=float)
        except (ValueError, TypeError):
            return ["Weight vector must be numerical."]

        if w.ndim != 1 or w.size == 0:
            errors.append("Weight vector must be a non-empty 1D sequence.")
            return errors
        if not np.all(np.isfinite(w)):
            errors.append("Weight vector contains non-finite values.")
        elif np.any(w < 0):
            errors.append("Weights must be non-negative.")
        if expected_size is not None and w.size != expected_size:
            errors.append(f"Weight vector has {w.size} entries, but the decision matrix has {expected_size} criteria.")
        return errors

    @staticmethod
    def validate_decision_matrix(decision_matrix, weights=None) -> List[str]:
        """
        Validates a TOPSIS decision matrix (alternatives x criteria): non-empty,
        rectangular, finite and non-negative. When `weights` is given it is
        validated too, including its length against the criterion count.
        """
        errors = []
        if hasattr(decision_matrix, "to_numpy"):
            decision_matrix = decision_matrix.to_numpy()
        rows = list(decision_matrix) if not isinstance(decision_matrix, np.ndarray) else decision_matrix
        if len(rows) == 0:
            return ["Decision matrix has no alternatives."]

        if not isinstance(rows, np.ndarray):
            try:
                lengths = {len(row) for row in rows}
            except TypeError:
                return ["Decision matrix must be a 2D array with at least one criterion."]
            if len(lengths) != 1:
                return ["Decision matrix rows have different lengths."]

        try:
            x = np.asarray(rows, dtype=float)
        except (ValueError, TypeError):
            return ["Decision matrix must be numerical."]

        if x.ndim != 2 or x.shape[1] == 0:
            return ["Decision matrix must be a 2D array with at least one criterion."]
        if not np.all(np.isfinite(x)):
            errors.append("Decision matrix contains missing or non-finite values.")
        elif np.any(x < 0):
            errors.append("Decision matrix values must be non-negative for benefit criteria.")

        if weights is not None:
            errors.extend(Validation.validate_weight_vector(weights, expected_size=x.shape[1]))
        return errors

    @staticmethod
    def run_all_validations(
        criteria: Sequence[Criterion],
        comparisons: Sequence[PairwiseComparison],
        include_interdependencies: bool = False
    ) -> Dict[str, List[str]]:
        """
        Runs the complete suite of judgment validations.

        Returns:
            A dictionary containing lists of errors for each validation category.
        """
        all_errors = {
            "references": Validation.validate_comparison_references(criteria, comparisons),
            "completeness": [],
            "scale": Validation.validate_judgment_scale(comparisons)
        }

        types: List[ComparisonType] = ["criteria", "interdependency"] if include_interdependencies else ["criteria"]
        for comparison_type in types:
            report = Validation.validate_completeness(criteria, comparisons, comparison_type)
            all_errors["completeness"].extend(
                f"Missing {m.comparison_type} comparison between '{m.criterion_a_id}' and '{m.criterion_b_id}'."
                for m in report.missing
            )
        return all_errors
