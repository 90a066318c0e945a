"""
===================================================================
Tests for the Consistency Module
===================================================================

This script contains unit tests for Saaty's consistency ratio, the
geometric consistency index and the revision recommendations.

To run tests, navigate to the root directory and run:
$ pytest
"""

import pytest
import numpy as np

from anpTopsisPy.config import ConfigurationContextManager
from anpTopsisPy.consistency import CONSISTENCY_METHODS, Consistency, register_consistency_method

# ==============================================================================
# Test Fixtures
# ==============================================================================

@pytest.fixture
def saaty_inconsistent_matrix() -> np.ndarray:
    """C1 > C2 > C3 with C3 > C1: clearly intransitive."""
    return np.array([
        [1, 9, 1/9],
        [1/9, 1, 9],
        [9, 1/9, 1],
    ], dtype=float)

# ==============================================================================
# Consistency ratio
# ==============================================================================

@pytest.mark.parametrize("size", [1, 2])
def test_small_matrices_are_always_consistent(size):
    assert Consistency.consistency_ratio(size + 5.0, size) == 0.0

def test_ratio_uses_random_index_table():
    # CI = (3.116 - 3) / 2 = 0.058; RI(3) = 0.58
    assert Consistency.consistency_ratio(3.116, 3) == pytest.approx(0.1)

def test_large_sizes_use_last_table_value():
    eigenvalue = 12 + 11 * 1.49 * 0.05
    assert Consistency.consistency_ratio(eigenvalue, 12) == pytest.approx(0.05)

def test_ratio_is_never_negative():
    assert Consistency.consistency_ratio(2.9999999999, 3) == 0.0

def test_check_consistent_matrix(consistent_matrix):
    result = Consistency.check(consistent_matrix)
    assert result.consistency_ratio == pytest.approx(0.0, abs=1e-9)
    assert result.is_consistent
    assert result.matrix_size == 3
    assert result.random_index == pytest.approx(0.58)

def test_check_two_by_two():
    result = Consistency.check([[1, 3], [1/3, 1]])
    assert result.consistency_ratio == 0.0
    assert result.is_consistent

def test_check_inconsistent_matrix(saaty_inconsistent_matrix):
    result = Consistency.check(saaty_inconsistent_matrix)
    assert result.consistency_ratio >= 0.10
    assert not result.is_consistent

def test_threshold_boundary_is_exclusive(consistent_matrix):
    # A ratio equal to the threshold is not consistent
    assert not Consistency.check(consistent_matrix, threshold=0.0).is_consistent

def test_threshold_from_configuration(saaty_inconsistent_matrix):
    with ConfigurationContextManager(DEFAULT_SAATY_CR_THRESHOLD=100.0):
        assert Consistency.check(saaty_inconsistent_matrix).is_consistent
    assert not Consistency.check(saaty_inconsistent_matrix).is_consistent

def test_result_to_dict(consistent_matrix):
    data = Consistency.check(consistent_matrix).to_dict()
    assert set(data) == {
        "principalEigenvalue", "consistencyIndex", "randomIndex",
        "consistencyRatio", "isConsistent", "matrixSize",
    }

# ==============================================================================
# GCI and the method registry
# ==============================================================================

def test_gci_of_consistent_matrix_is_zero(consistent_matrix):
    assert Consistency.calculate_gci(consistent_matrix) == pytest.approx(0.0, abs=1e-12)

def test_run_all_indices(consistent_matrix, saaty_inconsistent_matrix):
    good = Consistency.run_all_indices(consistent_matrix)
    assert good["is_consistent"]
    assert {"saaty_cr", "gci", "matrix_size"} <= set(good)

    bad = Consistency.run_all_indices(saaty_inconsistent_matrix)
    assert not bad["is_consistent"]

def test_register_custom_index(consistent_matrix):
    @register_consistency_method("max_entry_test")
    def max_entry(matrix, **kwargs):
        return float(np.max(matrix))

    try:
        assert Consistency.run_all_indices(consistent_matrix)["max_entry_test"] == 4.0
    finally:
        del CONSISTENCY_METHODS["max_entry_test"]

def test_registry_rejects_non_callables():
    with pytest.raises(TypeError):
        CONSISTENCY_METHODS["not_callable"] = 42

# ==============================================================================
# Recommendations
# ==============================================================================

def test_recommendations_point_at_the_worst_judgment():
    # Weights 8:4:2:1 except C1/C4, which should be 8
    matrix = np.array([
        [1, 2, 4, 1/8],
        [1/2, 1, 2, 4],
        [1/4, 1/2, 1, 2],
        [8, 1/4, 1/2, 1],
    ], dtype=float)
    recommendations = Consistency.get_consistency_recommendations(matrix, ["C1", "C2", "C3", "C4"])

    assert len(recommendations) == 6
    assert recommendations[0]["pair"] == ("C1", "C4")
    assert recommendations[0]["suggested_value"] > recommendations[0]["current_value"]
    assert recommendations[0]["error"] >= recommendations[-1]["error"]

def test_recommendations_on_consistent_matrix(consistent_matrix):
    recommendations = Consistency.get_consistency_recommendations(consistent_matrix)
    assert all(r["error"] == pytest.approx(0.0, abs=1e-8) for r in recommendations)
    assert all(r["suggested_value"] == pytest.approx(r["current_value"]) for r in recommendations)

def test_recommendations_require_matching_ids(consistent_matrix):
    with pytest.raises(ValueError):
        Consistency.get_consistency_recommendations(consistent_matrix, ["C1"])
