"""
===================================================================
Tests for the Model Module
===================================================================

Criteria, pairwise judgments, report areas and the end-to-end ANP
analysis performed by NetworkModel.
"""

import json
import warnings
from datetime import datetime
import pytest
import numpy as np

from anpTopsisPy.exceptions import (
    IncompleteComparisonsError, InconsistentJudgmentsWarning, InvalidInputError
)
from anpTopsisPy.model import Criterion, NetworkModel, PairwiseComparison, Report, ReportArea

# ==============================================================================
# 1. FIXTURES
# ==============================================================================

@pytest.fixture
def complete_model(road_criteria, consistent_comparisons) -> NetworkModel:
    model = NetworkModel(road_criteria)
    for comparison in consistent_comparisons:
        model.add_comparison(comparison)
    return model

# ==============================================================================
# 2. CRITERIA AND JUDGMENTS
# ==============================================================================

def test_criterion_identity_is_by_id():
    assert Criterion("C1", "Traffic") == Criterion("C1", "Another name")
    assert Criterion("C1", "Traffic") != Criterion("C2", "Traffic")

def test_empty_criterion_id_is_rejected():
    with pytest.raises(InvalidInputError):
        Criterion("", "Nameless")

def test_comparison_ratio():
    assert PairwiseComparison("C1", "C2", 3).ratio == 3.0
    assert PairwiseComparison("C1", "C2", 3, favors="b").ratio == pytest.approx(1/3)

@pytest.mark.parametrize("kwargs", [
    {"value": 0},
    {"value": -3},
    {"value": float("inf")},
    {"value": "strong"},
    {"value": 3, "favors": "c"},
    {"value": 3, "comparison_type": "alternatives"},
])
def test_invalid_comparisons(kwargs):
    with pytest.raises(InvalidInputError):
        PairwiseComparison("C1", "C2", **kwargs)

def test_self_comparison_is_rejected():
    with pytest.raises(InvalidInputError):
        PairwiseComparison("C1", "C1", 1)

def test_comparison_dict_round_trip():
    original = PairwiseComparison("C1", "C3", 5, comparison_type="interdependency", favors="b")
    data = original.to_dict()
    assert data == {
        "criterionAId": "C1", "criterionBId": "C3",
        "comparisonType": "interdependency", "value": 5.0, "favors": "b",
    }
    restored = PairwiseComparison.from_dict(data)
    assert restored.ratio == pytest.approx(original.ratio)
    assert restored.pair_key == original.pair_key

def test_report_area_round_trip():
    area = ReportArea("A1", "Jalan Merdeka", traffic_volume="High",
                      reports=[Report("R1", "Medium", lat=-6.2, lng=106.8)], lat=-6.2, lng=106.8)
    restored = ReportArea.from_dict(area.to_dict())
    assert restored == area
    assert restored.is_active

def test_repaired_area_is_not_active():
    assert not ReportArea("A1", "Jalan Merdeka", status="Repaired").is_active

# ==============================================================================
# 3. NETWORK MODEL
# ==============================================================================

def test_set_comparison_replaces_existing_pair(road_criteria):
    model = NetworkModel(road_criteria)
    model.set_comparison("C1", "C2", 3)
    model.set_comparison("C2", "C1", 5)
    assert len(model.comparisons) == 1
    assert model.comparison_matrix()[1, 0] == pytest.approx(5.0)

def test_comparison_with_unknown_criterion(road_criteria):
    model = NetworkModel(road_criteria)
    with pytest.raises(InvalidInputError):
        model.set_comparison("C1", "C9", 3)

def test_duplicate_criterion_is_rejected(road_criteria):
    model = NetworkModel(road_criteria)
    with pytest.raises(InvalidInputError):
        model.add_criterion(Criterion("C2", "Duplicate"))

def test_analyze_two_criteria():
    model = NetworkModel([Criterion("C1", "Traffic"), Criterion("C2", "Damage")])
    model.set_comparison("C1", "C2", 3)
    result = model.analyze(created_by="admin")

    assert result.weight_for("C1").weight == pytest.approx(0.75, abs=1e-9)
    assert result.weight_for("C2").weight == pytest.approx(0.25, abs=1e-9)
    assert result.weight_for("C1").rank == 1
    assert result.consistency_ratio == 0.0
    assert result.is_consistent
    assert not result.has_interdependencies
    assert result.supermatrix is None and result.limit_matrix is None

def test_analyze_complete_model(complete_model):
    result = complete_model.analyze(created_by="admin")

    assert [w.criterion_id for w in result.weights] == ["C1", "C2", "C3"]
    assert [w.rank for w in result.weights] == [1, 2, 3]
    assert result.weight_vector() == pytest.approx([4/7, 2/7, 1/7], abs=1e-9)
    assert sum(w.weight for w in result.weights) == pytest.approx(1.0)
    assert result.created_by == "admin"
    assert datetime.fromisoformat(result.created_at).tzinfo is not None

def test_incomplete_judgments_are_refused(road_criteria):
    model = NetworkModel(road_criteria)
    model.set_comparison("C1", "C2", 3)
    model.set_comparison("C1", "C3", 5)

    with pytest.raises(IncompleteComparisonsError) as excinfo:
        model.analyze(created_by="admin")

    missing = excinfo.value.missing
    assert [(m.criterion_a_id, m.criterion_b_id) for m in missing] == [("C2", "C3")]

def test_incomplete_judgments_can_be_allowed(road_criteria):
    model = NetworkModel(road_criteria)
    model.set_comparison("C1", "C2", 3)
    result = model.analyze(created_by="admin", require_complete=False)
    assert len(result.weights) == 3

def test_missing_interdependencies_are_refused(complete_model):
    with pytest.raises(IncompleteComparisonsError) as excinfo:
        complete_model.analyze(created_by="admin", include_interdependencies=True)
    assert all(m.comparison_type == "interdependency" for m in excinfo.value.missing)

def test_inconsistent_judgments_warn_but_return(road_criteria, inconsistent_comparisons):
    model = NetworkModel(road_criteria)
    for comparison in inconsistent_comparisons:
        model.add_comparison(comparison)

    with pytest.warns(InconsistentJudgmentsWarning):
        result = model.analyze(created_by="admin")

    assert not result.is_consistent
    assert result.consistency_ratio >= 0.10

def test_consistent_judgments_do_not_warn(complete_model):
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        complete_model.analyze(created_by="admin")

def test_equal_interdependencies_give_uniform_weights(complete_model):
    for a, b in [("C1", "C2"), ("C1", "C3"), ("C2", "C3")]:
        complete_model.set_comparison(a, b, 1, comparison_type="interdependency")

    result = complete_model.analyze(created_by="admin", include_interdependencies=True)

    assert result.has_interdependencies
    assert result.supermatrix.shape == (3, 3)
    assert result.limit_matrix.shape == (3, 3)
    assert [w.limit_weight for w in result.weights] == pytest.approx([1/3, 1/3, 1/3], abs=1e-9)
    # Independent weights are kept next to the limit weights
    assert result.weight_for("C1").weight == pytest.approx(4/7, abs=1e-9)
    assert result.interdependency_consistency is not None

def test_interdependencies_change_the_weights(complete_model):
    complete_model.set_comparison("C1", "C2", 1, comparison_type="interdependency")
    complete_model.set_comparison("C1", "C3", 1, comparison_type="interdependency")
    complete_model.set_comparison("C3", "C2", 5, comparison_type="interdependency")

    result = complete_model.analyze(created_by="admin", include_interdependencies=True)
    limit = result.weight_vector()

    assert np.sum(limit) == pytest.approx(1.0)
    assert result.weight_for("C3").limit_weight > result.weight_for("C2").limit_weight

def test_analyze_without_criteria():
    with pytest.raises(InvalidInputError):
        NetworkModel().analyze(created_by="admin")

def test_single_criterion_model():
    model = NetworkModel([Criterion("C1", "Only")])
    result = model.analyze(created_by="admin")
    assert result.weight_for("C1").weight == 1.0
    assert result.consistency_ratio == 0.0

# ==============================================================================
# 4. SERIALIZATION
# ==============================================================================

def test_model_json_round_trip(complete_model):
    restored = NetworkModel.from_json(complete_model.to_json())
    assert [c.id for c in restored.criteria] == ["C1", "C2", "C3"]
    assert np.allclose(restored.comparison_matrix(), complete_model.comparison_matrix())

def test_model_json_requires_criteria():
    with pytest.raises(ValueError):
        NetworkModel.from_json(json.dumps({"comparisons": []}))

def test_result_to_dict_is_json_serializable(complete_model):
    data = complete_model.analyze(created_by="admin").to_dict()
    encoded = json.loads(json.dumps(data))
    assert encoded["createdBy"] == "admin"
    assert encoded["weights"][0]["criterionId"] == "C1"
    assert encoded["limitMatrix"] is None

def test_serialized_limit_matrix_is_rescaled(complete_model):
    complete_model.set_comparison("C1", "C2", 3, comparison_type="interdependency")
    complete_model.set_comparison("C1", "C3", 1, comparison_type="interdependency")
    complete_model.set_comparison("C2", "C3", 1, comparison_type="interdependency")

    data = complete_model.analyze(created_by="admin", include_interdependencies=True).to_dict()
    limit = np.array(data["limitMatrix"])

    assert np.sum(limit) == pytest.approx(1.0)
    first_column = limit[:, 0] / np.sum(limit[:, 0])
    limit_weights = {w["criterionId"]: w["limitWeight"] for w in data["weights"]}
    assert first_column == pytest.approx([limit_weights[c] for c in ("C1", "C2", "C3")], abs=1e-9)

def test_result_to_dataframe(complete_model):
    df = complete_model.analyze(created_by="admin").to_dataframe()
    assert list(df.index) == ["C1", "C2", "C3"]
    assert df.loc["C1", "name"] == "Traffic Volume"
    assert df["final_weight"].sum() == pytest.approx(1.0)
