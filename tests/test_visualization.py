"""
===================================================================
Tests for the Visualization Module
===================================================================

Plots are rendered with the non-interactive Agg backend; the tests only
check that figures and tables are produced with the expected content.
"""

import matplotlib
matplotlib.use("Agg")

import pytest
import numpy as np
import matplotlib.pyplot as plt

from anpTopsisPy.model import NetworkModel
from anpTopsisPy.topsis import rank_by_topsis
from anpTopsisPy.visualization import (
    format_matrix_as_table,
    format_rankings_table,
    format_weights_table,
    plot_influence_network,
    plot_limit_matrix,
    plot_rankings,
    plot_weights,
)


@pytest.fixture
def anp_model(road_criteria, consistent_comparisons):
    model = NetworkModel(road_criteria)
    for comparison in consistent_comparisons:
        model.add_comparison(comparison)
    model.set_comparison("C1", "C2", 2, comparison_type="interdependency")
    model.set_comparison("C1", "C3", 1, comparison_type="interdependency")
    model.set_comparison("C2", "C3", 1/3, comparison_type="interdependency")
    return model

@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")

# --- Tables ---

def test_format_matrix_as_table(road_criteria, consistent_matrix):
    df = format_matrix_as_table(consistent_matrix, [c.id for c in road_criteria])
    assert df.shape == (3, 3)
    assert df.loc["C1", "C3"] == 4.0
    assert df.loc["C3", "C1"] == 0.25

def test_format_matrix_shape_mismatch(consistent_matrix):
    with pytest.raises(ValueError):
        format_matrix_as_table(consistent_matrix, ["C1", "C2"])

def test_format_weights_table(anp_model):
    df = format_weights_table(anp_model.analyze(created_by="admin"))
    assert list(df.columns) == ["name", "weight", "limit_weight", "final_weight", "rank"]

def test_format_rankings_table():
    results = rank_by_topsis([[1, 1], [3, 3], [2, 2]], [0.5, 0.5])
    df = format_rankings_table(results)
    assert list(df.index) == ["A2", "A3", "A1"]
    assert list(df["rank"]) == [1, 2, 3]

# --- Plots ---

def test_plot_weights(anp_model):
    fig = plot_weights(anp_model.analyze(created_by="admin"))
    assert isinstance(fig, plt.Figure)
    assert len(fig.axes[0].patches) == 3

def test_plot_rankings():
    fig = plot_rankings(rank_by_topsis([[1, 1], [3, 3]], [0.5, 0.5]))
    assert len(fig.axes[0].patches) == 2

def test_plot_limit_matrix(anp_model):
    result = anp_model.analyze(created_by="admin", include_interdependencies=True)
    fig = plot_limit_matrix(result)
    assert fig.axes[0].get_title() == "Limit Supermatrix"

def test_plot_limit_matrix_requires_interdependencies(anp_model):
    with pytest.raises(ValueError):
        plot_limit_matrix(anp_model.analyze(created_by="admin"))

def test_plot_influence_network(road_criteria, anp_model):
    dependency = anp_model.comparison_matrix("interdependency")
    fig = plot_influence_network(road_criteria, dependency)
    assert isinstance(fig, plt.Figure)

def test_plot_influence_network_low_threshold_keeps_widths_positive(road_criteria, anp_model):
    # A threshold below 1 also draws the weak (reciprocal) judgments
    dependency = anp_model.comparison_matrix("interdependency")
    fig = plot_influence_network(road_criteria, dependency, threshold=0.1)
    edges = fig.axes[0].patches
    assert len(edges) == 6
    assert all(edge.get_linewidth() >= 0.5 for edge in edges)

def test_plot_influence_network_shape_mismatch(road_criteria):
    with pytest.raises(ValueError):
        plot_influence_network(road_criteria, np.ones((2, 2)))
