from __future__ import annotations
from typing import TYPE_CHECKING, List, Sequence
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
import networkx as nx

if TYPE_CHECKING:
    from .model import Criterion
    from .types import ANPResult, TopsisResult


# ==============================================================================
# 1. TABLES
# ==============================================================================

def format_matrix_as_table(matrix: np.ndarray, item_names: List[str], decimals: int = 3) -> pd.DataFrame:
    """
    Formats a single comparison matrix into a classic n x n table.

    Args:
        matrix: The comparison matrix to format.
        item_names: The names of the criteria, in matrix order.
        decimals: Rounding applied to every cell.

    Returns:
        A pandas DataFrame with the item names as index and columns.
    """
    crisp_matrix = np.asarray(matrix, dtype=float)
    if crisp_matrix.shape != (len(item_names), len(item_names)):
        raise ValueError(f"Matrix shape {crisp_matrix.shape} does not match {len(item_names)} item names.")
    return pd.DataFrame(np.round(crisp_matrix, decimals), index=item_names, columns=item_names)


def format_weights_table(result: ANPResult) -> pd.DataFrame:
    """The ranked criteria weights of an ANP result, one row per criterion."""
    return result.to_dataframe()


def format_rankings_table(results: Sequence[TopsisResult]) -> pd.DataFrame:
    """TOPSIS results as a DataFrame indexed by alternative id, sorted by rank."""
    rows = [
        {
            "alternative_id": r.alternative_id,
            "score": r.score,
            "rank": r.rank,
            "distance_to_ideal": r.distance_to_ideal,
            "distance_to_anti_ideal": r.distance_to_anti_ideal,
        }
        for r in sorted(results, key=lambda r: r.rank)
    ]
    columns = ["alternative_id", "score", "rank", "distance_to_ideal", "distance_to_anti_ideal"]
    return pd.DataFrame(rows, columns=columns).set_index("alternative_id")


# ==============================================================================
# 2. PLOTS
# ==============================================================================

def plot_weights(result: ANPResult, figsize=(10, 6)) -> 'plt.Figure':
    """
    Plots the final criteria weights of an ANP result, in rank order.

    Returns:
        The matplotlib Figure object.
    """
    names = {c.id: c.name for c in result.criteria}
    labels = [names.get(w.criterion_id, w.criterion_id) for w in result.weights]
    weights = [w.final_weight for w in result.weights]

    fig, ax = plt.subplots(figsize=figsize)
    bars = ax.bar(labels, weights, color=plt.cm.viridis(np.linspace(0, 1, len(labels))))

    ax.set_ylabel('Weight')
    title = 'Criteria Weights (limit supermatrix)' if result.has_interdependencies else 'Criteria Weights'
    ax.set_title(f'{title}, CR = {result.consistency_ratio:.3f}')
    ax.tick_params(axis='x', labelrotation=45)

    for bar in bars:
        yval = bar.get_height()
        ax.text(bar.get_x() + bar.get_width()/2.0, yval, f'{yval:.3f}', va='bottom', ha='center')

    fig.tight_layout()
    return fig


def plot_rankings(results: Sequence[TopsisResult], figsize=(10, 6)) -> 'plt.Figure':
    """
    Plots the TOPSIS closeness scores of the alternatives, best first.

    Returns:
        The matplotlib Figure object.
    """
    ordered = sorted(results, key=lambda r: r.rank)
    names = [r.alternative_id for r in ordered]
    scores = [r.score for r in ordered]

    fig, ax = plt.subplots(figsize=figsize)
    bars = ax.barh(names, scores, color=plt.cm.plasma(np.linspace(0.4, 0.9, len(scores))))

    ax.set_xlabel('Closeness Coefficient')
    ax.set_ylabel('Alternative')
    ax.set_title('TOPSIS Rankings')
    ax.set_xlim(0, 1.1)
    ax.grid(axis='x', linestyle='--', alpha=0.6)
    ax.invert_yaxis()

    for i, bar in enumerate(bars):
        ax.text(bar.get_width() + 0.005, bar.get_y() + bar.get_height()/2,
                f'{scores[i]:.4f}', va='center')

    fig.tight_layout()
    return fig


def plot_limit_matrix(result: ANPResult, figsize=(8, 6)) -> 'plt.Figure':
    """Heatmap of the limit supermatrix; requires an analysis with interdependencies."""
    if result.limit_matrix is None:
        raise ValueError("This result has no limit matrix. Analyze with include_interdependencies=True.")

    labels = [c.id for c in result.criteria]
    fig, ax = plt.subplots(figsize=figsize)
    sns.heatmap(result.limit_matrix, annot=True, fmt=".3f", cmap="YlGnBu",
                xticklabels=labels, yticklabels=labels, ax=ax)
    ax.set_title('Limit Supermatrix')
    fig.tight_layout()
    return fig


def plot_influence_network(
    criteria: Sequence[Criterion],
    interdependency: np.ndarray,
    threshold: float = 1.0,
    figsize=(8, 8)
) -> 'plt.Figure':
    """
    Draws the criteria as a directed graph. An edge j -> i is drawn when
    interdependency[i][j] exceeds `threshold`, i.e. when j influences i more
    than i influences j; its width grows with the judgment value.
    """
    dependency = np.asarray(interdependency, dtype=float)
    n = len(criteria)
    if dependency.shape != (n, n):
        raise ValueError(f"Interdependency matrix shape {dependency.shape} does not match {n} criteria.")

    G = nx.DiGraph()
    for c in criteria:
        G.add_node(c.id, label=c.name)
    for i in range(n):
        for j in range(n):
            if i != j and dependency[i, j] > threshold:
                G.add_edge(criteria[j].id, criteria[i].id, weight=dependency[i, j])

    fig, ax = plt.subplots(figsize=figsize)
    pos = nx.circular_layout(G)
    # Judgments below 1/e would give a negative width
    widths = [max(0.5, 1.0 + np.log(G.edges[e]['weight'])) for e in G.edges]

    nx.draw_networkx_nodes(G, pos, node_color="#AED6F1", node_size=2000, ax=ax)
    nx.draw_networkx_labels(G, pos, labels=nx.get_node_attributes(G, 'label'), font_size=9, ax=ax)
    nx.draw_networkx_edges(G, pos, width=widths, arrows=True, arrowsize=20,
                           connectionstyle="arc3,rad=0.1", ax=ax)

    ax.set_title('Criteria Influence Network')
    ax.axis('off')
    fig.tight_layout()
    return fig
