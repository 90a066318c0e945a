from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence, Tuple
import pandas as pd
from .config import configure_parameters
from .exceptions import InvalidInputError
from .model import Criterion, NetworkModel, PairwiseComparison, ReportArea
from .topsis import TOPSISCalculator
from .types import ANPResult, TopsisResult

AREA_CRITERIA_COLUMNS = ["traffic_volume", "damage_level", "report_count"]


def default_criteria() -> List[Criterion]:
    """The three criteria every report area is scored on, in decision-matrix column order."""
    return [
        Criterion("C1", "Traffic Volume", "Traffic load on the damaged road."),
        Criterion("C2", "Damage Level", "Mean severity of the reports in the area."),
        Criterion("C3", "Report Count", "How many citizens reported the damage."),
    ]


def _level_score(level: str, table: Dict[str, float], what: str) -> float:
    try:
        return float(table[level])
    except KeyError as e:
        raise InvalidInputError(f"Unknown {what} '{level}'. Expected one of {list(table)}.") from e


def area_criteria_values(area: ReportArea) -> List[float]:
    """
    Maps a report area onto [traffic volume, damage level, report count] scores.

    - Traffic volume: Low/Medium/High via `TRAFFIC_VOLUME_SCORES`.
    - Damage level: the mean of the report scores (`DAMAGE_LEVEL_SCORES`);
      an area without reports scores as 'Low'.
    - Report count: min(count, REPORT_COUNT_CAP) / REPORT_COUNT_CAP * 3.
    """
    traffic = _level_score(area.traffic_volume, configure_parameters.TRAFFIC_VOLUME_SCORES, "traffic volume")

    damage_table = configure_parameters.DAMAGE_LEVEL_SCORES
    if area.reports:
        damage = sum(_level_score(r.damage_level, damage_table, "damage level") for r in area.reports) / len(area.reports)
    else:
        damage = float(damage_table["Low"])

    cap = configure_parameters.REPORT_COUNT_CAP
    report_count = min(len(area.reports), cap) / cap * 3

    return [traffic, damage, report_count]


def build_area_decision_matrix(areas: Sequence[ReportArea]) -> pd.DataFrame:
    """Builds the TOPSIS decision matrix, one row per area, indexed by area id."""
    rows = [area_criteria_values(area) for area in areas]
    index = pd.Index([area.area_id for area in areas], name="area_id")
    return pd.DataFrame(rows, index=index, columns=AREA_CRITERIA_COLUMNS, dtype=float)


class RepairPrioritizationWorkflow:
    """
    Runs the two-stage decision: ANP derives the criteria weights from
    pairwise judgments, then TOPSIS ranks the report areas with them.

    Example:
    >>> workflow = RepairPrioritizationWorkflow()
    >>> workflow.fit_weights(comparisons)
    >>> workflow.rank(areas)
    >>> best_area_id, best_score = workflow.rankings[0]
    """
    def __init__(
        self,
        criteria: Optional[Sequence[Criterion]] = None,
        include_interdependencies: bool = False,
        require_complete: bool = True,
        created_by: str = "system"
    ):
        self.criteria: List[Criterion] = list(criteria) if criteria is not None else default_criteria()
        self.include_interdependencies = include_interdependencies
        self.require_complete = require_complete
        self.created_by = created_by

        self.model: Optional[NetworkModel] = None
        self.anp_result: Optional[ANPResult] = None
        self.consistency_report: Optional[Dict[str, Any]] = None
        self.decision_matrix: Optional[pd.DataFrame] = None
        self.topsis_results: Optional[List[TopsisResult]] = None
        self.rankings: Optional[List[Tuple[str, float]]] = None

    def __repr__(self) -> str:
        status = "ranked" if self.rankings is not None else ("fitted" if self.anp_result is not None else "new")
        return f"RepairPrioritizationWorkflow(criteria={len(self.criteria)}, status='{status}')"

    @property
    def criteria_weights(self) -> Dict[str, float]:
        if self.anp_result is None:
            raise RuntimeError("Weights not calculated. Run `fit_weights()` first.")
        return {w.criterion_id: w.final_weight for w in self.anp_result.weights}

    def fit_weights(self, comparisons: Sequence[PairwiseComparison]) -> 'RepairPrioritizationWorkflow':
        """
        Validates the judgments and derives the criteria weights.

        Raises:
            IncompleteComparisonsError: If judgments are missing and the
                workflow requires complete judgments.
        """
        print("\n--- Fitting ANP Criteria Weights ---")
        self.model = NetworkModel(self.criteria)
        for comparison in comparisons:
            self.model.add_comparison(comparison)

        self.anp_result = self.model.analyze(
            created_by=self.created_by,
            include_interdependencies=self.include_interdependencies,
            require_complete=self.require_complete
        )

        self.consistency_report = {"criteria": self.anp_result.consistency.to_dict()}
        if self.anp_result.interdependency_consistency is not None:
            self.consistency_report["interdependency"] = self.anp_result.interdependency_consistency.to_dict()

        status = "consistent" if self.anp_result.is_consistent else "INCONSISTENT"
        print(f"  - CR = {self.anp_result.consistency_ratio:.4f} ({status})")
        return self

    def rank(self, areas: Sequence[ReportArea], include_repaired: bool = False) -> 'RepairPrioritizationWorkflow':
        """
        Ranks the report areas with TOPSIS using the fitted weights.
        Repaired areas are skipped unless `include_repaired` is set.
        """
        if self.anp_result is None:
            raise RuntimeError("Weights not calculated. Run `fit_weights()` first.")
        if len(self.criteria) != len(AREA_CRITERIA_COLUMNS):
            raise InvalidInputError(
                f"Report areas are scored on {len(AREA_CRITERIA_COLUMNS)} criteria, "
                f"but the workflow has {len(self.criteria)}."
            )

        print("\n--- Ranking Report Areas via TOPSIS ---")
        candidates = [a for a in areas if include_repaired or a.is_active]
        if not candidates:
            print("Warning: No areas to rank.")
            self.decision_matrix = build_area_decision_matrix([])
            self.topsis_results = []
            self.rankings = []
            return self

        self.decision_matrix = build_area_decision_matrix(candidates)
        state = TOPSISCalculator(self.anp_result.weight_vector()).calculate(self.decision_matrix)
        self.topsis_results = state.results

        ordered = sorted(state.results, key=lambda r: r.rank)
        self.rankings = [(r.alternative_id, r.score) for r in ordered]
        print(f"Ranked {len(self.rankings)} area(s).")
        return self
