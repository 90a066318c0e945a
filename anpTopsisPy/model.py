from __future__ import annotations
import json
import warnings
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
import numpy as np
from .consistency import Consistency
from .exceptions import IncompleteComparisonsError, InconsistentJudgmentsWarning, InvalidInputError
from .matrix_builder import create_matrix_from_comparisons
from .network import rank_criteria, synthesize_network_weights
from .types import ANPResult, COMPARISON_TYPES, ComparisonType, Favors, MissingPair
from .validation import Validation
from .weight_derivation import solve_priority_vector


# ==============================================================================
# 1. CRITERIA AND JUDGMENTS
# ==============================================================================

class Criterion:
    """
    A decision criterion (e.g. traffic volume, damage severity).
    Two criteria are the same criterion when their ids are equal.
    """
    def __init__(self, criterion_id: str, name: str, description: str = ""):
        if not criterion_id:
            raise InvalidInputError("Criterion id cannot be empty.")
        self.id = criterion_id
        self.name = name
        self.description = description

    def __repr__(self) -> str:
        return f"Criterion(id='{self.id}', name='{self.name}')"

    def __eq__(self, other) -> bool:
        return isinstance(other, Criterion) and other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "description": self.description}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Criterion':
        return cls(criterion_id=data['id'], name=data.get('name', data['id']), description=data.get('description', ""))


class PairwiseComparison:
    """
    One judgment on Saaty's ratio scale: how much more important criterion A
    is than criterion B.

    `value` is always positive; `favors` names the dominant criterion. With
    favors='a' the ratio A/B is `value`, with favors='b' it is `1/value`.
    So (A, B, 3, favors='b') and (A, B, 1/3) describe the same judgment.

    Args:
        criterion_a_id: Id of criterion A.
        criterion_b_id: Id of criterion B (must differ from A).
        value: Strictly positive judgment value, typically 1-9.
        comparison_type: 'criteria' for importance judgments,
            'interdependency' for influence judgments.
        favors: 'a' or 'b'.
    """
    def __init__(
        self,
        criterion_a_id: str,
        criterion_b_id: str,
        value: float,
        comparison_type: ComparisonType = "criteria",
        favors: Favors = "a"
    ):
        if criterion_a_id == criterion_b_id:
            raise InvalidInputError(f"A criterion cannot be compared with itself ('{criterion_a_id}').")
        if comparison_type not in COMPARISON_TYPES:
            raise InvalidInputError(f"Unknown comparison type '{comparison_type}'. Available: {list(COMPARISON_TYPES)}")
        if favors not in ("a", "b"):
            raise InvalidInputError(f"'favors' must be 'a' or 'b', got '{favors}'.")
        try:
            numeric_value = float(value)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"Judgment value must be a number, got {value!r}.") from e
        if not np.isfinite(numeric_value) or numeric_value <= 0:
            raise InvalidInputError(f"Judgment value must be finite and positive, got {value}.")

        self.criterion_a_id = criterion_a_id
        self.criterion_b_id = criterion_b_id
        self.value = numeric_value
        self.comparison_type = comparison_type
        self.favors = favors

    def __repr__(self) -> str:
        return (f"PairwiseComparison('{self.criterion_a_id}', '{self.criterion_b_id}', "
                f"value={self.value:g}, type='{self.comparison_type}', favors='{self.favors}')")

    @property
    def ratio(self) -> float:
        """The effective A/B importance ratio."""
        return self.value if self.favors == "a" else 1.0 / self.value

    @property
    def pair_key(self) -> frozenset:
        return frozenset((self.criterion_a_id, self.criterion_b_id))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "criterionAId": self.criterion_a_id,
            "criterionBId": self.criterion_b_id,
            "comparisonType": self.comparison_type,
            "value": self.value,
            "favors": self.favors,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PairwiseComparison':
        return cls(
            criterion_a_id=data['criterionAId'],
            criterion_b_id=data['criterionBId'],
            value=data['value'],
            comparison_type=data.get('comparisonType', "criteria"),
            favors=data.get('favors', "a")
        )


# ==============================================================================
# 2. ROAD-DAMAGE ALTERNATIVES
# ==============================================================================

@dataclass
class Report:
    """A single citizen report of road damage."""
    report_id: str
    damage_level: str
    lat: float = 0.0
    lng: float = 0.0
    description: str = ""
    address: str = ""
    reported_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.report_id,
            "damageLevel": self.damage_level,
            "coords": {"lat": self.lat, "lng": self.lng},
            "description": self.description,
            "address": self.address,
            "reportedAt": self.reported_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Report':
        coords = data.get('coords', {})
        return cls(
            report_id=data['id'],
            damage_level=data['damageLevel'],
            lat=coords.get('lat', 0.0),
            lng=coords.get('lng', 0.0),
            description=data.get('description', ""),
            address=data.get('address', ""),
            reported_at=data.get('reportedAt', "")
        )


@dataclass
class ReportArea:
    """
    A road segment grouping the reports made along it. Areas are the
    alternatives ranked for repair.
    """
    area_id: str
    street_name: str
    traffic_volume: str = "Medium"
    reports: List[Report] = field(default_factory=list)
    status: str = "Active"
    road_width: float = 0.0
    lat: float = 0.0
    lng: float = 0.0

    @property
    def is_active(self) -> bool:
        return self.status != "Repaired"

    def add_report(self, report: Report):
        self.reports.append(report)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.area_id,
            "streetName": self.street_name,
            "streetCoords": {"lat": self.lat, "lng": self.lng},
            "trafficVolume": self.traffic_volume,
            "roadWidth": self.road_width,
            "status": self.status,
            "reports": [r.to_dict() for r in self.reports],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReportArea':
        coords = data.get('streetCoords', {})
        return cls(
            area_id=data['id'],
            street_name=data.get('streetName', ""),
            traffic_volume=data.get('trafficVolume', "Medium"),
            reports=[Report.from_dict(r) for r in data.get('reports', [])],
            status=data.get('status', "Active"),
            road_width=data.get('roadWidth', 0.0),
            lat=coords.get('lat', 0.0),
            lng=coords.get('lng', 0.0)
        )


# ==============================================================================
# 3. THE NETWORK MODEL
# ==============================================================================

class NetworkModel:
    """
    Holds the criteria and the pairwise judgments of an ANP analysis and
    turns them into an immutable ANPResult.

    Example:
    >>> model = NetworkModel([Criterion("C1", "Traffic"), Criterion("C2", "Damage")])
    >>> model.set_comparison("C1", "C2", 3)
    >>> result = model.analyze(created_by="admin")
    >>> round(result.weight_for("C1").weight, 4)
    0.75
    """
    def __init__(self, criteria: Optional[Sequence[Criterion]] = None):
        self.criteria: List[Criterion] = []
        self._comparisons: Dict[tuple, PairwiseComparison] = {}
        for criterion in criteria or []:
            self.add_criterion(criterion)

    def __repr__(self) -> str:
        return f"NetworkModel(criteria={len(self.criteria)}, comparisons={len(self._comparisons)})"

    def add_criterion(self, criterion: Criterion):
        if any(c.id == criterion.id for c in self.criteria):
            raise InvalidInputError(f"Criterion '{criterion.id}' already exists.")
        self.criteria.append(criterion)

    def _criterion_ids(self) -> set:
        return {c.id for c in self.criteria}

    def add_comparison(self, comparison: PairwiseComparison):
        """Stores a judgment, replacing any earlier one for the same pair and type."""
        known = self._criterion_ids()
        for criterion_id in (comparison.criterion_a_id, comparison.criterion_b_id):
            if criterion_id not in known:
                raise InvalidInputError(f"Criterion '{criterion_id}' is not part of the model.")
        self._comparisons[(comparison.pair_key, comparison.comparison_type)] = comparison

    def set_comparison(
        self,
        criterion_a_id: str,
        criterion_b_id: str,
        value: float,
        comparison_type: ComparisonType = "criteria",
        favors: Favors = "a"
    ):
        self.add_comparison(PairwiseComparison(criterion_a_id, criterion_b_id, value, comparison_type, favors))

    @property
    def comparisons(self) -> List[PairwiseComparison]:
        return list(self._comparisons.values())

    def validate(self, include_interdependencies: bool = False) -> Dict[str, List[str]]:
        """Runs reference, completeness and scale validations; see `Validation.run_all_validations`."""
        return Validation.run_all_validations(self.criteria, self.comparisons, include_interdependencies)

    def missing_comparisons(self, include_interdependencies: bool = False) -> List[MissingPair]:
        types: List[ComparisonType] = ["criteria", "interdependency"] if include_interdependencies else ["criteria"]
        missing: List[MissingPair] = []
        for comparison_type in types:
            missing.extend(Validation.validate_completeness(self.criteria, self.comparisons, comparison_type).missing)
        return missing

    def comparison_matrix(self, comparison_type: ComparisonType = "criteria") -> np.ndarray:
        return create_matrix_from_comparisons(self.criteria, self.comparisons, comparison_type)

    def analyze(
        self,
        created_by: str,
        include_interdependencies: bool = False,
        require_complete: bool = True
    ) -> ANPResult:
        """
        Derives the criteria weights.

        The criteria matrix is solved by power iteration and checked for
        consistency. With `include_interdependencies`, the interdependency
        matrix is folded in through the supermatrix limit.

        Args:
            created_by: Who ran the analysis; stored on the result.
            include_interdependencies: Also require and use 'interdependency' judgments.
            require_complete: Refuse to analyze with missing judgments. When
                False, missing pairs are treated as equal importance (1).

        Returns:
            An ANPResult. An inconsistent criteria matrix still yields a
            result, flagged `is_consistent=False`, and emits an
            InconsistentJudgmentsWarning.

        Raises:
            InvalidInputError: If the model has no criteria.
            IncompleteComparisonsError: If judgments are missing and
                `require_complete` is True.
        """
        if not self.criteria:
            raise InvalidInputError("Cannot analyze a model without criteria.")

        missing = self.missing_comparisons(include_interdependencies)
        if missing and require_complete:
            raise IncompleteComparisonsError(missing)

        criteria_matrix = self.comparison_matrix("criteria")
        priority = solve_priority_vector(criteria_matrix)
        consistency = Consistency.evaluate(priority)

        if not consistency.is_consistent:
            warnings.warn(
                f"Criteria judgments are inconsistent (CR = {consistency.consistency_ratio:.4f}). "
                "Consider revising the judgments listed by Consistency.get_consistency_recommendations().",
                InconsistentJudgmentsWarning
            )

        interdependency_consistency = None
        supermatrix = None
        limit_matrix = None
        limit_weights = None

        if include_interdependencies:
            dependency_matrix = self.comparison_matrix("interdependency")
            interdependency_consistency = Consistency.check(dependency_matrix)
            network = synthesize_network_weights(priority.weights, dependency_matrix)
            supermatrix = network.supermatrix
            limit_matrix = network.limit_matrix
            limit_weights = network.weights

        ranked = rank_criteria([c.id for c in self.criteria], priority.weights, limit_weights)

        return ANPResult(
            criteria=list(self.criteria),
            weights=ranked,
            consistency_ratio=consistency.consistency_ratio,
            is_consistent=consistency.is_consistent,
            has_interdependencies=include_interdependencies,
            created_at=datetime.now(timezone.utc).isoformat(),
            created_by=created_by,
            consistency=consistency,
            interdependency_consistency=interdependency_consistency,
            supermatrix=supermatrix,
            limit_matrix=limit_matrix
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "criteria": [c.to_dict() for c in self.criteria],
            "comparisons": [c.to_dict() for c in self.comparisons],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NetworkModel':
        if "criteria" not in data:
            raise ValueError("Model data must contain a 'criteria' key.")
        model = cls([Criterion.from_dict(c) for c in data['criteria']])
        for comparison_data in data.get('comparisons', []):
            model.add_comparison(PairwiseComparison.from_dict(comparison_data))
        return model

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_string: str) -> 'NetworkModel':
        return cls.from_dict(json.loads(json_string))
