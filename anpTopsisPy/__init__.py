__version__ = "0.1.0"

from .config import configure_parameters, ConfigurationContextManager
from .exceptions import (
    InvalidInputError, IncompleteComparisonsError, InconsistentJudgmentsWarning, ConvergenceWarning
)
from .model import Criterion, PairwiseComparison, NetworkModel, Report, ReportArea
from .types import ANPResult, TopsisResult
from .matrix_builder import create_matrix_from_comparisons
from .weight_derivation import solve_priority_vector, derive_weights
from .consistency import Consistency
from .validation import Validation
from .network import synthesize_network_weights
from .topsis import rank_by_topsis, rank_detection_labels, TOPSISCalculator, DetectionLabel
from .pipeline import RepairPrioritizationWorkflow, build_area_decision_matrix
from .geocoding import GeocodingCache, CachedGeocoder, GeocodingResult

from .weight_derivation import register_weight_method
from .consistency import register_consistency_method
