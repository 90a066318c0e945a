from typing import Dict, List, Tuple


# Saaty's fundamental scale: 1-9 and the reciprocals 1/2..1/9
SAATY_SCALE: Tuple[float, ...] = tuple(
    [1.0 / v for v in range(9, 1, -1)] + [float(v) for v in range(1, 10)]
)


class Configuration:
    """
    A singleton-like class to hold all configurable parameters for the anpTopsisPy library.

    Users can modify these attributes directly to customize the behavior of
    the power iteration, the limit matrix, consistency checks and the mapping
    of road-damage areas onto TOPSIS criteria.

    Example:
    >>> from anpTopsisPy.config import configure_parameters
    >>> # Allow the power method more iterations for large, noisy matrices
    >>> configure_parameters.POWER_ITERATION_MAX_ITER = 500
    >>> # Use a stricter consistency threshold
    >>> configure_parameters.DEFAULT_SAATY_CR_THRESHOLD = 0.05
    """

    def __init__(self):
        self.reset_to_defaults()

    def reset_to_defaults(self):
        """Resets all configuration parameters to their original default values."""

        # --- Consistency Parameters (from consistency.py) ---

        # Saaty's Random Consistency Index (RI) values
        # Source: Saaty, T. L. (1980)
        self.SAATY_RI_VALUES: Dict[int | str, float] = {
            1: 0.00, 2: 0.00, 3: 0.58, 4: 0.90, 5: 1.12, 6: 1.24, 7: 1.32,
            8: 1.41, 9: 1.45, 10: 1.49,
            'default': 1.49  # n > 10
        }

        # Default Saaty's CR threshold
        self.DEFAULT_SAATY_CR_THRESHOLD: float = 0.1

        # Geometric Consistency Index (GCI) thresholds
        # Source: Aguarón & Moreno-Jiménez (2003)
        self.GCI_THRESHOLDS: Dict[int | str, float] = {
            3: 0.31,
            4: 0.35,
            'default': 0.37  # n > 4
        }

        # --- Weight Derivation Parameters (from weight_derivation.py) ---

        # Upper bound on power-method iterations; the loop stops earlier once the
        # L1 change between successive iterates drops below the tolerance.
        self.POWER_ITERATION_MAX_ITER: int = 100
        self.POWER_ITERATION_TOLERANCE: float = 1e-10

        # --- Network Parameters (from network.py) ---

        # Number of self-multiplications applied to the supermatrix.
        # An empirical bound: convergence is checked, not guaranteed.
        self.LIMIT_MATRIX_SQUARINGS: int = 20
        self.LIMIT_MATRIX_TOLERANCE: float = 1e-9

        # --- Judgment Scale ---

        self.SAATY_SCALE_VALUES: Tuple[float, ...] = SAATY_SCALE

        # --- Road-Damage Criteria Mapping (from pipeline.py) ---

        self.TRAFFIC_VOLUME_SCORES: Dict[str, float] = {"Low": 1.0, "Medium": 2.0, "High": 3.0}
        self.DAMAGE_LEVEL_SCORES: Dict[str, float] = {"Low": 1.0, "Medium": 2.0, "High": 3.0}
        # Report counts are capped and rescaled onto the same 0-3 range
        self.REPORT_COUNT_CAP: int = 10

        # --- Detection Label Ranking (from topsis.py) ---

        # Criteria: class id, confidence, polygon area in pixels
        self.DETECTION_WEIGHTS: List[float] = [0.5, 0.3, 0.2]
        # 409600 = 640 x 640, the full detector input frame
        self.DETECTION_REFERENCE_BEST: List[float] = [4.0, 1.0, 409600.0]
        self.DETECTION_REFERENCE_WORST: List[float] = [1.0, 0.01, 1.0]

        # --- Geocoding Cache (from geocoding.py) ---

        self.GEOCODING_CACHE_TTL: float = 24 * 60 * 60

        # --- General Numerical Parameters ---

        # Small tolerance value for float comparisons, reciprocity checks, etc.
        self.FLOAT_TOLERANCE: float = 1e-9

        # Decimal places used when comparing scores for rank ties
        self.RANK_TIE_DECIMALS: int = 12


configure_parameters = Configuration()


class ConfigurationContextManager:
    """
    A context manager to temporarily change configuration parameters.

    Usage:
    >>> with ConfigurationContextManager(DEFAULT_SAATY_CR_THRESHOLD=0.05):
    >>>     # Code block runs with CR threshold set to 0.05
    >>>     ...
    >>> # CR threshold reverts to its original value outside the block
    """
    def __init__(self, **kwargs):
        self.changes = kwargs
        self.original_values = {}

    def __enter__(self):
        for key, value in self.changes.items():
            if not hasattr(configure_parameters, key):
                raise AttributeError(f"Configuration object has no attribute '{key}'")
            self.original_values[key] = getattr(configure_parameters, key)
            setattr(configure_parameters, key, value)
        return configure_parameters

    def __exit__(self, exc_type, exc_val, exc_tb):
        for key, value in self.original_values.items():
            setattr(configure_parameters, key, value)
