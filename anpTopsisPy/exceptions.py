from __future__ import annotations
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .types import MissingPair


class InvalidInputError(ValueError):
    """Raised for malformed or empty matrices and weight vectors."""


class IncompleteComparisonsError(ValueError):
    """
    Raised when an analysis is requested before every required pairwise
    judgment has been supplied. The missing pairs are kept on the exception
    so the caller can prompt for exactly those judgments.
    """
    def __init__(self, missing: List[MissingPair]):
        self.missing = list(missing)
        pairs = ", ".join(f"({m.criterion_a_id}, {m.criterion_b_id}, {m.comparison_type})" for m in self.missing)
        super().__init__(f"{len(self.missing)} pairwise comparison(s) missing: {pairs}")


class InconsistentJudgmentsWarning(UserWarning):
    """The consistency ratio of a comparison matrix is at or above the threshold."""


class ConvergenceWarning(UserWarning):
    """An iterative computation stopped at its cap before meeting its tolerance."""
