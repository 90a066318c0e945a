import pytest
import numpy as np
from anpTopsisPy.config import configure_parameters
from anpTopsisPy.model import Criterion, PairwiseComparison, Report, ReportArea


@pytest.fixture(autouse=True)
def reset_configuration():
    """Every test starts from, and leaves behind, the default configuration."""
    configure_parameters.reset_to_defaults()
    yield
    configure_parameters.reset_to_defaults()


@pytest.fixture
def road_criteria():
    """The three road-damage criteria: traffic volume, damage level, report count."""
    return [
        Criterion("C1", "Traffic Volume"),
        Criterion("C2", "Damage Level"),
        Criterion("C3", "Report Count"),
    ]


@pytest.fixture
def consistent_comparisons():
    """Perfectly consistent judgments implied by weights 4:2:1."""
    return [
        PairwiseComparison("C1", "C2", 2),
        PairwiseComparison("C1", "C3", 4),
        PairwiseComparison("C2", "C3", 2),
    ]


@pytest.fixture
def inconsistent_comparisons():
    """C1 > C2 > C3 but C3 >> C1: a strongly intransitive set of judgments."""
    return [
        PairwiseComparison("C1", "C2", 9),
        PairwiseComparison("C2", "C3", 9),
        PairwiseComparison("C1", "C3", 9, favors="b"),
    ]


@pytest.fixture
def consistent_matrix() -> np.ndarray:
    """A perfectly consistent 3x3 matrix with weights [4/7, 2/7, 1/7]."""
    return np.array([
        [1.0, 2.0, 4.0],
        [0.5, 1.0, 2.0],
        [0.25, 0.5, 1.0],
    ])


@pytest.fixture
def report_areas():
    """Three active areas of increasing severity plus one repaired area."""
    def reports(prefix, levels):
        return [Report(f"{prefix}-r{i}", level) for i, level in enumerate(levels)]

    return [
        ReportArea("area-low", "Jalan Desa", traffic_volume="Low", reports=reports("low", ["Low"])),
        ReportArea("area-mid", "Jalan Raya", traffic_volume="Medium", reports=reports("mid", ["Medium", "High"])),
        ReportArea("area-high", "Jalan Utama", traffic_volume="High", reports=reports("high", ["High"] * 10)),
        ReportArea("area-fixed", "Jalan Lama", traffic_volume="High", reports=reports("fixed", ["High"] * 5),
                   status="Repaired"),
    ]
