"""Unit tests for RSSI distance estimation and proximity labels."""

import pytest

from utils.security.distance import (
    DistanceEstimator,
    estimate_distance,
    get_distance_estimator,
    proximity_label,
)


@pytest.fixture
def estimator():
    """Estimator with the default indoor calibration."""
    return DistanceEstimator()


class TestEstimateDistance:
    """Tests for the log-distance path-loss model."""

    def test_reference_rssi_is_one_meter(self, estimator):
        assert estimator.estimate_distance(-59) == pytest.approx(1.0)

    def test_ten_meters(self, estimator):
        """25 dB below the reference with n=2.5 is 10 m."""
        assert estimator.estimate_distance(-84) == pytest.approx(10.0)

    def test_unavailable_rssi(self, estimator):
        assert estimator.estimate_distance(0) == -1.0
        assert estimator.estimate_distance(None) == -1.0

    def test_monotonic_in_rssi(self, estimator):
        """Weaker signal never yields a shorter distance."""
        distances = [estimator.estimate_distance(rssi) for rssi in range(-100, -20)]
        assert all(a > b for a, b in zip(distances, distances[1:]))

    def test_custom_calibration(self):
        estimator = DistanceEstimator(path_loss_exponent=2.0, rssi_at_1m=-50)
        assert estimator.estimate_distance(-70) == pytest.approx(10.0)

    def test_module_helper_uses_default(self):
        assert estimate_distance(-59) == pytest.approx(1.0)
        assert get_distance_estimator() is get_distance_estimator()


class TestProximityLabel:
    """Tests for qualitative proximity labels."""

    @pytest.mark.parametrize('distance,label', [
        (-1.0, 'Unknown'),
        (None, 'Unknown'),
        (0.0, 'Very Close'),
        (0.5, 'Very Close'),
        (1.0, 'Near'),
        (2.99, 'Near'),
        (3.0, 'Far'),
        (9.99, 'Far'),
        (10.0, 'Very Far'),
        (150.0, 'Very Far'),
    ])
    def test_label_bounds(self, distance, label):
        assert proximity_label(distance) == label

    def test_label_from_rssi(self, estimator):
        assert estimator.proximity_label(estimator.estimate_distance(-40)) == 'Very Close'
        assert estimator.proximity_label(estimator.estimate_distance(0)) == 'Unknown'
