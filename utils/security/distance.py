"""
Distance estimation for BLE devices.

Log-distance path-loss model mapping RSSI to meters, plus the qualitative
proximity labels shown to users.
"""

from __future__ import annotations

from typing import Optional

from .constants import (
    DEFAULT_PATH_LOSS_EXPONENT,
    DISTANCE_UNKNOWN,
    PROXIMITY_FAR,
    PROXIMITY_FAR_MAX_M,
    PROXIMITY_NEAR,
    PROXIMITY_NEAR_MAX_M,
    PROXIMITY_UNKNOWN,
    PROXIMITY_VERY_CLOSE,
    PROXIMITY_VERY_CLOSE_MAX_M,
    PROXIMITY_VERY_FAR,
    REFERENCE_RSSI_AT_1M,
    RSSI_UNAVAILABLE,
)


class DistanceEstimator:
    """
    Estimates distance to BLE devices from RSSI.

    Formula: d = 10^((rssi_at_1m - rssi) / (10 * n))
    """

    def __init__(
        self,
        path_loss_exponent: float = DEFAULT_PATH_LOSS_EXPONENT,
        rssi_at_1m: int = REFERENCE_RSSI_AT_1M,
    ):
        """
        Initialize the distance estimator.

        Args:
            path_loss_exponent: Path-loss exponent (n), typically 2-4.
            rssi_at_1m: Calibrated RSSI at 1 meter.
        """
        self.path_loss_exponent = path_loss_exponent
        self.rssi_at_1m = rssi_at_1m

    def estimate_distance(self, rssi: Optional[int]) -> float:
        """
        Estimate distance in meters.

        Args:
            rssi: Signal strength in dBm. 0 means the reading is unavailable.

        Returns:
            Distance in meters, or -1.0 when unknown.
        """
        if rssi is None or rssi == RSSI_UNAVAILABLE:
            return DISTANCE_UNKNOWN

        exponent = (self.rssi_at_1m - rssi) / (10 * self.path_loss_exponent)
        return 10 ** exponent

    @staticmethod
    def proximity_label(distance_m: Optional[float]) -> str:
        """Map a distance to a qualitative proximity label."""
        if distance_m is None or distance_m < 0:
            return PROXIMITY_UNKNOWN
        if distance_m < PROXIMITY_VERY_CLOSE_MAX_M:
            return PROXIMITY_VERY_CLOSE
        if distance_m < PROXIMITY_NEAR_MAX_M:
            return PROXIMITY_NEAR
        if distance_m < PROXIMITY_FAR_MAX_M:
            return PROXIMITY_FAR
        return PROXIMITY_VERY_FAR


# Module-level instance for convenience
_default_estimator: Optional[DistanceEstimator] = None


def get_distance_estimator() -> DistanceEstimator:
    """Get or create the default distance estimator instance."""
    global _default_estimator
    if _default_estimator is None:
        _default_estimator = DistanceEstimator()
    return _default_estimator


def estimate_distance(rssi: Optional[int]) -> float:
    """Estimate distance with the default calibration."""
    return get_distance_estimator().estimate_distance(rssi)


def proximity_label(distance_m: Optional[float]) -> str:
    """Proximity label for a distance in meters."""
    return DistanceEstimator.proximity_label(distance_m)
