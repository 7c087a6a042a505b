"""
Detector set for passive security analysis.
"""

from __future__ import annotations

from .address_tracking import AddressTrackingDetector
from .base import Detector
from .info_leak import InformationLeakDetector
from .payload_anomaly import PayloadAnomalyDetector
from .services import DeprecatedServiceDetector, expand_uuid


def default_detectors() -> tuple[Detector, ...]:
    """Build the fixed detector list in display order."""
    return (
        InformationLeakDetector(),
        AddressTrackingDetector(),
        PayloadAnomalyDetector(),
        DeprecatedServiceDetector(),
    )


__all__ = [
    'Detector',
    'InformationLeakDetector',
    'AddressTrackingDetector',
    'PayloadAnomalyDetector',
    'DeprecatedServiceDetector',
    'default_detectors',
    'expand_uuid',
]
