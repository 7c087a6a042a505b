"""
Passive BLE security analysis package.

Classifies advertised addresses, keeps per-device history, runs the
vulnerability detectors on every observation, and publishes per-device risk
results plus an area summary.
"""

from .address import classify_address, is_trackable, normalize_address, parse_address
from .detectors import (
    AddressTrackingDetector,
    DeprecatedServiceDetector,
    Detector,
    InformationLeakDetector,
    PayloadAnomalyDetector,
    default_detectors,
)
from .distance import DistanceEstimator, estimate_distance, get_distance_estimator, proximity_label
from .engine import (
    SecurityAnalyzer,
    get_security_analyzer,
    local_time,
    manufacturer_name,
    reset_security_analyzer,
)
from .models import (
    AddressSample,
    AddressType,
    AreaSummary,
    DeviceResult,
    DeviceState,
    Finding,
    FindingKind,
    Observation,
    PayloadSample,
    RiskLevel,
    Severity,
    SignalPattern,
    SignalSample,
    VendorDataSample,
)
from .risk import area_status, calculate_risk_level, summarize_area
from .scanner import (
    PassiveScanner,
    get_passive_scanner,
    observation_from_advertisement,
    reset_passive_scanner,
)
from .signal_pattern import classify_signal_pattern, is_movement
from .store import DeviceStateStore

__all__ = [
    # Engine
    'SecurityAnalyzer',
    'get_security_analyzer',
    'reset_security_analyzer',
    'manufacturer_name',
    'local_time',

    # Models
    'Observation',
    'DeviceState',
    'DeviceResult',
    'Finding',
    'FindingKind',
    'Severity',
    'RiskLevel',
    'AddressType',
    'AreaSummary',
    'SignalPattern',
    'SignalSample',
    'PayloadSample',
    'VendorDataSample',
    'AddressSample',

    # Address classification
    'classify_address',
    'is_trackable',
    'normalize_address',
    'parse_address',

    # Distance estimation
    'DistanceEstimator',
    'estimate_distance',
    'get_distance_estimator',
    'proximity_label',

    # State
    'DeviceStateStore',

    # Detectors
    'Detector',
    'InformationLeakDetector',
    'AddressTrackingDetector',
    'PayloadAnomalyDetector',
    'DeprecatedServiceDetector',
    'default_detectors',

    # Risk
    'calculate_risk_level',
    'summarize_area',
    'area_status',

    # Signal patterns
    'classify_signal_pattern',
    'is_movement',

    # Passive scanning
    'PassiveScanner',
    'get_passive_scanner',
    'reset_passive_scanner',
    'observation_from_advertisement',
]
