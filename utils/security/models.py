"""
Data models for passive BLE security analysis.

Observations come in from the scanner, DeviceState accumulates history per
address, detectors emit Findings, and the engine publishes DeviceResults.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .constants import (
    AREA_CAUTION,
    AREA_CAUTION_MEDIUM_COUNT,
    AREA_DANGER,
    AREA_DANGER_HIGH_COUNT,
    AREA_SAFE,
    AREA_WARNING,
    AREA_WARNING_HIGH_COUNT,
)


# =============================================================================
# ENUMERATIONS
# =============================================================================

class Severity(str, Enum):
    """Finding severity, ordered LOW < MEDIUM < HIGH < CRITICAL."""
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    CRITICAL = 'critical'

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def __lt__(self, other):
        if isinstance(other, Severity):
            return self.rank < other.rank
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, Severity):
            return self.rank <= other.rank
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, Severity):
            return self.rank > other.rank
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, Severity):
            return self.rank >= other.rank
        return NotImplemented

    def __str__(self) -> str:
        return self.value


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


class FindingKind(str, Enum):
    """Categories of detected issues."""
    INFORMATION_LEAKAGE = 'information_leakage'
    STATIC_ADDRESS = 'static_address'
    WEAK_PAIRING = 'weak_pairing'
    GATT_EXPOSURE = 'gatt_exposure'
    INSECURE_OTA = 'insecure_ota'
    DENIAL_OF_SERVICE = 'denial_of_service'

    def __str__(self) -> str:
        return self.value


class AddressType(str, Enum):
    """Privacy category of a BLE hardware address."""
    PUBLIC = 'public'                                # Globally unique, trackable
    STATIC_RANDOM = 'static_random'                  # Fixed per session, trackable
    RANDOM_RESOLVABLE = 'random_resolvable'          # Rotates, resolvable by peers
    RANDOM_NON_RESOLVABLE = 'random_non_resolvable'  # Rotates, not resolvable
    UNKNOWN = 'unknown'

    def __str__(self) -> str:
        return self.value


class RiskLevel(str, Enum):
    """Aggregated device risk, ordered LOW < MEDIUM < HIGH."""
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]

    def __lt__(self, other):
        if isinstance(other, RiskLevel):
            return self.rank < other.rank
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, RiskLevel):
            return self.rank <= other.rank
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, RiskLevel):
            return self.rank > other.rank
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, RiskLevel):
            return self.rank >= other.rank
        return NotImplemented

    def __str__(self) -> str:
        return self.value


_RISK_RANK = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
}


class SignalPattern(str, Enum):
    """Movement pattern inferred from signal history."""
    STABLE = 'stable'          # Stationary
    PERIODIC = 'periodic'      # Moving back and forth
    RANDOM = 'random'          # Normal variation
    INCREASING = 'increasing'  # Getting closer
    DECREASING = 'decreasing'  # Moving away

    def __str__(self) -> str:
        return self.value


# =============================================================================
# OBSERVATIONS AND HISTORY SAMPLES
# =============================================================================

@dataclass(frozen=True)
class Observation:
    """A single received advertisement."""

    address: str
    rssi: int
    name: Optional[str] = None
    manufacturer_data: dict[int, bytes] = field(default_factory=dict)
    advertising_data: Optional[bytes] = None
    service_uuids: tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class SignalSample:
    rssi: int
    timestamp: datetime
    estimated_distance: float


@dataclass(frozen=True)
class PayloadSample:
    data: bytes
    timestamp: datetime


@dataclass(frozen=True)
class VendorDataSample:
    company_id: int
    data: bytes
    timestamp: datetime


@dataclass(frozen=True)
class AddressSample:
    address: str
    timestamp: datetime
    address_type: AddressType


def _history(maxlen: Optional[int] = None) -> deque:
    return deque(maxlen=maxlen)


@dataclass
class DeviceState:
    """
    Everything collected about one hardware address.

    History fields only ever grow (oldest samples fall off when a retention
    cap is configured). Only the store and the address tracking detector
    append to them.
    """

    address: str
    first_seen: datetime
    last_seen: datetime
    name: Optional[str] = None
    signal_history: deque = field(default_factory=_history)
    payload_history: deque = field(default_factory=_history)
    vendor_data_history: deque = field(default_factory=_history)
    address_observations: deque = field(default_factory=_history)
    service_uuids: list[str] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        address: str,
        timestamp: datetime,
        max_history: Optional[int] = None,
    ) -> DeviceState:
        """Create an empty state whose histories share a retention cap."""
        return cls(
            address=address,
            first_seen=timestamp,
            last_seen=timestamp,
            signal_history=_history(max_history),
            payload_history=_history(max_history),
            vendor_data_history=_history(max_history),
            address_observations=_history(max_history),
        )

    @property
    def duration_seconds(self) -> float:
        """Time between first and last sighting."""
        return (self.last_seen - self.first_seen).total_seconds()

    @property
    def latest_signal(self) -> Optional[SignalSample]:
        return self.signal_history[-1] if self.signal_history else None

    @property
    def latest_payload(self) -> Optional[PayloadSample]:
        return self.payload_history[-1] if self.payload_history else None

    def copy(self) -> DeviceState:
        """Detached copy that later appends cannot affect."""
        return DeviceState(
            address=self.address,
            first_seen=self.first_seen,
            last_seen=self.last_seen,
            name=self.name,
            signal_history=deque(self.signal_history, maxlen=self.signal_history.maxlen),
            payload_history=deque(self.payload_history, maxlen=self.payload_history.maxlen),
            vendor_data_history=deque(
                self.vendor_data_history, maxlen=self.vendor_data_history.maxlen
            ),
            address_observations=deque(
                self.address_observations, maxlen=self.address_observations.maxlen
            ),
            service_uuids=list(self.service_uuids),
        )


# =============================================================================
# FINDINGS AND RESULTS
# =============================================================================

@dataclass(frozen=True)
class Finding:
    """A single detected security concern."""

    kind: FindingKind
    severity: Severity
    title: str
    description: str
    evidence: str
    recommendation: str
    detected_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'kind': self.kind.value,
            'severity': self.severity.value,
            'title': self.title,
            'description': self.description,
            'evidence': self.evidence,
            'recommendation': self.recommendation,
            'detected_at': self.detected_at.isoformat(),
        }


@dataclass(frozen=True)
class DeviceResult:
    """Published analysis result for one device."""

    address: str
    name: Optional[str]
    rssi: int
    findings: tuple[Finding, ...]
    risk_level: RiskLevel
    observation_count: int
    first_seen: datetime
    last_seen: datetime
    address_type: AddressType = AddressType.UNKNOWN
    estimated_distance: float = -1.0
    proximity: str = 'Unknown'
    manufacturers: tuple[str, ...] = ()
    signal_pattern: Optional[SignalPattern] = None
    movement_detected: bool = False

    @property
    def duration_seconds(self) -> float:
        return (self.last_seen - self.first_seen).total_seconds()

    @property
    def highest_severity(self) -> Optional[Severity]:
        if not self.findings:
            return None
        return max((f.severity for f in self.findings), key=lambda s: s.rank)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'address': self.address,
            'name': self.name,
            'rssi': self.rssi,
            'risk_level': self.risk_level.value,
            'finding_count': len(self.findings),
            'findings': [f.to_dict() for f in self.findings],
            'observation_count': self.observation_count,
            'first_seen': self.first_seen.isoformat(),
            'last_seen': self.last_seen.isoformat(),
            'duration_seconds': round(self.duration_seconds, 1),
            'address_type': self.address_type.value,
            'estimated_distance_m': (
                round(self.estimated_distance, 2) if self.estimated_distance >= 0 else None
            ),
            'proximity': self.proximity,
            'manufacturers': list(self.manufacturers),
            'signal_pattern': self.signal_pattern.value if self.signal_pattern else None,
            'movement_detected': self.movement_detected,
        }


@dataclass(frozen=True)
class AreaSummary:
    """Risk counts across every device currently in the snapshot."""

    total_devices: int = 0
    high_risk_devices: int = 0
    medium_risk_devices: int = 0
    low_risk_devices: int = 0

    @property
    def status(self) -> str:
        """Qualitative label for display."""
        if self.high_risk_devices >= AREA_DANGER_HIGH_COUNT:
            return AREA_DANGER
        if self.high_risk_devices >= AREA_WARNING_HIGH_COUNT:
            return AREA_WARNING
        if self.medium_risk_devices >= AREA_CAUTION_MEDIUM_COUNT:
            return AREA_CAUTION
        return AREA_SAFE

    def to_dict(self) -> dict:
        return {
            'total_devices': self.total_devices,
            'high_risk_devices': self.high_risk_devices,
            'medium_risk_devices': self.medium_risk_devices,
            'low_risk_devices': self.low_risk_devices,
            'status': self.status,
        }
