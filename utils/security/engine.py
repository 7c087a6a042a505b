"""
Passive security analysis engine.

Routes every observation through the state store, the detector set and the
risk aggregator, then publishes an immutable snapshot of all device results.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from types import MappingProxyType
from typing import Callable, Mapping, Optional

import config
from utils.logging import get_logger

from .address import classify_address, normalize_address
from .constants import DEFAULT_MAX_HISTORY, MANUFACTURER_NAMES
from .detectors import Detector, default_detectors
from .distance import DistanceEstimator, get_distance_estimator
from .models import AreaSummary, DeviceResult, DeviceState, Finding, Observation
from .risk import calculate_risk_level, summarize_area
from .signal_pattern import classify_signal_pattern, is_movement
from .store import DeviceStateStore

logger = get_logger('secmap.security.engine')

Snapshot = Mapping[str, DeviceResult]
SnapshotCallback = Callable[[Snapshot, Optional[DeviceResult]], None]

_EMPTY_SNAPSHOT: Snapshot = MappingProxyType({})


def manufacturer_name(company_id: int) -> str:
    """Resolve a Bluetooth SIG company identifier."""
    return MANUFACTURER_NAMES.get(company_id, f'Unknown (0x{company_id:04X})')


def local_time(timestamp: datetime) -> datetime:
    """Convert aware timestamps to naive local time; naive ones pass through."""
    if timestamp.tzinfo is not None:
        return timestamp.astimezone().replace(tzinfo=None)
    return timestamp


class SecurityAnalyzer:
    """
    Builds per-device security profiles from passive observations.

    A single lock serializes every mutation (store update, detectors,
    aggregation, publish). Readers get the current snapshot without locking:
    it is a read-only mapping that is replaced as a whole on every update.

    Subscribers are called on the ingesting thread, while the lock is held,
    with the new snapshot and the result that changed (None after a reset).
    They must return quickly.
    """

    def __init__(
        self,
        detectors: Optional[tuple[Detector, ...]] = None,
        max_history: Optional[int] = DEFAULT_MAX_HISTORY,
        distance_estimator: Optional[DistanceEstimator] = None,
    ):
        self._lock = threading.RLock()
        self._distance_estimator = distance_estimator or get_distance_estimator()
        self._store = DeviceStateStore(
            max_history=max_history,
            distance_estimator=self._distance_estimator,
        )
        self._detectors: tuple[Detector, ...] = (
            tuple(detectors) if detectors is not None else default_detectors()
        )
        self._results: Snapshot = _EMPTY_SNAPSHOT
        self._subscribers: list[SnapshotCallback] = []
        self._generation = 0

    # =========================================================================
    # INGESTION
    # =========================================================================

    def analyze(self, observation: Observation) -> DeviceResult:
        """
        Process one observation and publish the updated snapshot.

        Args:
            observation: The received advertisement.

        Returns:
            The freshly computed DeviceResult for the observed address.
        """
        address = normalize_address(observation.address)
        timestamp = local_time(observation.timestamp)
        if address != observation.address or timestamp is not observation.timestamp:
            observation = replace(observation, address=address, timestamp=timestamp)

        with self._lock:
            generation = self._generation
            device = self._store.upsert(address, observation)

            findings: list[Finding] = []
            for detector in self._detectors:
                try:
                    findings.extend(detector.analyze(observation, device))
                except Exception:
                    logger.exception(f"Detector {detector.detector_id} failed for {address}")

            result = self._build_result(device, observation, findings)

            # A reset that ran in between must not be undone
            if generation != self._generation:
                return result

            updated = dict(self._results)
            updated[address] = result
            self._results = MappingProxyType(updated)

            logger.debug(
                f"{address}: {len(findings)} finding(s), risk {result.risk_level.value}"
            )
            self._notify(self._results, result)
            return result

    def analyze_advertisement(
        self,
        address: str,
        rssi: int,
        name: Optional[str] = None,
        manufacturer_data: Optional[Mapping[int, bytes]] = None,
        advertising_data: Optional[bytes] = None,
        service_uuids: Optional[list[str]] = None,
        timestamp: Optional[datetime] = None,
    ) -> DeviceResult:
        """Convenience wrapper building the Observation from raw fields."""
        observation = Observation(
            address=address,
            rssi=rssi,
            name=name or None,
            manufacturer_data=dict(manufacturer_data or {}),
            advertising_data=advertising_data,
            service_uuids=tuple(service_uuids or ()),
            timestamp=timestamp or datetime.now(),
        )
        return self.analyze(observation)

    def _build_result(
        self,
        device: DeviceState,
        observation: Observation,
        findings: list[Finding],
    ) -> DeviceResult:
        """Derive the published result from the device state."""
        latest = device.latest_signal
        distance = latest.estimated_distance if latest else -1.0

        manufacturers = []
        for sample in device.vendor_data_history:
            label = manufacturer_name(sample.company_id)
            if label not in manufacturers:
                manufacturers.append(label)

        pattern = classify_signal_pattern(device.signal_history)

        return DeviceResult(
            address=device.address,
            name=device.name,
            rssi=observation.rssi,
            findings=tuple(findings),
            risk_level=calculate_risk_level(findings),
            observation_count=len(device.signal_history),
            first_seen=device.first_seen,
            last_seen=device.last_seen,
            address_type=classify_address(device.address),
            estimated_distance=distance,
            proximity=self._distance_estimator.proximity_label(distance),
            manufacturers=tuple(manufacturers),
            signal_pattern=pattern,
            movement_detected=is_movement(pattern),
        )

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def results(self) -> Snapshot:
        """Current read-only snapshot of address -> DeviceResult."""
        return self._results

    @property
    def detectors(self) -> tuple[Detector, ...]:
        return self._detectors

    @property
    def device_count(self) -> int:
        return len(self._results)

    def get_result(self, address: str) -> Optional[DeviceResult]:
        """Get the latest result for an address."""
        return self._results.get(normalize_address(address))

    def get_area_summary(self) -> AreaSummary:
        """Area risk counts computed from the current snapshot."""
        return summarize_area(self._results.values())

    def get_device_state(self, address: str) -> Optional[DeviceState]:
        """Detached copy of the accumulated state for an address."""
        with self._lock:
            device = self._store.get(normalize_address(address))
            return device.copy() if device else None

    def all_devices(self) -> list[DeviceState]:
        """Detached copies of every tracked device state."""
        with self._lock:
            return [device.copy() for device in self._store.all_devices()]

    # =========================================================================
    # SUBSCRIPTIONS
    # =========================================================================

    def subscribe(self, callback: SnapshotCallback) -> None:
        """Register a callback for snapshot updates."""
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def unsubscribe(self, callback: SnapshotCallback) -> None:
        """Remove a previously registered callback."""
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def _notify(self, snapshot: Snapshot, changed: Optional[DeviceResult]) -> None:
        for callback in list(self._subscribers):
            try:
                callback(snapshot, changed)
            except Exception:
                logger.exception("Snapshot subscriber failed")

    # =========================================================================
    # RESET
    # =========================================================================

    def reset(self) -> None:
        """Discard all device state and publish an empty snapshot."""
        with self._lock:
            self._generation += 1
            self._store.reset()
            for detector in self._detectors:
                detector.reset()
            self._results = _EMPTY_SNAPSHOT
            logger.info("Security analyzer reset")
            self._notify(self._results, None)


# Module-level instance for shared access
_analyzer: Optional[SecurityAnalyzer] = None
_analyzer_lock = threading.Lock()


def get_security_analyzer() -> SecurityAnalyzer:
    """Get or create the shared analyzer instance."""
    global _analyzer
    with _analyzer_lock:
        if _analyzer is None:
            _analyzer = SecurityAnalyzer(
                max_history=config.MAX_HISTORY,
                distance_estimator=DistanceEstimator(
                    path_loss_exponent=config.PATH_LOSS_EXPONENT,
                    rssi_at_1m=config.REFERENCE_RSSI,
                ),
            )
        return _analyzer


def reset_security_analyzer() -> None:
    """Reset and drop the shared analyzer instance."""
    global _analyzer
    with _analyzer_lock:
        if _analyzer is not None:
            _analyzer.reset()
        _analyzer = None
