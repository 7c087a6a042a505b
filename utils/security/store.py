"""
Per-device state storage.

Holds the accumulated history of every observed address. The analysis
engine is the only writer and serializes access with its own lock.
"""

from __future__ import annotations

from typing import Optional

from .constants import DEFAULT_MAX_HISTORY, TRACKING_MIN_OBSERVATIONS
from .distance import DistanceEstimator, get_distance_estimator
from .models import DeviceState, Observation, PayloadSample, SignalSample, VendorDataSample


class DeviceStateStore:
    """
    Address-keyed store of DeviceState records.

    History lists are bounded by ``max_history`` samples each (None or 0
    keeps everything). A positive cap is raised to TRACKING_MIN_OBSERVATIONS
    so address tracking can still be evaluated.
    """

    def __init__(
        self,
        max_history: Optional[int] = DEFAULT_MAX_HISTORY,
        distance_estimator: Optional[DistanceEstimator] = None,
    ):
        self._devices: dict[str, DeviceState] = {}
        self._max_history = (
            max(max_history, TRACKING_MIN_OBSERVATIONS)
            if max_history and max_history > 0 else None
        )
        self._distance_estimator = distance_estimator or get_distance_estimator()

    @property
    def max_history(self) -> Optional[int]:
        return self._max_history

    def upsert(self, address: str, observation: Observation) -> DeviceState:
        """
        Record an observation for an address.

        Creates the DeviceState on first sight, otherwise advances
        ``last_seen``. Appends the signal reading, every vendor data block,
        and the raw payload when present.

        Returns:
            The updated DeviceState.
        """
        timestamp = observation.timestamp
        device = self._devices.get(address)

        if device is None:
            device = DeviceState.create(address, timestamp, self._max_history)
            self._devices[address] = device
        elif timestamp > device.last_seen:
            device.last_seen = timestamp

        # First non-empty name wins
        if not device.name and observation.name:
            device.name = observation.name

        device.signal_history.append(
            SignalSample(
                rssi=observation.rssi,
                timestamp=timestamp,
                estimated_distance=self._distance_estimator.estimate_distance(observation.rssi),
            )
        )

        for company_id, data in (observation.manufacturer_data or {}).items():
            device.vendor_data_history.append(
                VendorDataSample(company_id=company_id, data=bytes(data), timestamp=timestamp)
            )

        if observation.advertising_data is not None:
            device.payload_history.append(
                PayloadSample(data=bytes(observation.advertising_data), timestamp=timestamp)
            )

        # Service UUIDs (merge, don't replace)
        for uuid in observation.service_uuids or ():
            uuid = uuid.lower()
            if uuid not in device.service_uuids:
                device.service_uuids.append(uuid)

        return device

    def get(self, address: str) -> Optional[DeviceState]:
        """Get a device by address."""
        return self._devices.get(address)

    def all_devices(self) -> list[DeviceState]:
        """Get all tracked devices."""
        return list(self._devices.values())

    def reset(self) -> None:
        """Clear all tracked devices."""
        self._devices.clear()

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, address: object) -> bool:
        return address in self._devices
