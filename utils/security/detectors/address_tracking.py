"""
Address tracking detection.

A device that keeps the same public or static random address for a long
time can be followed from place to place by anyone listening.
"""

from __future__ import annotations

from ..address import classify_address
from ..constants import (
    PUBLIC_ADDRESS_THRESHOLD_SECONDS,
    STATIC_RANDOM_THRESHOLD_SECONDS,
    TRACKING_MIN_OBSERVATIONS,
)
from ..models import (
    AddressSample,
    AddressType,
    DeviceState,
    Finding,
    FindingKind,
    Observation,
    Severity,
)
from .base import Detector


class AddressTrackingDetector(Detector):
    """
    Flags devices whose address does not rotate.

    Unlike the other detectors this one records state: every call appends
    one AddressSample for the observed address to the device history before
    evaluating it.
    """

    detector_id = 'address-tracking-detector'
    name = 'MAC Address Tracking Detector'

    def __init__(
        self,
        min_observations: int = TRACKING_MIN_OBSERVATIONS,
        public_threshold_seconds: float = PUBLIC_ADDRESS_THRESHOLD_SECONDS,
        static_random_threshold_seconds: float = STATIC_RANDOM_THRESHOLD_SECONDS,
    ):
        self.min_observations = min_observations
        self.public_threshold_seconds = public_threshold_seconds
        self.static_random_threshold_seconds = static_random_threshold_seconds

    def analyze(self, observation: Observation, device: DeviceState) -> list[Finding]:
        address = observation.address or device.address
        address_type = classify_address(address)

        device.address_observations.append(
            AddressSample(
                address=address,
                timestamp=observation.timestamp,
                address_type=address_type,
            )
        )

        if len(device.address_observations) < self.min_observations:
            return []

        # Rotation is the privacy-preserving behaviour
        if self.has_rotated(device):
            return []

        duration = device.duration_seconds
        if address_type == AddressType.PUBLIC:
            if duration >= self.public_threshold_seconds:
                return [self._tracking_finding(device, address, address_type, Severity.HIGH, observation)]
        elif address_type == AddressType.STATIC_RANDOM:
            if duration >= self.static_random_threshold_seconds:
                return [self._tracking_finding(device, address, address_type, Severity.MEDIUM, observation)]

        return []

    @staticmethod
    def has_rotated(device: DeviceState) -> bool:
        """True when more than one distinct address was recorded."""
        if len(device.address_observations) < 2:
            return False
        return len({sample.address for sample in device.address_observations}) > 1

    @staticmethod
    def _tracking_finding(
        device: DeviceState,
        address: str,
        address_type: AddressType,
        severity: Severity,
        observation: Observation,
    ) -> Finding:
        return Finding(
            kind=FindingKind.STATIC_ADDRESS,
            severity=severity,
            title='Static MAC Address Enables Tracking',
            description=(
                "Device uses a static MAC address that hasn't rotated, "
                'enabling location tracking.'
            ),
            evidence=(
                f'MAC: {address} ({address_type.name})\n'
                f'Observed: {len(device.address_observations)} times over '
                f'{int(device.duration_seconds)} seconds\n'
                'No rotation detected'
            ),
            recommendation=(
                'Enable MAC address rotation per the BLE privacy feature '
                '(rotate every 15-60 minutes).'
            ),
            detected_at=observation.timestamp,
        )
