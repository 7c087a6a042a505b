"""
Deprecated service detection from advertised service UUIDs.
"""

from __future__ import annotations

from ..constants import BLUETOOTH_BASE_UUID_SUFFIX, DEPRECATED_SERVICES
from ..models import DeviceState, Finding, FindingKind, Observation, Severity
from .base import Detector


def expand_uuid(uuid: str) -> str:
    """Expand a 16- or 32-bit UUID to its 128-bit lowercase form."""
    uuid = (uuid or '').strip().lower()
    if len(uuid) == 4:
        return f'0000{uuid}{BLUETOOTH_BASE_UUID_SUFFIX}'
    if len(uuid) == 8:
        return f'{uuid}{BLUETOOTH_BASE_UUID_SUFFIX}'
    return uuid


class DeprecatedServiceDetector(Detector):
    """
    Flags legacy services with known vulnerabilities.

    Passive scanning only sees UUIDs the device chooses to advertise;
    enumerating the full service table would need a connection.
    """

    detector_id = 'deprecated-service-detector'
    name = 'Deprecated Service Detector'

    def analyze(self, observation: Observation, device: DeviceState) -> list[Finding]:
        findings = []
        seen = set()

        for uuid in device.service_uuids:
            full_uuid = expand_uuid(uuid)
            info = DEPRECATED_SERVICES.get(full_uuid)
            if info is None or full_uuid in seen:
                continue
            seen.add(full_uuid)

            service_name, vulnerability = info
            findings.append(
                Finding(
                    kind=FindingKind.WEAK_PAIRING,
                    severity=Severity.HIGH,
                    title=f'Deprecated Service Advertised: {service_name}',
                    description=vulnerability,
                    evidence=f'Service UUID: {uuid}',
                    recommendation=(
                        'Avoid connecting to devices advertising deprecated services. '
                        'If this is your device, disable legacy service support.'
                    ),
                    detected_at=observation.timestamp,
                )
            )

        return findings
