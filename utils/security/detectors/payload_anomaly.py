"""
Advertising payload anomaly detection.

Oversized names and payloads stress the parsers of every stack that
receives them and have been used in name-field exploits.
"""

from __future__ import annotations

from typing import Optional

from ..constants import (
    BUFFER_OVERFLOW_NAME_LENGTH,
    EVIDENCE_NAME_PREVIEW,
    LEGACY_ADVERTISING_MAX_BYTES,
    SUSPICIOUS_NAME_LENGTH,
)
from ..models import DeviceState, Finding, FindingKind, Observation, Severity
from .base import Detector


class PayloadAnomalyDetector(Detector):
    """
    Flags abnormally long names and extended advertising payloads.
    """

    detector_id = 'payload-anomaly-detector'
    name = 'Advertising Payload Anomaly Detector'

    def analyze(self, observation: Observation, device: DeviceState) -> list[Finding]:
        findings = []

        if device.name:
            finding = self.check_name_length(device.name, observation)
            if finding is not None:
                findings.append(finding)

        finding = self.check_payload_size(device, observation)
        if finding is not None:
            findings.append(finding)

        return findings

    def check_name_length(self, device_name: str, observation: Observation) -> Optional[Finding]:
        length = len(device_name)

        if length >= BUFFER_OVERFLOW_NAME_LENGTH:
            preview = device_name[:EVIDENCE_NAME_PREVIEW]
            if length > EVIDENCE_NAME_PREVIEW:
                preview += '...'
            return Finding(
                kind=FindingKind.DENIAL_OF_SERVICE,
                severity=Severity.HIGH,
                title='Potential Buffer Overflow Risk - Excessive Name Length',
                description=(
                    f'Device broadcasts an unusually long name ({length} characters). '
                    'Stacks with poor input validation may be vulnerable to buffer '
                    'overflows when processing it; historical Bluetooth flaws have '
                    'exploited name field parsing.'
                ),
                evidence=f"Device name length: {length} characters\nName: '{preview}'",
                recommendation=(
                    'If this is your device, shorten the name to under 20 characters. '
                    'If it is unknown, avoid connecting to it.'
                ),
                detected_at=observation.timestamp,
            )

        if length >= SUSPICIOUS_NAME_LENGTH:
            return Finding(
                kind=FindingKind.INFORMATION_LEAKAGE,
                severity=Severity.MEDIUM,
                title='Unusually Long Device Name',
                description=(
                    f'Device uses a long name ({length} characters), which increases '
                    'the attack surface for name-based exploits and may indicate poor '
                    'security hygiene.'
                ),
                evidence=f'Device name length: {length} characters',
                recommendation=(
                    'Shorten the device name to a concise identifier (10-20 characters).'
                ),
                detected_at=observation.timestamp,
            )

        return None

    def check_payload_size(self, device: DeviceState, observation: Observation) -> Optional[Finding]:
        latest = device.latest_payload
        if latest is None:
            return None

        size = len(latest.data)
        if size <= LEGACY_ADVERTISING_MAX_BYTES:
            return None

        return Finding(
            kind=FindingKind.DENIAL_OF_SERVICE,
            severity=Severity.MEDIUM,
            title='Extended Advertising Data Detected',
            description=(
                f'Device uses extended advertising data ({size} bytes). Larger '
                'payloads increase parsing complexity and have been associated '
                'with DoS flaws in some Bluetooth stacks.'
            ),
            evidence=(
                f'Advertising data size: {size} bytes '
                f'(exceeds standard {LEGACY_ADVERTISING_MAX_BYTES}-byte limit)'
            ),
            recommendation=(
                'Monitor device behaviour. Extended advertising is legitimate for '
                'complex devices but may indicate aggressive advertising.'
            ),
            detected_at=observation.timestamp,
        )
