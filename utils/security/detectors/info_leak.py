"""
Information leak detection on advertised device names.

Names are broadcast in clear text to anyone listening, so anything personal
in them (serial numbers, email addresses, owner names) is exposed.
"""

from __future__ import annotations

import re
from typing import Optional

from ..constants import (
    COMMON_BRANDS,
    COMMON_LONG_WORDS,
    EMAIL_PATTERN,
    LONG_NAME_LENGTH,
    POSSESSIVE_PATTERN,
    PROPER_NOUN_MIN_COUNT,
    SERIAL_NUMBER_PATTERN,
)
from ..models import DeviceState, Finding, FindingKind, Observation, Severity
from .base import Detector

_SERIAL_RE = re.compile(SERIAL_NUMBER_PATTERN)
_EMAIL_RE = re.compile(EMAIL_PATTERN)
_POSSESSIVE_RE = re.compile(POSSESSIVE_PATTERN)
_WHITESPACE_RE = re.compile(r'\s+')

_BRANDS_LOWER = tuple(brand.lower() for brand in COMMON_BRANDS)
_LONG_WORDS_LOWER = tuple(word.lower() for word in COMMON_LONG_WORDS)


class InformationLeakDetector(Detector):
    """
    Flags personal or unique data in the advertised name.

    Each check runs independently, so one name can produce several findings
    but at most one per check.
    """

    detector_id = 'info-leak-detector'
    name = 'Advertisement Information Leakage Detector'

    def analyze(self, observation: Observation, device: DeviceState) -> list[Finding]:
        device_name = device.name
        if not device_name:
            return []

        return self.check_device_name(device_name, observation.timestamp)

    def check_serial_number(self, device_name: str, detected_at=None) -> Optional[Finding]:
        match = _SERIAL_RE.search(device_name)
        if match is None:
            return None

        serial = match.group(0)
        serial_lower = serial.lower()
        if any(brand in serial_lower for brand in _BRANDS_LOWER):
            return None

        return _finding(
            severity=Severity.HIGH,
            title='Serial Number Exposed',
            description=(
                'Device broadcasts what appears to be a serial number or unique '
                'identifier in its name.'
            ),
            evidence=f"Found pattern: '{serial}' in device name '{device_name}'",
            recommendation=(
                'Remove serial numbers from the advertised device name. '
                'Use a generic name instead.'
            ),
            detected_at=detected_at,
        )

    def check_email(self, device_name: str, detected_at=None) -> Optional[Finding]:
        match = _EMAIL_RE.search(device_name)
        if match is None:
            return None

        return _finding(
            severity=Severity.CRITICAL,
            title='Email Address Exposed',
            description='Device broadcasts an email address, directly identifying the owner.',
            evidence=f"Found email: '{match.group(0)}' in device name '{device_name}'",
            recommendation='Remove email addresses from device names immediately.',
            detected_at=detected_at,
        )

    def check_possessive(self, device_name: str, detected_at=None) -> Optional[Finding]:
        if _POSSESSIVE_RE.search(device_name) is None:
            return None

        return _finding(
            severity=Severity.HIGH,
            title='Owner Name Exposed',
            description="Device name contains a possessive form, likely revealing the owner's name.",
            evidence=f"Found possessive pattern in: '{device_name}'",
            recommendation='Use generic device names without personal identifiers.',
            detected_at=detected_at,
        )

    def check_long_name(self, device_name: str, detected_at=None) -> Optional[Finding]:
        if len(device_name) < LONG_NAME_LENGTH:
            return None

        name_lower = device_name.lower()
        if any(word in name_lower for word in _LONG_WORDS_LOWER):
            return None

        return _finding(
            severity=Severity.MEDIUM,
            title='Potentially Identifying Name',
            description='Device uses a long, potentially identifying name.',
            evidence=f"Device name is {len(device_name)} characters: '{device_name}'",
            recommendation='Shorten the device name to a generic identifier.',
            detected_at=detected_at,
        )

    def check_proper_nouns(self, device_name: str, detected_at=None) -> Optional[Finding]:
        capitalized = [
            word for word in _WHITESPACE_RE.split(device_name)
            if len(word) > 1 and word[0].isupper() and word not in COMMON_BRANDS
        ]
        if len(capitalized) < PROPER_NOUN_MIN_COUNT:
            return None

        return _finding(
            severity=Severity.MEDIUM,
            title='Multiple Identifying Terms',
            description='Device name contains multiple capitalized words.',
            evidence=f"Found {len(capitalized)} terms: {', '.join(capitalized)}",
            recommendation='Use a single generic term for the device name.',
            detected_at=detected_at,
        )

    def check_device_name(self, device_name: str, detected_at=None) -> list[Finding]:
        """Run all five name checks and collect what fires."""
        findings = []
        for check in (
            self.check_serial_number,
            self.check_email,
            self.check_possessive,
            self.check_long_name,
            self.check_proper_nouns,
        ):
            finding = check(device_name, detected_at)
            if finding is not None:
                findings.append(finding)
        return findings


def _finding(detected_at=None, **kwargs) -> Finding:
    if detected_at is None:
        return Finding(kind=FindingKind.INFORMATION_LEAKAGE, **kwargs)
    return Finding(kind=FindingKind.INFORMATION_LEAKAGE, detected_at=detected_at, **kwargs)
