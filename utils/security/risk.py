"""
Risk aggregation.

Reduces findings to a per-device risk level and device results to an
area-wide summary.
"""

from __future__ import annotations

from typing import Iterable

from .models import AreaSummary, DeviceResult, Finding, RiskLevel, Severity


def calculate_risk_level(findings: Iterable[Finding]) -> RiskLevel:
    """
    Classify a finding list.

    Any HIGH or CRITICAL finding makes the device HIGH risk. Otherwise two or
    more findings make it MEDIUM, and anything less is LOW.
    """
    findings = list(findings)
    if not findings:
        return RiskLevel.LOW

    if any(f.severity in (Severity.HIGH, Severity.CRITICAL) for f in findings):
        return RiskLevel.HIGH
    if len(findings) >= 2:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def summarize_area(results: Iterable[DeviceResult]) -> AreaSummary:
    """Count devices at each risk level."""
    high = medium = low = 0
    for result in results:
        if result.risk_level == RiskLevel.HIGH:
            high += 1
        elif result.risk_level == RiskLevel.MEDIUM:
            medium += 1
        else:
            low += 1

    return AreaSummary(
        total_devices=high + medium + low,
        high_risk_devices=high,
        medium_risk_devices=medium,
        low_risk_devices=low,
    )


def area_status(summary: AreaSummary) -> str:
    """Qualitative label (danger / warning / caution / safe) for an area."""
    return summary.status
