"""Unit tests for risk aggregation and the area summary."""

import pytest
from datetime import datetime

from utils.security.models import (
    AreaSummary,
    DeviceResult,
    Finding,
    FindingKind,
    RiskLevel,
    Severity,
)
from utils.security.risk import area_status, calculate_risk_level, summarize_area


def finding(severity):
    return Finding(
        kind=FindingKind.INFORMATION_LEAKAGE,
        severity=severity,
        title='Test',
        description='Test finding',
        evidence='',
        recommendation='',
    )


def result(address, risk_level):
    now = datetime.now()
    return DeviceResult(
        address=address,
        name=None,
        rssi=-60,
        findings=(),
        risk_level=risk_level,
        observation_count=1,
        first_seen=now,
        last_seen=now,
    )


class TestCalculateRiskLevel:
    """Tests for the per-device risk rule."""

    def test_no_findings_low(self):
        assert calculate_risk_level([]) == RiskLevel.LOW

    def test_single_high(self):
        assert calculate_risk_level([finding(Severity.HIGH)]) == RiskLevel.HIGH

    def test_single_critical(self):
        assert calculate_risk_level([finding(Severity.CRITICAL)]) == RiskLevel.HIGH

    def test_two_medium(self):
        assert calculate_risk_level([finding(Severity.MEDIUM), finding(Severity.MEDIUM)]) == RiskLevel.MEDIUM

    def test_single_medium_low(self):
        assert calculate_risk_level([finding(Severity.MEDIUM)]) == RiskLevel.LOW

    def test_single_low(self):
        assert calculate_risk_level([finding(Severity.LOW)]) == RiskLevel.LOW

    def test_high_dominates(self):
        findings = [finding(Severity.LOW), finding(Severity.MEDIUM), finding(Severity.HIGH)]
        assert calculate_risk_level(findings) == RiskLevel.HIGH

    def test_accepts_iterator(self):
        assert calculate_risk_level(iter([finding(Severity.LOW)] * 3)) == RiskLevel.MEDIUM


class TestAreaSummary:
    """Tests for area-wide counts and status labels."""

    def test_counts(self):
        summary = summarize_area([
            result('A', RiskLevel.HIGH),
            result('B', RiskLevel.MEDIUM),
            result('C', RiskLevel.MEDIUM),
            result('D', RiskLevel.LOW),
        ])
        assert summary.total_devices == 4
        assert summary.high_risk_devices == 1
        assert summary.medium_risk_devices == 2
        assert summary.low_risk_devices == 1

    def test_empty_area(self):
        summary = summarize_area([])
        assert summary == AreaSummary()
        assert area_status(summary) == 'safe'

    @pytest.mark.parametrize('high,medium,status', [
        (3, 0, 'danger'),
        (5, 5, 'danger'),
        (1, 0, 'warning'),
        (2, 4, 'warning'),
        (0, 2, 'caution'),
        (0, 1, 'safe'),
    ])
    def test_status_labels(self, high, medium, status):
        summary = AreaSummary(
            total_devices=high + medium,
            high_risk_devices=high,
            medium_risk_devices=medium,
        )
        assert area_status(summary) == status

    def test_to_dict_includes_status(self):
        data = AreaSummary(total_devices=1, high_risk_devices=1).to_dict()
        assert data['status'] == 'warning'
        assert data['total_devices'] == 1
