"""Unit tests for the security detectors."""

import pytest
from datetime import datetime, timedelta

from utils.security.detectors import (
    AddressTrackingDetector,
    DeprecatedServiceDetector,
    InformationLeakDetector,
    PayloadAnomalyDetector,
    default_detectors,
    expand_uuid,
)
from utils.security.models import (
    AddressSample,
    AddressType,
    DeviceState,
    FindingKind,
    Observation,
    PayloadSample,
    Severity,
)

START = datetime(2024, 1, 1, 12, 0, 0)


def make_device(address='00:11:22:33:44:55', name=None):
    """Create an empty device state first seen at START."""
    device = DeviceState.create(address, START)
    device.name = name
    return device


def make_observation(address='00:11:22:33:44:55', name=None, timestamp=START, **kwargs):
    return Observation(address=address, rssi=-60, name=name, timestamp=timestamp, **kwargs)


def observe_over(detector, address, count, span_seconds, device=None):
    """Feed `count` evenly spaced observations; return the device and last findings."""
    device = device or make_device(address)
    findings = []
    for i in range(count):
        ts = START + timedelta(seconds=span_seconds * i / max(count - 1, 1))
        device.last_seen = ts
        findings = detector.analyze(make_observation(address, timestamp=ts), device)
    return device, findings


class TestInformationLeakDetector:
    """Tests for advertised name checks."""

    @pytest.fixture
    def detector(self):
        return InformationLeakDetector()

    def check(self, detector, name):
        device = make_device(name=name)
        return detector.analyze(make_observation(name=name), device)

    def test_no_name_no_findings(self, detector):
        assert self.check(detector, None) == []

    def test_email_is_critical(self, detector):
        findings = self.check(detector, 'admin@company.com')
        email = [f for f in findings if f.severity == Severity.CRITICAL]
        assert len(email) == 1
        assert email[0].kind == FindingKind.INFORMATION_LEAKAGE
        assert 'admin@company.com' in email[0].evidence

    def test_email_name_also_long(self, detector):
        """17 characters without a generic word also flags the long name."""
        findings = self.check(detector, 'admin@company.com')
        titles = {f.title for f in findings}
        assert titles == {'Email Address Exposed', 'Potentially Identifying Name'}

    def test_possessive_is_high(self, detector):
        findings = self.check(detector, "John's iPhone")
        assert len(findings) == 1
        assert findings[0].severity == Severity.HIGH
        assert findings[0].title == 'Owner Name Exposed'

    def test_serial_number_is_high(self, detector):
        findings = self.check(detector, 'SN-123456')
        assert len(findings) == 1
        assert findings[0].severity == Severity.HIGH
        assert "'SN-123456'" in findings[0].evidence

    def test_serial_with_brand_suppressed(self, detector):
        assert self.check(detector, 'LG12345') == []

    def test_long_name_with_common_word_suppressed(self, detector):
        findings = self.check(detector, 'Wireless Headphones X')
        assert 'Potentially Identifying Name' not in {f.title for f in findings}

    def test_proper_nouns(self, detector):
        findings = self.check(detector, 'Kitchen Speaker')
        assert len(findings) == 1
        assert findings[0].severity == Severity.MEDIUM
        assert findings[0].title == 'Multiple Identifying Terms'

    def test_brand_terms_are_not_proper_nouns(self, detector):
        assert self.check(detector, 'Apple Watch') == []

    def test_generic_short_name_clean(self, detector):
        assert self.check(detector, 'Speaker') == []

    def test_idempotent(self, detector):
        """Same input yields equal findings on every call."""
        device = make_device(name='admin@company.com')
        observation = make_observation(name='admin@company.com')
        assert detector.analyze(observation, device) == detector.analyze(observation, device)

    def test_findings_stamped_with_observation_time(self, detector):
        findings = self.check(detector, 'admin@company.com')
        assert all(f.detected_at == START for f in findings)


class TestAddressTrackingDetector:
    """Tests for static address tracking."""

    @pytest.fixture
    def detector(self):
        return AddressTrackingDetector()

    def test_records_address_sample(self, detector):
        device = make_device()
        detector.analyze(make_observation(), device)
        assert len(device.address_observations) == 1
        sample = device.address_observations[0]
        assert sample.address == '00:11:22:33:44:55'
        assert sample.address_type == AddressType.PUBLIC

    def test_public_address_high(self, detector):
        _, findings = observe_over(detector, '00:11:22:33:44:55', 5, 120)
        assert len(findings) == 1
        assert findings[0].kind == FindingKind.STATIC_ADDRESS
        assert findings[0].severity == Severity.HIGH
        assert findings[0].title == 'Static MAC Address Enables Tracking'

    def test_public_address_just_over_a_minute(self, detector):
        _, findings = observe_over(detector, '00:11:22:33:44:55', 5, 65)
        assert len(findings) == 1
        assert findings[0].severity == Severity.HIGH

    def test_public_address_at_exact_threshold(self, detector):
        device, findings = observe_over(detector, '00:11:22:33:44:55', 5, 60)
        assert device.duration_seconds == 60
        assert len(findings) == 1
        assert findings[0].severity == Severity.HIGH

    def test_public_address_just_under_threshold(self, detector):
        _, findings = observe_over(detector, '00:11:22:33:44:55', 5, 59)
        assert findings == []

    def test_too_few_observations(self, detector):
        _, findings = observe_over(detector, '00:11:22:33:44:55', 4, 120)
        assert findings == []

    def test_short_span(self, detector):
        _, findings = observe_over(detector, '00:11:22:33:44:55', 5, 30)
        assert findings == []

    def test_static_random_medium(self, detector):
        _, findings = observe_over(detector, 'AA:BB:CC:DD:EE:FF', 5, 65)
        assert len(findings) == 1
        assert findings[0].severity == Severity.MEDIUM

    def test_resolvable_address_not_flagged(self, detector):
        _, findings = observe_over(detector, '02:11:22:33:44:45', 10, 300)
        assert findings == []

    def test_rotation_suppresses_finding(self, detector):
        device = make_device()
        device.address_observations.append(
            AddressSample('00:11:22:33:44:66', START, AddressType.PUBLIC)
        )
        _, findings = observe_over(detector, '00:11:22:33:44:55', 5, 120, device=device)
        assert findings == []
        assert detector.has_rotated(device)

    def test_custom_thresholds(self):
        detector = AddressTrackingDetector(min_observations=2, public_threshold_seconds=10)
        _, findings = observe_over(detector, '00:11:22:33:44:55', 2, 10)
        assert len(findings) == 1


class TestPayloadAnomalyDetector:
    """Tests for oversized names and payloads."""

    @pytest.fixture
    def detector(self):
        return PayloadAnomalyDetector()

    def test_overflow_length_name(self, detector):
        name = 'x' * 60
        findings = detector.analyze(make_observation(name=name), make_device(name=name))
        assert len(findings) == 1
        assert findings[0].kind == FindingKind.DENIAL_OF_SERVICE
        assert findings[0].severity == Severity.HIGH
        assert findings[0].evidence.endswith("...'")

    def test_suspicious_length_name(self, detector):
        name = 'x' * 45
        findings = detector.analyze(make_observation(name=name), make_device(name=name))
        assert len(findings) == 1
        assert findings[0].kind == FindingKind.INFORMATION_LEAKAGE
        assert findings[0].severity == Severity.MEDIUM

    def test_normal_name(self, detector):
        name = 'x' * 39
        assert detector.analyze(make_observation(name=name), make_device(name=name)) == []

    def test_extended_payload(self, detector):
        device = make_device()
        device.payload_history.append(PayloadSample(bytes(32), START))
        findings = detector.analyze(make_observation(), device)
        assert len(findings) == 1
        assert findings[0].title == 'Extended Advertising Data Detected'
        assert findings[0].severity == Severity.MEDIUM

    def test_legacy_payload(self, detector):
        device = make_device()
        device.payload_history.append(PayloadSample(bytes(31), START))
        assert detector.analyze(make_observation(), device) == []

    def test_only_latest_payload_counts(self, detector):
        device = make_device()
        device.payload_history.append(PayloadSample(bytes(40), START))
        device.payload_history.append(PayloadSample(bytes(10), START))
        assert detector.analyze(make_observation(), device) == []


class TestDeprecatedServiceDetector:
    """Tests for legacy service detection."""

    @pytest.fixture
    def detector(self):
        return DeprecatedServiceDetector()

    def test_expand_uuid(self):
        assert expand_uuid('110A') == '0000110a-0000-1000-8000-00805f9b34fb'
        assert expand_uuid('0000110A') == '0000110a-0000-1000-8000-00805f9b34fb'
        assert expand_uuid('0000180F-0000-1000-8000-00805F9B34FB') == '0000180f-0000-1000-8000-00805f9b34fb'

    def test_obex_flagged(self, detector):
        device = make_device()
        device.service_uuids.append('1105')
        findings = detector.analyze(make_observation(), device)
        assert len(findings) == 1
        assert findings[0].kind == FindingKind.WEAK_PAIRING
        assert findings[0].severity == Severity.HIGH
        assert 'OBEX Object Push' in findings[0].title

    def test_duplicate_forms_one_finding(self, detector):
        device = make_device()
        device.service_uuids.extend(['1101', '00001101-0000-1000-8000-00805f9b34fb'])
        assert len(detector.analyze(make_observation(), device)) == 1

    def test_modern_service_ignored(self, detector):
        device = make_device()
        device.service_uuids.append('0000180f-0000-1000-8000-00805f9b34fb')
        assert detector.analyze(make_observation(), device) == []


class TestDefaultDetectors:
    """Tests for the default detector set."""

    def test_fixed_order(self):
        ids = [d.detector_id for d in default_detectors()]
        assert ids == [
            'info-leak-detector',
            'address-tracking-detector',
            'payload-anomaly-detector',
            'deprecated-service-detector',
        ]

    def test_fresh_instances(self):
        assert default_detectors()[1] is not default_detectors()[1]
