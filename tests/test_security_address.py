"""Unit tests for BLE address classification."""

import pytest

from utils.security.address import (
    classify_address,
    is_trackable,
    normalize_address,
    parse_address,
)
from utils.security.models import AddressType


class TestParseAddress:
    """Tests for colon-separated address parsing."""

    def test_parses_six_bytes(self):
        assert parse_address('AA:BB:CC:DD:EE:FF') == bytes([0xAA, 0xBB, 0xCC, 0xDD, 0xEE, 0xFF])

    def test_lowercase_accepted(self):
        assert parse_address('aa:bb:cc:dd:ee:ff') == bytes([0xAA, 0xBB, 0xCC, 0xDD, 0xEE, 0xFF])

    @pytest.mark.parametrize('address', [
        '',
        'AA:BB:CC:DD:EE',
        'AA:BB:CC:DD:EE:FF:00',
        'GG:BB:CC:DD:EE:FF',
        'AAA:BB:CC:DD:EE:F',
        'AABBCCDDEEFF',
    ])
    def test_malformed_returns_none(self, address):
        assert parse_address(address) is None

    def test_non_string_returns_none(self):
        assert parse_address(None) is None


class TestClassifyAddress:
    """Tests for the five-way privacy classification."""

    def test_public_address(self):
        """Bits 0 and 1 of the first byte clear means public."""
        assert classify_address('00:11:22:33:44:55') == AddressType.PUBLIC

    def test_public_ignores_last_byte(self):
        assert classify_address('00:11:22:33:44:FF') == AddressType.PUBLIC

    def test_static_random(self):
        """Top two bits of the last byte set means static random."""
        assert classify_address('02:11:22:33:44:C5') == AddressType.STATIC_RANDOM

    def test_all_high_bytes_static_random(self):
        assert classify_address('AA:BB:CC:DD:EE:FF') == AddressType.STATIC_RANDOM

    def test_resolvable_private(self):
        """bit7=0, bit6=1 means resolvable private."""
        assert classify_address('02:11:22:33:44:45') == AddressType.RANDOM_RESOLVABLE

    def test_non_resolvable_private(self):
        """bit7=0, bit6=0 means non-resolvable private."""
        assert classify_address('02:11:22:33:44:05') == AddressType.RANDOM_NON_RESOLVABLE

    def test_reserved_bits_unknown(self):
        """bit7=1, bit6=0 is not a defined sub-type."""
        assert classify_address('02:11:22:33:44:85') == AddressType.UNKNOWN

    def test_lowercase_input(self):
        assert classify_address('aa:bb:cc:dd:ee:ff') == AddressType.STATIC_RANDOM

    def test_bytes_input(self):
        assert classify_address(bytes(6)) == AddressType.PUBLIC
        assert classify_address(bytes([0x03, 0, 0, 0, 0, 0x40])) == AddressType.RANDOM_RESOLVABLE

    @pytest.mark.parametrize('address', [
        None,
        '',
        'not-an-address',
        'AA:BB:CC',
        'ZZ:ZZ:ZZ:ZZ:ZZ:ZZ',
        b'\x00\x01',
        12345,
    ])
    def test_malformed_is_unknown(self, address):
        """Malformed input never raises."""
        assert classify_address(address) == AddressType.UNKNOWN


class TestAddressHelpers:
    """Tests for trackability and normalization helpers."""

    def test_trackable_types(self):
        assert is_trackable(AddressType.PUBLIC)
        assert is_trackable(AddressType.STATIC_RANDOM)

    def test_rotating_types_not_trackable(self):
        assert not is_trackable(AddressType.RANDOM_RESOLVABLE)
        assert not is_trackable(AddressType.RANDOM_NON_RESOLVABLE)
        assert not is_trackable(AddressType.UNKNOWN)

    def test_normalize_address(self):
        assert normalize_address('  aa:bb:cc:dd:ee:ff ') == 'AA:BB:CC:DD:EE:FF'
        assert normalize_address(None) == ''
