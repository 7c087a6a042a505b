"""
BLE hardware address classification.

Derives the privacy category of an address from its bits, following the
locally-administered / random address sub-type convention.
"""

from __future__ import annotations

from typing import Optional, Union

from .models import AddressType

ADDRESS_LENGTH = 6


def parse_address(address: str) -> Optional[bytes]:
    """
    Parse a colon-separated hex address into 6 bytes.

    Args:
        address: Address such as 'AA:BB:CC:DD:EE:FF'.

    Returns:
        The address bytes (most significant first), or None if malformed.
    """
    if not isinstance(address, str):
        return None

    parts = address.strip().split(':')
    if len(parts) != ADDRESS_LENGTH:
        return None

    try:
        values = [int(part, 16) for part in parts]
    except ValueError:
        return None

    if any(len(part) != 2 or not 0 <= value <= 0xFF for part, value in zip(parts, values)):
        return None

    return bytes(values)


def classify_address(address: Union[str, bytes, bytearray, None]) -> AddressType:
    """
    Classify a hardware address into one of five privacy categories.

    Bits 0 and 1 of the first byte clear means a globally assigned public
    address. Otherwise the top two bits of the last byte select the random
    sub-type:

    - bit7=1, bit6=1: static random
    - bit7=0, bit6=1: resolvable private
    - bit7=0, bit6=0: non-resolvable private
    - bit7=1, bit6=0: unknown

    Malformed input never raises; it classifies as UNKNOWN.
    """
    if isinstance(address, str):
        raw = parse_address(address)
    elif isinstance(address, (bytes, bytearray)):
        raw = bytes(address)
    else:
        raw = None

    if raw is None or len(raw) != ADDRESS_LENGTH:
        return AddressType.UNKNOWN

    first_byte = raw[0]
    last_byte = raw[-1]

    bit0 = first_byte & 0x01
    bit1 = (first_byte >> 1) & 0x01
    bit6 = (last_byte >> 6) & 0x01
    bit7 = (last_byte >> 7) & 0x01

    if bit0 == 0 and bit1 == 0:
        return AddressType.PUBLIC
    if bit7 == 1 and bit6 == 1:
        return AddressType.STATIC_RANDOM
    if bit7 == 0 and bit6 == 1:
        return AddressType.RANDOM_RESOLVABLE
    if bit7 == 0 and bit6 == 0:
        return AddressType.RANDOM_NON_RESOLVABLE
    return AddressType.UNKNOWN


def is_trackable(address_type: AddressType) -> bool:
    """Whether an address type stays fixed long enough to follow a device."""
    return address_type in (AddressType.PUBLIC, AddressType.STATIC_RANDOM)


def normalize_address(address: Optional[str]) -> str:
    """Upper-case, trimmed form used as the device key."""
    return (address or '').strip().upper()
