"""
Passive BLE scanner feeding the security analyzer.

Uses bleak to listen for advertisements; nothing here ever connects to a
device. Each advertisement is converted to an Observation and handed to the
analyzer on the scan thread.
"""

from __future__ import annotations

import asyncio
import struct
import threading
import time
from datetime import datetime
from typing import Any, Optional

from utils.logging import scanner_logger as logger

from .constants import (
    AD_TYPE_COMPLETE_16BIT_UUIDS,
    AD_TYPE_COMPLETE_128BIT_UUIDS,
    AD_TYPE_COMPLETE_LOCAL_NAME,
    AD_TYPE_MANUFACTURER_SPECIFIC,
    AD_TYPE_SERVICE_DATA_16BIT,
    AD_TYPE_TX_POWER_LEVEL,
    BLUETOOTH_BASE_UUID_SUFFIX,
)
from .engine import SecurityAnalyzer, get_security_analyzer
from .models import Observation


def _as_bytes(value: Any) -> Optional[bytes]:
    """Coerce bleak payload values (bytes, lists, hex strings) to bytes."""
    try:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if isinstance(value, str):
            return bytes.fromhex(value)
        return bytes(value)
    except (TypeError, ValueError) as e:
        logger.debug(f"Could not convert advertisement bytes: {e}")
        return None


def _ad_structure(ad_type: int, payload: bytes) -> bytes:
    # Length byte covers the type byte plus payload
    if len(payload) > 254:
        payload = payload[:254]
    return bytes([len(payload) + 1, ad_type]) + payload


def encode_advertising_payload(
    name: Optional[str] = None,
    manufacturer_data: Optional[dict[int, bytes]] = None,
    service_uuids: Optional[list[str]] = None,
    service_data: Optional[dict[str, bytes]] = None,
    tx_power: Optional[int] = None,
) -> bytes:
    """
    Rebuild the raw advertising payload from decoded fields.

    bleak only exposes parsed advertisement data, so the payload is
    reassembled from length-prefixed AD structures. Its size matches what
    the device put on air for the fields bleak reports.
    """
    payload = b''

    if name:
        payload += _ad_structure(AD_TYPE_COMPLETE_LOCAL_NAME, name.encode('utf-8'))

    if tx_power is not None:
        payload += _ad_structure(AD_TYPE_TX_POWER_LEVEL, struct.pack('<b', max(-128, min(127, tx_power))))

    short_uuids = b''
    long_uuids = b''
    for uuid in service_uuids or []:
        uuid = uuid.lower()
        if uuid.endswith(BLUETOOTH_BASE_UUID_SUFFIX) and uuid.startswith('0000'):
            short_uuids += struct.pack('<H', int(uuid[4:8], 16))
        else:
            try:
                long_uuids += bytes.fromhex(uuid.replace('-', ''))[::-1]
            except ValueError:
                logger.debug(f"Skipping malformed service UUID {uuid}")
    if short_uuids:
        payload += _ad_structure(AD_TYPE_COMPLETE_16BIT_UUIDS, short_uuids)
    if long_uuids:
        payload += _ad_structure(AD_TYPE_COMPLETE_128BIT_UUIDS, long_uuids)

    for uuid, data in (service_data or {}).items():
        uuid = uuid.lower()
        if uuid.endswith(BLUETOOTH_BASE_UUID_SUFFIX) and uuid.startswith('0000'):
            payload += _ad_structure(
                AD_TYPE_SERVICE_DATA_16BIT,
                struct.pack('<H', int(uuid[4:8], 16)) + data,
            )

    for company_id, data in (manufacturer_data or {}).items():
        payload += _ad_structure(
            AD_TYPE_MANUFACTURER_SPECIFIC,
            struct.pack('<H', company_id & 0xFFFF) + data,
        )

    return payload


def observation_from_advertisement(device: Any, adv_data: Any) -> Observation:
    """
    Convert a bleak BLEDevice / AdvertisementData pair to an Observation.

    Args:
        device: bleak BLEDevice (needs ``address`` and ``name``).
        adv_data: bleak AdvertisementData.

    Returns:
        Observation stamped with the current time.
    """
    manufacturer_data = {}
    for company_id, data in (getattr(adv_data, 'manufacturer_data', None) or {}).items():
        converted = _as_bytes(data)
        if converted is not None:
            manufacturer_data[int(company_id)] = converted

    service_data = {}
    for uuid, data in (getattr(adv_data, 'service_data', None) or {}).items():
        converted = _as_bytes(data)
        if converted is not None:
            service_data[str(uuid)] = converted

    service_uuids = [str(uuid) for uuid in (getattr(adv_data, 'service_uuids', None) or [])]
    name = getattr(adv_data, 'local_name', None) or getattr(device, 'name', None)
    tx_power = getattr(adv_data, 'tx_power', None)
    rssi = getattr(adv_data, 'rssi', None)

    return Observation(
        address=(device.address or '').upper(),
        rssi=rssi if rssi is not None else 0,
        name=name or None,
        manufacturer_data=manufacturer_data,
        advertising_data=encode_advertising_payload(
            name=name,
            manufacturer_data=manufacturer_data,
            service_uuids=service_uuids,
            service_data=service_data,
            tx_power=tx_power,
        ),
        service_uuids=tuple(service_uuids),
        timestamp=datetime.now(),
    )


class PassiveScanner:
    """
    Background bleak scanner that forwards advertisements to an analyzer.
    """

    def __init__(self, analyzer: SecurityAnalyzer):
        self._analyzer = analyzer
        self._is_scanning = False
        self._scan_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._started_at: Optional[float] = None
        self._error: Optional[str] = None
        self._observation_count = 0

    @property
    def is_scanning(self) -> bool:
        return self._is_scanning

    def start(self, duration: float = 0.0) -> bool:
        """
        Start scanning in a background thread.

        Args:
            duration: Seconds to scan, 0 to run until stopped.

        Returns:
            True if scanning started (or was already running).
        """
        if self._is_scanning:
            return True

        try:
            import bleak  # noqa: F401
        except ImportError:
            self._error = 'bleak library not installed'
            logger.error(self._error)
            return False

        self._stop_event.clear()
        self._error = None
        self._observation_count = 0
        self._started_at = time.time()
        self._scan_thread = threading.Thread(
            target=self._scan_loop,
            args=(duration,),
            daemon=True,
        )
        self._is_scanning = True
        self._scan_thread.start()
        logger.info("Passive scanner started")
        return True

    def stop(self) -> None:
        """Stop scanning."""
        self._stop_event.set()
        if self._scan_thread:
            self._scan_thread.join(timeout=2.0)
        self._is_scanning = False
        logger.info("Passive scanner stopped")

    def get_status(self) -> dict:
        elapsed = None
        if self._is_scanning and self._started_at is not None:
            elapsed = round(time.time() - self._started_at, 1)
        return {
            'is_scanning': self._is_scanning,
            'elapsed_seconds': elapsed,
            'observation_count': self._observation_count,
            'device_count': self._analyzer.device_count,
            'error': self._error,
        }

    def handle_advertisement(self, device: Any, adv_data: Any) -> None:
        """Detection callback: convert and analyze one advertisement."""
        if self._stop_event.is_set():
            return

        try:
            observation = observation_from_advertisement(device, adv_data)
        except (AttributeError, TypeError, ValueError) as e:
            logger.debug(f"Error converting advertisement: {e}")
            return

        if not observation.address:
            return

        self._analyzer.analyze(observation)
        self._observation_count += 1

    def _scan_loop(self, duration: float) -> None:
        """Run scanning in its own event loop."""
        try:
            asyncio.run(self._async_scan(duration))
        except Exception as e:
            self._error = str(e)
            logger.error(f"Passive scan error: {e}")
        finally:
            self._is_scanning = False

    async def _async_scan(self, duration: float) -> None:
        from bleak import BleakScanner

        scanner = BleakScanner(detection_callback=self.handle_advertisement)
        await scanner.start()
        try:
            loop = asyncio.get_running_loop()
            start_time = loop.time()
            while not self._stop_event.is_set():
                await asyncio.sleep(0.1)
                if duration > 0 and (loop.time() - start_time) >= duration:
                    break
        finally:
            await scanner.stop()


# Module-level instance for shared access
_scanner: Optional[PassiveScanner] = None


def get_passive_scanner(analyzer: Optional[SecurityAnalyzer] = None) -> PassiveScanner:
    """Get or create the shared passive scanner."""
    global _scanner
    if _scanner is None:
        _scanner = PassiveScanner(analyzer or get_security_analyzer())
    return _scanner


def reset_passive_scanner() -> None:
    """Stop and drop the shared passive scanner."""
    global _scanner
    if _scanner is not None and _scanner.is_scanning:
        _scanner.stop()
    _scanner = None
