"""
Security mapping API - passive BLE risk analysis.

Provides REST endpoints and SSE streaming for per-device findings, the area
summary, and control of the passive scanner.
"""

from __future__ import annotations

import csv
import io
import json
import queue
import time
from datetime import datetime
from typing import Any, Generator, Optional

from flask import Blueprint, Response, jsonify, request

import config
from utils.logging import routes_logger as logger
from utils.security import (
    DeviceResult,
    Observation,
    RiskLevel,
    get_passive_scanner,
    get_security_analyzer,
    local_time,
)
from utils.sse import format_sse


# Blueprint
security_bp = Blueprint('security', __name__, url_prefix='/api/security')


class ObservationError(ValueError):
    """Raised when a submitted observation cannot be parsed."""


# =============================================================================
# REQUEST PARSING
# =============================================================================


def _parse_hex(value: Any, field_name: str) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise ObservationError(f'{field_name} must be a hex string')
    try:
        return bytes.fromhex(value.replace(':', '').replace(' ', ''))
    except ValueError:
        raise ObservationError(f'{field_name} is not valid hex')


def _parse_company_id(key: Any) -> int:
    try:
        if isinstance(key, str):
            return int(key, 0)
        return int(key)
    except (TypeError, ValueError):
        raise ObservationError(f'Invalid company id: {key!r}')


def parse_observation(data: Any) -> Observation:
    """
    Build an Observation from a JSON object.

    Required keys: ``address`` and ``rssi``. Byte fields are hex strings;
    ``manufacturer_data`` maps company ids (int or '0x004C') to hex.
    """
    if not isinstance(data, dict):
        raise ObservationError('Observation must be a JSON object')

    address = data.get('address')
    if not address or not isinstance(address, str):
        raise ObservationError('address is required')

    rssi = data.get('rssi')
    if rssi is None or isinstance(rssi, bool):
        raise ObservationError('rssi is required')
    try:
        rssi = int(rssi)
    except (TypeError, ValueError):
        raise ObservationError('rssi must be an integer')

    manufacturer_data = {}
    raw_mfg = data.get('manufacturer_data') or {}
    if not isinstance(raw_mfg, dict):
        raise ObservationError('manufacturer_data must be an object')
    for key, value in raw_mfg.items():
        manufacturer_data[_parse_company_id(key)] = _parse_hex(value, 'manufacturer_data')

    advertising_data = None
    if data.get('advertising_data') is not None:
        advertising_data = _parse_hex(data['advertising_data'], 'advertising_data')

    service_uuids = data.get('service_uuids') or []
    if not isinstance(service_uuids, list):
        raise ObservationError('service_uuids must be a list')

    name = data.get('name')
    if name is not None and not isinstance(name, str):
        raise ObservationError('name must be a string')

    timestamp = datetime.now()
    if data.get('timestamp'):
        raw_timestamp = str(data['timestamp'])
        if raw_timestamp.endswith(('Z', 'z')):
            raw_timestamp = raw_timestamp[:-1] + '+00:00'
        try:
            timestamp = datetime.fromisoformat(raw_timestamp)
        except ValueError:
            raise ObservationError('timestamp must be ISO 8601')
        # Aware timestamps are stored as naive local time
        timestamp = local_time(timestamp)

    return Observation(
        address=address,
        rssi=rssi,
        name=name or None,
        manufacturer_data=manufacturer_data,
        advertising_data=advertising_data,
        service_uuids=tuple(str(u) for u in service_uuids),
        timestamp=timestamp,
    )


def _error(message: str, status: int = 400):
    return jsonify({'status': 'error', 'message': message}), status


def _sorted_results(results: list[DeviceResult]) -> list[DeviceResult]:
    """Highest risk first, most recently seen first within a level."""
    return sorted(
        results,
        key=lambda r: (r.risk_level.rank, r.last_seen),
        reverse=True,
    )


# =============================================================================
# DEVICE RESULTS
# =============================================================================


@security_bp.route('/devices', methods=['GET'])
def list_devices():
    """
    List analyzed devices.

    Query parameters:
        - risk: Risk level filter ('low', 'medium', 'high')
        - min_rssi: Minimum RSSI filter

    Returns:
        JSON with device results sorted by risk then last seen.
    """
    analyzer = get_security_analyzer()
    risk_filter = request.args.get('risk')
    min_rssi = request.args.get('min_rssi', type=int)

    risk_level: Optional[RiskLevel] = None
    if risk_filter:
        try:
            risk_level = RiskLevel(risk_filter.lower())
        except ValueError:
            return _error(f'Invalid risk level. Must be one of: {[r.value for r in RiskLevel]}')

    results = list(analyzer.results.values())
    if risk_level is not None:
        results = [r for r in results if r.risk_level == risk_level]
    if min_rssi is not None:
        results = [r for r in results if r.rssi and r.rssi >= min_rssi]

    results = _sorted_results(results)
    return jsonify({
        'count': len(results),
        'devices': [r.to_dict() for r in results],
    })


@security_bp.route('/devices/<address>', methods=['GET'])
def get_device(address: str):
    """
    Get the analysis result for one device.

    Returns:
        JSON device result, or 404 if the address has not been observed.
    """
    result = get_security_analyzer().get_result(address)
    if result is None:
        return _error('Device not found', 404)
    return jsonify(result.to_dict())


@security_bp.route('/summary', methods=['GET'])
def get_summary():
    """Area risk summary with its status label."""
    summary = get_security_analyzer().get_area_summary()
    return jsonify(summary.to_dict())


@security_bp.route('/observations', methods=['POST'])
def submit_observations():
    """
    Ingest one or more observations.

    Request JSON:
        - a single observation object, a list of them, or
          {'observations': [...]}

    Returns:
        JSON with the resulting device results.
    """
    data = request.get_json(silent=True)
    if data is None:
        return _error('Request body must be JSON')

    if isinstance(data, dict) and 'observations' in data:
        items = data['observations']
    elif isinstance(data, list):
        items = data
    else:
        items = [data]

    if not isinstance(items, list) or not items:
        return _error('No observations supplied')

    try:
        observations = [parse_observation(item) for item in items]
    except ObservationError as e:
        return _error(str(e))

    analyzer = get_security_analyzer()
    results = [analyzer.analyze(observation) for observation in observations]

    return jsonify({
        'status': 'ok',
        'count': len(results),
        'devices': [r.to_dict() for r in results],
    })


@security_bp.route('/reset', methods=['POST'])
def reset_analysis():
    """
    Discard all analysis state.

    Returns:
        JSON with status.
    """
    get_security_analyzer().reset()
    return jsonify({'status': 'reset'})


@security_bp.route('/export', methods=['GET'])
def export_devices():
    """
    Export device results in CSV or JSON format.

    Query parameters:
        - format: Export format ('csv', 'json')

    Returns:
        CSV or JSON file download.
    """
    export_format = request.args.get('format', 'json').lower()
    analyzer = get_security_analyzer()
    results = _sorted_results(list(analyzer.results.values()))
    stamp = datetime.now().strftime('%Y%m%d_%H%M%S')

    if export_format == 'csv':
        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow([
            'address', 'name', 'address_type', 'rssi', 'estimated_distance_m',
            'proximity', 'risk_level', 'finding_count', 'findings',
            'manufacturers', 'signal_pattern', 'first_seen', 'last_seen',
            'observation_count',
        ])

        for result in results:
            writer.writerow([
                result.address,
                result.name or '',
                result.address_type.value,
                result.rssi,
                round(result.estimated_distance, 2) if result.estimated_distance >= 0 else '',
                result.proximity,
                result.risk_level.value,
                len(result.findings),
                '; '.join(f'{f.severity.value}:{f.title}' for f in result.findings),
                ','.join(result.manufacturers),
                result.signal_pattern.value if result.signal_pattern else '',
                result.first_seen.isoformat(),
                result.last_seen.isoformat(),
                result.observation_count,
            ])

        output.seek(0)
        return Response(
            output.getvalue(),
            mimetype='text/csv',
            headers={
                'Content-Disposition': f'attachment; filename=ble_security_{stamp}.csv'
            }
        )

    if export_format != 'json':
        return _error("Invalid format. Must be 'json' or 'csv'")

    data = {
        'exported_at': datetime.now().isoformat(),
        'summary': analyzer.get_area_summary().to_dict(),
        'device_count': len(results),
        'devices': [r.to_dict() for r in results],
    }
    return Response(
        json.dumps(data, indent=2),
        mimetype='application/json',
        headers={
            'Content-Disposition': f'attachment; filename=ble_security_{stamp}.json'
        }
    )


# =============================================================================
# STREAMING
# =============================================================================


@security_bp.route('/stream', methods=['GET'])
def stream_events():
    """
    SSE event stream of device result updates.

    Events:
        - summary: area summary, sent once on connect
        - device_update: a device result changed
        - reset: all results were discarded
        - keepalive: sent when idle

    Returns:
        Server-Sent Events stream.
    """
    analyzer = get_security_analyzer()
    events: queue.Queue = queue.Queue(maxsize=config.SSE_QUEUE_SIZE)

    def on_update(snapshot, changed: Optional[DeviceResult]) -> None:
        if changed is None:
            event = ('reset', {'device_count': len(snapshot)})
        else:
            event = ('device_update', changed.to_dict())
        try:
            events.put_nowait(event)
        except queue.Full:
            logger.warning("SSE queue full, dropping security event")

    def event_generator() -> Generator[str, None, None]:
        analyzer.subscribe(on_update)
        last_keepalive = time.time()
        try:
            yield format_sse(analyzer.get_area_summary().to_dict(), event='summary')
            while True:
                try:
                    event_name, payload = events.get(timeout=1.0)
                    last_keepalive = time.time()
                    yield format_sse(payload, event=event_name)
                except queue.Empty:
                    now = time.time()
                    if now - last_keepalive >= config.SSE_KEEPALIVE_INTERVAL:
                        yield format_sse({'type': 'keepalive'}, event='keepalive')
                        last_keepalive = now
        finally:
            analyzer.unsubscribe(on_update)

    return Response(
        event_generator(),
        mimetype='text/event-stream',
        headers={
            'Cache-Control': 'no-cache',
            'Connection': 'keep-alive',
            'X-Accel-Buffering': 'no',
        }
    )


# =============================================================================
# PASSIVE SCANNER CONTROL
# =============================================================================


@security_bp.route('/scan/start', methods=['POST'])
def start_scan():
    """
    Start passive scanning.

    Request JSON:
        - duration_s: Scan duration in seconds (optional, 0 for indefinite)

    Returns:
        JSON with scan status.
    """
    data = request.get_json(silent=True) or {}
    duration = data.get('duration_s', config.SCAN_DURATION)
    try:
        duration = float(duration or 0)
    except (TypeError, ValueError):
        return _error('duration_s must be a number')
    if duration < 0:
        return _error('duration_s must not be negative')

    scanner = get_passive_scanner()
    if scanner.is_scanning:
        return jsonify({
            'status': 'already_running',
            'scan_status': scanner.get_status(),
        })

    if scanner.start(duration):
        return jsonify({'status': 'started', 'duration_s': duration})

    status = scanner.get_status()
    return jsonify({
        'status': 'failed',
        'error': status['error'] or 'Failed to start scan',
    }), 500


@security_bp.route('/scan/stop', methods=['POST'])
def stop_scan():
    """Stop passive scanning."""
    get_passive_scanner().stop()
    return jsonify({'status': 'stopped'})


@security_bp.route('/scan/status', methods=['GET'])
def get_scan_status():
    """Current scanner status including elapsed time and device count."""
    return jsonify(get_passive_scanner().get_status())
