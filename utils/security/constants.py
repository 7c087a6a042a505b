"""
Constants for passive BLE security analysis.
"""

from __future__ import annotations

# =============================================================================
# PROXIMITY ESTIMATION
# =============================================================================

# Calibrated signal strength at 1 meter (typical BLE value)
REFERENCE_RSSI_AT_1M = -59

# Path-loss exponent for indoor environments (typical range: 2-4)
DEFAULT_PATH_LOSS_EXPONENT = 2.5

# RSSI value reported when the reading is unavailable
RSSI_UNAVAILABLE = 0

# Distance returned when it cannot be estimated
DISTANCE_UNKNOWN = -1.0

# Proximity labels and their upper distance bounds (meters)
PROXIMITY_UNKNOWN = 'Unknown'
PROXIMITY_VERY_CLOSE = 'Very Close'
PROXIMITY_NEAR = 'Near'
PROXIMITY_FAR = 'Far'
PROXIMITY_VERY_FAR = 'Very Far'

PROXIMITY_VERY_CLOSE_MAX_M = 1.0
PROXIMITY_NEAR_MAX_M = 3.0
PROXIMITY_FAR_MAX_M = 10.0

# =============================================================================
# DEVICE HISTORY
# =============================================================================

# Samples kept per history list when no cap is configured explicitly
DEFAULT_MAX_HISTORY = 1000

# =============================================================================
# ADDRESS TRACKING THRESHOLDS
# =============================================================================

# Address samples needed before tracking is evaluated
TRACKING_MIN_OBSERVATIONS = 5

# Observation span before a non-rotating address counts as trackable (seconds)
PUBLIC_ADDRESS_THRESHOLD_SECONDS = 60
STATIC_RANDOM_THRESHOLD_SECONDS = 60

# =============================================================================
# PAYLOAD ANOMALY THRESHOLDS
# =============================================================================

# Name length treated as unusually long
SUSPICIOUS_NAME_LENGTH = 40

# Name length large enough to target name-parsing overflows
BUFFER_OVERFLOW_NAME_LENGTH = 60

# Legacy (non-extended) advertising payload limit in bytes
LEGACY_ADVERTISING_MAX_BYTES = 31

# Evidence truncation for very long names
EVIDENCE_NAME_PREVIEW = 50

# =============================================================================
# INFORMATION LEAK RULES
# =============================================================================

# Serial-number-like token: uppercase prefix, optional separator, digits
SERIAL_NUMBER_PATTERN = r'[A-Z]{2,}[-_]?\d{4,}'

EMAIL_PATTERN = r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}'

# "<word>'s " usually carries an owner's name
POSSESSIVE_PATTERN = r"\w+'s\s"

# Names at least this long are flagged unless they contain a generic term
LONG_NAME_LENGTH = 15

# Capitalized tokens needed before a name counts as identifying
PROPER_NOUN_MIN_COUNT = 2

# Brand and category tokens that do not identify an owner
COMMON_BRANDS = frozenset({
    'Apple', 'Samsung', 'Google', 'Microsoft', 'Amazon',
    'Fitbit', 'Garmin', 'Xiaomi', 'Huawei', 'OnePlus',
    'Sony', 'LG', 'Motorola', 'Nokia', 'Bluetooth',
    'BLE', 'Smart', 'Device', 'Tracker', 'Watch',
})

# Generic product words that explain a long name
COMMON_LONG_WORDS = frozenset({
    'Bluetooth', 'Wireless', 'Controller', 'Headphones',
    'Smartwatch', 'Tracker', 'Assistant', 'Speaker',
})

# =============================================================================
# DEPRECATED SERVICES
# =============================================================================

# Legacy services with a history of parser and authentication flaws
DEPRECATED_SERVICES = {
    '00001105-0000-1000-8000-00805f9b34fb': (
        'OBEX Object Push',
        'Historical buffer overflow vulnerabilities in OBEX parsers. '
        'Often implemented without authentication.',
    ),
    '00001101-0000-1000-8000-00805f9b34fb': (
        'Serial Port Profile (SPP)',
        'Legacy serial communication. Older implementations are vulnerable '
        'to command injection and buffer overflows.',
    ),
    '0000110a-0000-1000-8000-00805f9b34fb': (
        'Audio Source',
        'Some implementations leak the audio stream without proper '
        'pairing verification.',
    ),
}

# Bluetooth base UUID suffix used to expand 16-bit UUIDs
BLUETOOTH_BASE_UUID_SUFFIX = '-0000-1000-8000-00805f9b34fb'

# =============================================================================
# SIGNAL PATTERN ANALYSIS
# =============================================================================

# Most recent samples considered
SIGNAL_PATTERN_WINDOW = 20

# Minimum valid samples before a pattern is reported
SIGNAL_PATTERN_MIN_SAMPLES = 5

# Standard deviation below which the device is considered stationary (dB)
SIGNAL_STABLE_STDEV = 2.0

# Trend slope per sample that indicates approach or retreat (dB)
SIGNAL_TREND_SLOPE = 0.5

# Share of direction changes and minimum spread for periodic movement
SIGNAL_PERIODIC_CHANGE_RATIO = 0.6
SIGNAL_PERIODIC_MIN_STDEV = 4.0

# =============================================================================
# AREA SUMMARY LABELS
# =============================================================================

AREA_DANGER = 'danger'
AREA_WARNING = 'warning'
AREA_CAUTION = 'caution'
AREA_SAFE = 'safe'

AREA_DANGER_HIGH_COUNT = 3
AREA_WARNING_HIGH_COUNT = 1
AREA_CAUTION_MEDIUM_COUNT = 2

# =============================================================================
# COMMON MANUFACTURER IDS (Bluetooth SIG company identifiers)
# =============================================================================

MANUFACTURER_NAMES = {
    0x004C: 'Apple Inc.',
    0x0006: 'Microsoft',
    0x00E0: 'Google',
    0x0075: 'Samsung Electronics',
    0x0157: 'Eufy (Anker Innovations)',
    0x0087: 'Garmin',
    0x0099: 'Xiaomi',
    0x02E5: 'Tile Inc.',
    0x0059: 'Nordic Semiconductor',
    0x0131: 'Fitbit',
}

# =============================================================================
# ADVERTISING DATA TYPES (used to rebuild raw payloads)
# =============================================================================

AD_TYPE_COMPLETE_16BIT_UUIDS = 0x03
AD_TYPE_COMPLETE_128BIT_UUIDS = 0x07
AD_TYPE_COMPLETE_LOCAL_NAME = 0x09
AD_TYPE_TX_POWER_LEVEL = 0x0A
AD_TYPE_SERVICE_DATA_16BIT = 0x16
AD_TYPE_MANUFACTURER_SPECIFIC = 0xFF
