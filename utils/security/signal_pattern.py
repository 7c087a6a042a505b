"""
Signal pattern analysis.

Infers whether a device is stationary, approaching, leaving, or moving back
and forth from the shape of its recent RSSI history.
"""

from __future__ import annotations

import statistics
from typing import Iterable, Optional

from .constants import (
    RSSI_UNAVAILABLE,
    SIGNAL_PATTERN_MIN_SAMPLES,
    SIGNAL_PATTERN_WINDOW,
    SIGNAL_PERIODIC_CHANGE_RATIO,
    SIGNAL_PERIODIC_MIN_STDEV,
    SIGNAL_STABLE_STDEV,
    SIGNAL_TREND_SLOPE,
)
from .models import SignalPattern, SignalSample

MOVEMENT_PATTERNS = frozenset({
    SignalPattern.INCREASING,
    SignalPattern.DECREASING,
    SignalPattern.PERIODIC,
})


def classify_signal_pattern(
    samples: Iterable[SignalSample],
    window: int = SIGNAL_PATTERN_WINDOW,
) -> Optional[SignalPattern]:
    """
    Classify the most recent signal samples.

    Args:
        samples: Chronological signal history.
        window: Number of most recent samples to consider.

    Returns:
        The pattern, or None when there are too few valid readings.
    """
    values = [s.rssi for s in samples if s.rssi != RSSI_UNAVAILABLE][-window:]
    if len(values) < SIGNAL_PATTERN_MIN_SAMPLES:
        return None

    stdev = statistics.pstdev(values)
    if stdev < SIGNAL_STABLE_STDEV:
        return SignalPattern.STABLE

    slope = statistics.linear_regression(range(len(values)), values).slope
    net_change = values[-1] - values[0]
    if slope > SIGNAL_TREND_SLOPE and net_change > 0:
        return SignalPattern.INCREASING
    if slope < -SIGNAL_TREND_SLOPE and net_change < 0:
        return SignalPattern.DECREASING

    if stdev >= SIGNAL_PERIODIC_MIN_STDEV and _direction_change_ratio(values) >= SIGNAL_PERIODIC_CHANGE_RATIO:
        return SignalPattern.PERIODIC

    return SignalPattern.RANDOM


def is_movement(pattern: Optional[SignalPattern]) -> bool:
    """Whether a pattern indicates the device or observer is moving."""
    return pattern in MOVEMENT_PATTERNS


def _direction_change_ratio(values: list[int]) -> float:
    """Share of consecutive steps that reverse direction."""
    steps = [b - a for a, b in zip(values, values[1:]) if b != a]
    if len(steps) < 2:
        return 0.0

    changes = sum(1 for a, b in zip(steps, steps[1:]) if (a > 0) != (b > 0))
    return changes / (len(steps) - 1)
