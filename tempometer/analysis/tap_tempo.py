"""Tap tempo from wall-clock tap timestamps."""

from __future__ import annotations

import math

import numpy as np

_RESET_GAP_MS = 2000.0
_MIN_TAPS = 4
_OUTLIER_TOLERANCE = 0.2  # fraction of the median interval


class TapTempo:
    """Accumulates taps and reports BPM once enough have been seen.

    A pause longer than two seconds starts a new series.
    """

    def __init__(self) -> None:
        self._taps: list[float] = []

    def tap(self, timestamp_ms: float) -> float | None:
        """Register a tap at *timestamp_ms* and return the current BPM, if any."""
        if self._taps and timestamp_ms - self._taps[-1] > _RESET_GAP_MS:
            self._taps = []
        self._taps.append(timestamp_ms)
        return self.bpm

    def reset(self) -> None:
        self._taps = []

    @property
    def count(self) -> int:
        return len(self._taps)

    @property
    def bpm(self) -> float | None:
        if len(self._taps) < _MIN_TAPS:
            return None
        return bpm_from_taps(self._taps)


def bpm_from_taps(timestamps_ms: list[float]) -> float | None:
    """BPM from tap times, ignoring intervals more than 20% off the median."""
    intervals = np.diff(np.asarray(timestamps_ms, dtype=np.float64))
    if len(intervals) == 0:
        return None
    # upper median for even counts
    median = float(np.sort(intervals)[len(intervals) // 2])
    kept = intervals[np.abs(intervals - median) < _OUTLIER_TOLERANCE * median]
    if len(kept) == 0:
        return None
    bpm = 60000.0 / float(np.mean(kept))
    return bpm if math.isfinite(bpm) else None
