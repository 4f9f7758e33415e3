"""Lag-domain periodicity detection on the onset envelope."""

import logging
from dataclasses import dataclass

import numpy as np

from tempometer.analysis.onset import SPAN_FLOOR

logger = logging.getLogger(__name__)

MAX_PEAKS = 5
MIN_PEAK_DISTANCE = 2


@dataclass
class Peak:
    index: int
    value: float


def bpm_to_lag_range(min_bpm: float, max_bpm: float, envelope_rate: float) -> tuple[int, int]:
    """Map a BPM search range onto envelope lags (min_lag, max_lag).

    Lower tempos have longer lags, so *min_bpm* sets the upper lag bound.
    """
    max_lag = int(round(envelope_rate * 60.0 / min_bpm))
    min_lag = max(1, int(round(envelope_rate * 60.0 / max_bpm)))
    return min_lag, max(max_lag, min_lag)


def lag_to_bpm(lag: float, envelope_rate: float) -> float:
    return 60.0 * envelope_rate / lag


def autocorrelate(envelope: np.ndarray, min_lag: int, max_lag: int) -> np.ndarray:
    """Mean-centered autocorrelation for lags min_lag..max_lag, rescaled to [0, 1].

    Index ``i`` of the result is lag ``min_lag + i``. An envelope shorter than
    ``min_lag + 1`` yields an empty curve.
    """
    n = len(envelope)
    if n < min_lag + 1 or max_lag < min_lag:
        return np.zeros(0, dtype=np.float64)

    centered = envelope - np.mean(envelope)
    acf = np.zeros(max_lag - min_lag + 1, dtype=np.float64)
    for lag in range(min_lag, min(max_lag, n - 1) + 1):
        acf[lag - min_lag] = np.dot(centered[:n - lag], centered[lag:])

    lo = float(acf.min())
    span = max(SPAN_FLOOR, float(acf.max()) - lo)
    return (acf - lo) / span


def find_top_peaks(
    series: np.ndarray,
    k: int = MAX_PEAKS,
    min_distance: int = MIN_PEAK_DISTANCE,
) -> list[Peak]:
    """Pick up to *k* strict local maxima, strongest first.

    Peaks are taken greedily by value; a peak closer than *min_distance*
    indices to one already picked is skipped.
    """
    series = np.asarray(series)
    if len(series) < 3:
        return []

    mid = series[1:-1]
    maxima = np.flatnonzero((mid > series[:-2]) & (mid > series[2:])) + 1
    ranked = sorted(maxima, key=lambda i: -series[i])

    picked: list[Peak] = []
    for i in ranked:
        if len(picked) >= k:
            break
        if all(abs(p.index - i) >= min_distance for p in picked):
            picked.append(Peak(index=int(i), value=float(series[i])))

    logger.debug("Picked %d of %d local maxima", len(picked), len(maxima))
    return picked
