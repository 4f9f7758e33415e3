"""Tempo candidates, octave correction and confidence."""

import logging
import math

from tempometer.analysis.models import TempoCandidate
from tempometer.analysis.periodicity import Peak, lag_to_bpm

logger = logging.getLogger(__name__)

# Octave correction always targets this band, independent of the search range.
PREFERRED_MIN_BPM = 60.0
PREFERRED_MAX_BPM = 180.0
REFERENCE_BPM = 120.0

STRENGTH_FLOOR = 1e-6


def candidates_from_peaks(
    peaks: list[Peak],
    min_lag: int,
    envelope_rate: float,
) -> list[TempoCandidate]:
    """Convert autocorrelation peaks to tempo candidates, strongest first."""
    candidates = [
        TempoCandidate(bpm=lag_to_bpm(min_lag + p.index, envelope_rate), strength=p.value)
        for p in peaks
    ]
    candidates.sort(key=lambda c: c.strength, reverse=True)
    return candidates


def refine_tempo(
    bpm: float,
    low: float = PREFERRED_MIN_BPM,
    high: float = PREFERRED_MAX_BPM,
    reference: float = REFERENCE_BPM,
) -> float:
    """Resolve half/double/triple tempo confusion.

    Of ``bpm`` and its halves, doubles, thirds and triples, return the one
    within [low, high] closest to *reference*. If none falls in the band,
    return *bpm* clamped into it.
    """
    if not math.isfinite(bpm):
        return bpm
    options = [bpm, bpm / 2, bpm * 2, bpm / 3, bpm * 3]
    in_range = [b for b in options if low <= b <= high]
    if not in_range:
        return max(low, min(high, bpm))
    # min() keeps the first of equally close options
    return min(in_range, key=lambda b: abs(b - reference))


def confidence_ratio(candidates: list[TempoCandidate]) -> float:
    """Strength of the best candidate relative to the runner-up.

    Unbounded above; 0 when there are no candidates.
    """
    if not candidates:
        return 0.0
    runner_up = candidates[1].strength if len(candidates) > 1 else 0.0
    return candidates[0].strength / max(runner_up, STRENGTH_FLOOR)


def resolve_tempo(candidates: list[TempoCandidate]) -> tuple[float, float]:
    """Return (bpm, confidence) for ranked candidates.

    bpm is NaN when *candidates* is empty.
    """
    if not candidates:
        logger.debug("No tempo candidates")
        return math.nan, 0.0

    best = candidates[0]
    bpm = refine_tempo(best.bpm)
    confidence = confidence_ratio(candidates)
    logger.debug("Best candidate %.2f BPM refined to %.2f (confidence %.3f)",
                 best.bpm, bpm, confidence)
    return bpm, confidence
