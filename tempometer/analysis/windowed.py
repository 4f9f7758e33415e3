"""Tempo over time from overlapping fixed-length windows."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from tempometer.analysis.models import EstimationConfig, SampleBuffer, TempoCurvePoint
from tempometer.analysis.pipeline import DEFAULT_CONFIG, estimate_bpm

logger = logging.getLogger(__name__)

DEFAULT_WIN_SECS = 8.0
DEFAULT_HOP_SECS = 2.0


def _estimate_window(
    buffer: SampleBuffer,
    start: int,
    length: int,
    config: EstimationConfig,
) -> TempoCurvePoint | None:
    result = estimate_bpm(buffer.slice(start, length), config)
    if not result.is_valid:
        return None
    mid = (start + length / 2) / buffer.sample_rate
    return TempoCurvePoint(time=mid, bpm=result.bpm, confidence=result.confidence)


def estimate_tempo_curve(
    buffer: SampleBuffer,
    config: EstimationConfig = DEFAULT_CONFIG,
    win_secs: float = DEFAULT_WIN_SECS,
    hop_secs: float = DEFAULT_HOP_SECS,
    max_workers: int | None = None,
) -> list[TempoCurvePoint]:
    """Estimate tempo in sliding windows across *buffer*.

    Each window is analyzed independently and reported at its midpoint.
    Windows without a detectable tempo are left out, so the curve may have
    fewer points than windows. A buffer no longer than one window is
    analyzed as a whole.

    Parameters
    ----------
    win_secs, hop_secs:
        Window length and window advance in seconds.
    max_workers:
        Run windows on a thread pool of this size. Points are returned in
        window order either way.
    """
    sr = buffer.sample_rate
    win = int(win_secs * sr)
    hop = max(1, int(hop_secs * sr))

    if buffer.length <= win:
        point = _estimate_window(buffer, 0, buffer.length, config)
        return [point] if point is not None else []

    starts = range(0, buffer.length - win + 1, hop)
    logger.debug("Tempo curve: %d windows of %d samples", len(starts), win)

    if max_workers and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            points = list(pool.map(lambda s: _estimate_window(buffer, s, win, config), starts))
    else:
        points = [_estimate_window(buffer, s, win, config) for s in starts]

    return [p for p in points if p is not None]
