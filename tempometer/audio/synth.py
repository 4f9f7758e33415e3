"""Synthetic click tracks for demos and testing."""

from __future__ import annotations

import numpy as np

from tempometer.analysis.models import SampleBuffer

DEMO_SR = 44100
DEMO_SECONDS = 16.0
DEMO_BPM = 120.0

_CLICK_FREQ = 1000.0  # Hz
_CLICK_DECAY_SAMPLES = 200


def click_track(
    bpm: float = DEMO_BPM,
    duration_seconds: float = DEMO_SECONDS,
    sr: int = DEMO_SR,
) -> np.ndarray:
    """Mono click track with one click every ``60 / bpm`` seconds.

    Each click is a 1 kHz sine under a 200-sample exponential decay, placed
    at integer multiples of the rounded beat interval.
    """
    n_samples = int(duration_seconds * sr)
    interval = int(round(60.0 / bpm * sr))
    idx = np.arange(n_samples)
    phase = idx % interval
    env = np.where(phase < _CLICK_DECAY_SAMPLES, np.exp(-phase / _CLICK_DECAY_SAMPLES), 0.0)
    return env * np.sin(2 * np.pi * _CLICK_FREQ * idx / sr)


def demo_buffer(
    bpm: float = DEMO_BPM,
    duration_seconds: float = DEMO_SECONDS,
    sr: int = DEMO_SR,
) -> SampleBuffer:
    """Demo input: a mono click track at 120 BPM by default."""
    return SampleBuffer.from_mono(click_track(bpm, duration_seconds, sr), sr)
