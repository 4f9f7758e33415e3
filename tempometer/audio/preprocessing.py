"""Signal preparation: channel mixdown and pre-emphasis."""

from __future__ import annotations

import numpy as np
from scipy.signal import lfilter

from tempometer.analysis.models import SampleBuffer

PRE_EMPHASIS_COEFF = 0.97


def mix_to_mono(buffer: SampleBuffer) -> np.ndarray:
    """Average all channels into a single signal.

    An empty buffer yields an empty array.
    """
    if buffer.length == 0:
        return np.zeros(0, dtype=np.float64)
    return buffer.channels.mean(axis=0)


def pre_emphasis(
    signal: np.ndarray,
    coeff: float = PRE_EMPHASIS_COEFF,
) -> np.ndarray:
    """Apply a first-order difference filter.

    Parameters
    ----------
    signal:
        Mono input signal.
    coeff:
        Weight of the previous sample, ``y[n] = x[n] - coeff * x[n - 1]``.
        The sample before the first is taken as zero.
    """
    if len(signal) == 0:
        return np.array(signal, dtype=np.float64)
    return lfilter([1.0, -coeff], [1.0], signal)


def prepare_signal(buffer: SampleBuffer, emphasis: bool = False) -> np.ndarray:
    """Mix down to mono, then optionally pre-emphasize."""
    mono = mix_to_mono(buffer)
    if emphasis:
        mono = pre_emphasis(mono)
    return mono
