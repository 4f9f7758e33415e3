"""Energy-difference onset strength envelope."""

import numpy as np

from tempometer.analysis.models import EstimationConfig

VARIANCE_FLOOR = 1e-12
SPAN_FLOOR = 1e-9


def frame_energy(signal: np.ndarray, frame_size: int, hop_size: int) -> np.ndarray:
    """Mean squared amplitude of each analysis frame.

    Returns an empty array if the signal is shorter than one frame.
    """
    n = len(signal)
    if n < frame_size:
        return np.zeros(0, dtype=np.float64)
    n_frames = 1 + max(0, (n - frame_size) // hop_size)
    frames = np.lib.stride_tricks.sliding_window_view(signal, frame_size)[::hop_size][:n_frames]
    return np.mean(np.square(frames), axis=1)


def onset_strength(energy: np.ndarray) -> np.ndarray:
    """Half-wave rectified first difference of frame energy."""
    if len(energy) == 0:
        return np.zeros(0, dtype=np.float64)
    diff = np.diff(energy, prepend=energy[0])
    return np.maximum(diff, 0.0)


def moving_average(values: np.ndarray, window: int) -> np.ndarray:
    """Causal moving average over the trailing *window* values.

    The window shrinks at the start so no output uses future samples.
    """
    values = np.asarray(values, dtype=np.float64)
    if window <= 1 or len(values) == 0:
        return values.copy()
    csum = np.concatenate(([0.0], np.cumsum(values)))
    idx = np.arange(len(values))
    lo = np.maximum(0, idx - window + 1)
    return (csum[idx + 1] - csum[lo]) / (idx + 1 - lo)


def z_normalize(values: np.ndarray) -> np.ndarray:
    if len(values) == 0:
        return np.zeros(0, dtype=np.float64)
    var = max(VARIANCE_FLOOR, float(np.var(values)))
    return (values - np.mean(values)) / np.sqrt(var)


def to_unit_range(values: np.ndarray) -> np.ndarray:
    """Min-max rescale into [0, 1]; a flat input maps to all zeros."""
    if len(values) == 0:
        return np.zeros(0, dtype=np.float64)
    lo = float(np.min(values))
    span = max(SPAN_FLOOR, float(np.max(values)) - lo)
    return (values - lo) / span


def onset_envelope(signal: np.ndarray, config: EstimationConfig) -> np.ndarray:
    """Compute the smoothed, normalized onset envelope.

    One value per analysis frame, all within [0, 1]. Frame ``f`` starts at
    sample ``f * config.hop_size``.
    """
    energy = frame_energy(signal, config.frame_size, config.hop_size)
    onsets = onset_strength(energy)
    smoothed = moving_average(onsets, config.smoothing_window)
    return to_unit_range(z_normalize(smoothed))
