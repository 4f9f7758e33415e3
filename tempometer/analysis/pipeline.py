"""Single-buffer tempo estimate: signal prep -> onsets -> periodicity -> tempo."""

import logging

from tempometer.analysis.models import EstimationConfig, EstimationResult, SampleBuffer
from tempometer.analysis.onset import onset_envelope
from tempometer.analysis.periodicity import (
    MAX_PEAKS,
    MIN_PEAK_DISTANCE,
    autocorrelate,
    bpm_to_lag_range,
    find_top_peaks,
)
from tempometer.analysis.tempo import candidates_from_peaks, resolve_tempo
from tempometer.audio.preprocessing import prepare_signal

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = EstimationConfig()


def estimate_bpm(
    buffer: SampleBuffer,
    config: EstimationConfig = DEFAULT_CONFIG,
) -> EstimationResult:
    """Estimate the tempo of *buffer*.

    Pure function of its arguments. Never raises for well-formed input:
    a buffer too short to analyze gives ``bpm = NaN`` and ``confidence = 0``.
    The caller is expected to pass ``0 < min_bpm < max_bpm``.
    """
    signal = prepare_signal(buffer, emphasis=config.pre_emphasis)
    envelope = onset_envelope(signal, config)

    envelope_rate = buffer.sample_rate / config.hop_size
    min_lag, max_lag = bpm_to_lag_range(config.min_bpm, config.max_bpm, envelope_rate)
    logger.debug("Envelope: %d frames at %.2f Hz, lags %d-%d",
                 len(envelope), envelope_rate, min_lag, max_lag)

    acf = autocorrelate(envelope, min_lag, max_lag)
    peaks = find_top_peaks(acf, MAX_PEAKS, MIN_PEAK_DISTANCE)
    candidates = candidates_from_peaks(peaks, min_lag, envelope_rate)
    bpm, confidence = resolve_tempo(candidates)

    return EstimationResult(
        bpm=bpm,
        confidence=confidence,
        envelope=envelope,
        autocorrelation=acf,
        candidates=candidates,
        min_lag=min_lag,
        envelope_rate=envelope_rate,
    )
