"""Integration tests for the estimation pipeline and the analysis engine."""

import math

import numpy as np
import pytest
import soundfile as sf

from tempometer.analysis.engine import TempoEngine
from tempometer.analysis.models import AnalysisResult, EstimationConfig, EstimationResult, SampleBuffer
from tempometer.analysis.pipeline import estimate_bpm
from tempometer.audio.loader import AudioDecodeError, load_audio
from tempometer.audio.synth import demo_buffer
from tests.conftest import SR, click_buffer, generate_click_track, within_octave


@pytest.mark.parametrize("bpm", [90, 100, 120])
def test_click_track_tempo_accuracy(bpm):
    """Clean click tracks should be estimated within 2 BPM (up to octave errors)."""
    result = estimate_bpm(click_buffer(bpm))
    assert result.is_valid
    assert within_octave(result.bpm, bpm), f"Estimated {result.bpm:.2f} for {bpm} BPM"


def test_click_track_120_resolves_to_120(click_120):
    result = estimate_bpm(click_120)
    assert abs(result.bpm - 120) <= 2
    assert result.confidence > 1.0


def test_demo_buffer_tempo():
    result = estimate_bpm(demo_buffer())
    assert abs(result.bpm - 120) <= 2


def test_result_contents(click_120):
    result = estimate_bpm(click_120)
    assert isinstance(result, EstimationResult)
    assert 0 < len(result.candidates) <= 5
    strengths = [c.strength for c in result.candidates]
    assert strengths == sorted(strengths, reverse=True)
    assert result.envelope.min() >= 0.0 and result.envelope.max() <= 1.0
    assert result.autocorrelation.min() == 0.0 and result.autocorrelation.max() == 1.0
    assert result.envelope_rate == SR / 512
    assert result.min_lag == 29


def test_buffer_shorter_than_frame_gives_nan():
    buf = SampleBuffer.from_mono(np.ones(500), SR)
    result = estimate_bpm(buf)
    assert len(result.envelope) == 0
    assert len(result.autocorrelation) == 0
    assert result.candidates == []
    assert math.isnan(result.bpm)
    assert result.confidence == 0.0


def test_empty_buffer_gives_nan():
    result = estimate_bpm(SampleBuffer.from_mono(np.zeros(0), SR))
    assert not result.is_valid
    assert result.confidence == 0.0


def test_silence_gives_nan():
    result = estimate_bpm(SampleBuffer.from_mono(np.zeros(SR * 3), SR))
    assert not result.is_valid


def test_estimate_is_deterministic(click_120):
    config = EstimationConfig(pre_emphasis=True)
    a = estimate_bpm(click_120, config)
    b = estimate_bpm(click_120, config)
    assert a.bpm == b.bpm
    assert a.confidence == b.confidence
    assert a.candidates == b.candidates
    assert np.array_equal(a.envelope, b.envelope)
    assert np.array_equal(a.autocorrelation, b.autocorrelation)


def test_custom_bpm_range_bounds_candidates():
    """Candidates stay in the search range; octave correction still targets 60-180."""
    result = estimate_bpm(click_buffer(200), EstimationConfig(min_bpm=150, max_bpm=250))
    assert result.candidates
    assert all(150 <= c.bpm <= 250 for c in result.candidates)
    assert abs(result.bpm - 100) <= 2


def test_custom_framing_and_smoothing():
    config = EstimationConfig(frame_size=2048, hop_size=256, smoothing_window=5, pre_emphasis=True)
    result = estimate_bpm(click_buffer(128), config)
    assert result.envelope_rate == SR / 256
    assert abs(result.bpm - 128) <= 2


def test_identical_stereo_channels_match_mono():
    mono = generate_click_track(120, duration_seconds=8)
    stereo = SampleBuffer(sample_rate=SR, channels=np.stack([mono, mono]))
    assert estimate_bpm(stereo).bpm == estimate_bpm(SampleBuffer.from_mono(mono, SR)).bpm


def test_engine_analyze_buffer_with_curve():
    engine = TempoEngine(per_window=True, win_secs=4, hop_secs=2)
    result = engine.analyze_buffer(click_buffer(120, duration_seconds=10))
    assert isinstance(result, AnalysisResult)
    assert result.duration == 10.0
    assert result.n_channels == 1
    assert len(result.tempo_curve) == 4
    assert all(abs(p.bpm - 120) <= 2 for p in result.tempo_curve)


def test_engine_without_curve():
    result = TempoEngine().analyze_buffer(click_buffer(120, duration_seconds=10))
    assert result.tempo_curve == []


def test_load_audio_keeps_channels(tmp_path):
    mono = generate_click_track(120, duration_seconds=2, sr=22050)
    path = tmp_path / "stereo.wav"
    sf.write(str(path), np.stack([mono, mono * 0.5], axis=1), 22050)

    buf = load_audio(str(path))
    assert buf.sample_rate == 22050
    assert buf.n_channels == 2
    assert buf.length == len(mono)


def test_load_audio_rejects_garbage(tmp_path):
    path = tmp_path / "broken.wav"
    path.write_bytes(b"definitely not audio")
    with pytest.raises(AudioDecodeError):
        load_audio(str(path))


def test_analyze_file(click_wav):
    result = TempoEngine().analyze_file(str(click_wav))
    assert abs(result.estimate.bpm - 120) <= 2
    assert result.sample_rate == SR


def test_analyze_batch_reports_failures_and_continues(click_wav, tmp_path):
    broken = tmp_path / "broken.wav"
    broken.write_bytes(b"nope")

    rows = TempoEngine().analyze_batch([str(broken), str(click_wav)])
    assert [r.filename for r in rows] == ["broken.wav", "click_120.wav"]

    failed, ok = rows
    assert math.isnan(failed.bpm)
    assert failed.duration == 0.0
    assert failed.confidence == 0.0
    assert abs(ok.bpm - 120) <= 2
    assert ok.duration == pytest.approx(6.0)
