"""Shared test fixtures for tempo estimation tests."""

import numpy as np
import pytest
from fastapi.testclient import TestClient

from tempometer.analysis.models import SampleBuffer
from tempometer.main import app

SR = 44100


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


def generate_click_track(
    bpm: float,
    duration_seconds: float = 10.0,
    sr: int = SR,
) -> np.ndarray:
    """Generate a synthetic mono click track at a fixed tempo.

    Clicks are short decaying 1 kHz sine bursts.
    """
    n_samples = int(duration_seconds * sr)
    audio = np.zeros(n_samples, dtype=np.float32)

    beat_interval = 60.0 / bpm  # seconds per beat
    click_duration = 0.02  # 20ms click
    click_samples = int(click_duration * sr)

    t_click = np.arange(click_samples) / sr
    click = np.sin(2 * np.pi * 1000 * t_click) * np.exp(-t_click * 100)

    beat = 0
    while beat * beat_interval < duration_seconds:
        sample_pos = int(beat * beat_interval * sr)
        end = min(sample_pos + click_samples, n_samples)
        length = end - sample_pos
        if length > 0:
            audio[sample_pos:end] += click[:length]
        beat += 1

    return audio


def click_buffer(bpm: float, duration_seconds: float = 10.0, sr: int = SR) -> SampleBuffer:
    return SampleBuffer.from_mono(generate_click_track(bpm, duration_seconds, sr), sr)


def within_octave(bpm: float, target: float, tol: float = 2.0) -> bool:
    """True if *bpm* is within *tol* of target or its half/double/third/triple."""
    return any(abs(bpm - t) <= tol for t in (target, target / 2, target * 2, target / 3, target * 3))


@pytest.fixture
def click_120():
    """Click track at 120 BPM, 10 seconds."""
    return click_buffer(120)


@pytest.fixture
def click_wav(tmp_path):
    """Path to a 6 second, 120 BPM click track WAV file."""
    import soundfile as sf

    path = tmp_path / "click_120.wav"
    sf.write(str(path), generate_click_track(120, duration_seconds=6), SR)
    return path
