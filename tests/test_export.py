"""Tests for CSV export and request sanitizing."""

import math

from tempometer.analysis.models import FileResult, TempoCurvePoint
from tempometer.config import Settings, clamp_bpm_range, clamp_window
from tempometer.export import batch_results_csv, tempo_curve_csv, write_csv


def test_tempo_curve_row_format():
    csv_text = tempo_curve_csv([TempoCurvePoint(time=1.5, bpm=128.4, confidence=2.0)])
    assert csv_text == "time_sec,bpm,confidence\n1.500,128.40,2.000\n"


def test_tempo_curve_empty_has_header_only():
    assert tempo_curve_csv([]) == "time_sec,bpm,confidence\n"


def test_batch_results_csv():
    rows = [
        FileResult(filename="song.wav", duration=12.3456, bpm=120.186, confidence=3.5),
        FileResult(filename='say "hi".mp3', duration=0.0, bpm=math.nan, confidence=0.0),
    ]
    assert batch_results_csv(rows) == (
        "filename,duration_sec,bpm,confidence\n"
        '"song.wav",12.346,120.19,3.500000\n'
        '"say ""hi"".mp3",0.000,,0.000000\n'
    )


def test_write_csv(tmp_path):
    path = tmp_path / "curve.csv"
    write_csv(tempo_curve_csv([TempoCurvePoint(4.0, 120.0, 1.25)]), path)
    assert path.read_text() == "time_sec,bpm,confidence\n4.000,120.00,1.250\n"


def test_clamp_bpm_range():
    assert clamp_bpm_range(None, None) == (60.0, 180.0)
    assert clamp_bpm_range(0, 0) == (60.0, 180.0)
    assert clamp_bpm_range(10, 1000) == (30.0, 400.0)
    assert clamp_bpm_range(200, 150) == (200.0, 210.0)


def test_clamp_window():
    assert clamp_window(None, None) == (8.0, 2.0)
    assert clamp_window(1, 0.5) == (2.0, 1.0)
    assert clamp_window(12, 3) == (12, 3)


def test_settings_env_override(monkeypatch):
    monkeypatch.setenv("TEMPOMETER_MIN_BPM", "80")
    monkeypatch.setenv("TEMPOMETER_PRE_EMPHASIS", "true")
    s = Settings()
    config = s.estimation_config()
    assert config.min_bpm == 80.0
    assert config.max_bpm == 180.0
    assert config.pre_emphasis is True


def test_settings_request_range_is_sanitized():
    config = Settings().estimation_config(min_bpm=10, max_bpm=20)
    assert (config.min_bpm, config.max_bpm) == (30.0, 40.0)
