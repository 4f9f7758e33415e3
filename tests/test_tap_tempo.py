"""Tests for tap tempo."""

import pytest

from tempometer.analysis.tap_tempo import TapTempo, bpm_from_taps


def _tap_all(tapper, times):
    bpm = None
    for t in times:
        bpm = tapper.tap(t)
    return bpm


def test_needs_four_taps():
    tapper = TapTempo()
    assert _tap_all(tapper, [0, 500, 1000]) is None
    assert tapper.tap(1500) == pytest.approx(120.0)
    assert tapper.count == 4


def test_outlier_interval_ignored():
    tapper = TapTempo()
    bpm = _tap_all(tapper, [0, 500, 1000, 1500, 2600])
    assert bpm == pytest.approx(120.0)


def test_long_pause_restarts_series():
    tapper = TapTempo()
    _tap_all(tapper, [0, 500, 1000, 1500])
    assert tapper.tap(4000) is None
    assert tapper.count == 1


def test_reset():
    tapper = TapTempo()
    _tap_all(tapper, [0, 400, 800, 1200])
    tapper.reset()
    assert tapper.count == 0
    assert tapper.bpm is None


def test_bpm_from_taps_averages_kept_intervals():
    assert bpm_from_taps([0, 600, 1200, 1800]) == pytest.approx(100.0)
    assert bpm_from_taps([0]) is None
