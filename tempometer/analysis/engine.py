"""Analysis orchestrator - drives the estimator over buffers and files."""

import logging
import math
import os

from tempometer.analysis.models import (
    AnalysisResult,
    EstimationConfig,
    FileResult,
    SampleBuffer,
)
from tempometer.analysis.pipeline import estimate_bpm
from tempometer.analysis.windowed import (
    DEFAULT_HOP_SECS,
    DEFAULT_WIN_SECS,
    estimate_tempo_curve,
)
from tempometer.audio.loader import AudioDecodeError, load_audio

logger = logging.getLogger(__name__)


class TempoEngine:
    """Runs tempo estimation on buffers, single files and batches of files.

    Parameters
    ----------
    config:
        Estimator parameters shared by every analysis.
    sample_rate:
        Resample decoded files to this rate; ``None`` keeps the native rate.
    per_window:
        Also compute a tempo curve over sliding windows.
    win_secs, hop_secs:
        Tempo-curve window length and advance in seconds.
    window_workers:
        Thread pool size for tempo-curve windows (1 runs them inline).
    """

    def __init__(
        self,
        config: EstimationConfig | None = None,
        sample_rate: int | None = None,
        per_window: bool = False,
        win_secs: float = DEFAULT_WIN_SECS,
        hop_secs: float = DEFAULT_HOP_SECS,
        window_workers: int = 1,
    ):
        self.config = config or EstimationConfig()
        self.sample_rate = sample_rate
        self.per_window = per_window
        self.win_secs = win_secs
        self.hop_secs = hop_secs
        self.window_workers = window_workers

    def analyze_file(self, file_path: str) -> AnalysisResult:
        """Decode and analyze an audio file.

        Raises AudioDecodeError if the file cannot be decoded.
        """
        buffer = load_audio(file_path, sr=self.sample_rate)
        return self.analyze_buffer(buffer)

    def analyze_buffer(self, buffer: SampleBuffer) -> AnalysisResult:
        """Analyze pre-loaded audio."""
        logger.info(f"Analyzing {buffer.duration:.1f}s of audio at {buffer.sample_rate}Hz "
                    f"({buffer.n_channels} channel(s))")

        estimate = estimate_bpm(buffer, self.config)
        if estimate.is_valid:
            logger.info(f"  Tempo: {estimate.bpm:.2f} BPM (confidence: {estimate.confidence:.2f})")
        else:
            logger.info("  No tempo detected")

        curve = []
        if self.per_window:
            curve = estimate_tempo_curve(
                buffer,
                self.config,
                win_secs=self.win_secs,
                hop_secs=self.hop_secs,
                max_workers=self.window_workers,
            )
            logger.info(f"  Tempo curve: {len(curve)} points")

        return AnalysisResult(
            estimate=estimate,
            tempo_curve=curve,
            duration=buffer.duration,
            sample_rate=buffer.sample_rate,
            n_channels=buffer.n_channels,
        )

    def analyze_batch(self, file_paths: list[str], names: list[str] | None = None) -> list[FileResult]:
        """Analyze files one after another.

        A file that fails to decode yields a row with ``bpm = NaN`` and
        zero duration and confidence; the batch carries on.
        """
        names = names or [os.path.basename(p) for p in file_paths]
        results = []
        total = len(file_paths)
        for i, (path, name) in enumerate(zip(file_paths, names), start=1):
            logger.info(f"[{i}/{total}] {name}")
            try:
                analysis = self.analyze_file(path)
            except AudioDecodeError as e:
                logger.warning(f"Could not decode {name}: {e}")
                results.append(FileResult(filename=name, duration=0.0, bpm=math.nan, confidence=0.0))
                continue
            results.append(FileResult(
                filename=name,
                duration=analysis.duration,
                bpm=analysis.estimate.bpm,
                confidence=analysis.estimate.confidence,
                curve=analysis.tempo_curve,
            ))
        logger.info(f"Finished analyzing {total} file(s)")
        return results
