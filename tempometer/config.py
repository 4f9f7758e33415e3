"""Application configuration."""

from pydantic_settings import BaseSettings

from tempometer.analysis.models import EstimationConfig

ABS_MIN_BPM = 30.0
ABS_MAX_BPM = 400.0
MIN_BPM_SPAN = 10.0
MIN_WIN_SECS = 2.0
MIN_HOP_SECS = 1.0


class Settings(BaseSettings):
    """App settings with env var overrides."""

    # Audio (None keeps the file's native sample rate)
    sample_rate: int | None = None

    # Analysis
    frame_size: int = 1024
    hop_size: int = 512
    min_bpm: float = 60.0
    max_bpm: float = 180.0
    smoothing_window: int = 3
    pre_emphasis: bool = False

    # Tempo curve
    win_secs: float = 8.0
    hop_secs: float = 2.0
    window_workers: int = 1

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    max_upload_mb: int = 50
    max_batch_files: int = 32

    model_config = {"env_prefix": "TEMPOMETER_"}

    def estimation_config(
        self,
        min_bpm: float | None = None,
        max_bpm: float | None = None,
    ) -> EstimationConfig:
        """Build the estimator config, with an optional sanitized BPM range."""
        lo, hi = clamp_bpm_range(
            min_bpm if min_bpm is not None else self.min_bpm,
            max_bpm if max_bpm is not None else self.max_bpm,
        )
        return EstimationConfig(
            frame_size=self.frame_size,
            hop_size=self.hop_size,
            min_bpm=lo,
            max_bpm=hi,
            smoothing_window=self.smoothing_window,
            pre_emphasis=self.pre_emphasis,
        )


def clamp_bpm_range(min_bpm: float | None, max_bpm: float | None) -> tuple[float, float]:
    """Sanitize a user-supplied BPM search range.

    Missing or zero values fall back to 60/180. The range is kept inside
    [30, 400] and at least 10 BPM wide.
    """
    lo = max(ABS_MIN_BPM, min(ABS_MAX_BPM, min_bpm or 60.0))
    hi = max(lo + MIN_BPM_SPAN, min(ABS_MAX_BPM, max_bpm or 180.0))
    return lo, hi


def clamp_window(win_secs: float | None, hop_secs: float | None) -> tuple[float, float]:
    """Sanitize tempo-curve window and hop lengths (seconds)."""
    return (
        max(MIN_WIN_SECS, win_secs or 8.0),
        max(MIN_HOP_SECS, hop_secs or 2.0),
    )


settings = Settings()
