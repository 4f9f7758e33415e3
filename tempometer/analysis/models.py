"""Core data models for tempo estimation."""

import math
from dataclasses import dataclass, field

import numpy as np


@dataclass(frozen=True, eq=False)
class SampleBuffer:
    """Decoded PCM audio, shape (channels, samples).

    The sample array is copied on construction and made read-only.
    """
    sample_rate: int  # Hz
    channels: np.ndarray

    def __post_init__(self):
        data = np.array(self.channels, dtype=np.float64, ndmin=2)
        data.setflags(write=False)
        object.__setattr__(self, "channels", data)

    @classmethod
    def from_mono(cls, samples: np.ndarray, sample_rate: int) -> "SampleBuffer":
        return cls(sample_rate=sample_rate, channels=np.asarray(samples)[np.newaxis, :])

    @property
    def n_channels(self) -> int:
        return self.channels.shape[0]

    @property
    def length(self) -> int:
        """Number of samples per channel."""
        return self.channels.shape[1]

    @property
    def duration(self) -> float:
        return self.length / self.sample_rate

    def slice(self, start: int, length: int) -> "SampleBuffer":
        """Return *length* samples from *start*, zero-padded past the end."""
        out = np.zeros((self.n_channels, length), dtype=np.float64)
        available = max(0, min(length, self.length - start))
        if available > 0:
            out[:, :available] = self.channels[:, start:start + available]
        return SampleBuffer(sample_rate=self.sample_rate, channels=out)


@dataclass(frozen=True)
class EstimationConfig:
    """Parameters for a single tempo estimate."""
    frame_size: int = 1024  # samples per analysis frame
    hop_size: int = 512  # samples between frame starts
    min_bpm: float = 60.0
    max_bpm: float = 180.0
    smoothing_window: int = 3  # onset frames
    pre_emphasis: bool = False


@dataclass
class TempoCandidate:
    """A periodicity peak expressed as a tempo."""
    bpm: float
    strength: float  # normalized autocorrelation value at the peak


@dataclass
class EstimationResult:
    """Output of the single-estimate pipeline.

    ``bpm`` is NaN when no tempo was detected.
    """
    bpm: float
    confidence: float
    envelope: np.ndarray
    autocorrelation: np.ndarray
    candidates: list[TempoCandidate] = field(default_factory=list)
    # autocorrelation index i corresponds to lag min_lag + i
    min_lag: int = 1
    envelope_rate: float = 0.0  # onset frames per second

    @property
    def is_valid(self) -> bool:
        return math.isfinite(self.bpm)


@dataclass
class TempoCurvePoint:
    """A point on the tempo-over-time curve."""
    time: float  # window midpoint, seconds
    bpm: float
    confidence: float


@dataclass
class FileResult:
    """Per-file row produced by batch analysis."""
    filename: str
    duration: float
    bpm: float
    confidence: float
    curve: list[TempoCurvePoint] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return math.isfinite(self.bpm)


@dataclass
class AnalysisResult:
    """Complete analysis of one buffer: estimate plus optional tempo curve."""
    estimate: EstimationResult
    tempo_curve: list[TempoCurvePoint] = field(default_factory=list)
    duration: float = 0.0
    sample_rate: int = 0
    n_channels: int = 0
