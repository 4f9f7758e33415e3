"""Audio file loading utilities."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Union

import librosa
import numpy as np

from tempometer.analysis.models import SampleBuffer


class AudioDecodeError(Exception):
    """Raised when an audio file cannot be decoded."""


def load_audio(
    file_path_or_buffer: Union[str, Path, BytesIO],
    sr: int | None = None,
) -> SampleBuffer:
    """Load an audio file or buffer, keeping all channels.

    Parameters
    ----------
    file_path_or_buffer:
        Path to an audio file or a BytesIO buffer containing audio data.
    sr:
        Target sample rate. ``None`` keeps the file's native rate.

    Raises
    ------
    AudioDecodeError
        If the decoder cannot read the input.
    """
    try:
        audio, sample_rate = librosa.load(file_path_or_buffer, sr=sr, mono=False)
    except Exception as e:
        raise AudioDecodeError(f"Could not decode audio: {e}") from e
    return SampleBuffer(sample_rate=int(sample_rate), channels=np.atleast_2d(audio))
