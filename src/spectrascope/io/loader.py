"""Audio file loading for the analysis engine."""

from pathlib import Path
from typing import Union

import librosa
import numpy as np

from spectrascope.core.errors import AudioLoadError


def load_audio(
    audio_path: Union[str, Path],
    sr: int | None = None,
) -> tuple[np.ndarray, int]:
    """
    Load audio from file without downmixing.

    Args:
        audio_path: Path to audio file (wav, flac, ogg, or anything the
                    installed librosa backends decode).
        sr: Target sample rate. None preserves the original.

    Returns:
        Tuple of (samples, sample_rate); samples are 1-D for mono files
        and ``(channels, n_samples)`` otherwise.

    Raises:
        AudioLoadError: If the file is missing or cannot be decoded.
    """
    path = Path(audio_path)
    if not path.exists():
        raise AudioLoadError(f"Audio file not found: {path}", file_path=str(path))
    try:
        y, sr_out = librosa.load(path, sr=sr, mono=False)
    except Exception as exc:
        raise AudioLoadError(f"Could not decode {path}: {exc}", file_path=str(path)) from exc
    return y, int(sr_out)
