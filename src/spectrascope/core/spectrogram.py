"""
Short-time magnitude spectrogram.

Every frame is an independent function of its index (slice, window,
FFT, magnitude, dB normalisation), so frames can be computed on a
thread pool and written back by index.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from spectrascope.core.errors import InvalidParameter
from spectrascope.core.transform import (
    FFTEngine,
    blackman_harris,
    extract_spectrum,
    is_power_of_two,
)

logger = logging.getLogger(__name__)

# Magnitude floor before the log and dB offset mapping -100 dB to 0.0
MAGNITUDE_FLOOR = 1e-10
DB_RANGE = 100.0


def normalize_db(magnitude: np.ndarray) -> np.ndarray:
    """Map linear magnitudes to ``max(0, (dB + 100) / 100)``."""
    db = 20.0 * np.log10(np.maximum(magnitude, MAGNITUDE_FLOOR))
    return np.maximum((db + DB_RANGE) / DB_RANGE, 0.0)


class SpectrogramBuilder:
    """
    Builds a time-major grid of normalised magnitude frames.

    Frames are ``window_size`` samples wide and start every ``hop_size``
    samples. Output shape is ``(n_frames, window_size // 2)``.
    """

    def __init__(
        self,
        window_size: int = 2048,
        hop_size: int = 512,
        n_workers: int = 1,
        engine: FFTEngine | None = None,
    ):
        """
        Initialize the builder.

        Args:
            window_size: Frame length in samples (power of two).
            hop_size: Distance between frame starts in samples.
            n_workers: Threads used to compute frames; 1 computes inline.
            engine: FFT engine to share plans with; a private one is created if None.

        Raises:
            InvalidParameter: If the window is not a power of two >= 2 or hop < 1.
        """
        if window_size < 2 or not is_power_of_two(window_size):
            raise InvalidParameter(
                f"window_size must be a power of two >= 2, got {window_size}",
                parameter="window_size",
                value=window_size,
            )
        if hop_size < 1:
            raise InvalidParameter(
                f"hop_size must be >= 1, got {hop_size}",
                parameter="hop_size",
                value=hop_size,
            )
        self.window_size = window_size
        self.hop_size = hop_size
        self.n_workers = max(1, int(n_workers or 1))
        self.engine = engine or FFTEngine()
        self.window = blackman_harris(window_size)

    @property
    def n_bins(self) -> int:
        """Magnitude bins per frame."""
        return self.window_size // 2

    def n_frames(self, n_samples: int) -> int:
        """Number of frames for a signal of *n_samples*."""
        if n_samples < self.window_size:
            return 0
        return (n_samples - self.window_size) // self.hop_size + 1

    def frame(self, samples: np.ndarray, index: int) -> np.ndarray:
        """Compute the normalised magnitude vector of frame *index*."""
        start = index * self.hop_size
        segment = samples[start:start + self.window_size]
        if len(segment) < self.window_size:
            segment = np.pad(segment, (0, self.window_size - len(segment)))

        real, imag = self.engine.transform(segment * self.window)
        magnitude, _ = extract_spectrum(real, imag)
        return normalize_db(magnitude)

    def build(self, samples: np.ndarray) -> np.ndarray:
        """
        Build the spectrogram of a mono signal.

        Args:
            samples: 1-D time-domain signal.

        Returns:
            float64 array of shape (n_frames, window_size // 2).
        """
        samples = np.asarray(samples, dtype=np.float64)
        n_frames = self.n_frames(len(samples))
        grid = np.zeros((n_frames, self.n_bins), dtype=np.float64)
        if n_frames == 0:
            return grid

        if self.n_workers > 1 and n_frames > 1:
            with ThreadPoolExecutor(max_workers=self.n_workers) as pool:
                for i, column in enumerate(pool.map(lambda k: self.frame(samples, k), range(n_frames))):
                    grid[i] = column
        else:
            for i in range(n_frames):
                grid[i] = self.frame(samples, i)

        logger.debug(
            "Built spectrogram: %d frames x %d bins (%d worker(s))",
            n_frames,
            self.n_bins,
            self.n_workers,
        )
        return grid
