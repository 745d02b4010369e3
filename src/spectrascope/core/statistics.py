"""
Aggregate spectral and level statistics.

Centroid and rolloff summarise a single magnitude spectrum; flux
summarises frame-to-frame change across a spectrogram; RMS, peak and
the amplitude envelope operate on the time-domain signal.
"""

import numpy as np


ROLLOFF_FRACTION = 0.85
ENVELOPE_WINDOW_SECONDS = 0.01


def _bin_frequencies(n_bins: int, sample_rate: float) -> np.ndarray:
    resolution = sample_rate / (n_bins * 2)
    return np.arange(n_bins) * resolution


def spectral_centroid(spectrum: np.ndarray, sample_rate: float) -> float:
    """
    Magnitude-weighted mean frequency of a half-spectrum.

    Returns 0.0 when the spectrum carries no energy.
    """
    spectrum = np.asarray(spectrum, dtype=np.float64)
    total = float(spectrum.sum())
    if spectrum.size == 0 or total <= 0:
        return 0.0
    freqs = _bin_frequencies(len(spectrum), sample_rate)
    return float(np.dot(freqs, spectrum) / total)


def spectral_rolloff(
    spectrum: np.ndarray,
    sample_rate: float,
    fraction: float = ROLLOFF_FRACTION,
) -> float:
    """
    Lowest bin frequency below which *fraction* of the spectral energy lies.

    Energy is squared magnitude, accumulated inclusively from bin 0. Falls
    back to the top bin's frequency if the threshold is never reached.
    """
    spectrum = np.asarray(spectrum, dtype=np.float64)
    if spectrum.size == 0:
        return 0.0
    energy = np.cumsum(spectrum * spectrum)
    threshold = energy[-1] * fraction
    resolution = sample_rate / (len(spectrum) * 2)

    reached = np.nonzero(energy >= threshold)[0]
    index = int(reached[0]) if reached.size else len(spectrum) - 1
    return index * resolution


def spectral_flux(spectrogram: np.ndarray) -> float:
    """
    Mean positive spectral change between consecutive spectrogram frames.

    Each frame pair contributes the L2 norm of the rectified difference.
    Returns 0.0 with fewer than two frames.
    """
    spectrogram = np.asarray(spectrogram, dtype=np.float64)
    if spectrogram.ndim != 2 or spectrogram.shape[0] < 2:
        return 0.0
    rises = np.maximum(np.diff(spectrogram, axis=0), 0.0)
    return float(np.sqrt((rises * rises).sum(axis=1)).mean())


def rms_level(samples: np.ndarray) -> float:
    """Root-mean-square level of *samples* (0.0 if empty)."""
    samples = np.asarray(samples, dtype=np.float64)
    if samples.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(samples * samples)))


def peak_level(samples: np.ndarray) -> float:
    """Largest absolute sample value (0.0 if empty)."""
    samples = np.asarray(samples, dtype=np.float64)
    if samples.size == 0:
        return 0.0
    return float(np.max(np.abs(samples)))


def amplitude_envelope(
    samples: np.ndarray,
    sample_rate: float,
    window_seconds: float = ENVELOPE_WINDOW_SECONDS,
) -> np.ndarray:
    """
    Centered moving average of the rectified signal.

    Sample ``i`` averages ``[i - width // 2, i - width // 2 + width)``, where
    ``width = round(sample_rate * window_seconds)``. The window is clamped
    to the buffer at both ends, so edge values average fewer samples.

    Returns:
        Non-negative float64 array with the same length as *samples*.
    """
    rectified = np.abs(np.asarray(samples, dtype=np.float64))
    n = rectified.shape[0]
    if n == 0:
        return rectified

    width = int(round(sample_rate * window_seconds))
    half = width // 2
    if half == 0:
        return rectified

    # Cumulative sum of non-negative values is monotone, so window sums stay >= 0
    running = np.concatenate(([0.0], np.cumsum(rectified)))
    idx = np.arange(n)
    lo = np.maximum(idx - half, 0)
    hi = np.minimum(idx - half + width, n)
    return (running[hi] - running[lo]) / (hi - lo)
