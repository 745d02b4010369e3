"""
Spectral peak detection.

Finds local maxima in a magnitude spectrum, refines each with
three-point quadratic interpolation and estimates its -3 dB bandwidth.
"""

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpectralFeature:
    """A single detected spectral peak."""

    frequency: float   # Hz, sub-bin interpolated
    magnitude: float   # linear, >= 0
    phase: float       # radians
    bandwidth: float   # Hz


class PeakDetector:
    """
    Scans a half-spectrum for peaks above a threshold relative to its maximum.

    A bin is a peak when it is strictly above ``max(spectrum) * harmonic_threshold``
    and strictly greater than its two neighbours on either side.
    """

    # Bins excluded at each end so the +-2 neighbourhood is always valid
    EDGE_MARGIN = 2
    # -3 dB relative amplitude
    HALF_POWER = 0.707
    BANDWIDTH_SEARCH_BINS = 20

    def __init__(
        self,
        harmonic_threshold: float = 0.1,
        min_freq: float = 20.0,
        max_freq: float = 20000.0,
    ):
        """
        Initialize the detector.

        Args:
            harmonic_threshold: Fraction of the spectrum maximum a peak must exceed.
            min_freq: Lowest frequency (Hz) reported.
            max_freq: Highest frequency (Hz) reported.
        """
        self.harmonic_threshold = harmonic_threshold
        self.min_freq = min_freq
        self.max_freq = max_freq

    @staticmethod
    def frequency_resolution(spectrum_length: int, sample_rate: float) -> float:
        """Width of one bin in Hz for a half-spectrum of *spectrum_length* bins."""
        return sample_rate / (spectrum_length * 2)

    @staticmethod
    def interpolate_offset(y1: float, y2: float, y3: float) -> float:
        """
        Vertex offset (in bins) of the parabola through three equally spaced points.

        Clamped to [-1, 1]; 0 when the points are collinear.
        """
        a = (y1 - 2.0 * y2 + y3) / 2.0
        b = (y3 - y1) / 2.0
        if a == 0:
            return 0.0
        return float(np.clip(-b / (2.0 * a), -1.0, 1.0))

    def _bandwidth(self, spectrum: np.ndarray, index: int, resolution: float) -> float:
        cutoff = spectrum[index] * self.HALF_POWER
        for j in range(1, self.BANDWIDTH_SEARCH_BINS):
            if index - j >= 0 and spectrum[index - j] < cutoff:
                return j * resolution
        return resolution

    def _candidate_bins(self, spectrum: np.ndarray, threshold: float) -> np.ndarray:
        m = self.EDGE_MARGIN
        n = len(spectrum)
        if n < 2 * m + 1:
            return np.array([], dtype=np.intp)
        centre = spectrum[m:n - m]
        mask = centre > threshold
        for shift in (1, 2):
            mask &= centre > spectrum[m - shift:n - m - shift]
            mask &= centre > spectrum[m + shift:n - m + shift]
        return np.nonzero(mask)[0] + m

    def detect(self, spectrum: np.ndarray, sample_rate: float) -> list[SpectralFeature]:
        """
        Detect peaks in a magnitude half-spectrum.

        Args:
            spectrum: Linear magnitudes (bins 0 .. N/2 - 1).
            sample_rate: Sample rate of the analysed signal in Hz.

        Returns:
            Peaks sorted by descending magnitude.
        """
        spectrum = np.asarray(spectrum, dtype=np.float64)
        if spectrum.size == 0:
            return []

        threshold = float(spectrum.max()) * self.harmonic_threshold
        resolution = self.frequency_resolution(len(spectrum), sample_rate)

        features = []
        for i in self._candidate_bins(spectrum, threshold):
            i = int(i)
            offset = self.interpolate_offset(spectrum[i - 1], spectrum[i], spectrum[i + 1])
            frequency = (i + offset) * resolution
            if not (self.min_freq <= frequency <= self.max_freq):
                continue
            features.append(
                SpectralFeature(
                    frequency=frequency,
                    magnitude=float(spectrum[i]),
                    phase=0.0,
                    bandwidth=self._bandwidth(spectrum, i, resolution),
                )
            )

        features.sort(key=lambda f: f.magnitude, reverse=True)
        logger.debug("Detected %d spectral peaks above %.6g", len(features), threshold)
        return features
