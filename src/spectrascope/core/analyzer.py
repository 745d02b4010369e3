"""
Spectral analysis orchestration.

Turns a decoded PCM buffer into an AnalysisResult: levels over the
whole signal, peak / harmonic / centroid / rolloff analysis of a single
FFT frame centred in the signal, an amplitude envelope, and a
normalised spectrogram over the full duration.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from spectrascope.core.errors import EmptyInput, InvalidParameter
from spectrascope.core.harmonics import HarmonicGrouper, HarmonicSeries
from spectrascope.core.peaks import PeakDetector, SpectralFeature
from spectrascope.core.spectrogram import SpectrogramBuilder
from spectrascope.core.statistics import (
    amplitude_envelope,
    peak_level,
    rms_level,
    spectral_centroid,
    spectral_flux,
    spectral_rolloff,
)
from spectrascope.core.transform import (
    FFTEngine,
    blackman_harris,
    extract_spectrum,
    is_power_of_two,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AnalysisSettings:
    """Parameters governing one analysis run."""

    fft_size: int = 8192             # centre-frame FFT length (power of two)
    window_size: int = 2048          # spectrogram frame length (power of two)
    hop_size: int = 512              # spectrogram hop in samples
    min_freq: float = 20.0           # Hz
    max_freq: float = 20000.0        # Hz
    harmonic_threshold: float = 0.1  # peak threshold relative to spectrum max, (0, 1]
    noise_floor: float = -60.0       # dB

    def validate(self) -> "AnalysisSettings":
        """
        Check every field against its valid range.

        Returns:
            self, so calls can be chained.

        Raises:
            InvalidParameter: On the first invalid field.
        """
        for name in ("fft_size", "window_size"):
            value = getattr(self, name)
            if value < 2 or not is_power_of_two(value):
                raise InvalidParameter(
                    f"{name} must be a power of two >= 2, got {value}",
                    parameter=name,
                    value=value,
                )
        if self.hop_size < 1:
            raise InvalidParameter(
                f"hop_size must be >= 1, got {self.hop_size}",
                parameter="hop_size",
                value=self.hop_size,
            )
        if not 0.0 < self.harmonic_threshold <= 1.0:
            raise InvalidParameter(
                f"harmonic_threshold must be in (0, 1], got {self.harmonic_threshold}",
                parameter="harmonic_threshold",
                value=self.harmonic_threshold,
            )
        if self.min_freq < 0 or self.min_freq >= self.max_freq:
            raise InvalidParameter(
                f"Frequency range must satisfy 0 <= min_freq < max_freq, "
                f"got [{self.min_freq}, {self.max_freq}]",
                parameter="min_freq",
                value=(self.min_freq, self.max_freq),
            )
        return self

    def replace(self, **overrides: Any) -> "AnalysisSettings":
        """Return a validated copy with *overrides* applied."""
        return dataclasses.replace(self, **overrides).validate()

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict view for serialisation."""
        return dataclasses.asdict(self)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class AnalysisResult:
    """Complete description of one analysed signal."""

    spectral_features: list[SpectralFeature]   # descending magnitude
    harmonics: list[HarmonicSeries]            # descending strength
    fundamental_freq: Optional[float]
    spectral_centroid: float
    spectral_rolloff: float
    spectral_flux: float
    rms_level: float
    peak_level: float
    sample_rate: int
    duration: float
    envelope: np.ndarray                       # (n_samples,)
    spectrogram: np.ndarray                    # (n_frames, window_size // 2)
    settings: AnalysisSettings = field(default_factory=AnalysisSettings)

    @property
    def n_frames(self) -> int:
        """Number of spectrogram frames."""
        return int(self.spectrogram.shape[0])

    @property
    def frame_times(self) -> np.ndarray:
        """Start time in seconds of each spectrogram frame."""
        return np.arange(self.n_frames) * self.settings.hop_size / self.sample_rate


# ---------------------------------------------------------------------------
# Analyzer
# ---------------------------------------------------------------------------

def downmix(samples: Any) -> np.ndarray:
    """
    Reduce mono or multi-channel samples to a mono float64 signal.

    Args:
        samples: 1-D mono samples, or 2-D ``(channels, n_samples)``.

    Returns:
        Mono signal; the first two channels are averaged, a single
        channel is returned unchanged.

    Raises:
        EmptyInput: If there are no channels or no samples.
        InvalidParameter: If the array has more than two dimensions.
    """
    data = np.asarray(samples, dtype=np.float64)
    if data.ndim == 1:
        mono = data
    elif data.ndim == 2:
        if data.shape[0] == 0:
            raise EmptyInput("Sample buffer has no channels")
        left = data[0]
        right = data[1] if data.shape[0] > 1 else left
        mono = (left + right) / 2.0
    else:
        raise InvalidParameter(
            f"Samples must be 1-D or (channels, n_samples), got shape {data.shape}",
            parameter="samples",
            value=data.shape,
        )

    if mono.size == 0:
        raise EmptyInput("Sample buffer is empty")
    return mono


class SpectralAnalyzer:
    """
    Sequences windowing, FFT, peak detection, harmonic grouping and
    statistics into a single AnalysisResult.

    The analyzer holds no per-signal state; one instance can analyse
    any number of signals, and repeated calls with the same input are
    bit-identical.
    """

    def __init__(self, settings: Optional[AnalysisSettings] = None, n_workers: int = 1):
        """
        Initialize the analyzer.

        Args:
            settings: Analysis parameters (defaults if None).
            n_workers: Threads used for spectrogram frames.

        Raises:
            InvalidParameter: If *settings* is invalid.
        """
        self.settings = (settings or AnalysisSettings()).validate()
        self.n_workers = n_workers
        self.engine = FFTEngine()
        self.peak_detector = PeakDetector(
            harmonic_threshold=self.settings.harmonic_threshold,
            min_freq=self.settings.min_freq,
            max_freq=self.settings.max_freq,
        )
        self.grouper = HarmonicGrouper()
        self.spectrogram_builder = SpectrogramBuilder(
            window_size=self.settings.window_size,
            hop_size=self.settings.hop_size,
            n_workers=n_workers,
            engine=self.engine,
        )

    def _check_length(self, n_samples: int) -> None:
        for name in ("fft_size", "window_size"):
            size = getattr(self.settings, name)
            if size > n_samples:
                raise InvalidParameter(
                    f"{name} ({size}) exceeds the number of samples ({n_samples})",
                    parameter=name,
                    value=size,
                )

    def centre_spectrum(self, mono: np.ndarray) -> np.ndarray:
        """Magnitude half-spectrum of the windowed ``fft_size`` frame centred in *mono*."""
        fft_size = self.settings.fft_size
        start = (len(mono) - fft_size) // 2
        frame = mono[start:start + fft_size] * blackman_harris(fft_size)
        real, imag = self.engine.transform(frame)
        magnitude, _ = extract_spectrum(real, imag)
        return magnitude

    def select_fundamental(
        self,
        features: list[SpectralFeature],
        harmonics: list[HarmonicSeries],
    ) -> Optional[float]:
        """
        Strongest series' fundamental, else the lowest peak at or above
        ``min_freq``, else None.

        The fallback deliberately picks the lowest peak rather than the
        strongest one that a reverse scan over magnitude-sorted peaks yields.
        """
        if harmonics:
            return harmonics[0].fundamental
        candidates = [f.frequency for f in features if f.frequency >= self.settings.min_freq]
        return min(candidates) if candidates else None

    def analyze(self, samples: Any, sample_rate: int) -> AnalysisResult:
        """
        Analyse a fully buffered signal.

        Args:
            samples: Mono samples or ``(channels, n_samples)`` in [-1, 1].
            sample_rate: Sample rate in Hz.

        Returns:
            AnalysisResult for the signal.

        Raises:
            EmptyInput: If the buffer has no samples.
            InvalidParameter: If the sample rate is not positive or the
                signal is shorter than ``fft_size`` / ``window_size``.
        """
        if sample_rate <= 0:
            raise InvalidParameter(
                f"sample_rate must be positive, got {sample_rate}",
                parameter="sample_rate",
                value=sample_rate,
            )
        mono = downmix(samples)
        n_samples = len(mono)
        self._check_length(n_samples)

        spectrum = self.centre_spectrum(mono)
        features = self.peak_detector.detect(spectrum, sample_rate)
        harmonics = self.grouper.group(features)

        spectrogram = self.spectrogram_builder.build(mono)

        result = AnalysisResult(
            spectral_features=features,
            harmonics=harmonics,
            fundamental_freq=self.select_fundamental(features, harmonics),
            spectral_centroid=spectral_centroid(spectrum, sample_rate),
            spectral_rolloff=spectral_rolloff(spectrum, sample_rate),
            spectral_flux=spectral_flux(spectrogram),
            rms_level=rms_level(mono),
            peak_level=peak_level(mono),
            sample_rate=sample_rate,
            duration=n_samples / sample_rate,
            envelope=amplitude_envelope(mono, sample_rate),
            spectrogram=spectrogram,
            settings=self.settings,
        )
        logger.debug(
            "Analysed %d samples @ %d Hz: %d peaks, %d harmonic series, f0=%s",
            n_samples,
            sample_rate,
            len(features),
            len(harmonics),
            result.fundamental_freq,
        )
        return result


def analyze(
    samples: Any,
    sample_rate: int,
    settings: Optional[AnalysisSettings] = None,
) -> AnalysisResult:
    """Analyse *samples* with a one-off SpectralAnalyzer."""
    return SpectralAnalyzer(settings).analyze(samples, sample_rate)
