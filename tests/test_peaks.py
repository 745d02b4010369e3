"""Tests for the spectral peak detector."""

import numpy as np
import pytest

from spectrascope.core.peaks import PeakDetector, SpectralFeature
from spectrascope.core.transform import blackman_harris, extract_spectrum, fft


def _spectrum(y, n_fft):
    start = (len(y) - n_fft) // 2
    frame = y[start:start + n_fft] * blackman_harris(n_fft)
    mag, _ = extract_spectrum(*fft(frame))
    return mag


@pytest.fixture
def detector():
    return PeakDetector(harmonic_threshold=0.1, min_freq=20.0, max_freq=20000.0)


class TestInterpolation:
    def test_symmetric_neighbours_give_zero_offset(self):
        assert PeakDetector.interpolate_offset(1.0, 2.0, 1.0) == 0.0

    def test_flat_gives_zero_offset(self):
        assert PeakDetector.interpolate_offset(1.0, 1.0, 1.0) == 0.0

    def test_offset_towards_larger_neighbour(self):
        assert PeakDetector.interpolate_offset(1.0, 2.0, 1.5) > 0
        assert PeakDetector.interpolate_offset(1.5, 2.0, 1.0) < 0

    def test_parabola_vertex(self):
        # y = -(x - 0.25)^2 sampled at -1, 0, 1
        y = [-(x - 0.25) ** 2 for x in (-1, 0, 1)]
        assert PeakDetector.interpolate_offset(*y) == pytest.approx(0.25)

    def test_offset_is_clamped(self):
        # raw vertex would sit 2.5 bins to the right
        assert PeakDetector.interpolate_offset(0.0, 3.0, 5.0) == 1.0


class TestPeakDetector:
    @pytest.mark.parametrize("freq", [100.0, 440.0, 1234.5, 5000.0])
    def test_sub_bin_accuracy(self, detector, freq):
        """Interpolated frequency is within one bin of the true frequency."""
        sr, n_fft = 44100, 8192
        t = np.arange(sr) / sr
        spectrum = _spectrum(np.sin(2 * np.pi * freq * t), n_fft)

        peaks = detector.detect(spectrum, sr)

        assert peaks, "expected at least one peak"
        resolution = sr / n_fft
        assert abs(peaks[0].frequency - freq) < resolution

    def test_sorted_by_descending_magnitude(self, detector):
        sr, n_fft = 44100, 8192
        t = np.arange(sr) / sr
        y = 0.2 * np.sin(2 * np.pi * 300 * t) + 0.8 * np.sin(2 * np.pi * 1500 * t) \
            + 0.5 * np.sin(2 * np.pi * 3000 * t)
        peaks = detector.detect(_spectrum(y, n_fft), sr)

        mags = [p.magnitude for p in peaks]
        assert mags == sorted(mags, reverse=True)
        assert len(peaks) == 3
        assert peaks[0].frequency == pytest.approx(1500, abs=sr / n_fft)

    def test_frequency_range_filter(self):
        sr, n_fft = 44100, 8192
        t = np.arange(sr) / sr
        y = np.sin(2 * np.pi * 300 * t) + np.sin(2 * np.pi * 3000 * t)
        detector = PeakDetector(harmonic_threshold=0.1, min_freq=1000.0, max_freq=5000.0)

        peaks = detector.detect(_spectrum(y, n_fft), sr)

        assert len(peaks) == 1
        assert all(1000.0 <= p.frequency <= 5000.0 for p in peaks)

    def test_threshold_rejects_weak_peaks(self):
        sr, n_fft = 44100, 8192
        t = np.arange(sr) / sr
        y = np.sin(2 * np.pi * 500 * t) + 0.05 * np.sin(2 * np.pi * 2000 * t)
        spectrum = _spectrum(y, n_fft)

        assert len(PeakDetector(harmonic_threshold=0.1).detect(spectrum, sr)) == 1
        assert len(PeakDetector(harmonic_threshold=0.01).detect(spectrum, sr)) == 2

    def test_requires_strict_local_maximum(self, detector):
        spectrum = np.zeros(32)
        spectrum[10] = spectrum[11] = 1.0  # plateau
        spectrum[20] = 1.0
        spectrum[19] = spectrum[21] = 0.5

        peaks = detector.detect(spectrum, 64.0)

        assert len(peaks) == 1
        assert peaks[0].frequency == pytest.approx(20.0)

    def test_edges_are_ignored(self):
        spectrum = np.zeros(16)
        spectrum[1] = 1.0
        spectrum[14] = 1.0
        detector = PeakDetector(harmonic_threshold=0.1, min_freq=0.0, max_freq=1e9)
        assert detector.detect(spectrum, 32.0) == []

    def test_bandwidth_default_is_one_bin(self, detector):
        spectrum = np.full(32, 0.9)
        spectrum[10] = 1.0
        spectrum[8] = spectrum[12] = 0.8
        resolution = PeakDetector.frequency_resolution(32, 640.0)

        peaks = detector.detect(spectrum, 640.0)

        assert len(peaks) == 1
        assert peaks[0].bandwidth == pytest.approx(resolution)

    def test_bandwidth_walks_to_half_power(self, detector):
        spectrum = np.zeros(64)
        spectrum[27:34] = [0.5, 0.8, 0.9, 1.0, 0.9, 0.8, 0.5]
        resolution = PeakDetector.frequency_resolution(64, 128.0)

        peaks = detector.detect(spectrum, 128.0)

        assert peaks[0].bandwidth == pytest.approx(3 * resolution)

    def test_phase_is_zero(self, detector, pure_sine):
        y, sr = pure_sine
        peaks = detector.detect(_spectrum(y, 8192), sr)
        assert all(p.phase == 0.0 for p in peaks)

    def test_silence_has_no_peaks(self, detector):
        assert detector.detect(np.zeros(4096), 44100) == []

    def test_empty_spectrum(self, detector):
        assert detector.detect(np.array([]), 44100) == []

    def test_feature_is_immutable(self):
        feature = SpectralFeature(frequency=440.0, magnitude=1.0, phase=0.0, bandwidth=5.0)
        with pytest.raises(AttributeError):
            feature.frequency = 220.0
