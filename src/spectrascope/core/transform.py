"""
Frame-level DSP primitives: analysis window, radix-2 FFT and spectrum extraction.

The FFT is an iterative Cooley-Tukey transform. Bit-reversal indices and
twiddle factors are planned once per frame length and reused, so the
spectrogram (which transforms thousands of equally sized frames) never
recomputes trigonometry inside its hot loop.
"""

import threading
from functools import lru_cache

import numpy as np
from scipy.signal import windows as scipy_windows

from spectrascope.core.errors import InvalidParameter


# ---------------------------------------------------------------------------
# Window generator
# ---------------------------------------------------------------------------

# Four-term Blackman-Harris coefficients (a0, a1, a2, a3)
BLACKMAN_HARRIS_COEFFS = (0.35875, 0.48829, 0.14128, 0.01168)


@lru_cache(maxsize=16)
def _cached_window(n: int) -> np.ndarray:
    window = scipy_windows.blackmanharris(n, sym=True).astype(np.float64)
    window.flags.writeable = False
    return window


def blackman_harris(n: int) -> np.ndarray:
    """
    Return a symmetric Blackman-Harris window of length *n*.

    Args:
        n: Window length, at least 2.

    Returns:
        Read-only float64 array of *n* coefficients.

    Raises:
        InvalidParameter: If *n* < 2.
    """
    if n < 2:
        raise InvalidParameter(
            f"Window length must be at least 2, got {n}", parameter="n", value=n
        )
    return _cached_window(int(n))


# ---------------------------------------------------------------------------
# FFT engine
# ---------------------------------------------------------------------------

def is_power_of_two(n: int) -> bool:
    """True if *n* is a positive integer power of two (1 included)."""
    return n > 0 and (n & (n - 1)) == 0


class FFTPlan:
    """Precomputed bit-reversal permutation and twiddle table for one length."""

    def __init__(self, n: int):
        self.n = n
        bits = n.bit_length() - 1

        idx = np.arange(n)
        rev = np.zeros(n, dtype=np.intp)
        for b in range(bits):
            rev |= ((idx >> b) & 1) << (bits - 1 - b)
        self.bit_reverse = rev

        # exp(-2πi k/N) for k < N/2; stage of span L uses every (N/L)-th entry
        k = np.arange(max(n // 2, 1))
        self.twiddles = np.exp(-2j * np.pi * k / n)

    def stage_twiddles(self, span: int) -> np.ndarray:
        """Twiddle factors exp(-2πi j/span) for j < span/2."""
        return self.twiddles[:: self.n // span][: span // 2]


class FFTEngine:
    """
    Iterative radix-2 Cooley-Tukey FFT with per-length plan caching.

    Safe to share between threads: plans are immutable once built and
    creation is guarded by a lock.
    """

    def __init__(self):
        self._plans: dict[int, FFTPlan] = {}
        self._lock = threading.Lock()

    def plan(self, n: int) -> FFTPlan:
        """Return (building on first use) the plan for length *n*."""
        plan = self._plans.get(n)
        if plan is None:
            with self._lock:
                plan = self._plans.get(n)
                if plan is None:
                    plan = FFTPlan(n)
                    self._plans[n] = plan
        return plan

    def transform(self, frame: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """
        Compute the unnormalised forward DFT of a real frame.

        Args:
            frame: Real-valued samples; length must be a power of two.

        Returns:
            Tuple of (real, imag) float64 arrays, same length as *frame*.

        Raises:
            InvalidParameter: If the length is not a power of two.
        """
        frame = np.asarray(frame, dtype=np.float64)
        if frame.ndim != 1:
            raise InvalidParameter(
                f"FFT input must be 1-D, got shape {frame.shape}",
                parameter="frame",
                value=frame.shape,
            )
        n = frame.shape[0]
        if not is_power_of_two(n):
            raise InvalidParameter(
                f"FFT length must be a power of two, got {n}",
                parameter="frame",
                value=n,
            )

        plan = self.plan(n)
        x = frame[plan.bit_reverse].astype(np.complex128)

        span = 2
        while span <= n:
            half = span // 2
            blocks = x.reshape(-1, span)
            upper = blocks[:, :half].copy()
            lower = blocks[:, half:] * plan.stage_twiddles(span)
            blocks[:, :half] = upper + lower
            blocks[:, half:] = upper - lower
            span *= 2

        return x.real.copy(), x.imag.copy()


_default_engine = FFTEngine()


def fft(frame: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Transform *frame* with the shared module-level engine."""
    return _default_engine.transform(frame)


# ---------------------------------------------------------------------------
# Spectrum extraction
# ---------------------------------------------------------------------------

def extract_spectrum(real: np.ndarray, imag: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Magnitude and phase of the non-redundant half of a real signal's DFT.

    Returns:
        Tuple of (magnitude, phase), each of length ``len(real) // 2``.
    """
    real = np.asarray(real, dtype=np.float64)
    imag = np.asarray(imag, dtype=np.float64)
    half = real.shape[0] // 2
    re = real[:half]
    im = imag[:half]
    return np.sqrt(re * re + im * im), np.arctan2(im, re)
