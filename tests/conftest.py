"""Shared synthetic-signal fixtures."""

import numpy as np
import pytest

SR = 44100


def sine(freq, duration=1.0, sr=SR, amplitude=1.0):
    t = np.arange(int(sr * duration)) / sr
    return amplitude * np.sin(2 * np.pi * freq * t)


@pytest.fixture
def pure_sine():
    """One second of a full-scale 440 Hz sine at 44.1 kHz."""
    return sine(440.0), SR


@pytest.fixture
def harmonic_signal():
    """220 Hz fundamental plus exact multiples 2f..5f at decreasing amplitude."""
    f0 = 220.0
    y = sum(sine(f0 * k, amplitude=1.0 / k) for k in range(1, 6))
    return 0.4 * y, SR, f0


@pytest.fixture
def silence():
    """One second of digital silence."""
    return np.zeros(SR), SR


@pytest.fixture
def stereo_signal():
    """Left channel 440 Hz, right channel silent, shape (2, n)."""
    left = sine(440.0)
    return np.stack([left, np.zeros_like(left)]), SR
