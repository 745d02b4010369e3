"""Core spectral analysis modules."""

from spectrascope.core.analyzer import AnalysisResult, AnalysisSettings, SpectralAnalyzer, analyze
from spectrascope.core.errors import EmptyInput, InvalidParameter, SpectrascopeError
from spectrascope.core.harmonics import HarmonicGrouper, HarmonicSeries
from spectrascope.core.peaks import PeakDetector, SpectralFeature
from spectrascope.core.spectrogram import SpectrogramBuilder

__all__ = [
    "AnalysisResult",
    "AnalysisSettings",
    "SpectralAnalyzer",
    "analyze",
    "EmptyInput",
    "InvalidParameter",
    "SpectrascopeError",
    "HarmonicGrouper",
    "HarmonicSeries",
    "PeakDetector",
    "SpectralFeature",
    "SpectrogramBuilder",
]
