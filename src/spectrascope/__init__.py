"""Offline spectral analysis engine: peaks, harmonic series, statistics and spectrograms."""

from spectrascope.core.analyzer import AnalysisResult, AnalysisSettings, SpectralAnalyzer, analyze
from spectrascope.core.errors import EmptyInput, InvalidParameter, SpectrascopeError
from spectrascope.core.harmonics import HarmonicSeries
from spectrascope.core.peaks import SpectralFeature
from spectrascope.io.exporter import ResultExporter

__version__ = "0.1.0"
__all__ = [
    "AnalysisResult",
    "AnalysisSettings",
    "SpectralAnalyzer",
    "analyze",
    "EmptyInput",
    "InvalidParameter",
    "SpectrascopeError",
    "HarmonicSeries",
    "SpectralFeature",
    "ResultExporter",
]
