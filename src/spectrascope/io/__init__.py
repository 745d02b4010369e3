"""Input/output helpers around the analysis engine."""

from spectrascope.io.exporter import ResultExporter
from spectrascope.io.loader import load_audio

__all__ = ["ResultExporter", "load_audio"]
