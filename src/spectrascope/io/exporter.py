"""
Result serialization module.

Exports an AnalysisResult to a JSON document for renderers and other
downstream consumers. Large per-sample and per-frame arrays are opt-in.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np

from spectrascope.core.analyzer import AnalysisResult
from spectrascope.core.harmonics import HarmonicSeries
from spectrascope.core.peaks import SpectralFeature
from spectrascope.core.pitch import cents_deviation, note_name


@dataclass
class ResultMetadata:
    """Metadata header for an exported analysis."""

    sample_rate: int
    duration: float
    n_frames: int
    settings: dict
    schema_version: str = "1.0"


class ResultExporter:
    """
    Exports analysis results to JSON.

    Floats are rounded to a fixed precision; NaN and infinite values
    are written as null.
    """

    def __init__(self, precision: int = 4):
        """
        Initialize the exporter.

        Args:
            precision: Decimal places for floating point values.
        """
        self.precision = precision

    def _round(self, value: Optional[float]) -> Optional[float]:
        """Round to configured precision, mapping None/NaN/inf to None."""
        if value is None:
            return None
        f = float(value)
        if np.isnan(f) or np.isinf(f):
            return None
        return round(f, self.precision)

    def _round_array(self, values: np.ndarray) -> list:
        return np.round(np.asarray(values, dtype=np.float64), self.precision).tolist()

    def _feature(self, feature: SpectralFeature) -> dict[str, Any]:
        return {
            "frequency": self._round(feature.frequency),
            "magnitude": self._round(feature.magnitude),
            "phase": self._round(feature.phase),
            "bandwidth": self._round(feature.bandwidth),
            "note": note_name(feature.frequency),
            "cents": cents_deviation(feature.frequency),
        }

    def _series(self, series: HarmonicSeries) -> dict[str, Any]:
        return {
            "fundamental": self._round(series.fundamental),
            "note": note_name(series.fundamental),
            "strength": self._round(series.strength),
            "inharmonicity": self._round(series.inharmonicity),
            "overtones": [self._feature(f) for f in series.overtones],
        }

    def build_metadata(self, result: AnalysisResult) -> ResultMetadata:
        """Collect the header fields for *result*."""
        return ResultMetadata(
            sample_rate=int(result.sample_rate),
            duration=self._round(result.duration),
            n_frames=result.n_frames,
            settings=result.settings.to_dict(),
        )

    def to_dict(
        self,
        result: AnalysisResult,
        include_envelope: bool = False,
        include_spectrogram: bool = False,
    ) -> dict[str, Any]:
        """
        Build the JSON-serialisable document for *result*.

        Args:
            result: Analysis to export.
            include_envelope: Include the per-sample amplitude envelope.
            include_spectrogram: Include the (n_frames, n_bins) spectrogram.

        Returns:
            Dictionary with ``metadata``, ``summary``, ``spectral_features``
            and ``harmonics`` keys, plus the optional arrays.
        """
        metadata = self.build_metadata(result)
        fundamental = result.fundamental_freq

        document: dict[str, Any] = {
            "metadata": {
                "schema_version": metadata.schema_version,
                "sample_rate": metadata.sample_rate,
                "duration": metadata.duration,
                "n_frames": metadata.n_frames,
                "settings": metadata.settings,
            },
            "summary": {
                "fundamental_freq": self._round(fundamental),
                "fundamental_note": note_name(fundamental) if fundamental is not None else None,
                "spectral_centroid": self._round(result.spectral_centroid),
                "spectral_rolloff": self._round(result.spectral_rolloff),
                "spectral_flux": self._round(result.spectral_flux),
                "rms_level": self._round(result.rms_level),
                "peak_level": self._round(result.peak_level),
            },
            "spectral_features": [self._feature(f) for f in result.spectral_features],
            "harmonics": [self._series(s) for s in result.harmonics],
        }

        if include_envelope:
            document["envelope"] = self._round_array(result.envelope)
        if include_spectrogram:
            document["frame_times"] = self._round_array(result.frame_times)
            document["spectrogram"] = self._round_array(result.spectrogram)

        return document

    def export(
        self,
        result: AnalysisResult,
        output_path: Union[str, Path],
        include_envelope: bool = False,
        include_spectrogram: bool = False,
        indent: Optional[int] = 2,
    ) -> Path:
        """
        Write *result* as JSON to *output_path*.

        Returns:
            The path written.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        document = self.to_dict(
            result,
            include_envelope=include_envelope,
            include_spectrogram=include_spectrogram,
        )
        with open(output_path, "w") as f:
            json.dump(document, f, indent=indent)
        return output_path
