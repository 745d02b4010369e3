"""Tests for JSON result export and note naming."""

import json

import numpy as np
import pytest

from spectrascope.core.analyzer import SpectralAnalyzer
from spectrascope.core.pitch import cents_deviation, note_name
from spectrascope.io.exporter import ResultExporter


@pytest.fixture
def harmonic_result(harmonic_signal):
    y, sr, _ = harmonic_signal
    return SpectralAnalyzer().analyze(y, sr)


class TestPitch:
    @pytest.mark.parametrize(
        "freq, expected",
        [(440.0, "A4"), (261.63, "C4"), (220.0, "A3"), (27.5, "A0"), (466.16, "A#4")],
    )
    def test_note_name(self, freq, expected):
        assert note_name(freq) == expected

    def test_note_name_invalid(self):
        assert note_name(0.0) == "N/A"
        assert note_name(-5.0) == "N/A"
        assert note_name(float("nan")) == "N/A"

    def test_cents_in_tune(self):
        assert cents_deviation(440.0) == 0

    def test_cents_sharp_and_flat(self):
        assert cents_deviation(440.0 * 2 ** (10 / 1200)) == 10
        assert cents_deviation(440.0 * 2 ** (-25 / 1200)) == -25

    def test_cents_invalid(self):
        assert cents_deviation(0.0) == 0


class TestResultExporter:
    def test_document_sections(self, harmonic_result):
        doc = ResultExporter().to_dict(harmonic_result)
        assert set(doc) == {"metadata", "summary", "spectral_features", "harmonics"}
        assert doc["metadata"]["schema_version"] == "1.0"
        assert doc["metadata"]["sample_rate"] == 44100
        assert doc["metadata"]["settings"]["fft_size"] == 8192

    def test_summary(self, harmonic_result):
        summary = ResultExporter().to_dict(harmonic_result)["summary"]
        assert summary["fundamental_note"] == "A3"
        assert summary["fundamental_freq"] == pytest.approx(220.0, abs=6.0)

    def test_features_carry_notes(self, harmonic_result):
        features = ResultExporter().to_dict(harmonic_result)["spectral_features"]
        assert len(features) == len(harmonic_result.spectral_features)
        assert features[0]["note"] == "A3"
        assert isinstance(features[0]["cents"], int)

    def test_harmonics(self, harmonic_result):
        harmonics = ResultExporter().to_dict(harmonic_result)["harmonics"]
        assert len(harmonics) == 1
        assert len(harmonics[0]["overtones"]) == harmonic_result.harmonics[0].n_members

    def test_precision(self, harmonic_result):
        doc = ResultExporter(precision=2).to_dict(harmonic_result)
        freq = doc["spectral_features"][0]["frequency"]
        assert freq == round(freq, 2)

    def test_optional_arrays(self, harmonic_result):
        doc = ResultExporter().to_dict(
            harmonic_result, include_envelope=True, include_spectrogram=True
        )
        assert len(doc["envelope"]) == len(harmonic_result.envelope)
        assert len(doc["spectrogram"]) == harmonic_result.n_frames
        assert len(doc["spectrogram"][0]) == harmonic_result.settings.window_size // 2
        assert len(doc["frame_times"]) == harmonic_result.n_frames

    def test_silence_serialises_nulls(self, silence):
        y, sr = silence
        doc = ResultExporter().to_dict(SpectralAnalyzer().analyze(y, sr))
        assert doc["summary"]["fundamental_freq"] is None
        assert doc["summary"]["fundamental_note"] is None
        assert doc["spectral_features"] == []

    def test_non_finite_rounding(self):
        exporter = ResultExporter()
        assert exporter._round(float("nan")) is None
        assert exporter._round(np.inf) is None
        assert exporter._round(None) is None
        assert exporter._round(1.234567) == 1.2346

    def test_export_writes_json(self, harmonic_result, tmp_path):
        path = ResultExporter().export(
            harmonic_result, tmp_path / "out" / "analysis.json", include_envelope=True
        )
        assert path.exists()
        with open(path) as f:
            loaded = json.load(f)
        assert loaded["summary"]["fundamental_note"] == "A3"
        assert "envelope" in loaded
        assert "spectrogram" not in loaded

    def test_numpy_sample_rate_exports(self, pure_sine, tmp_path):
        y, sr = pure_sine
        result = SpectralAnalyzer().analyze(y, np.int64(sr))
        path = ResultExporter().export(result, tmp_path / "analysis.json")
        with open(path) as f:
            loaded = json.load(f)
        assert loaded["metadata"]["sample_rate"] == 44100
        assert type(ResultExporter().build_metadata(result).sample_rate) is int
