"""
Command-line entry point.

Loads an audio file, runs the spectral analysis and prints a summary,
optionally writing the full result as JSON.
"""

import argparse
import logging
import sys
from pathlib import Path

from spectrascope import __version__
from spectrascope.core.analyzer import AnalysisResult, AnalysisSettings, SpectralAnalyzer
from spectrascope.core.errors import SpectrascopeError
from spectrascope.core.pitch import cents_deviation, note_name
from spectrascope.io.exporter import ResultExporter
from spectrascope.io.loader import load_audio

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    defaults = AnalysisSettings()
    parser = argparse.ArgumentParser(
        prog="spectrascope",
        description="Analyse the spectral peaks, harmonics and spectrogram of an audio file",
    )

    parser.add_argument(
        "audio",
        type=Path,
        help="Input audio file (wav, flac, ogg)",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Write the analysis as JSON to this path",
    )

    parser.add_argument(
        "--fft-size",
        type=int,
        default=defaults.fft_size,
        help=f"Centre-frame FFT size, power of two (default: {defaults.fft_size})",
    )

    parser.add_argument(
        "--window-size",
        type=int,
        default=defaults.window_size,
        help=f"Spectrogram window size, power of two (default: {defaults.window_size})",
    )

    parser.add_argument(
        "--hop-size",
        type=int,
        default=defaults.hop_size,
        help=f"Spectrogram hop in samples (default: {defaults.hop_size})",
    )

    parser.add_argument(
        "--min-freq",
        type=float,
        default=defaults.min_freq,
        help=f"Lowest reported peak frequency in Hz (default: {defaults.min_freq})",
    )

    parser.add_argument(
        "--max-freq",
        type=float,
        default=defaults.max_freq,
        help=f"Highest reported peak frequency in Hz (default: {defaults.max_freq})",
    )

    parser.add_argument(
        "-t", "--threshold",
        type=float,
        default=defaults.harmonic_threshold,
        help=f"Peak threshold relative to the spectrum maximum (default: {defaults.harmonic_threshold})",
    )

    parser.add_argument(
        "--noise-floor",
        type=float,
        default=defaults.noise_floor,
        help=f"Noise floor in dB (default: {defaults.noise_floor})",
    )

    parser.add_argument(
        "-w", "--workers",
        type=int,
        default=1,
        help="Threads for spectrogram frames (default: 1)",
    )

    parser.add_argument(
        "--include-envelope",
        action="store_true",
        help="Include the amplitude envelope in the JSON output",
    )

    parser.add_argument(
        "--include-spectrogram",
        action="store_true",
        help="Include the spectrogram in the JSON output",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def format_summary(result: AnalysisResult, max_peaks: int = 10) -> str:
    """Human-readable multi-line summary of *result*."""
    lines = [
        f"Duration:          {result.duration:.2f} s @ {result.sample_rate} Hz",
        f"RMS / peak level:  {result.rms_level:.4f} / {result.peak_level:.4f}",
    ]
    f0 = result.fundamental_freq
    if f0 is None:
        lines.append("Fundamental:       none detected")
    else:
        lines.append(
            f"Fundamental:       {f0:.2f} Hz ({note_name(f0)}, {cents_deviation(f0):+d} cents)"
        )
    lines.append(f"Spectral centroid: {result.spectral_centroid:.2f} Hz")
    lines.append(f"Spectral rolloff:  {result.spectral_rolloff:.2f} Hz")
    lines.append(
        f"Peaks / series:    {len(result.spectral_features)} / {len(result.harmonics)}"
    )

    for feature in result.spectral_features[:max_peaks]:
        lines.append(
            f"  {feature.frequency:10.2f} Hz  {note_name(feature.frequency):>4}  "
            f"mag={feature.magnitude:.4f}  bw={feature.bandwidth:.2f} Hz"
        )
    for i, series in enumerate(result.harmonics):
        lines.append(
            f"  series {i}: f0={series.fundamental:.2f} Hz  members={series.n_members}  "
            f"strength={series.strength:.4f}  inharmonicity={series.inharmonicity:.4f}"
        )
    return "\n".join(lines)


def main(argv=None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.audio.exists():
        print(f"Error: Audio file not found: {args.audio}", file=sys.stderr)
        return 1

    try:
        settings = AnalysisSettings(
            fft_size=args.fft_size,
            window_size=args.window_size,
            hop_size=args.hop_size,
            min_freq=args.min_freq,
            max_freq=args.max_freq,
            harmonic_threshold=args.threshold,
            noise_floor=args.noise_floor,
        ).validate()

        print(f"Loading {args.audio}...")
        samples, sr = load_audio(args.audio)

        print("Analyzing...")
        result = SpectralAnalyzer(settings, n_workers=args.workers).analyze(samples, sr)
    except SpectrascopeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(format_summary(result))

    if args.output is not None:
        path = ResultExporter().export(
            result,
            args.output,
            include_envelope=args.include_envelope,
            include_spectrogram=args.include_spectrogram,
        )
        print(f"Wrote {path}")
        logger.info("Exported analysis to %s", path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
