"""Equal-tempered note naming for detected frequencies (A4 = 440 Hz)."""

import librosa
import numpy as np


def note_name(frequency: float) -> str:
    """
    Nearest equal-tempered note name, e.g. ``"A4"`` or ``"C#3"``.

    Returns ``"N/A"`` for non-positive or non-finite frequencies.
    """
    if not np.isfinite(frequency) or frequency <= 0:
        return "N/A"
    midi = int(np.round(librosa.hz_to_midi(frequency)))
    return librosa.midi_to_note(midi, unicode=False)


def cents_deviation(frequency: float) -> int:
    """Deviation in whole cents from the nearest semitone (0 for invalid input)."""
    if not np.isfinite(frequency) or frequency <= 0:
        return 0
    midi = float(librosa.hz_to_midi(frequency))
    return int(np.round((midi - np.round(midi)) * 100))
