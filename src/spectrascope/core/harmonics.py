"""
Harmonic series grouping.

Greedily partitions magnitude-sorted peaks into series of a fundamental
plus integer-multiple overtones. Stronger fundamentals claim overtones
first; a claimed peak is never reassigned, even if a weaker fundamental
would fit it better. The order is part of the contract and keeps the
result reproducible.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from spectrascope.core.peaks import SpectralFeature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HarmonicSeries:
    """A fundamental and the overtones matched to it."""

    fundamental: float                        # Hz
    overtones: tuple[SpectralFeature, ...]    # index 0 is the fundamental
    strength: float                           # sum of member magnitudes
    inharmonicity: float                      # mean relative deviation from k * f0

    @property
    def n_members(self) -> int:
        """Number of peaks in the series, fundamental included."""
        return len(self.overtones)


class HarmonicGrouper:
    """Groups spectral peaks into harmonic series by frequency-ratio matching."""

    MAX_CANDIDATES = 50
    TOLERANCE = 0.02
    MIN_ORDER = 2
    MAX_ORDER = 20
    MIN_MEMBERS = 3

    def group(self, features: Sequence[SpectralFeature]) -> list[HarmonicSeries]:
        """
        Partition *features* into harmonic series.

        Args:
            features: Peaks sorted by descending magnitude.

        Returns:
            Series with at least ``MIN_MEMBERS`` members, sorted by descending strength.
        """
        claimed: set[int] = set()
        series_list = []

        for i in range(min(len(features), self.MAX_CANDIDATES)):
            if i in claimed:
                continue
            fundamental = features[i]
            claimed.add(i)
            if fundamental.frequency <= 0:
                continue

            members = [fundamental]
            for order in range(self.MIN_ORDER, self.MAX_ORDER + 1):
                match = self._best_match(features, fundamental.frequency * order, i, claimed)
                if match is not None:
                    members.append(features[match])
                    claimed.add(match)

            if len(members) >= self.MIN_MEMBERS:
                series_list.append(self._build_series(members))

        series_list.sort(key=lambda s: s.strength, reverse=True)
        logger.debug("Grouped %d harmonic series from %d peaks", len(series_list), len(features))
        return series_list

    def _best_match(
        self,
        features: Sequence[SpectralFeature],
        target: float,
        after: int,
        claimed: set[int],
    ):
        best = None
        min_error = float("inf")
        for j in range(after + 1, len(features)):
            if j in claimed:
                continue
            error = abs(features[j].frequency - target) / target
            if error < self.TOLERANCE and error < min_error:
                min_error = error
                best = j
        return best

    @staticmethod
    def _build_series(members: list[SpectralFeature]) -> HarmonicSeries:
        f0 = members[0].frequency
        deviations = [
            abs(member.frequency - f0 * (position + 1)) / (f0 * (position + 1))
            for position, member in enumerate(members)
            if position > 0
        ]
        return HarmonicSeries(
            fundamental=f0,
            overtones=tuple(members),
            strength=sum(m.magnitude for m in members),
            inharmonicity=sum(deviations) / len(deviations),
        )
