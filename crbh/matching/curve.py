# crbh/matching/curve.py
"""Length-conditioned significance curve from strict reciprocal hits"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np


class SignificanceCurveBuilder:
    """Smooth transformed e-values of strict hits over alignment length

    For each integer centre length from min_length up to the longest strict
    alignment, the curve holds the mean transformed e-value of all strict
    hits whose length falls within centre +/- s, where
    s = max(min_half_width, int(centre * window_fraction)).
    Centres with no points in their window get no entry.
    """

    def __init__(self,
                 min_length: int = 10,
                 window_fraction: float = 0.1,
                 min_half_width: int = 5,
                 logger: Optional[logging.Logger] = None):
        self.min_length = min_length
        self.window_fraction = window_fraction
        self.min_half_width = min_half_width
        self.logger = logger or logging.getLogger("crbh.matching.curve")

    def half_width(self, centre: int) -> int:
        return max(self.min_half_width, int(centre * self.window_fraction))

    def build(self, points: Iterable[Tuple[int, float]], longest: Optional[int] = None) -> Dict[int, float]:
        """Build the curve

        Args:
            points: (alignment_length, transformed_evalue) pairs of strict hits
            longest: Longest strict alignment length, derived from points if None

        Returns:
            Mapping of centre length to mean transformed e-value
        """
        buckets: Dict[int, List[float]] = {}
        for length, value in points:
            buckets.setdefault(int(length), []).append(value)

        if longest is None:
            longest = max(buckets) if buckets else 0

        curve: Dict[int, float] = {}
        for centre in range(self.min_length, longest + 1):
            s = self.half_width(centre)
            gathered = [
                value
                for length in range(centre - s, centre + s + 1)
                for value in buckets.get(length, ())
            ]
            if gathered:
                curve[centre] = float(np.mean(gathered))

        self.logger.info(f"Built significance curve with {len(curve)} points "
                         f"from {sum(len(v) for v in buckets.values())} strict hits")
        return curve
