# crbh/matching/rescue.py
"""Conditional rescue of missed reciprocal candidates"""

import logging
from typing import Dict, List, Optional

from crbh.exceptions import StateError
from crbh.models.hit import HitRecord


class SecondaryRescuer:
    """Promote candidates whose significance meets the curve for their length"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("crbh.matching.rescue")

    def rescue(self,
               missed: Dict[str, List[HitRecord]],
               curve: Dict[int, float],
               reciprocals: Dict[str, List[HitRecord]]) -> int:
        """Extend reciprocals in place with qualifying candidates

        A candidate is promoted when the curve has an entry for its
        alignment length, its transformed e-value is at least the curve
        value, and its (query, target) pair is not already recorded for
        that source.

        Args:
            missed: Candidate hits per source identifier
            curve: Significance curve
            reciprocals: Reciprocal set to extend

        Returns:
            Number of hits promoted
        """
        if missed is None or curve is None or reciprocals is None:
            raise StateError("Rescue inputs not ready, run the strict pass first")

        promoted = 0
        for source_id, candidates in missed.items():
            for hit in candidates:
                length = int(hit.alignment_length)
                threshold = curve.get(length)
                if threshold is None or hit.transformed_evalue < threshold:
                    continue
                existing = reciprocals.setdefault(source_id, [])
                if any(other.pair == hit.pair for other in existing):
                    continue
                existing.append(hit)
                promoted += 1
                self.logger.debug(f"Rescued {hit.query} <-> {hit.target} "
                                  f"(length {length}, score {hit.transformed_evalue:.2f} "
                                  f">= {threshold:.2f})")

        self.logger.info(f"Rescued {promoted} secondary reciprocal hits")
        return promoted
