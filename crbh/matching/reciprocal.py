# crbh/matching/reciprocal.py
"""Strict reciprocal best hit detection"""

import logging
from typing import Optional

from crbh.exceptions import StateError
from crbh.models.results import MatchResult
from .index import DirectionalHitIndex


class ReciprocalMatcher:
    """Find strict reciprocal best hits and collect rescue candidates

    A forward hit q -> t at rank i is a strict hit when i == 0 and the
    reverse hit list of t has q at rank 0. Every other (i, j) combination
    where reverse rank j points back to q makes the forward hit a rescue
    candidate. A candidate is recorded once per matching reverse rank, so
    the missed set can hold the same hit more than once.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("crbh.matching.reciprocal")

    def find_reciprocals(self,
                         forward: Optional[DirectionalHitIndex],
                         reverse: Optional[DirectionalHitIndex]) -> MatchResult:
        """Run the strict pass

        Args:
            forward: Query searched against target
            reverse: Target searched against query

        Returns:
            MatchResult with the strict reciprocal set, the missed set,
            the strict count and the (length, transformed e-value) points

        Raises:
            StateError: If either direction has not been loaded
        """
        if forward is None or reverse is None:
            missing = [name for name, index in (('forward', forward), ('reverse', reverse))
                       if index is None]
            raise StateError("Hit indexes not ready, load both search directions first",
                             {'missing': missing})

        result = MatchResult()

        for query_id, forward_hits in forward.items():
            for query_rank, hit in enumerate(forward_hits):
                reverse_hits = reverse.get(hit.target)
                if not reverse_hits:
                    continue
                for target_rank, reverse_hit in enumerate(reverse_hits):
                    if reverse_hit.target != query_id:
                        continue
                    if query_rank == 0 and target_rank == 0:
                        result.reciprocals.setdefault(query_id, []).append(hit)
                        result.strict_count += 1
                        result.significance_points.append(
                            (hit.alignment_length, hit.transformed_evalue)
                        )
                        result.longest = max(result.longest, hit.alignment_length)
                        self.logger.debug(f"Strict reciprocal hit: {query_id} <-> {hit.target}")
                    else:
                        result.missed.setdefault(query_id, []).append(hit)

        self.logger.info(f"Found {result.strict_count} strict reciprocal hits "
                         f"and {result.missed_count} rescue candidates")
        return result
