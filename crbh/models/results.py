# crbh/models/results.py
"""Result containers passed between the matching stages"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

import pandas as pd

from .hit import HitRecord

HitMap = Dict[str, List[HitRecord]]

OUTPUT_COLUMNS = ['query', 'target', 'id', 'alnlen', 'evalue', 'bitscore']


def count_hits(hits: HitMap) -> int:
    """Total number of hit entries across all source identifiers"""
    return sum(len(value) for value in hits.values())


@dataclass
class MatchResult:
    """Output of the strict reciprocal pass

    The harvested (alignment_length, transformed_evalue) pairs and the
    longest strict alignment are returned here rather than kept on the
    matcher, so the curve builder receives them explicitly.
    """
    reciprocals: HitMap = field(default_factory=dict)
    missed: HitMap = field(default_factory=dict)
    strict_count: int = 0
    significance_points: List[Tuple[int, float]] = field(default_factory=list)
    longest: int = 0

    @property
    def missed_count(self) -> int:
        return count_hits(self.missed)


@dataclass
class CRBHResult:
    """Final reciprocal and residual missed sets of one matching run"""
    reciprocals: HitMap = field(default_factory=dict)
    missed: HitMap = field(default_factory=dict)
    strict_count: int = 0
    rescued_count: int = 0
    curve: Dict[int, float] = field(default_factory=dict)

    @property
    def total_count(self) -> int:
        return self.strict_count + self.rescued_count

    def has_reciprocal(self, source_id: str) -> bool:
        """True if the source identifier has at least one reciprocal hit"""
        return bool(self.reciprocals.get(source_id))

    def pairs(self) -> Iterator[HitRecord]:
        """Iterate reciprocal hits, strict hits before rescued ones per source"""
        for hits in self.reciprocals.values():
            yield from hits

    def summary(self) -> Dict[str, int]:
        return {
            'strict': self.strict_count,
            'rescued': self.rescued_count,
            'total': self.total_count,
            'sources': sum(1 for hits in self.reciprocals.values() if hits),
            'missed': count_hits(self.missed),
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Reciprocal hits as a table with the standard output columns"""
        rows = [
            {
                'query': hit.query,
                'target': hit.target,
                'id': hit.percent_identity,
                'alnlen': hit.alignment_length,
                'evalue': hit.evalue,
                'bitscore': hit.bit_score,
            }
            for hit in self.pairs()
        ]
        return pd.DataFrame(rows, columns=OUTPUT_COLUMNS)
