# crbh/matching/index.py
"""Hits grouped by source sequence for one search direction"""

import logging
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, List, Tuple

from crbh.models.hit import HitRecord
from crbh.utils.blast_utils import parse_tabular_lines, read_tabular_hits

logger = logging.getLogger("crbh.matching.index")


class DirectionalHitIndex(Mapping):
    """Immutable mapping of source identifier to its ranked hits

    Rank contract: within each source the hits keep the order the search
    backend wrote them, and position 0 is the backend's best hit. The index
    never re-sorts. BLAST+ writes tabular hits best first by e-value, which
    validate_rank_order() can check.
    """

    def __init__(self, groups: Dict[str, Tuple[HitRecord, ...]]):
        self._groups = groups

    @classmethod
    def build(cls, records: Iterable[HitRecord]) -> 'DirectionalHitIndex':
        """Group records by their query field, preserving input order"""
        grouped: Dict[str, List[HitRecord]] = {}
        for record in records:
            grouped.setdefault(record.query, []).append(record)
        return cls({key: tuple(hits) for key, hits in grouped.items()})

    @classmethod
    def from_lines(cls, lines: Iterable[str], source: str = "<stream>") -> 'DirectionalHitIndex':
        return cls.build(parse_tabular_lines(lines, source=source))

    @classmethod
    def from_file(cls, file_path: str) -> 'DirectionalHitIndex':
        index = cls.build(read_tabular_hits(file_path))
        logger.debug(f"Indexed {index.hit_count} hits for {len(index)} sources from {file_path}")
        return index

    def __getitem__(self, source_id: str) -> Tuple[HitRecord, ...]:
        return self._groups[source_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(sources={len(self)}, hits={self.hit_count})"

    @property
    def hit_count(self) -> int:
        return sum(len(hits) for hits in self._groups.values())

    def best_hit(self, source_id: str):
        """Rank 0 hit for a source, or None"""
        hits = self._groups.get(source_id)
        return hits[0] if hits else None

    def validate_rank_order(self) -> List[str]:
        """Sources whose targets are not listed best e-value first

        BLAST groups the HSPs of one target together, so only the first
        HSP of each distinct target is compared. The order is reported,
        never corrected.
        """
        violations = []
        for source_id, hits in self._groups.items():
            seen = set()
            leading = []
            for hit in hits:
                if hit.target not in seen:
                    seen.add(hit.target)
                    leading.append(hit.evalue)
            if any(later < earlier for earlier, later in zip(leading, leading[1:])):
                violations.append(source_id)
        return violations
