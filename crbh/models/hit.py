# crbh/models/hit.py
"""Hit record model for one line of BLAST tabular output"""

import math
from dataclasses import dataclass, astuple
from typing import Any, Dict, List, Optional, Sequence

from crbh.exceptions import ParseError

# Smallest e-value used in the log transform, BLAST reports underflow as 0
EVALUE_FLOOR = 1e-200

# Column order of BLAST -outfmt 6
HIT_FIELDS = (
    'query', 'target', 'percent_identity', 'alignment_length', 'mismatches',
    'gap_opens', 'query_start', 'query_end', 'target_start', 'target_end',
    'evalue', 'bit_score'
)

_INT_FIELDS = {
    'alignment_length', 'mismatches', 'gap_opens',
    'query_start', 'query_end', 'target_start', 'target_end'
}
_FLOAT_FIELDS = {'percent_identity', 'evalue', 'bit_score'}


def transform_evalue(evalue: float) -> float:
    """Return -log10 of an e-value clamped to EVALUE_FLOOR"""
    return -math.log10(max(evalue, EVALUE_FLOOR))


@dataclass(frozen=True)
class HitRecord:
    """One alignment between a query sequence and a target sequence"""
    query: str
    target: str
    percent_identity: float
    alignment_length: int
    mismatches: int
    gap_opens: int
    query_start: int
    query_end: int
    target_start: int
    target_end: int
    evalue: float
    bit_score: float

    @property
    def transformed_evalue(self) -> float:
        """-log10(evalue), higher is more significant"""
        return transform_evalue(self.evalue)

    @property
    def pair(self) -> tuple:
        """(query, target) identifier pair"""
        return (self.query, self.target)

    @classmethod
    def from_fields(cls, fields: Sequence[str], line_number: Optional[int] = None) -> 'HitRecord':
        """Create a hit from the 12 tabular columns

        Args:
            fields: Column values in BLAST -outfmt 6 order
            line_number: Source line number, used in error details

        Returns:
            HitRecord instance

        Raises:
            ParseError: If the field count is wrong or a numeric column is invalid
        """
        if len(fields) != len(HIT_FIELDS):
            raise ParseError(
                f"Expected {len(HIT_FIELDS)} fields, found {len(fields)}",
                {'line_number': line_number, 'fields': list(fields)}
            )

        values: Dict[str, Any] = {}
        for name, raw in zip(HIT_FIELDS, fields):
            raw = raw.strip()
            if name in _INT_FIELDS:
                values[name] = cls._convert(int, name, raw, line_number)
            elif name in _FLOAT_FIELDS:
                values[name] = cls._convert(float, name, raw, line_number)
            else:
                if not raw:
                    raise ParseError(f"Empty {name} identifier",
                                     {'line_number': line_number})
                values[name] = raw

        if math.isnan(values['evalue']) or values['evalue'] < 0:
            raise ParseError(f"Invalid e-value: {values['evalue']}",
                             {'line_number': line_number})

        return cls(**values)

    @classmethod
    def from_line(cls, line: str, line_number: Optional[int] = None) -> 'HitRecord':
        """Parse a single tab (or whitespace) delimited hit line"""
        stripped = line.strip()
        fields = stripped.split('\t') if '\t' in stripped else stripped.split()
        return cls.from_fields(fields, line_number)

    @staticmethod
    def _convert(kind: type, name: str, raw: str, line_number: Optional[int]) -> Any:
        try:
            return kind(raw)
        except ValueError:
            raise ParseError(
                f"Field {name} is not a valid {kind.__name__}: {raw!r}",
                {'line_number': line_number, 'field': name, 'value': raw}
            ) from None

    def to_fields(self) -> List[str]:
        """Format the hit back into tabular columns"""
        return [str(value) for value in astuple(self)]

    def to_line(self) -> str:
        return '\t'.join(self.to_fields())
