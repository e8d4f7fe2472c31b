"""
Utility functions for the CRBH pipeline
"""

from .blast_utils import (
    read_tabular_hits, parse_tabular_lines, write_reciprocals, read_reciprocals
)
from .sequence import guess_sequence_type, iter_sequence_types, fasta_base_name

__all__ = [
    'read_tabular_hits', 'parse_tabular_lines', 'write_reciprocals', 'read_reciprocals',
    'guess_sequence_type', 'iter_sequence_types', 'fasta_base_name'
]
