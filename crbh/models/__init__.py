"""
Models for the CRBH pipeline.

Hit records parsed from tabular search output and the result containers
produced by the matching stages.
"""

from .hit import HitRecord, HIT_FIELDS, EVALUE_FLOOR, transform_evalue
from .results import MatchResult, CRBHResult, count_hits

__all__ = [
    'HitRecord', 'HIT_FIELDS', 'EVALUE_FLOOR', 'transform_evalue',
    'MatchResult', 'CRBHResult', 'count_hits'
]
