"""
Reciprocal matching engine

Strict reciprocal best hit detection followed by the conditional rescue
of candidates whose significance fits the length-binned curve of strict
hits.
"""

from .index import DirectionalHitIndex
from .reciprocal import ReciprocalMatcher
from .curve import SignificanceCurveBuilder
from .rescue import SecondaryRescuer

__all__ = [
    'DirectionalHitIndex', 'ReciprocalMatcher',
    'SignificanceCurveBuilder', 'SecondaryRescuer'
]
