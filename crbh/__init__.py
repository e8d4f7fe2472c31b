#!/usr/bin/env python3
"""
CRBH (Conditional Reciprocal Best Hits)

A Python toolkit for calling putative orthologs between two sequence sets
from BLAST tabular results.
"""

__version__ = '0.1.0'
__author__ = 'CRBH Team'
__email__ = 'example@example.org'
__license__ = 'MIT'

# Import core modules for easier access
from .exceptions import CRBHError, ParseError, StateError
from .error_handlers import cli_error_handler
from .models import HitRecord, CRBHResult
from .pipelines.orchestrator import CRBHOrchestrator

# Make key classes available at package level
__all__ = [
    'CRBHError', 'ParseError', 'StateError', 'cli_error_handler',
    'HitRecord', 'CRBHResult', 'CRBHOrchestrator'
]
