"""
Command-line interface for the CRBH pipeline.
"""

from .main import main, build_parser

__all__ = ['main', 'build_parser']
