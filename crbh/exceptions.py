#!/usr/bin/env python3
"""
Exception hierarchy for the CRBH pipeline.
All custom exceptions should inherit from CRBHError.
"""
from typing import Dict, Any, Optional


class CRBHError(Exception):
    """Base exception for all CRBH-related errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize with error message and optional details

        Args:
            message: Error message
            details: Optional details dictionary with context
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(CRBHError):
    """Error related to configuration issues"""
    pass


class ParseError(CRBHError):
    """A hit record line could not be tokenized or converted"""
    pass


class StateError(CRBHError):
    """A pipeline stage was run before its inputs were ready"""
    pass


class FileOperationError(CRBHError):
    """Error during file operations"""
    pass


class ValidationError(CRBHError):
    """Data validation error"""
    pass


class SearchError(CRBHError):
    """Error running an external search or database build"""
    pass
