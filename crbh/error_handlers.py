#!/usr/bin/env python3
"""
Error reporting for the crbh command line.

Known errors are reported in one line plus the input location when there is
one. Exit codes tell apart bad input, stages run out of order and bugs.
"""
import sys
import traceback
import logging
from functools import wraps
from typing import Callable, Any, Dict, Optional

from .exceptions import CRBHError, ParseError, StateError

EXIT_ERROR = 1
EXIT_UNEXPECTED = 2
EXIT_STATE = 3
EXIT_INTERRUPTED = 130

# Detail keys shown for a bad hit line, in display order
PARSE_LOCATION_KEYS = ('source', 'line_number', 'field', 'value')


def exit_code_for(error: BaseException) -> int:
    """Process exit code for an error raised out of a CLI command"""
    if isinstance(error, KeyboardInterrupt):
        return EXIT_INTERRUPTED
    if isinstance(error, StateError):
        return EXIT_STATE
    if isinstance(error, CRBHError):
        return EXIT_ERROR
    return EXIT_UNEXPECTED


def parse_location(error: ParseError) -> str:
    """Where a hit line failed, e.g. 'source=fwd.blast line_number=3 field=evalue'"""
    parts = []
    for key in PARSE_LOCATION_KEYS:
        value = error.details.get(key)
        if value is not None:
            parts.append(f"{key}={value!r}" if key == 'value' else f"{key}={value}")
    return ' '.join(parts)


def format_error(error: Exception, verbose: bool = False) -> str:
    """Format an error message for display

    Args:
        error: Exception object
        verbose: Whether to include the full details or traceback

    Returns:
        Formatted error message
    """
    if isinstance(error, CRBHError):
        msg = f"{error.__class__.__name__}: {error.message}"
        if isinstance(error, ParseError):
            location = parse_location(error)
            if location:
                msg += f"\n  at {location}"
        if isinstance(error, StateError):
            msg += "\n  Run the earlier pipeline stages first."
        if verbose and error.details:
            msg += f"\nDetails: {error.details}"
        return msg
    if verbose:
        return f"Unexpected Error ({error.__class__.__name__}): {str(error)}\n{traceback.format_exc()}"
    return f"Unexpected Error: {str(error)}"


def log_exception(logger: logging.Logger,
                  error: Exception,
                  level: int = logging.ERROR,
                  context: Optional[Dict[str, Any]] = None) -> None:
    """Log an exception once, with its details as context

    Known errors carry their own context, so the traceback is only attached
    for unexpected errors or when the logger is at DEBUG.
    """
    if isinstance(error, CRBHError):
        ctx = {**(error.details or {}), **(context or {})}
        logger.log(level, f"{error.__class__.__name__}: {error.message}",
                   extra={"context": ctx} if ctx else None,
                   exc_info=logger.isEnabledFor(logging.DEBUG))
    else:
        logger.log(level, f"Unexpected error: {str(error)}",
                   extra={"context": context} if context else None,
                   exc_info=True)


def cli_error_handler(func: Callable[..., int]) -> Callable[..., int]:
    """Wrap a CLI entry point: report failures and exit with their code"""
    @wraps(func)
    def wrapper(*args, **kwargs) -> int:
        logger = logging.getLogger(func.__module__)
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt as e:
            logger.info("Operation cancelled by user")
            print("\nOperation cancelled by user", file=sys.stderr)
            sys.exit(exit_code_for(e))
        except CRBHError as e:
            log_exception(logger, e)
            print(format_error(e), file=sys.stderr)
            sys.exit(exit_code_for(e))
        except Exception as e:
            log_exception(logger, e)
            print(format_error(e), file=sys.stderr)
            print("See log for details. Run with --verbose for more information.", file=sys.stderr)
            sys.exit(exit_code_for(e))
    return wrapper
