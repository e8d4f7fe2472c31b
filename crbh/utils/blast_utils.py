#!/usr/bin/env python3
"""
Readers and writers for BLAST tabular (-outfmt 6) files

Hit lines are parsed strictly: a malformed line aborts the read with a
ParseError instead of being skipped, so no partial hit stream ever reaches
the matcher.
"""

import os
import logging
from typing import Iterable, Iterator, List

import pandas as pd

from crbh.exceptions import FileOperationError, ParseError
from crbh.models.hit import HitRecord
from crbh.models.results import CRBHResult, OUTPUT_COLUMNS

logger = logging.getLogger("crbh.utils.blast_utils")


def parse_tabular_lines(lines: Iterable[str], source: str = "<stream>") -> Iterator[HitRecord]:
    """Parse hit lines, skipping blank lines and '#' comment lines

    Args:
        lines: Iterable of text lines
        source: Name used in error details

    Yields:
        HitRecord per data line

    Raises:
        ParseError: On the first malformed line
    """
    for line_number, line in enumerate(lines, start=1):
        if not line.strip() or line.startswith('#'):
            continue
        try:
            yield HitRecord.from_line(line, line_number)
        except ParseError as e:
            e.details.setdefault('source', source)
            raise ParseError(f"{source}, line {line_number}: {e.message}", e.details) from e


def read_tabular_hits(file_path: str) -> List[HitRecord]:
    """Read every hit from a BLAST tabular file

    Raises:
        FileOperationError: If the file does not exist or cannot be read
        ParseError: If a line is malformed
    """
    if not os.path.exists(file_path):
        raise FileOperationError(f"Hit file not found: {file_path}", {'path': file_path})

    try:
        with open(file_path, 'r') as f:
            hits = list(parse_tabular_lines(f, source=file_path))
    except OSError as e:
        raise FileOperationError(f"Error reading hit file {file_path}: {str(e)}",
                                 {'path': file_path}) from e

    logger.debug(f"Read {len(hits)} hits from {file_path}")
    return hits


def write_reciprocals(result: CRBHResult, file_path: str) -> int:
    """Write reciprocal hits as a tab separated table

    Args:
        result: Final matching result
        file_path: Output path

    Returns:
        Number of rows written
    """
    frame = result.to_dataframe()
    try:
        frame.to_csv(file_path, sep='\t', index=False)
    except OSError as e:
        raise FileOperationError(f"Error writing {file_path}: {str(e)}",
                                 {'path': file_path}) from e
    logger.info(f"Wrote {len(frame)} reciprocal hits to {file_path}")
    return len(frame)


def read_reciprocals(file_path: str) -> pd.DataFrame:
    """Load a table written by write_reciprocals"""
    if not os.path.exists(file_path):
        raise FileOperationError(f"Output file not found: {file_path}", {'path': file_path})
    return pd.read_csv(file_path, sep='\t', dtype={'query': str, 'target': str},
                       usecols=OUTPUT_COLUMNS)
