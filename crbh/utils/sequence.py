#!/usr/bin/env python3
"""
Sequence utilities for the CRBH pipeline
Functions for inspecting FASTA inputs before database construction
"""
import os
import logging
from typing import Iterator, Tuple

from Bio import SeqIO

from crbh.exceptions import FileOperationError

logger = logging.getLogger("crbh.utils.sequence")

NUCLEOTIDE = 'nucl'
PROTEIN = 'prot'

BASE_CHARS = set('ACGTUacgtu')
UNKNOWN_BASE_CHARS = set('Nn')


def guess_sequence_type(sequence: str, threshold: float = 0.9, window: int = 1000) -> str:
    """Guess whether a sequence is nucleotide or protein

    Only the first `window` residues are examined. N is left out of the
    count entirely, and the sequence is called nucleotide when ACGTU make up
    more than `threshold` of the rest. A sample of nothing but N is protein.

    Returns:
        NUCLEOTIDE or PROTEIN
    """
    sample = str(sequence)[:window]
    known = len(sample) - sum(1 for residue in sample if residue in UNKNOWN_BASE_CHARS)
    if known <= 0:
        return PROTEIN
    base_count = sum(1 for residue in sample if residue in BASE_CHARS)
    return NUCLEOTIDE if base_count / known > threshold else PROTEIN


def iter_sequence_types(fasta_path: str) -> Iterator[Tuple[str, str]]:
    """Yield (record id, sequence type) for every record of a FASTA file"""
    if not os.path.exists(fasta_path):
        raise FileOperationError(f"FASTA file not found: {fasta_path}", {'path': fasta_path})

    for record in SeqIO.parse(fasta_path, "fasta"):
        yield record.id, guess_sequence_type(str(record.seq))


def fasta_base_name(fasta_path: str) -> str:
    """File name without its last extension, used to name BLAST databases"""
    name = os.path.basename(fasta_path)
    stem, ext = os.path.splitext(name)
    return stem if ext else name
