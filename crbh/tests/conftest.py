#!/usr/bin/env python3
"""
Test configuration and fixtures for crbh tests

Provides hit factories and a synthetic pair of search outputs with a known
outcome: 7 strict reciprocal hits, 70 missed candidate entries and 2
rescued hits.
"""

import pytest
from pathlib import Path
from typing import List, Tuple

from crbh.models.hit import HitRecord


def make_hit(query: str, target: str, length: int = 100, evalue: float = 1e-10,
             identity: float = 90.0, bit_score: float = 200.0) -> HitRecord:
    """Build a hit with plausible coordinates for the given length"""
    return HitRecord(
        query=query, target=target, percent_identity=identity,
        alignment_length=length, mismatches=0, gap_opens=0,
        query_start=1, query_end=length, target_start=1, target_end=length,
        evalue=evalue, bit_score=bit_score
    )


def write_hits(path: Path, hits: List[HitRecord]) -> str:
    path.write_text(''.join(hit.to_line() + '\n' for hit in hits))
    return str(path)


def build_known_scenario() -> Tuple[List[HitRecord], List[HitRecord]]:
    """Forward (query -> target) and reverse (target -> query) hit lists

    Layout:
      q1..q7 <-> t1..t7 are mutual top hits (length 100, e-value 1e-50),
        so the curve only has entries for centres 91..100.
      q1 -> u1 rank 1 qualifies; u1 lists q1 twice (two HSPs), so it is a
        missed candidate twice but can only be rescued once.
      q2 -> u2 rank 1 qualifies once.
      q3 -> u3 rank 1 has a curve length but a weak e-value.
      q4 -> t4 second HSP qualifies but the pair is already strict.
      q8 -> t1 rank 0, t1 lists q8 at rank 1: missed, length 40 has no curve.
      q1..q8 each have 8 length-50 candidates with no curve entry.
      q9 hits a target absent from the reverse search.
      q10 hits t2, which never hits back to q10.
    """
    forward: List[HitRecord] = []
    reverse: List[HitRecord] = []

    for i in range(1, 8):
        forward.append(make_hit(f"q{i}", f"t{i}", length=100, evalue=1e-50))
        if i == 1:
            forward.append(make_hit("q1", "u1", length=100, evalue=1e-80))
        elif i == 2:
            forward.append(make_hit("q2", "u2", length=100, evalue=1e-80))
        elif i == 3:
            forward.append(make_hit("q3", "u3", length=95, evalue=1e-10))
        elif i == 4:
            forward.append(make_hit("q4", "t4", length=100, evalue=1e-60))
        for k in range(1, 9):
            forward.append(make_hit(f"q{i}", f"v{i}_{k}", length=50, evalue=1e-5))

    forward.append(make_hit("q8", "t1", length=40, evalue=1e-20))
    for k in range(1, 9):
        forward.append(make_hit("q8", f"v8_{k}", length=50, evalue=1e-5))

    forward.append(make_hit("q9", "w1", length=100, evalue=1e-90))
    forward.append(make_hit("q10", "t2", length=100, evalue=1e-90))

    for i in range(1, 8):
        reverse.append(make_hit(f"t{i}", f"q{i}", length=100, evalue=1e-50))
        if i == 1:
            reverse.append(make_hit("t1", "q8", length=40, evalue=1e-20))
    reverse.append(make_hit("u1", "q1", length=100, evalue=1e-80))
    reverse.append(make_hit("u1", "q1", length=30, evalue=1e-3))
    reverse.append(make_hit("u2", "q2", length=100, evalue=1e-80))
    reverse.append(make_hit("u3", "q3", length=95, evalue=1e-10))
    for i in range(1, 9):
        for k in range(1, 9):
            reverse.append(make_hit(f"v{i}_{k}", f"q{i}", length=50, evalue=1e-5))

    return forward, reverse


@pytest.fixture
def known_scenario():
    """Forward and reverse hit lists with a known outcome"""
    return build_known_scenario()


@pytest.fixture
def known_scenario_files(tmp_path, known_scenario):
    """The known scenario written as BLAST tabular files"""
    forward, reverse = known_scenario
    return (
        write_hits(tmp_path / "query_into_target.1.blast", forward),
        write_hits(tmp_path / "target_into_query.2.blast", reverse),
    )
