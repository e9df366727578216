# tests/test_sequence.py
"""
Tests for the Lucas–Lehmer recurrence.

Run: pytest -v
"""

from __future__ import annotations

import gmpy2
import pytest

from lucaslehmer.sequence import residue, residues
from lucaslehmer.utility import InvalidExponentError


def _reference_residue(p: int) -> int:
    """Textbook version with % for cross-checking."""
    m = (1 << p) - 1
    s = 4 % m
    for _ in range(p - 2):
        s = (s * s - 2) % m
    return s


# (p, final residue)
KNOWN_RESIDUES = [
    (1, 0),      # 4 mod 1
    (2, 1),      # 4 mod 3; the loop does not run
    (3, 0),
    (4, 14),
    (5, 0),
    (6, 23),
    (7, 0),
    (11, 1736),  # M11 = 23 × 89
    (13, 0),
    (17, 0),
    (19, 0),
    (31, 0),
]


@pytest.mark.parametrize("backend", ["gmpy2", "int"])
@pytest.mark.parametrize("p,expected", KNOWN_RESIDUES, ids=[f"p={p}" for p, _ in KNOWN_RESIDUES])
def test_known_residues(p, expected, backend):
    assert residue(p, backend=backend) == expected


@pytest.mark.parametrize("p", [23, 29, 37, 41, 43, 47, 53, 59, 67, 71, 73, 79, 83, 97, 101, 103, 109, 113])
def test_matches_reference_implementation(p):
    r = residue(p)
    assert r == _reference_residue(p)
    assert r != 0


@pytest.mark.parametrize("backend", ["gmpy2", "int"])
def test_m127(backend):
    assert residue(127, backend=backend) == 0


def test_residue_is_plain_int_and_deterministic():
    a = residue(89)
    b = residue(89)
    assert a == b == 0
    assert type(residue(11)) is int


def test_backends_agree():
    for p in (61, 67, 257, 521, 523):
        assert residue(p, backend="gmpy2") == residue(p, backend="int")


def test_accepts_mpz_exponent():
    assert residue(gmpy2.mpz(7)) == 0


def test_residues_sequence_m11():
    assert list(residues(11)) == [4, 14, 194, 788, 701, 119, 1877, 240, 282, 1736]


@pytest.mark.parametrize("p", [1, 2, 3, 5, 20, 61])
def test_residues_length_and_last_term(p):
    seq = list(residues(p))
    assert len(seq) == max(p - 2, 0) + 1
    assert seq[-1] == residue(p)
    m = (1 << p) - 1
    assert all(0 <= s < m for s in seq)


def test_progress_every_iteration_for_small_p():
    calls: list[tuple[int, int]] = []
    residue(127, progress=lambda done, total: calls.append((done, total)))
    assert len(calls) == 125
    assert calls[0] == (1, 125)
    assert calls[-1] == (125, 125)


def test_progress_ends_at_total():
    calls: list[tuple[int, int]] = []
    residue(1000, progress=lambda done, total: calls.append((done, total)))
    dones = [d for d, _ in calls]
    assert dones == sorted(dones)
    assert calls[-1] == (998, 998)
    assert len(calls) == 998 // 9 + 1


def test_progress_not_called_without_iterations():
    calls = []
    residue(2, progress=lambda *a: calls.append(a))
    assert calls == []


@pytest.mark.parametrize("p", [0, -5])
def test_invalid_exponent(p):
    with pytest.raises(InvalidExponentError):
        residue(p)
    with pytest.raises(InvalidExponentError):
        next(residues(p))
