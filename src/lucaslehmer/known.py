# -----------------------------------------------------------------------------
#  known.py
#  Exponents of the known Mersenne primes (OEIS A000043)
# -----------------------------------------------------------------------------

from __future__ import annotations

from functools import cache

from lucaslehmer.dataio import read_bfile

BFILE = "b000043.txt"


@cache
def known_mersenne_exponents() -> tuple[int, ...]:
    """Sorted exponents p with 2^p - 1 a known prime (workspace copy wins over the packaged one)."""
    return tuple(sorted({v for _, v in read_bfile(BFILE)}))


def is_known_mersenne_exponent(p: int) -> bool:
    return p in known_mersenne_exponents()


def mersenne_index(p: int) -> int | None:
    """1-based position of p in the known list, e.g. 127 -> 12."""
    exps = known_mersenne_exponents()
    try:
        return exps.index(p) + 1
    except ValueError:
        return None
