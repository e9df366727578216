# -----------------------------------------------------------------------------
#  field.py
#  Residue arithmetic modulo a Mersenne number M_p = 2^p - 1
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import gmpy2

from lucaslehmer.utility import check_exponent

"""
Since 2^p ≡ 1 (mod M_p), any n >= 0 splits as n = hi·2^p + lo with
n ≡ hi + lo (mod M_p). Folding the high bits back onto the low p bits is a
mask and a shift, so reduction never needs a division.
"""

# backend name -> constructor for the big-integer type used inside the loop
BACKEND_TYPES: dict[str, Callable[[int], Any]] = {
    "gmpy2": gmpy2.mpz,
    "int": int,
}


def backend_type(backend: str) -> Callable[[int], Any]:
    try:
        return BACKEND_TYPES[backend]
    except KeyError:
        names = ", ".join(sorted(BACKEND_TYPES))
        raise ValueError(f"unknown arithmetic backend {backend!r} (expected one of: {names})") from None


class MersenneField:
    """
    Reduction modulo M_p = 2^p - 1 using only AND, shift, add and compare.

    The mask (which equals M_p) is stored in the backend's integer type so the
    whole recurrence runs on one type.
    """

    __slots__ = ("backend", "mask", "p", "zero")

    def __init__(self, p: int, backend: str = "gmpy2"):
        self.p = check_exponent(p)
        self.backend = backend
        num = backend_type(backend)
        self.mask = num((1 << self.p) - 1)
        self.zero = num(0)

    def __repr__(self) -> str:
        return f"MersenneField(p={self.p}, backend={self.backend!r})"

    @property
    def modulus(self) -> int:
        return int(self.mask)

    def element(self, n: int) -> Any:
        """Canonical residue of n, in the backend's integer type."""
        return self.reduce(backend_type(self.backend)(n))

    def reduce(self, n: Any) -> Any:
        """
        Return the residue r of n with 0 <= r < M_p.

        Negative n is handled by reducing -n and reflecting it (M_p - r), so
        n = -1 gives M_p - 1 and n = -2 gives M_p - 2.
        """
        if n < 0:
            r = self.reduce(-n)
            return r if r == 0 else self.mask - r

        p, mask = self.p, self.mask
        # n >> p < n whenever n >= 2^p, so each pass strictly shrinks n
        while n > mask:
            n = (n & mask) + (n >> p)
        if n == mask:
            return self.zero
        return n


def reduce(p: int, n: int, *, backend: str = "gmpy2") -> int:
    """One-shot reduction of n modulo 2^p - 1, returned as int."""
    return int(MersenneField(p, backend).reduce(n))
