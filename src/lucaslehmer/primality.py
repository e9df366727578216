# -----------------------------------------------------------------------------
#  primality.py
#  Lucas–Lehmer primality test driver for Mersenne numbers 2^p - 1
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from functools import partial
from time import perf_counter

from sympy import isprime, primerange

from lucaslehmer.fmt import res64 as _res64
from lucaslehmer.known import is_known_mersenne_exponent
from lucaslehmer.sequence import ProgressCallback, residue
from lucaslehmer.utility import check_exponent

"""
Only one direction of the Lucas–Lehmer theorem is relied on: for p > 2, a
zero residue certifies that 2^p - 1 is prime. A non-zero residue is reported
as "not certified", and nothing is claimed for p <= 2.

Boundary behaviour:
  p <= 0   InvalidExponentError
  p == 1   False (sentinel; 2^1 - 1 = 1 is not prime, and the test is undefined)
  p == 2   False, although 2^2 - 1 = 3 is prime: the recurrence never runs and
           s_0 = 4 ≡ 1 (mod 3). Callers that care must special-case p = 2.
"""

@dataclass(frozen=True)
class LLResult:
    p: int
    residue: int
    passed: bool            # residue == 0 and p > 1
    meaningful: bool        # False for p <= 2: the outcome carries no guarantee
    exponent_prime: bool    # 2^p - 1 can only be prime when p is
    known: bool             # p is a listed Mersenne prime exponent
    elapsed: float = 0.0
    backend: str = "gmpy2"

    @property
    def certified_prime(self) -> bool:
        """True only when the test passed for p > 2."""
        return self.passed and self.meaningful

    @property
    def res64(self) -> str:
        """Lowest 64 bits of the final residue as 16 hex digits."""
        return _res64(self.residue)


def is_probably_mersenne_prime(p: int, *, backend: str = "gmpy2") -> bool:
    """
    Run the Lucas–Lehmer test for 2^p - 1.

    Returns True when the final residue is zero. For p > 2 a True result means
    2^p - 1 is prime; False means it was not certified. p = 1 returns False as
    a fixed sentinel, and p = 2 returns False even though 3 is prime (see the
    module notes). Raises InvalidExponentError for p <= 0.
    """
    p = check_exponent(p)
    if p < 2:
        return False
    return residue(p, backend=backend) == 0


def run_test(p: int, *, backend: str = "gmpy2", progress: ProgressCallback | None = None) -> LLResult:
    p = check_exponent(p)
    t0 = perf_counter()
    r = residue(p, backend=backend, progress=progress)
    elapsed = perf_counter() - t0
    return LLResult(
        p=p,
        residue=r,
        passed=p >= 2 and r == 0,
        meaningful=p > 2,
        exponent_prime=bool(isprime(p)),
        known=is_known_mersenne_exponent(p),
        elapsed=elapsed,
        backend=backend,
    )


def scan(exponents: Iterable[int], *, workers: int = 1, backend: str = "gmpy2") -> list[LLResult]:
    """
    Test every exponent independently; results come back in input order.

    workers > 1 spreads the exponents over a process pool. The recurrence for
    a single p always runs sequentially inside one worker.
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    exps = [check_exponent(p) for p in exponents]
    one = partial(run_test, backend=backend)
    if workers == 1 or len(exps) <= 1:
        return [one(p) for p in exps]
    with ProcessPoolExecutor(max_workers=min(workers, len(exps))) as pool:
        return list(pool.map(one, exps))


def prime_exponents(lo: int, hi: int) -> list[int]:
    """Prime p with lo <= p <= hi (only these can give a Mersenne prime)."""
    return [int(p) for p in primerange(max(lo, 2), hi + 1)]
