# -----------------------------------------------------------------------------
#  sequence.py
#  The Lucas–Lehmer recurrence s_0 = 4, s_{i+1} = s_i^2 - 2 (mod 2^p - 1)
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections.abc import Callable, Iterator

from lucaslehmer.field import MersenneField
from lucaslehmer.utility import check_exponent

SEED = 4

ProgressCallback = Callable[[int, int], None]


def residues(p: int, *, backend: str = "gmpy2") -> Iterator[int]:
    """
    Yield s_0, s_1, ..., s_{p-2}, each reduced modulo 2^p - 1.

    For p = 1 and p = 2 only s_0 is produced (4 mod 1 = 0, 4 mod 3 = 1).
    """
    p = check_exponent(p)
    field = MersenneField(p, backend)
    s = field.element(SEED)
    yield int(s)
    for _ in range(p - 2):
        s = field.reduce(s * s - 2)
        yield int(s)


def residue(p: int, *, backend: str = "gmpy2", progress: ProgressCallback | None = None) -> int:
    """
    Final Lucas–Lehmer residue s_{p-2} mod 2^p - 1.

    progress(done, total) is called roughly every 1% of the iterations and
    once at the end; it does not influence the result.
    """
    p = check_exponent(p)
    field = MersenneField(p, backend)
    reduce = field.reduce
    s = field.element(SEED)

    total = max(p - 2, 0)
    stride = max(1, total // 100)
    for i in range(1, total + 1):
        s = reduce(s * s - 2)
        if progress is not None and i % stride == 0:
            progress(i, total)
    if progress is not None and total % stride:
        progress(total, total)
    return int(s)
