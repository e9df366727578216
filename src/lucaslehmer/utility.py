# -----------------------------------------------------------------------------
#  Utility functions
# -----------------------------------------------------------------------------

from __future__ import annotations

import re
from typing import Any

import gmpy2


class UserInputError(Exception):
    pass


class InvalidExponentError(UserInputError, ValueError):
    """Exponent outside the domain p >= 1 (or not an integer at all)."""


_MERSENNE_EXPR_RE = re.compile(r"^2(?:\*\*|\^)(\d+)-1$")
_GROUPED_RE = re.compile(r"^\d{1,3}(?:[_,]\d{3})+$")


def check_exponent(p: Any) -> int:
    """Return p as int, or raise InvalidExponentError when p is not a positive integer."""
    if isinstance(p, gmpy2.mpz):
        p = int(p)
    # bool is an int subclass; True as an exponent is almost certainly a bug
    if isinstance(p, bool) or not isinstance(p, int):
        raise InvalidExponentError(f"exponent must be an integer, got {type(p).__name__}")
    if p < 1:
        raise InvalidExponentError(f"exponent must be >= 1, got {p}")
    return p


def parse_exponent(text: str) -> int:
    """
    Parse user input into an exponent p.

    Accepts a plain integer ("127", "1_279", "11,213") or the Mersenne
    form "2**p-1" / "2^p-1", from which p is extracted.
    """
    s = (text or "").strip().replace(" ", "")
    if not s:
        raise UserInputError("empty exponent.")

    m = _MERSENNE_EXPR_RE.match(s)
    if m:
        return check_exponent(int(m.group(1)))

    if _GROUPED_RE.match(s):
        s = re.sub(r"[_,]", "", s)
    if re.fullmatch(r"[+-]?\d+", s):
        return check_exponent(int(s))

    raise UserInputError(f"Invalid input: '{text}' is not an exponent or 2**p-1.")


def looks_like_exponent(text: str) -> bool:
    """Syntax check only: '0' and '-3' look like exponents and fail later in parse_exponent."""
    s = (text or "").strip().replace(" ", "")
    return bool(_MERSENNE_EXPR_RE.match(s) or _GROUPED_RE.match(s) or re.fullmatch(r"[+-]?\d+", s))


def dec_digits(n: int) -> int:
    """Exact decimal digit count without str(); handles n >= 0."""
    n = abs(n)
    if n == 0:
        return 1
    # floor(log10(n)) ~= floor(bitlen*log10(2))
    bl = n.bit_length()
    est = int((bl * 30103) // 100000)
    p10 = 10 ** est
    if n < p10:
        while n < p10:
            est -= 1
            p10 //= 10
    else:
        p10 *= 10
        while n >= p10:
            est += 1
            p10 *= 10
    return est + 1


def mersenne_digits(p: int) -> int:
    """Decimal digits of 2^p - 1 (same as 2^p, which is never a power of ten)."""
    return int(p * 0.30102999566398120) + 1


def mersenne_exponent_if_exact(n: int) -> int | None:
    """Return p when n == 2^p - 1 exactly (p >= 1), else None."""
    m = int(n) + 1
    if m <= 1:
        return None
    if m & (m - 1):
        return None
    return m.bit_length() - 1


def flatten_dotted(d: dict, prefix: str = "") -> dict[str, Any]:
    """{'A': {'B': 1}} -> {'A.B': 1}"""
    out: dict[str, Any] = {}
    for k, v in (d or {}).items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out


def typename(x: Any) -> str:
    return type(x).__name__
