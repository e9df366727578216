# src/lucaslehmer/fmt.py
from __future__ import annotations

import re
from decimal import Decimal, localcontext

from lucaslehmer.runtime import CFG
from lucaslehmer.utility import dec_digits

# Single source of truth for ANSI stripping
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

LOG10_2 = Decimal(2).ln() / Decimal(10).ln()


def abbr_int_fast(n: int, head: int = 10, tail: int = 10, threshold: int = 35, ellipsis: str = "…") -> str:
    """Abbreviate very large ints as first<head>…last<tail> without str(n)."""
    if n == 0:
        return "0"

    sign = "-" if n < 0 else ""
    a = -n if n < 0 else n

    # If not long enough, fall back to normal str()
    d = dec_digits(a)
    if d <= threshold or head + tail >= d:
        return sign + str(a)

    first = a // 10 ** (d - head)
    last = a % 10 ** tail
    return f"{sign}{first}{ellipsis}{last:0{tail}d}"


def mersenne_leading_digits(p: int, k: int = 20) -> int:
    """First k decimal digits of 2^p - 1 from the fractional part of p*log10(2)."""
    with localcontext() as ctx:
        # k digits + safety margin
        ctx.prec = k + 10
        x = Decimal(p) * LOG10_2
        f = x - x.to_integral_value(rounding="ROUND_FLOOR")
        return int((Decimal(10) ** (f + (k - 1))).to_integral_value(rounding="ROUND_FLOOR"))


def mersenne_trailing_digits(p: int, k: int = 20) -> int:
    """Last k decimal digits of 2^p - 1, computed with modular exponentiation."""
    mod = 10 ** k
    return (pow(2, p, mod) - 1) % mod


RES64_MASK = (1 << 64) - 1


def res64(residue: int) -> str:
    """Lowest 64 bits of a residue as 16 upper-case hex digits (GIMPS style)."""
    return f"{int(residue) & RES64_MASK:016X}"


def abbr_mersenne_number(p: int, *, k: int = 10) -> str:
    """2^p - 1 in decimal, abbreviated as first k…last k digits once it is long."""
    if p < 4 * k:
        return str((1 << p) - 1)
    ELLIPSIS = CFG("FORMATTING.ELLIPSIS", "…")
    lead = mersenne_leading_digits(p, k)
    tail = mersenne_trailing_digits(p, k)
    return f"{lead:0{k}d}{ELLIPSIS}{tail:0{k}d}"


def format_duration(seconds: float) -> str:
    """ms if <1s; s with millis if <60s; else mm:ss.mmm (and hh:mm:ss.mmm if ≥1h)."""
    MAX_SECONDS = 60
    if seconds < 1:
        ms = round(seconds * 1000)
        return f"{ms} ms"
    if seconds < MAX_SECONDS:
        return f"{seconds:.3f} s"
    m, s = divmod(seconds, MAX_SECONDS)
    if m < MAX_SECONDS:
        return f"{int(m)}:{s:06.3f}"               # mm:ss.mmm
    h, m = divmod(int(m), MAX_SECONDS)
    return f"{h}:{m:02d}:{s:06.3f}"                # hh:mm:ss.mmm


def strip_ansi(s: str | None) -> str:
    """Return s with ANSI escape sequences removed."""
    return "" if s is None else ANSI_RE.sub("", s)
