# src/lucaslehmer/display.py
from __future__ import annotations

from colorama import Fore, Style

from lucaslehmer.config import list_profiles_with_descriptions, read_current_profile
from lucaslehmer.fmt import abbr_int_fast, abbr_mersenne_number, format_duration
from lucaslehmer.known import mersenne_index
from lucaslehmer.output_manager import OutputManager
from lucaslehmer.primality import LLResult
from lucaslehmer.runtime import CFG
from lucaslehmer.utility import mersenne_digits, mersenne_exponent_if_exact

ALIGN_WIDTH = 22  # label column


def _row(label: str, value: str) -> str:
    return f"  {label + ':':<{ALIGN_WIDTH}}{value}"


def verdict(res: LLResult) -> str:
    """Short colored outcome; never claims compositeness for p <= 2."""
    if not res.meaningful:
        return f"{Fore.YELLOW}Not meaningful (p ≤ 2){Style.RESET_ALL}"
    if res.passed:
        return f"{Fore.GREEN + Style.BRIGHT}Prime (residue 0){Style.RESET_ALL}"
    return f"{Fore.RED}Not certified (residue ≠ 0){Style.RESET_ALL}"


def _notes(res: LLResult) -> list[str]:
    notes: list[str] = []
    if res.p == 1:
        notes.append("p = 1: 2^1 − 1 = 1; the test is undefined and returns False by convention.")
    elif res.p == 2:
        notes.append("p = 2: the recurrence does not run and s₀ = 4 ≡ 1 (mod 3).")
        notes.append("2^2 − 1 = 3 is prime; the test cannot certify it. Handle p = 2 separately.")
    elif not res.exponent_prime:
        notes.append(f"p = {res.p} is composite, so 2^p − 1 has a factor 2^d − 1 for every divisor d of p.")
    elif not res.passed:
        notes.append("A non-zero residue is not used as a proof of compositeness here.")
    q = mersenne_exponent_if_exact(res.p)
    if q is not None and q >= 2:
        notes.append(f"p = {res.p} = 2^{q} − 1, so 2^p − 1 is the double Mersenne number MM{q}.")
    if res.passed and res.meaningful and not res.known:
        notes.append(f"{Fore.MAGENTA + Style.BRIGHT}p = {res.p} is not in the list of known Mersenne exponents!{Style.RESET_ALL}")
    return notes


def print_result(res: LLResult, *, show_details: bool = True, om: OutputManager | None = None) -> None:
    """Pretty print one Lucas–Lehmer run."""
    out = om.write if om is not None else print

    out(f"{Fore.CYAN + Style.BRIGHT}Lucas–Lehmer test:{Style.RESET_ALL}")
    out(_row("Exponent", f"p = {res.p} ({'prime' if res.exponent_prime else 'not prime'})"))
    out(_row("Number", f"{Fore.YELLOW + Style.BRIGHT}{abbr_mersenne_number(res.p)}{Style.RESET_ALL}"))
    out(_row("Digits", f"Count={mersenne_digits(res.p)}"))
    out(_row("Iterations", str(max(res.p - 2, 0))))
    if CFG("OUTPUT.SHOW_RESIDUE", True):
        ell = CFG("FORMATTING.ELLIPSIS", "…")
        out(_row("Residue", abbr_int_fast(res.residue, ellipsis=ell)))
    out(_row("Res64", res.res64))
    out(_row("Result", verdict(res)))

    if show_details:
        idx = mersenne_index(res.p)
        if idx is not None:
            out(_row("Known", f"Mersenne prime #{idx} (OEIS A000043)"))
        out(_row("Backend", res.backend))
        out(_row("Time", format_duration(res.elapsed)))
        for note in _notes(res):
            out(f"{Fore.GREEN}  Details: {note}{Style.RESET_ALL}")


def print_scan_table(results: list[LLResult], *, om: OutputManager | None = None) -> None:
    """Compact one-line-per-exponent table for ranges and multi-exponent runs."""
    out = om.write if om is not None else print

    out(f"{Fore.CYAN + Style.BRIGHT}{'p':>10}  {'res64':<16}  {'time':>12}  result{Style.RESET_ALL}")
    for res in results:
        out(f"{res.p:>10}  {res.res64:<16}  {format_duration(res.elapsed):>12}  {verdict(res)}")

    found = [r.p for r in results if r.certified_prime]
    total = sum(r.elapsed for r in results)
    out("")
    out(f"Tested {len(results)} exponent(s) in {format_duration(total)} (cpu); "
        f"Mersenne primes: {', '.join(map(str, found)) if found else 'none'}")


def print_profiles_with_descriptions() -> None:
    pairs = list_profiles_with_descriptions()
    if not pairs:
        print("\nAvailable profiles: (none)")
        return

    current = read_current_profile()
    lines = []
    for name, desc in pairs:
        mark = "→" if current and name == current else " "
        lines.append(f"{mark} {name:13} — {desc}")
    print("\nAvailable profiles:\n  " + "\n  ".join(lines))


def show_intro_help() -> None:
    lines = [
        "",
        f"{Fore.GREEN}Lucas–Lehmer test for Mersenne numbers 2^p − 1{Style.RESET_ALL}",
        f"{'-'*78}",
        "Runs s₀ = 4, sᵢ₊₁ = sᵢ² − 2 (mod 2^p − 1) for p − 2 steps.",
        "For p > 2 a final residue of 0 proves that 2^p − 1 is prime.",
        "",
        f"{Fore.MAGENTA + Style.BRIGHT}Usage in interactive mode:{Style.RESET_ALL}",
        " • Enter an exponent p (e.g. 127, 4_423) or a Mersenne number as 2**p-1.",
        " • Enter a profile name to switch profiles.",
        "",
        " • Valid commands are:",
        "   debug on|off|status to switch debug mode on, off or show current status.",
        "   h or help           to show this help.",
        "   hist                to show the exponents tested in this session.",
        "   p                   to list the profiles.",
        "   q or quit           to quit.",
        "",
    ]
    print("\n".join(lines))
