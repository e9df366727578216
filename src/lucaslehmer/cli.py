# src/lucaslehmer/cli.py

"""
Lucas–Lehmer test for Mersenne numbers

Description:
    Runs the Lucas–Lehmer recurrence for 2^p - 1 and reports whether the
    final residue is zero (2^p - 1 is then prime, for p > 2). Single
    exponents get a detailed report; several exponents or a range get a
    compact table and may be spread over worker processes.

usage: see lucaslehmer -h
"""

from __future__ import annotations

import argparse
import faulthandler
import os
import platform
import sys
import textwrap
import threading
import time
import traceback
from importlib.resources import files as pkg_files
from typing import NamedTuple

from colorama import Fore, Style
from colorama import init as colorama_init

from lucaslehmer import __version__ as _ver
from lucaslehmer import config as CONFIG
from lucaslehmer.display import (
    print_profiles_with_descriptions,
    print_result,
    print_scan_table,
    show_intro_help,
)
from lucaslehmer.output_manager import OutputManager, validate_output_setting
from lucaslehmer.primality import LLResult, prime_exponents, run_test, scan
from lucaslehmer.progress import Progress
from lucaslehmer.runtime import APPLY, BACKENDS, CFG, ensure_runtime_deps
from lucaslehmer.runtime import current as _rt_current
from lucaslehmer.runtime import reset as _rt_reset
from lucaslehmer.utility import (
    UserInputError,
    flatten_dotted,
    looks_like_exponent,
    parse_exponent,
    typename,
)
from lucaslehmer.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir

COMMANDS = ("init", "where", "profiles", "active")


# In memory session history
class HistoryItem(NamedTuple):
    p: int
    passed: bool
    profile: str | None
    timestamp: float


_HISTORY: list[HistoryItem] = []


def add_to_history(res: LLResult, profile: str | None = None) -> None:
    _HISTORY.append(HistoryItem(p=res.p, passed=res.certified_prime, profile=profile, timestamp=time.time()))


def get_history() -> list[HistoryItem]:
    return list(_HISTORY)


def _install_loud_error_handlers(debug: bool) -> None:
    if not debug:
        return
    faulthandler.enable()

    def _excepthook(exc_type, exc, tb):
        sys.stderr.write("\n[UNCAUGHT EXCEPTION]\n")
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)
        sys.stderr.flush()
    sys.excepthook = _excepthook

    # worker threads (progress output, executor management)
    def _thread_excepthook(args):
        sys.stderr.write("\n[UNCAUGHT THREAD EXCEPTION]\n")
        traceback.print_exception(args.exc_type, args.exc_value, args.exc_traceback, file=sys.stderr)
        sys.stderr.flush()
    threading.excepthook = _thread_excepthook


def _print_user_error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    prefix = f"{Fore.RED}Error:{Style.RESET_ALL}"
    if not (msg.startswith("Invalid input:") or msg.startswith("Error:")):
        msg = f"{prefix} {msg}"
    print(msg, file=sys.stderr)


def _debug(msg: str) -> None:
    if _rt_current().debug:
        print(f"{Fore.BLUE}[debug]{Style.RESET_ALL} {msg}", file=sys.stderr)


def _resolve_inputs(items: list[str]) -> tuple[str | None, list[int]]:
    """Return (profile_or_command, exponents) from the positionals.

    Rules:
      - the first item is a profile/command if it does not parse as an exponent
      - every remaining item must be an exponent (p or 2**p-1)
    """
    if not items:
        return None, []
    head, rest = items[0], items[1:]
    name = None
    if not looks_like_exponent(head):
        name, items = head, rest
        if name in COMMANDS:
            return name, []
    return name, [parse_exponent(s) for s in items]


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    commands:
      init
          Create the workspace folders and copy packaged profiles/data if missing.

      init overwrite
          Meant for developers. Requires environment variable LUCASLEHMER_DEV=1.
          Replaces the workspace profiles and data with the packaged copies.

      profiles
          List available profiles.

      where
          Show the workspace and package paths.

    examples:
      lucaslehmer 127
      lucaslehmer 2**521-1 --no-details
      lucaslehmer --range 2 2300 --workers 4
      lucaslehmer pure-python 4423
    """)

    p = argparse.ArgumentParser(
        prog="lucaslehmer",
        description="Lucas–Lehmer primality test for Mersenne numbers 2^p − 1",
        usage=(
            "lucaslehmer [profile] [p ...] [--range LO HI] [--all] [--backend {gmpy2,int}]\n"
            "                   [--workers N] [--output OUTPUT] [--quiet] [--no-details] [--debug]\n"
            "       lucaslehmer init | where | profiles\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("items", nargs="*", metavar="[profile] p",
                   help="optional profile name followed by exponents p (or 2**p-1)")
    p.add_argument("--range", nargs=2, type=int, metavar=("LO", "HI"), default=None,
                   help="test the prime exponents LO ≤ p ≤ HI")
    p.add_argument("--all", action="store_true", help="with --range, include composite exponents")
    p.add_argument("--backend", choices=BACKENDS, default=None,
                   help="big-integer backend (default: profile ARITHMETIC.BACKEND)")
    p.add_argument("--workers", type=int, default=None,
                   help="worker processes for multi-exponent runs (default: profile SCAN.WORKERS)")
    p.add_argument("--output", default=None, help="Write results to a file (also prints unless --quiet)")
    p.add_argument("--quiet", action="store_true", help="Suppress progress and screen output")
    p.add_argument("--no-details", action="store_true", help="Omit timings, notes and backend details")
    p.add_argument("--debug", action="store_true", help="Show internal trace info and full tracebacks")
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")

    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    try:
        return _main_impl(argv)
    except UserInputError as e:
        _print_user_error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        debug = "--debug" in (argv if argv is not None else sys.argv)
        if debug:
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


def _configure_text_streams() -> None:
    # Respect explicit user choice
    if os.environ.get("PYTHONIOENCODING"):
        return
    # Only touch redirected output (pipes/files), leave TTY as-is
    if sys.stdout.isatty() or not hasattr(sys.stdout, "reconfigure"):
        return
    enc = (sys.stdout.encoding or "").lower()
    if platform.system() == "Windows" or enc in ("", "ascii", "us-ascii"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        sys.stderr.reconfigure(encoding="utf-8", errors="replace")


def _select_profile_name(explicit: str | None) -> str:
    """
    Precedence:
      1) explicit profile positional
      2) last used (from workspace)
      3) 'default'
    """
    if explicit:
        return explicit
    last = CONFIG.read_current_profile()
    if last and CONFIG.has_profile(last):
        return last
    return "default"


def _apply_profile(name: str) -> None:
    selected = CONFIG.load_settings(name)
    APPLY(selected)

    if _rt_current().debug:
        _debug(f"active profile: {selected.name}")
        if selected.path:
            _debug(f"profile file: {selected.path}")
        flat = flatten_dotted(selected.as_dict())
        for k in sorted(flat, key=str.lower):
            v = CFG(k, None)
            print(f"        {k:.<40} {v!r} ({typename(v)})", file=sys.stderr)


def _run_command(cmd: str, items: list[str]) -> int:
    _TWO_ARGS = 2
    if cmd == "init":
        if len(items) == _TWO_ARGS and items[1] == "overwrite":
            if os.environ.get("LUCASLEHMER_DEV") != "1":
                print("Refusing to overwrite: set LUCASLEHMER_DEV=1 to enable developer overwrite.")
                return 2
            ws, copied = seed_workspace(overwrite=True)
            print(f"Workspace ready at: {ws} (overwrote existing files)")
        else:
            ws, _, copied = ensure_workspace_seeded()
            print(f"Workspace ready at: {ws}")
        print(f"Copied -> profiles: {copied.get('profiles', 0)}, data: {copied.get('data', 0)}")
        return 0
    if cmd == "where":
        print(f"Workspace: {workspace_dir()}")
        print(f"Package:   {pkg_files('lucaslehmer')}")
        return 0
    if cmd == "profiles":
        print_profiles_with_descriptions()
        return 0
    # active
    print(f"Active profile: {CONFIG.read_current_profile() or 'default'}")
    return 0


def _check_limit(exponents: list[int]) -> None:
    limit = int(CFG("BEHAVIOUR.MAX_EXPONENT", 1_000_000))
    too_big = [p for p in exponents if p > limit]
    if too_big:
        raise UserInputError(
            f"exponent {too_big[0]} exceeds BEHAVIOUR.MAX_EXPONENT={limit}. "
            "Increase the limit in the profile to run it."
        )


def _run_single(p: int, *, backend: str, quiet: bool, show_details: bool, om: OutputManager) -> LLResult:
    show_bar = not quiet and p >= int(CFG("BEHAVIOUR.PROGRESS_MIN_EXPONENT", 20_000))
    bar = Progress(max(p - 2, 1), enabled=show_bar, label=f"M{p}")
    try:
        res = run_test(p, backend=backend, progress=bar if show_bar else None)
    finally:
        bar.done()
    _debug(f"p={p} backend={backend} elapsed={res.elapsed:.6f}s res64={res.res64}")
    print_result(res, show_details=show_details, om=om)
    return res


# ---- main ----
def _main_impl(argv=None) -> int:

    colorama_init(autoreset=True)
    _configure_text_streams()

    parser = _build_parser()
    args = parser.parse_args(argv)
    rt = _rt_reset()
    rt.debug = bool(args.debug)

    _install_loud_error_handlers(args.debug)

    if args.all and args.range is None:
        parser.error("--all can only be used together with --range")
    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be >= 1")

    if not ensure_runtime_deps(strict=True):
        return 1

    # Ensure a first-run workspace seed silently
    ensure_workspace_seeded()

    name, exponents = _resolve_inputs(args.items)
    if name in COMMANDS:
        return _run_command(name, args.items)

    if name and not CONFIG.has_profile(name):
        print(f"Unknown profile: '{name}'", file=sys.stderr)
        print("Available profiles:", ", ".join(CONFIG.list_all_profiles()), file=sys.stderr)
        return 2

    profile_name = _select_profile_name(name)
    if not CONFIG.has_profile(profile_name):
        profile_name = "default"
    _apply_profile(profile_name)
    if args.debug:
        rt.debug = True

    if args.range is not None:
        lo, hi = args.range
        if lo > hi:
            raise UserInputError(f"empty range: {lo} > {hi}.")
        if hi < 1:
            raise UserInputError(f"range {lo}..{hi} contains no exponent >= 1.")
        extra = list(range(max(lo, 1), hi + 1)) if args.all else prime_exponents(lo, hi)
        exponents.extend(extra)

    _check_limit(exponents)
    backend = args.backend or rt.backend
    workers = args.workers if args.workers is not None else int(CFG("SCAN.WORKERS", 1))
    _debug(f"backend={backend} workers={workers} exponents={len(exponents)}")

    try:
        output_target = validate_output_setting(args.output)  # None => use profile OUTPUT_FILE
    except ValueError as e:
        print(f"Fatal error in --output: {e}", file=sys.stderr)
        return 1

    def make_output_manager(p: int | None = None) -> OutputManager:
        # read OUTPUT_FILE from runtime each time so profile switches take effect
        target = output_target if output_target is not None else CFG("OUTPUT.OUTPUT_FILE", None)
        return OutputManager(output_file=target, quiet=args.quiet, exponent=p)

    # --- one-shot paths ---
    if len(exponents) == 1 and args.range is None:
        with make_output_manager(exponents[0]) as om:
            _run_single(exponents[0], backend=backend, quiet=args.quiet,
                        show_details=not args.no_details, om=om)
        return 0

    if exponents or args.range is not None:
        if not exponents:
            print("No exponents in range.")
            return 0
        t0 = time.perf_counter()
        results = scan(exponents, workers=workers, backend=backend)
        _debug(f"scan wall time {time.perf_counter() - t0:.3f}s")
        with make_output_manager() as om:
            print_scan_table(results, om=om)
        return 0

    # --- REPL ---
    print(f"{Fore.YELLOW}{Style.BRIGHT}Lucas–Lehmer v{_ver} — Mersenne prime test{Style.RESET_ALL}")
    return _repl(profile_name, args=args, make_output_manager=make_output_manager)


def _repl(current_profile: str, *, args, make_output_manager) -> int:
    while True:
        try:
            prompt = f"\nProfile: {current_profile} — Enter an exponent p, command or profile (h=Help, q=Quit): "
            user_input = input(prompt).strip()

            low = user_input.lower()
            if low in {"", "q", "quit"}:
                break

            if low in {"h", "help"}:
                show_intro_help()
                continue

            if low in {"p", "profiles"}:
                print_profiles_with_descriptions()
                continue

            if low in {"hist", "history"}:
                hist = get_history()
                if not hist:
                    print("History is empty.")
                for item in hist:
                    ts = time.strftime("%H:%M:%S", time.localtime(item.timestamp))
                    verdict = "prime" if item.passed else "-"
                    print(f"{ts}  p={item.p:<10}  {verdict:<6} profile={item.profile or '-'}")
                continue

            if low.startswith("debug"):
                parts = low.split()
                rt = _rt_current()
                if len(parts) == 1 or parts[1] == "status":
                    print(f"Debug is currently {'ON' if rt.debug else 'OFF'}.")
                elif parts[1] == "on":
                    rt.debug = True
                    print("Debug mode enabled for this session.")
                elif parts[1] == "off":
                    rt.debug = False
                    print("Debug mode disabled for this session.")
                else:
                    print("Usage: DEBUG [on|off|status]")
                continue

            if looks_like_exponent(user_input):
                p = parse_exponent(user_input)
                _check_limit([p])
                with make_output_manager(p) as om:
                    res = _run_single(p, backend=args.backend or _rt_current().backend,
                                      quiet=args.quiet, show_details=not args.no_details, om=om)
                add_to_history(res, current_profile)
                continue

            # treat as profile switch
            if CONFIG.has_profile(user_input):
                _apply_profile(user_input)
                CONFIG.write_current_profile(user_input)
                current_profile = user_input
                print(f"Applied profile: {current_profile}")
                continue

            print(f"{Fore.RED}Invalid input: {Style.RESET_ALL}'{user_input}'. Type H for help.")
        except UserInputError as e:
            msg = str(e)
            prefix = f"{Fore.RED}Invalid input:{Style.RESET_ALL}"
            msg = msg.replace("Invalid input:", prefix, 1) if msg.startswith("Invalid input:") else f"{prefix} {msg}"
            print(msg, file=sys.stderr)
        except (EOFError, KeyboardInterrupt):
            print()
            break
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
