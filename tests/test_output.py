# tests/test_output.py
"""
Tests for formatting, result rendering and the output manager.

Run: pytest -v
"""

from __future__ import annotations

from decimal import getcontext

from lucaslehmer.display import print_result, print_scan_table, verdict
from lucaslehmer.fmt import (
    abbr_int_fast,
    abbr_mersenne_number,
    format_duration,
    mersenne_leading_digits,
    res64,
    strip_ansi,
)
from lucaslehmer.output_manager import OutputManager, resolve_output_path
from lucaslehmer.primality import run_test, scan


def test_abbr_mersenne_number():
    assert abbr_mersenne_number(7) == "127"
    assert abbr_mersenne_number(31) == "2147483647"
    assert abbr_mersenne_number(127) == "1701411834…5884105727"


def test_abbr_int_fast():
    assert abbr_int_fast(12345) == "12345"
    assert abbr_int_fast(-(10**50)) == "-1000000000…0000000000"
    assert abbr_int_fast(2**127 - 1, ellipsis="...") == "1701411834...5884105727"


def test_format_duration():
    assert format_duration(0.5) == "500 ms"
    assert format_duration(1.5) == "1.500 s"
    assert format_duration(75) == "1:15.000"
    assert format_duration(3725) == "1:02:05.000"


def test_verdicts_never_claim_compositeness():
    assert "Prime" in strip_ansi(verdict(run_test(7)))
    assert "Not certified" in strip_ansi(verdict(run_test(11)))
    assert "Not meaningful" in strip_ansi(verdict(run_test(2)))
    assert "composite" not in strip_ansi(verdict(run_test(11))).lower()


def test_print_result_details(capsys):
    print_result(run_test(127))
    out = strip_ansi(capsys.readouterr().out)
    assert "p = 127 (prime)" in out
    assert "1701411834…5884105727" in out
    assert "Count=39" in out
    assert "Iterations:           125" in out
    assert "Prime (residue 0)" in out
    assert "Mersenne prime #12" in out


def test_print_result_p2_note(capsys):
    print_result(run_test(2))
    out = strip_ansi(capsys.readouterr().out)
    assert "Not meaningful" in out
    assert "Handle p = 2 separately" in out


def test_print_result_without_details(capsys):
    print_result(run_test(11), show_details=False)
    out = strip_ansi(capsys.readouterr().out)
    assert "1736" in out
    assert "Backend" not in out


def test_scan_table(capsys):
    print_scan_table(scan([5, 11, 13]))
    out = strip_ansi(capsys.readouterr().out)
    assert "Tested 3 exponent(s)" in out
    assert "Mersenne primes: 5, 13" in out


def test_resolve_output_path(tmp_path):
    assert resolve_output_path("a/b.txt", str(tmp_path)).endswith("b.txt")
    assert resolve_output_path(str(tmp_path / "x.txt"), "/elsewhere") == str(tmp_path / "x.txt")


def test_output_manager_split_mode(workspace, capsys):
    with OutputManager("results/", exponent=127) as om:
        print_result(run_test(127), om=om)
    assert "Prime (residue 0)" in strip_ansi(om.getvalue())
    path = workspace / "results" / "M127.txt"
    text = path.read_text(encoding="utf-8")
    assert "Prime (residue 0)" in text
    assert "\x1b[" not in text
    assert "Prime (residue 0)" in capsys.readouterr().out


def test_output_manager_single_file_quiet(workspace, capsys):
    for p in (3, 11):
        with OutputManager("logs/all.txt", quiet=True, exponent=p) as om:
            print_result(run_test(p), om=om, show_details=False)
    text = (workspace / "logs" / "all.txt").read_text(encoding="utf-8")
    assert text.count("Lucas–Lehmer test:") == 2
    assert capsys.readouterr().out == ""


def test_res64():
    assert res64(0) == "0000000000000000"
    assert res64(1736) == "00000000000006C8"
    assert res64((1 << 70) | 0xBEEF) == "000000000000BEEF"


def test_leading_digits_leave_decimal_context_alone():
    prec = getcontext().prec
    assert mersenne_leading_digits(127, 10) == 1701411834
    assert mersenne_leading_digits(82589933, 5) == 14889
    assert getcontext().prec == prec


def test_double_mersenne_note(capsys):
    print_result(run_test(31))
    out = strip_ansi(capsys.readouterr().out)
    assert "double Mersenne number MM5" in out
    print_result(run_test(61))
    assert "double Mersenne" not in strip_ansi(capsys.readouterr().out)
