# tests/test_cli.py
"""
Command-line tests: exit codes, routing of positionals and output.

Run: pytest -v
"""

from __future__ import annotations

import builtins

import pytest

from lucaslehmer import cli
from lucaslehmer.fmt import strip_ansi
from lucaslehmer.workspace import ensure_workspace_seeded


def _run(capsys, *argv: str) -> tuple[int, str, str]:
    code = cli.main(list(argv))
    cap = capsys.readouterr()
    return code, strip_ansi(cap.out), strip_ansi(cap.err)


def test_single_exponent(capsys):
    code, out, _ = _run(capsys, "127")
    assert code == 0
    assert "Prime (residue 0)" in out
    assert "Mersenne prime #12" in out


def test_mersenne_expression_input(capsys):
    code, out, _ = _run(capsys, "2**11-1", "--no-details")
    assert code == 0
    assert "p = 11" in out
    assert "Not certified" in out


def test_several_exponents_print_a_table(capsys):
    code, out, _ = _run(capsys, "13", "11", "7")
    assert code == 0
    assert "Tested 3 exponent(s)" in out
    assert "Mersenne primes: 13, 7" in out


def test_range_of_prime_exponents(capsys):
    code, out, _ = _run(capsys, "--range", "2", "31")
    assert code == 0
    assert "Tested 11 exponent(s)" in out
    assert "Mersenne primes: 3, 5, 7, 13, 17, 19, 31" in out


def test_range_all_with_workers(capsys):
    code, out, _ = _run(capsys, "--range", "1", "8", "--all", "--workers", "2", "--backend", "int")
    assert code == 0
    assert "Tested 8 exponent(s)" in out
    assert "Mersenne primes: 3, 5, 7" in out


def test_empty_range(capsys):
    code, out, _ = _run(capsys, "--range", "24", "28")
    assert code == 0
    assert "No exponents in range." in out


def test_profile_then_exponent(capsys):
    code, out, _ = _run(capsys, "pure-python", "61")
    assert code == 0
    assert out.split("Backend:")[1].splitlines()[0].strip() == "int"
    assert "Prime (residue 0)" in out


@pytest.mark.parametrize("argv", [["0"], ["-7"], ["7", "banana"], ["--range", "9", "3"]],
                         ids=["zero", "negative", "garbage", "reversed-range"])
def test_user_errors_exit_2(capsys, argv):
    code, _, err = _run(capsys, *argv)
    assert code == 2
    assert "Error:" in err or "Invalid input:" in err


def test_unknown_profile(capsys):
    code, _, err = _run(capsys, "nosuchprofile", "7")
    assert code == 2
    assert "Unknown profile" in err


def test_exponent_limit(capsys):
    code, _, err = _run(capsys, "2000003")
    assert code == 2
    assert "MAX_EXPONENT" in err


def test_all_requires_range():
    with pytest.raises(SystemExit) as exc:
        cli.main(["--all", "7"])
    assert exc.value.code == 2


def test_output_to_directory(capsys, workspace):
    code, _, _ = _run(capsys, "31", "--output", "out/", "--quiet")
    assert code == 0
    assert "Prime (residue 0)" in (workspace / "out" / "M31.txt").read_text(encoding="utf-8")


def test_commands(capsys, workspace):
    code, out, _ = _run(capsys, "where")
    assert code == 0
    assert str(workspace.resolve()) in out

    code, out, _ = _run(capsys, "profiles")
    assert code == 0
    assert "default" in out and "survey" in out

    code, out, _ = _run(capsys, "init")
    assert code == 0
    assert "Workspace ready at" in out


def test_init_overwrite_needs_dev_flag(capsys, monkeypatch):
    monkeypatch.delenv("LUCASLEHMER_DEV", raising=False)
    code, out, _ = _run(capsys, "init", "overwrite")
    assert code == 2
    assert "Refusing to overwrite" in out

    monkeypatch.setenv("LUCASLEHMER_DEV", "1")
    code, out, _ = _run(capsys, "init", "overwrite")
    assert code == 0
    assert "overwrote existing files" in out


def test_interactive_session(capsys, monkeypatch):
    answers = iter(["7", "11", "hist", "debug status", "survey", "banana", "0", "q"])
    monkeypatch.setattr(builtins, "input", lambda prompt="": next(answers))
    code, out, err = _run(capsys)
    assert code == 0
    assert out.count("Lucas–Lehmer test:") == 2
    assert "p=7" in out and "p=11" in out
    assert "Debug is currently OFF." in out
    assert "Applied profile: survey" in out
    assert "Invalid input:" in out      # banana
    assert "exponent must be >= 1" in err


def test_interactive_eof_quits(capsys, monkeypatch):
    def _eof(prompt=""):
        raise EOFError
    monkeypatch.setattr(builtins, "input", _eof)
    code, _, _ = _run(capsys)
    assert code == 0


def test_bad_profile_value_is_a_user_error(capsys, workspace):
    ensure_workspace_seeded()
    prof = workspace / "profiles" / "default.toml"
    prof.write_text(prof.read_text(encoding="utf-8").replace("WORKERS = 1", "WORKERS = 0"), encoding="utf-8")
    code, _, err = _run(capsys, "3", "5")
    assert code == 2
    assert "SCAN.WORKERS must be >= 1" in err
    assert "Unexpected error" not in err
