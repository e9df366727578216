# src/lucaslehmer/dataio.py
from __future__ import annotations

import re
from importlib.resources import as_file
from importlib.resources import files as pkg_files
from pathlib import Path

from lucaslehmer.workspace import workspace_dir


def data_path(rel: str) -> Path:
    """
    Resolve a data file path with override semantics:

      1) <Workspace>/data/<rel>  (if present)
      2) Packaged resource: lucaslehmer/data/<rel>

    Returns a filesystem Path you can open.
    """
    rel = rel.lstrip("/\\")
    p = workspace_dir() / "data" / rel
    if p.exists():
        return p

    ref = pkg_files("lucaslehmer") / "data" / rel
    # materialize to a real path (needed for zip/egg resources)
    with as_file(ref) as real:
        return Path(real)


def read_bfile(name: str) -> list[tuple[int, int]]:
    """
    Parse an OEIS-style b-file into [(index, value), ...].

    Blank lines and '#' comments (whole-line or trailing) are ignored, as are
    lines that do not start with two integers. A missing file gives [].
    """
    try:
        text = data_path(Path(name).name).read_text(encoding="utf-8")
    except FileNotFoundError:
        return []

    _EXPECTED_COLS = 2
    rows: list[tuple[int, int]] = []
    for raw in text.splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        parts = re.split(r"[,\s]+", line)
        if len(parts) < _EXPECTED_COLS:
            continue
        try:
            rows.append((int(parts[0]), int(parts[1])))
        except ValueError:
            continue
    return rows
