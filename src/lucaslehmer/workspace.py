from __future__ import annotations

import os
import shutil
from importlib.resources import as_file
from importlib.resources import files as pkg_files
from pathlib import Path

# workspace subdirectory -> file pattern shipped in the package
SUBDIRS = {
    "profiles": "*.toml",
    "data": "b*.txt",
}


def workspace_dir() -> Path:
    """$LUCASLEHMER_HOME, else ~/Documents/LucasLehmer."""
    env = os.environ.get("LUCASLEHMER_HOME")
    if env:
        return Path(env).expanduser().resolve()
    return (Path.home() / "Documents" / "LucasLehmer").resolve()


def _copy_packaged(sub: str, dst: Path, *, overwrite: bool) -> int:
    count = 0
    with as_file(pkg_files("lucaslehmer") / sub) as src:
        src = Path(src)
        if not src.is_dir():
            return 0
        for p in sorted(src.glob(SUBDIRS[sub])):
            # .current and editor backups stay out
            if not p.is_file() or p.name.startswith("."):
                continue
            target = dst / p.name
            if overwrite or not target.exists():
                shutil.copy2(p, target)
                count += 1
    return count


def seed_workspace(*, overwrite: bool = False) -> tuple[Path, dict[str, int]]:
    """
    Copy the packaged profiles and OEIS b-files into the workspace.

    overwrite=False keeps user edits (copy-if-missing); overwrite=True restores
    the shipped versions (``lucaslehmer init overwrite``).

    Returns (workspace_path, {subdir: files_copied}).
    """
    root = workspace_dir()
    copied = dict.fromkeys(SUBDIRS, 0)
    for sub in SUBDIRS:
        dst = root / sub
        dst.mkdir(parents=True, exist_ok=True)
        copied[sub] = _copy_packaged(sub, dst, overwrite=overwrite)
    return root, copied


def ensure_workspace_seeded() -> tuple[Path, bool, dict[str, int]]:
    root, copied = seed_workspace(overwrite=False)
    return root, any(copied.values()), copied
