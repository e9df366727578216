from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib as toml
except ImportError:
    import tomli as toml  # type: ignore

from lucaslehmer.runtime import BACKENDS
from lucaslehmer.utility import UserInputError, flatten_dotted
from lucaslehmer.workspace import workspace_dir


@dataclass
class Settings:
    """A validated profile: its settings tables plus [PROFILE] name and description."""
    data: dict[str, Any]
    name: str
    description: str
    path: Path | None = None

    def as_dict(self) -> dict[str, Any]:
        return self.data


# --- Paths -----------------------------------------------------------------

def _profiles_dir() -> Path:
    return workspace_dir() / "profiles"


def _profile_path(name: str) -> Path:
    return _profiles_dir() / f"{name}.toml"


# --- I/O -------------------------------------------------------------------


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return toml.load(f)
    except toml.TOMLDecodeError as e:
        lineno = getattr(e, "lineno", None)
        colno = getattr(e, "colno", None)
        msg = getattr(e, "msg", str(e))
        where = []
        if lineno is not None:
            where.append(f"line {lineno}")
        if colno is not None:
            where.append(f"column {colno}")
        loc = f" (at {', '.join(where)})" if where else ""
        # No traceback chaining
        raise UserInputError(f"reading {path.name}: {msg}{loc}.") from None


# --- Metadata handling -----------------------------------------------------


def _sanitize_oneline(s: str) -> str:
    return " ".join(str(s).split()) or "(no description)"


def _split_profile_data(raw: dict[str, Any], fallback_name: str) -> tuple[dict[str, Any], str, str]:
    """
    Extract [PROFILE] meta (name, description) and return:
      (settings_without_profile, resolved_name, resolved_description)
    """
    meta = raw.get("PROFILE") or {}
    data = {k: v for k, v in raw.items() if k != "PROFILE"}

    name = str(meta.get("name") or fallback_name)
    description = _sanitize_oneline(str(meta.get("description") or ""))

    return data, name, description


# --- Validation ------------------------------------------------------------

# dotted key -> smallest allowed value
_INT_KEYS = {
    "BEHAVIOUR.MAX_EXPONENT": 1,
    "BEHAVIOUR.PROGRESS_MIN_EXPONENT": 0,
    "SCAN.WORKERS": 1,
}


def _validate(data: dict[str, Any], fname: str) -> None:
    """Raise UserInputError naming the file and key for any unusable value."""
    flat = flatten_dotted(data)

    backend = flat.get("ARITHMETIC.BACKEND")
    if backend is not None and str(backend).lower() not in BACKENDS:
        raise UserInputError(f"{fname}: ARITHMETIC.BACKEND must be 'gmpy2' or 'int', got {backend!r}.")

    for key, lowest in _INT_KEYS.items():
        if key not in flat:
            continue
        v = flat[key]
        # TOML booleans are ints to Python
        if isinstance(v, bool) or not isinstance(v, int):
            raise UserInputError(f"{fname}: {key} must be an integer, got {v!r}.")
        if v < lowest:
            raise UserInputError(f"{fname}: {key} must be >= {lowest}, got {v}.")


# --- Public API ------------------------------------------------------------


def list_all_profiles() -> list[str]:
    """Return the list of available profile *names* (filename stems)."""
    pdir = _profiles_dir()
    if not pdir.exists():
        return []
    return sorted(p.stem for p in pdir.glob("*.toml"))


def list_profiles_with_descriptions() -> list[tuple[str, str]]:
    """
    Return [(name, description), ...] for all profiles.
    Profiles lacking [PROFILE] get "(no description)".
    """
    items: list[tuple[str, str]] = []
    for p in _profiles_dir().glob("*.toml"):
        try:
            raw = _load_toml(p)
        except UserInputError:
            # Best-effort listing; fall back to filename
            items.append((p.stem, "(unreadable profile)"))
            continue
        _, nm, desc = _split_profile_data(raw, p.stem)
        items.append((nm, desc))
    return sorted(items, key=lambda t: t[0].lower())


def has_profile(name: str) -> bool:
    return bool(name) and _profile_path(name).exists()


def load_settings(name: str | None) -> Settings:
    """
    Load and validate profiles/<name>.toml (name defaults to "default").

    Raises UserInputError when the file is missing, is not valid TOML, or holds
    a value the runner cannot use (unknown backend, WORKERS < 1, ...).
    """
    if not name:
        name = "default"

    path = _profile_path(name)
    if not path.exists():
        raise UserInputError(f"Profile '{name}' not found at {path}")

    raw = _load_toml(path)
    data, resolved_name, description = _split_profile_data(raw, path.stem)

    _validate(data, path.name)

    return Settings(
        data=data,
        name=resolved_name,
        description=description,
        path=path,
    )


def _current_profile_path() -> Path:
    p = _profiles_dir()
    p.mkdir(parents=True, exist_ok=True)
    return p / ".current"


def read_current_profile() -> str | None:
    try:
        s = _current_profile_path().read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return s[:-5] if s.lower().endswith(".toml") else (s or None)


def write_current_profile(name: str) -> None:
    nm = (name or "").strip()
    if nm.lower().endswith(".toml"):
        nm = nm[:-5]
    _current_profile_path().write_text(nm, encoding="utf-8")
