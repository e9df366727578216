from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("lucaslehmer")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .config import has_profile, load_settings, read_current_profile
from .field import MersenneField, reduce
from .known import is_known_mersenne_exponent, known_mersenne_exponents
from .primality import LLResult, is_probably_mersenne_prime, prime_exponents, run_test, scan
from .runtime import APPLY, CFG
from .sequence import residue, residues
from .utility import InvalidExponentError, UserInputError, mersenne_exponent_if_exact
from .workspace import workspace_dir

__all__ = [
    "APPLY",
    "CFG",
    "InvalidExponentError",
    "LLResult",
    "MersenneField",
    "UserInputError",
    "__version__",
    "has_profile",
    "is_known_mersenne_exponent",
    "is_probably_mersenne_prime",
    "known_mersenne_exponents",
    "load_settings",
    "mersenne_exponent_if_exact",
    "prime_exponents",
    "read_current_profile",
    "reduce",
    "residue",
    "residues",
    "run_test",
    "scan",
    "workspace_dir",
]
