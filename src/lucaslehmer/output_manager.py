# output_manager.py

import os

from lucaslehmer.fmt import strip_ansi
from lucaslehmer.workspace import workspace_dir


def resolve_output_path(path: str, workspace_root: str) -> str:
    """
    Resolve user-provided output path.

    Rules:
    - '~' expanded to user home
    - Absolute paths unchanged
    - Relative paths are relative to workspace_root
    """
    if not path:
        raise ValueError("Output path is empty")

    path = os.path.expanduser(path)
    if os.path.isabs(path):
        return os.path.normpath(path)
    return os.path.normpath(os.path.join(workspace_root, path))


def validate_output_setting(value: str | None) -> str | None:
    """None/"" → no override; otherwise reject names that cannot be files."""
    if value is None:
        return None
    v = str(value).strip()
    if not v:
        return None
    if any(ch in v for ch in "\0\n\r"):
        raise ValueError(f"invalid characters in output path {value!r}")
    return v


class OutputManager:
    """
    Handles all printing/output, to screen and/or file.

    Usage:
        # Split mode (one file per exponent):
        om = OutputManager(output_file="results/", exponent=127)
        om.write("Hello")   # prints and buffers; results/M127.txt written on close()
        om.close()

        # Single file (append all runs to one file):
        om = OutputManager(output_file="results/all.txt")
        om.write("Hello")   # prints and appends
        om.close()
    """

    def __init__(self, output_file: str | None = None, quiet: bool = False, exponent: int | None = None):
        """
        Parameters:
            output_file:
                None or ""       => screen only
                endswith "/"     => per-exponent files M<p>.txt in that dir
                path/to/file.txt => append all runs to this file
            quiet: if True, no output to screen (only to file)
            exponent: used for the filename in per-exponent mode
        """
        self.quiet = quiet
        self.output_file = output_file or ""
        self.exponent = exponent
        self._buffer: list[str] = []

        self._mode: str = "none"     # "none" | "split" | "single"
        self._split_path: str | None = None
        self._single_path: str | None = None
        self._closed = False

        root = str(workspace_dir())
        if self.output_file.endswith(("/", "\\")) or self.output_file in (".", "./"):
            directory = resolve_output_path(self.output_file, root)
            os.makedirs(directory, exist_ok=True)
            name = f"M{exponent}.txt" if exponent is not None else "scan.txt"
            self._mode = "split"
            self._split_path = os.path.join(directory, name)

        elif self.output_file:
            path = resolve_output_path(self.output_file, root)
            parent = os.path.dirname(path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            self._mode = "single"
            self._single_path = path

    def write(self, *args, sep: str = " ", end: str = "\n") -> None:
        """Write to screen and file (if configured)."""
        text = sep.join(str(a) for a in args) + end
        self._buffer.append(text)

        if not self.quiet:
            print(text, end="")

        if self._mode == "single" and self._single_path:
            with open(self._single_path, "a", encoding="utf-8") as fh:
                fh.write(strip_ansi(text))
        # split mode is written once in close()

    def getvalue(self) -> str:
        """Returns everything written (with color codes)."""
        return "".join(self._buffer)

    def close(self) -> None:
        """Flush buffered output to the per-exponent file, or add a separator in single-file mode."""
        if self._closed:
            return
        self._closed = True

        if self._mode == "split" and self._split_path and self._buffer:
            with open(self._split_path, "w", encoding="utf-8") as fh:
                fh.write(strip_ansi("".join(self._buffer)))
            return

        if self._mode == "single" and self._single_path and self._buffer:
            with open(self._single_path, "a", encoding="utf-8") as fh:
                fh.write("\n")  # one empty line between runs

    def __enter__(self) -> "OutputManager":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
