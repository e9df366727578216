# src/lucaslehmer/progress.py
from __future__ import annotations

import sys
import time

from lucaslehmer.fmt import format_duration


class Progress:
    def __init__(self, total: int, *, enabled: bool = True, label: str = ""):
        self.total = max(1, int(total))
        self.enabled = enabled
        self.label = label
        self.start = time.perf_counter()
        self.last_draw = 0.0
        self.spin = "|/-\\"
        self.i = 0

    def __call__(self, done: int, total: int | None = None) -> None:
        # usable directly as a residue() progress callback
        if total is not None:
            self.total = max(1, int(total))
        self.update(done, self.label)

    def update(self, done: int, label: str = ""):
        THROTTLE = 0.05
        if not self.enabled:
            return
        now = time.perf_counter()
        if now - self.last_draw < THROTTLE and done < self.total:  # throttle to avoid flicker
            return
        self.last_draw = now
        self.i = (self.i + 1) % len(self.spin)
        frac = min(max(done / self.total, 0.0), 1.0)
        pct = int(frac * 100)
        bar_len = 24
        fill = int(frac * bar_len)
        bar = "#" * fill + "-" * (bar_len - fill)
        eta = ""
        if 0 < frac < 1:
            eta = "  eta " + format_duration((now - self.start) * (1 - frac) / frac)
        msg = f"\r[{self.spin[self.i]}] [{bar}] {pct:3d}%  {label[:40]}{eta}"
        sys.stdout.write(msg)
        sys.stdout.flush()

    def done(self):
        if not self.enabled:
            return
        sys.stdout.write("\r" + " " * 80 + "\r")
        sys.stdout.flush()
