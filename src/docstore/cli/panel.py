# Licensed under the Apache License, Version 2.0
from __future__ import annotations

import time
from typing import Callable, Dict, Optional

import psutil
from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from ..domain.models import DocumentEntry, ScanResult
from ..services.path_resolver import PathResolver

MIB = 1024 * 1024
GIB = 1024 * MIB
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp"}

Predicate = Callable[[DocumentEntry], bool]

# Named byte totals shown under the status line.
GROUPS: Dict[str, Predicate] = {
    "git": lambda e: "/.git/" in f"./{e.path}",
    "bin": lambda e: "/bin/" in f"./{e.path}",
    "node": lambda e: "/node_modules/" in f"./{e.path}",
    "images": lambda e: PathResolver.extname(e.name) in IMAGE_EXTENSIONS,
    "> 100G": lambda e: e.stat.size > 100 * GIB,
    "> 10G": lambda e: e.stat.size > 10 * GIB,
    "> 1G": lambda e: e.stat.size > GIB,
    "> 100M": lambda e: e.stat.size > 100 * MIB,
}


def _rss() -> int:
    return psutil.Process().memory_info().rss


def mib(size: float) -> str:
    return f"{size / MIB:.2f} MiB"


class StatusPanel:
    """
    Accumulates what the `find` command shows for every emitted entry:
    count, elapsed time, dir/file totals, average RSS, error count, the
    current path and the GROUPS byte totals (files only, errored entries
    excluded).
    """

    def __init__(
        self,
        groups: Optional[Dict[str, Predicate]] = None,
        *,
        memory_sampler: Callable[[], int] = _rss,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.groups = dict(GROUPS if groups is None else groups)
        self.group_totals: Dict[str, int] = {}
        self.count = 0
        self._memory_sampler = memory_sampler
        self._clock = clock
        self._started = clock()
        self._ram_sum = 0
        self._ram_samples = 0

    @property
    def elapsed_ms(self) -> int:
        return int((self._clock() - self._started) * 1000)

    @property
    def average_ram(self) -> float:
        return self._ram_sum / self._ram_samples if self._ram_samples else 0.0

    def update(self, result: ScanResult) -> None:
        self.count += 1
        self._ram_sum += self._memory_sampler()
        self._ram_samples += 1
        entry = result.file
        if entry.is_directory or entry.stat.error is not None:
            return
        for name, matches in self.groups.items():
            if matches(entry):
                self.group_totals[name] = self.group_totals.get(name, 0) + entry.stat.size

    def status_line(self, result: ScanResult) -> str:
        return " ".join(
            [
                f"{self.count:,}",
                f"[{self.elapsed_ms:,} ms]",
                f"[{mib(result.total_size.dirs)} / {mib(result.total_size.files)}]",
                f"[{int(self.average_ram / MIB):,} MiB RAM]",
                f"[!{len(result.errors)}]",
                f"[{result.progress:.0%}]",
                f"({result.file.path})",
            ]
        )

    def render(self, result: Optional[ScanResult] = None) -> Panel:
        if result is None:
            return Panel(Text("waiting for entries..."), title="docstore find")
        lines = [Text(self.status_line(result), no_wrap=True, overflow="ellipsis")]
        for name, size in self.group_totals.items():
            lines.append(Text(f"{name}: {mib(size)}"))
        return Panel(Group(*lines), title="docstore find")
