# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, Generator, Iterator, List, Mapping, Optional, Set, Union

from ..domain.errors import ScanInvariantViolation
from ..domain.models import (
    DocumentEntry,
    ScanOptions,
    ScanResult,
    ScanTotals,
    SortKey,
    SortOrder,
)
from ..ports.filesystem import FilesystemPort

logger = logging.getLogger(__name__)

_SORT_KEYS: Dict[SortKey, Callable[[DocumentEntry], object]] = {
    SortKey.NAME: lambda e: e.name,
    SortKey.MTIME: lambda e: e.stat.mtime_ms,
    SortKey.SIZE: lambda e: e.stat.size,
}


def order_group(
    entries: List[DocumentEntry], sort: SortKey, order: SortOrder
) -> List[DocumentEntry]:
    """
    Sort one sibling group. Ties keep discovery order (also for DESC, since
    `sorted(reverse=True)` is stable). Directories always come first.
    """
    ordered = sorted(entries, key=_SORT_KEYS[sort], reverse=order is SortOrder.DESC)
    dirs = [e for e in ordered if e.is_directory]
    files = [e for e in ordered if not e.is_directory]
    return dirs + files


def _top_segment(path: str) -> str:
    return path.partition("/")[0]


class SiblingBuffer:
    """Holds the entries of the one sibling group (same parent, same depth) still open."""

    def __init__(self) -> None:
        self.parent_path: Optional[str] = None
        self.depth: Optional[int] = None
        self._entries: List[DocumentEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def belongs(self, entry: DocumentEntry) -> bool:
        return (
            bool(self._entries)
            and entry.depth == self.depth
            and entry.parent_path == self.parent_path
        )

    def open(self, entry: DocumentEntry) -> None:
        self.parent_path = entry.parent_path
        self.depth = entry.depth
        self._entries = [entry]

    def add(self, entry: DocumentEntry) -> None:
        self._entries.append(entry)

    def drain(self) -> List[DocumentEntry]:
        entries, self._entries = self._entries, []
        return entries


class AggregateTracker:
    """
    Running totals of one scan.

    `dirs` maps every emitted directory to the bytes of the files emitted
    below it so far; `top` does the same per top-level directory. Entries
    whose stat carries an error only land in `errors`.

    `snapshot_*()` return frozen copies. A copy is taken at most once per
    change of the underlying map, so consecutive results that did not touch
    a map share the same snapshot.
    """

    def __init__(self) -> None:
        self.dirs: Dict[str, int] = {}
        self.top: Dict[str, int] = {}
        self.errors: Dict[str, BaseException] = {}
        self._errored_parents: Set[str] = set()
        self._dir_bytes = 0
        self._file_bytes = 0
        self._dirs_snapshot: Optional[Mapping[str, int]] = None
        self._top_snapshot: Optional[Mapping[str, int]] = None
        self._errors_snapshot: Optional[Mapping[str, BaseException]] = None

    @property
    def totals(self) -> ScanTotals:
        return ScanTotals(dirs=self._dir_bytes, files=self._file_bytes)

    def has_directory(self, path: str) -> bool:
        # an errored entry not known to be a file may still be descended into
        return path == "" or path in self.dirs or path in self._errored_parents

    def snapshot_dirs(self) -> Mapping[str, int]:
        if self._dirs_snapshot is None:
            self._dirs_snapshot = MappingProxyType(dict(self.dirs))
        return self._dirs_snapshot

    def snapshot_top(self) -> Mapping[str, int]:
        if self._top_snapshot is None:
            self._top_snapshot = MappingProxyType(dict(self.top))
        return self._top_snapshot

    def snapshot_errors(self) -> Mapping[str, BaseException]:
        if self._errors_snapshot is None:
            self._errors_snapshot = MappingProxyType(dict(self.errors))
        return self._errors_snapshot

    def record(self, entry: DocumentEntry) -> None:
        stat = entry.stat
        if stat.error is not None:
            self.errors[entry.path] = stat.error
            self._errors_snapshot = None
            if not stat.is_file:
                self._errored_parents.add(entry.path)
            return

        if entry.is_directory:
            self.dirs.setdefault(entry.path, 0)
            self.top.setdefault(_top_segment(entry.path), 0)
            self._dirs_snapshot = None
            self._top_snapshot = None
            self._dir_bytes += stat.size
            return

        size = stat.size
        self._file_bytes += size
        if not size:
            return
        parent = entry.parent_path
        while parent:
            if parent in self.dirs:
                self.dirs[parent] += size
                self._dirs_snapshot = None
            parent = parent.rpartition("/")[0]
        if entry.depth > 0:
            bucket = _top_segment(entry.path)
            if bucket in self.top:
                self.top[bucket] += size
                self._top_snapshot = None


class ProgressEstimator:
    """
    Heuristic completion estimate for a walk of unknown size.

    Depth `d` weighs `0.5 ** (d + 1)`. Walking depths from the top, each adds
    `weight * drained / max(discovered, opened)` and the walk stops at the
    first depth that still has undrained groups. Every emitted directory at
    depth `d` announces one expected group at `d + 1`. The published value is
    clamped to be non-decreasing and only changes when a group is drained, so
    it is constant across the entries of one group.

    Empty directories never open a group, so trees with many of them stall
    below 1.0; the value is a hint, not a fraction of work done.
    """

    def __init__(self) -> None:
        self._discovered: Dict[int, int] = defaultdict(int)
        self._discovered[0] = 1
        self._opened: Dict[int, int] = defaultdict(int)
        self._drained: Dict[int, int] = defaultdict(int)
        self._value = 0.0

    @property
    def value(self) -> float:
        return self._value

    def directory_emitted(self, depth: int) -> None:
        self._discovered[depth + 1] += 1

    def group_opened(self, depth: int) -> None:
        self._opened[depth] += 1

    def group_drained(self, depth: int) -> float:
        self._drained[depth] += 1
        self._value = max(self._value, min(1.0, self._estimate()))
        return self._value

    def _estimate(self) -> float:
        value = 0.0
        depth = 0
        while True:
            total = max(self._discovered.get(depth, 0), self._opened.get(depth, 0))
            if total == 0:
                break
            ratio = min(1.0, self._drained.get(depth, 0) / total)
            value += 0.5 ** (depth + 1) * ratio
            if ratio < 1.0:
                break
            depth += 1
        return value


class ScanState:
    """Everything one `scan()` invocation owns; dropped when the generator ends."""

    def __init__(self, options: ScanOptions) -> None:
        self.options = options
        self.buffer = SiblingBuffer()
        self.tracker = AggregateTracker()
        self.progress = ProgressEstimator()
        self.emitted = 0

    @property
    def limit_reached(self) -> bool:
        return 0 <= self.options.limit <= self.emitted


class ScanService:
    """
    Streaming tree scan over a FilesystemPort walker.

      - buffers one sibling group at a time, sorts it, emits it
      - keeps per-directory, per-top-level and global byte totals
      - records per-entry stat errors without stopping
      - aborts with ScanInvariantViolation when a child shows up before its parent
      - stops pulling from the walker as soon as `limit` results were emitted

    Stat work is strictly sequential: the walker is pulled one entry at a time
    and nothing is read ahead beyond the entry that closes the current group.
    """

    def __init__(self, fs: FilesystemPort) -> None:
        self._fs = fs

    def scan(
        self,
        root: Union[str, Path],
        *,
        limit: int = -1,
        sort: Union[str, SortKey] = SortKey.NAME,
        order: Union[str, SortOrder] = SortOrder.ASC,
        skip_stat: bool = False,
        skip_symbolic_link: bool = False,
    ) -> Iterator[ScanResult]:
        """
        Scan the tree rooted at `root`, lazily.

        Options are validated eagerly (ConfigurationError), the walk itself
        only starts on the first `next()`.
        """
        options = ScanOptions.build(
            limit=limit,
            sort=sort,
            order=order,
            skip_stat=skip_stat,
            skip_symbolic_link=skip_symbolic_link,
        )
        return self._stream(Path(root), options)

    def _stream(self, root: Path, options: ScanOptions) -> Iterator[ScanResult]:
        if options.limit == 0:
            return

        state = ScanState(options)
        logger.debug(
            "ScanService.scan: %s (limit=%s sort=%s order=%s)",
            root,
            options.limit,
            options.sort.value,
            options.order.value,
        )
        walker = iter(
            self._fs.walk(
                root,
                skip_stat=options.skip_stat,
                skip_symbolic_link=options.skip_symbolic_link,
            )
        )
        try:
            for entry in walker:
                if entry.path in ("", "."):
                    continue
                if state.buffer.belongs(entry):
                    state.buffer.add(entry)
                    continue
                if len(state.buffer):
                    done = yield from self._flush(state)
                    if done:
                        return
                self._ensure_parent(entry, state)
                state.buffer.open(entry)
                state.progress.group_opened(entry.depth)

            if len(state.buffer):
                yield from self._flush(state)
        finally:
            close = getattr(walker, "close", None)
            if close is not None:
                close()
            logger.debug(
                "ScanService.scan: %s emitted=%d errors=%d",
                root,
                state.emitted,
                len(state.tracker.errors),
            )

    def _ensure_parent(self, entry: DocumentEntry, state: ScanState) -> None:
        if entry.depth > 0 and not state.tracker.has_directory(entry.parent_path):
            logger.error(
                "ScanService.scan: %s arrived before its directory %s",
                entry.path,
                entry.parent_path,
            )
            raise ScanInvariantViolation(entry.parent_path)

    def _flush(self, state: ScanState) -> Generator[ScanResult, None, bool]:
        """Emit the drained group; returns True once the limit is reached."""
        depth = state.buffer.depth if state.buffer.depth is not None else 0
        group = order_group(state.buffer.drain(), state.options.sort, state.options.order)
        progress = state.progress.group_drained(depth)

        for entry in group:
            if state.limit_reached:
                return True
            yield self._emit(entry, state, progress)
        return state.limit_reached

    def _emit(self, entry: DocumentEntry, state: ScanState, progress: float) -> ScanResult:
        if entry.stat.error is not None:
            logger.debug("ScanService.scan: stat error for %s: %s", entry.path, entry.stat.error)
        elif entry.is_directory:
            state.progress.directory_emitted(entry.depth)
        state.tracker.record(entry)
        state.emitted += 1
        return ScanResult(
            file=entry,
            dirs=state.tracker.snapshot_dirs(),
            top=state.tracker.snapshot_top(),
            total_size=state.tracker.totals,
            errors=state.tracker.snapshot_errors(),
            progress=progress,
        )
