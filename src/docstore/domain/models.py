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

import os
import stat as statmod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Mapping, Optional

from .errors import ConfigurationError


@dataclass(frozen=True)
class DocumentStat:
    """
    Immutable stat snapshot of one filesystem node.

    Built once at the I/O boundary; consumers never re-query the filesystem.
    A stat carrying `error` describes a node that could not be stat'ed (or is
    absent) and reports `exists == False`.
    """

    size: int = 0
    mtime_ms: float = 0.0
    is_directory: bool = False
    is_file: bool = False
    is_symbolic_link: bool = False
    error: Optional[BaseException] = None

    @property
    def exists(self) -> bool:
        return self.error is None and (self.is_directory or self.is_file)

    @property
    def mtime(self) -> datetime:
        return datetime.fromtimestamp(self.mtime_ms / 1000, tz=timezone.utc)

    @classmethod
    def from_os(cls, st: os.stat_result, *, is_symbolic_link: bool = False) -> DocumentStat:
        mtime_ns = getattr(st, "st_mtime_ns", int(st.st_mtime * 1e9))
        return cls(
            size=int(st.st_size),
            mtime_ms=mtime_ns / 1e6,
            is_directory=statmod.S_ISDIR(st.st_mode),
            is_file=statmod.S_ISREG(st.st_mode),
            is_symbolic_link=is_symbolic_link or statmod.S_ISLNK(st.st_mode),
        )

    @classmethod
    def from_error(cls, error: BaseException, *, is_file: bool = False) -> DocumentStat:
        # `is_file` keeps the entry kind when the listing already told us
        return cls(is_file=is_file, error=error)


@dataclass(frozen=True)
class DocumentEntry:
    """One walked node: root-relative `path` (always `/`-separated), its depth and stat."""

    path: str
    name: str
    depth: int
    stat: DocumentStat

    @property
    def parent_path(self) -> str:
        # lookup key only; "" is the scan root
        head, _, _ = self.path.rpartition("/")
        return head

    @property
    def is_directory(self) -> bool:
        return self.stat.is_directory

    @classmethod
    def from_path(
        cls, path: str, stat: Optional[DocumentStat] = None, depth: Optional[int] = None
    ) -> DocumentEntry:
        path = path.replace("\\", "/").strip("/")
        name = path.rpartition("/")[2]
        if depth is None:
            depth = path.count("/")
        return cls(path=path, name=name, depth=depth, stat=stat or DocumentStat())

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class ScanTotals:
    dirs: int = 0
    files: int = 0


@dataclass(frozen=True)
class ScanResult:
    """
    One emitted scan step.

    `dirs`, `top`, `total_size` and `errors` are snapshots taken when the
    result was emitted; holding on to a result never shows later state.
    Results that did not change a map share one read-only copy of it.
    """

    file: DocumentEntry
    dirs: Mapping[str, int]
    top: Mapping[str, int]
    total_size: ScanTotals
    errors: Mapping[str, BaseException]
    progress: float


class SortKey(str, Enum):
    NAME = "name"
    MTIME = "mtime"
    SIZE = "size"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class ScanOptions:
    limit: int = -1
    sort: SortKey = SortKey.NAME
    order: SortOrder = SortOrder.ASC
    skip_stat: bool = False
    skip_symbolic_link: bool = False

    @classmethod
    def build(
        cls,
        *,
        limit: int = -1,
        sort: str = "name",
        order: str = "asc",
        skip_stat: bool = False,
        skip_symbolic_link: bool = False,
    ) -> ScanOptions:
        """Validate raw option values; raises ConfigurationError on unknown input."""
        try:
            key = SortKey(sort)
        except ValueError:
            raise ConfigurationError(
                f"Unknown sort key: {sort}. Valid options: "
                f"{', '.join(k.value for k in SortKey)}"
            ) from None
        try:
            direction = SortOrder(order)
        except ValueError:
            raise ConfigurationError(
                f"Unknown sort order: {order}. Valid options: "
                f"{', '.join(o.value for o in SortOrder)}"
            ) from None
        limit = int(limit)
        if limit < -1:
            raise ConfigurationError(f"limit must be -1 or >= 0, got {limit}")
        return cls(
            limit=limit,
            sort=key,
            order=direction,
            skip_stat=bool(skip_stat),
            skip_symbolic_link=bool(skip_symbolic_link),
        )
