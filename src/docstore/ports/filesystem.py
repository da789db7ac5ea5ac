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

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, List

from ..domain.models import DocumentEntry, DocumentStat


class FilesystemPort(ABC):
    """Abstract interface for filesystem access."""

    @abstractmethod
    def walk(
        self,
        root: Path,
        *,
        skip_stat: bool = False,
        skip_symbolic_link: bool = False,
    ) -> Iterator[DocumentEntry]:
        """
        Lazily yield entries under `root` (paths relative to `root`).

        Ordering contract relied upon by ScanService:
          * a directory is yielded before any of its descendants
          * the children of one directory are yielded contiguously,
            directories before files
          * a failed stat is embedded in the entry, never raised

        May raise only when a directory's own children cannot be enumerated.
        """
        raise NotImplementedError

    @abstractmethod
    def stat(self, path: Path) -> DocumentStat:
        """Return a stat snapshot; absent/unreadable paths carry `error`."""
        raise NotImplementedError

    @abstractmethod
    def list_dir(
        self, path: Path, *, depth: int = 0, skip_stat: bool = False
    ) -> List[DocumentEntry]:
        """Single-level listing of `path`, directories first."""
        raise NotImplementedError

    @abstractmethod
    def read_text(self, path: Path, encoding: str = "utf-8") -> str:
        raise NotImplementedError

    @abstractmethod
    def write_text(self, path: Path, text: str, encoding: str = "utf-8") -> None:
        raise NotImplementedError

    @abstractmethod
    def append_text(self, path: Path, chunk: str, encoding: str = "utf-8") -> None:
        raise NotImplementedError

    @abstractmethod
    def make_dirs(self, path: Path) -> None:
        """Create `path` and any missing parents; no-op when it exists."""
        raise NotImplementedError

    @abstractmethod
    def remove_file(self, path: Path) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_dir(self, path: Path) -> None:
        """Remove an empty directory; raises DirectoryNotEmpty otherwise."""
        raise NotImplementedError
