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

import errno
import logging
import os
from pathlib import Path
from typing import Iterator, List

from ...domain.errors import DirectoryNotEmpty, FilesystemError
from ...domain.models import DocumentEntry, DocumentStat
from ...ports.filesystem import FilesystemPort

logger = logging.getLogger(__name__)


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def _is_file(entry: os.DirEntry) -> bool:
    try:
        return entry.is_file()
    except OSError:
        return False


class LocalFS(FilesystemPort):
    """
    Local filesystem adapter.

    `walk()` is depth-first: it lists one directory, yields all of its
    children as one contiguous group (directories first, listing order
    otherwise), then descends into each child directory in that order.
    Children are stat'ed one at a time as they are pulled, so a consumer
    that stops early leaves the rest of the tree untouched.
    Symbolic links are reported but never descended into.
    """

    def walk(
        self,
        root: Path,
        *,
        skip_stat: bool = False,
        skip_symbolic_link: bool = False,
    ) -> Iterator[DocumentEntry]:
        root = Path(root)
        # (absolute dir, root-relative prefix, depth of its children)
        stack: list[tuple[Path, str, int]] = [(root, "", 0)]
        while stack:
            directory, prefix, depth = stack.pop()
            try:
                listing = self._listing(directory)
            except OSError as e:
                if not prefix:
                    raise FilesystemError(f"Cannot list {directory}: {e}") from e
                logger.warning("LocalFS.walk: skipping unreadable directory %s: %s", directory, e)
                continue

            subdirs: list[tuple[Path, str, int]] = []
            for item in listing:
                path = f"{prefix}/{item.name}" if prefix else item.name
                stat = self._entry_stat(item, skip_stat)
                if skip_symbolic_link and stat.is_symbolic_link:
                    continue
                entry = DocumentEntry(path=path, name=item.name, depth=depth, stat=stat)
                if stat.is_directory and not stat.is_symbolic_link:
                    subdirs.append((directory / item.name, path, depth + 1))
                yield entry

            stack.extend(reversed(subdirs))

    def stat(self, path: Path) -> DocumentStat:
        try:
            st = os.stat(path)
        except OSError as e:
            return DocumentStat.from_error(e)
        return DocumentStat.from_os(st, is_symbolic_link=os.path.islink(path))

    def list_dir(
        self, path: Path, *, depth: int = 0, skip_stat: bool = False
    ) -> List[DocumentEntry]:
        return [
            DocumentEntry(
                path=item.name,
                name=item.name,
                depth=depth,
                stat=self._entry_stat(item, skip_stat),
            )
            for item in self._listing(Path(path))
        ]

    def read_text(self, path: Path, encoding: str = "utf-8") -> str:
        return Path(path).read_text(encoding=encoding)

    def write_text(self, path: Path, text: str, encoding: str = "utf-8") -> None:
        Path(path).write_text(text, encoding=encoding)

    def append_text(self, path: Path, chunk: str, encoding: str = "utf-8") -> None:
        with open(path, "a", encoding=encoding) as fh:
            fh.write(chunk)

    def make_dirs(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def remove_file(self, path: Path) -> None:
        Path(path).unlink()

    def remove_dir(self, path: Path) -> None:
        try:
            Path(path).rmdir()
        except OSError as e:
            if e.errno in (errno.ENOTEMPTY, errno.EEXIST):
                raise DirectoryNotEmpty(f"Directory is not empty: {path}") from e
            raise

    # --- helpers ------------------------------------------------------------

    def _listing(self, directory: Path) -> List[os.DirEntry]:
        with os.scandir(directory) as it:
            items = list(it)
        # stable: directories first, listing order otherwise
        items.sort(key=lambda item: not _is_dir(item))
        return items

    def _entry_stat(self, item: os.DirEntry, skip_stat: bool) -> DocumentStat:
        try:
            is_link = item.is_symlink()
        except OSError:
            is_link = False
        if skip_stat:
            try:
                return DocumentStat(
                    is_directory=item.is_dir(),
                    is_file=item.is_file(),
                    is_symbolic_link=is_link,
                )
            except OSError as e:
                return DocumentStat.from_error(e)
        try:
            return DocumentStat.from_os(item.stat(), is_symbolic_link=is_link)
        except OSError as e:
            logger.debug("LocalFS: stat failed for %s: %s", item.path, e)
            return DocumentStat.from_error(e, is_file=_is_file(item))
