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
import posixpath
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from ..adapters.formats import default_loaders, default_savers
from ..adapters.fs.local_fs import LocalFS
from ..domain.errors import DirectoryNotEmpty, NotFound
from ..domain.models import DocumentEntry, DocumentStat, ScanResult
from ..ports.filesystem import FilesystemPort
from ..ports.formats import FormatHandler
from ..ports.store import DocumentStorePort
from .access_guard import DEFAULT_CONFIG_FILENAME, AccessGuard, AccessLevel
from .path_resolver import PathLike, PathResolver
from .scan_service import ScanService

logger = logging.getLogger(__name__)


class DocumentStore(DocumentStorePort):
    """
    Document store over a directory tree.

    URIs are `/`-separated and relative to `root` (itself relative to `cwd`).
    Every load/save/write/drop goes through the AccessGuard first.

    Caches (both private to this instance):
      * `meta`: uri -> DocumentStat of documents this store saved, wrote or
        stat'ed; it also decides whether a directory still has tracked
        descendants when dropping it.
      * `data`: uri -> last loaded document value, invalidated on
        save/write/drop.
    """

    def __init__(
        self,
        root: PathLike = ".",
        *,
        cwd: Optional[PathLike] = None,
        fs: Optional[FilesystemPort] = None,
        loaders: Optional[Iterable[FormatHandler]] = None,
        savers: Optional[Iterable[FormatHandler]] = None,
        encoding: str = "utf-8",
        config_filename: str = DEFAULT_CONFIG_FILENAME,
        scanner: Optional[ScanService] = None,
    ) -> None:
        self._fs = fs or LocalFS()
        self._resolver = PathResolver(root, cwd)
        self._guard = AccessGuard(self._resolver, config_filename)
        self._config_filename = config_filename
        self._scanner = scanner or ScanService(self._fs)
        self.loaders: List[FormatHandler] = list(loaders or default_loaders())
        self.savers: List[FormatHandler] = list(savers or default_savers())
        self.encoding = encoding
        self.meta: Dict[str, DocumentStat] = {}
        self.data: Dict[str, Any] = {}

    @property
    def root(self) -> str:
        return self._resolver.root

    @property
    def cwd(self) -> str:
        return self._resolver.cwd

    # --- path helpers -------------------------------------------------------

    def resolve(self, *parts: PathLike) -> str:
        return self._resolver.resolve(*parts)

    def absolute(self, *parts: PathLike) -> str:
        return self._resolver.absolute(*parts)

    def relative(self, start: PathLike, target: PathLike) -> str:
        return self._resolver.relative(start, target)

    def extname(self, uri: str) -> str:
        return self._resolver.extname(uri)

    def ensure_access(self, uri: str, level: Union[str, AccessLevel] = AccessLevel.READ) -> bool:
        return self._guard.ensure_access(uri, level)

    def _key(self, uri: str) -> str:
        return self.resolve(uri)

    def _path(self, uri: str) -> Path:
        return Path(self.absolute(uri))

    # --- stat ---------------------------------------------------------------

    def stat_document(self, uri: str) -> DocumentStat:
        return self._fs.stat(self._path(uri))

    def stat(self, uri: str) -> DocumentStat:
        """Cached stat; only existing documents are remembered."""
        key = self._key(uri)
        cached = self.meta.get(key)
        if cached is not None:
            return cached
        stat = self.stat_document(uri)
        if stat.exists:
            self.meta[key] = stat
        return stat

    # --- CRUD ---------------------------------------------------------------

    def load_document(self, uri: str, default: Any = "") -> Any:
        self.ensure_access(uri, AccessLevel.READ)
        path = self._path(uri)
        stat = self._fs.stat(path)
        if not stat.exists or stat.is_directory:
            return default
        ext = self.extname(uri)
        for loader in self.loaders:
            if not loader.accepts(ext):
                continue
            document = loader.decode(self._fs.read_text(path, self.encoding))
            self.data[self._key(uri)] = document
            return document
        logger.debug("DocumentStore.load_document: no loader for %s", uri)
        return default

    def get(self, uri: str, default: Any = "") -> Any:
        """Like load_document, but served from the document cache when possible."""
        key = self._key(uri)
        if key in self.data:
            return self.data[key]
        return self.load_document(uri, default)

    def save_document(self, uri: str, document: Any) -> bool:
        self.ensure_access(uri, AccessLevel.WRITE)
        path = self._path(uri)
        ext = self.extname(uri)
        for saver in self.savers:
            if not saver.accepts(ext):
                continue
            payload = saver.encode(document)
            if payload is None:
                continue
            self._fs.make_dirs(path.parent)
            self._fs.write_text(path, payload, self.encoding)
            self._touch(uri)
            logger.debug("DocumentStore.save_document: %s via %s", uri, saver.name)
            return True
        logger.warning("DocumentStore.save_document: no format handler accepted %s", uri)
        return False

    def write_document(self, uri: str, chunk: str) -> bool:
        self.ensure_access(uri, AccessLevel.WRITE)
        path = self._path(uri)
        self._fs.make_dirs(path.parent)
        self._fs.append_text(path, chunk, self.encoding)
        self._touch(uri)
        return True

    def drop_document(self, uri: str) -> bool:
        self.ensure_access(uri, AccessLevel.DELETE)
        key = self._key(uri)
        path = self._path(uri)
        stat = self._fs.stat(path)
        if not stat.exists:
            return False

        if stat.is_directory:
            prefix = "" if key == "." else key + "/"
            nested = [k for k in self.meta if k.startswith(prefix) and k != key]
            if nested:
                raise DirectoryNotEmpty(
                    f"Directory has children, delete them first: {uri} ({len(nested)} tracked)"
                )
            self._fs.remove_dir(path)
            self._forget(key)
            return True

        self._fs.remove_file(path)
        dropped = not self._fs.stat(path).exists
        if dropped:
            self._forget(key)
        return dropped

    def _touch(self, uri: str) -> None:
        key = self._key(uri)
        self.meta[key] = self.stat_document(uri)
        self.data.pop(key, None)

    def _forget(self, key: str) -> None:
        self.meta.pop(key, None)
        self.data.pop(key, None)

    # --- listing & scanning -------------------------------------------------

    def list_dir(
        self, uri: str = ".", *, depth: int = 0, skip_stat: bool = False
    ) -> List[DocumentEntry]:
        self.ensure_access(uri, AccessLevel.READ)
        path = self._path(uri)
        stat = self._fs.stat(path)
        if not stat.is_directory:
            raise NotFound(f"Directory not found: {uri}")
        return self._fs.list_dir(path, depth=depth, skip_stat=skip_stat)

    def find(self, uri: str = ".", **options: Any) -> Iterator[ScanResult]:
        """
        Stream a ScanService scan of the directory `uri`.

        Accepts the ScanService.scan keyword options (limit, sort, order,
        skip_stat, skip_symbolic_link).
        """
        self.ensure_access(uri, AccessLevel.READ)
        return self._scanner.scan(self._path(uri), **options)

    def extract(self, uri: str) -> DocumentStore:
        """
        New store rooted at the sub-directory `uri`, sharing this store's
        filesystem and handlers and carrying the cached entries below it
        (keys re-rooted).
        """
        self.ensure_access(uri, AccessLevel.READ)
        key = self._key(uri)
        child = DocumentStore(
            posixpath.join(self.root, key),
            cwd=self.cwd,
            fs=self._fs,
            loaders=self.loaders,
            savers=self.savers,
            encoding=self.encoding,
            config_filename=self._config_filename,
            scanner=self._scanner,
        )
        prefix = "" if key == "." else key + "/"
        for k, stat in self.meta.items():
            if prefix and k.startswith(prefix):
                child.meta[k[len(prefix):]] = stat
            elif not prefix:
                child.meta[k] = stat
        for k, value in self.data.items():
            if prefix and k.startswith(prefix):
                child.data[k[len(prefix):]] = value
            elif not prefix:
                child.data[k] = value
        return child
