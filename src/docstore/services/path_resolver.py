# Licensed under the Apache License, Version 2.0
from __future__ import annotations

import os
import posixpath
from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


def to_posix(path: str) -> str:
    """Normalise platform separators to `/`."""
    return path if os.sep == "/" else path.replace(os.sep, "/")


class PathResolver:
    """
    Pure path arithmetic for a store rooted at `root` (itself relative to `cwd`).

    No I/O happens here. All returned paths use `/` as separator.
    """

    def __init__(self, root: PathLike = ".", cwd: Optional[PathLike] = None) -> None:
        self.root = str(root)
        self.cwd = str(cwd) if cwd is not None else os.getcwd()

    def absolute(self, *parts: PathLike) -> str:
        root = self.root.rstrip("/\\") or self.root
        joined = os.path.join(self.cwd, root, *(str(p) for p in parts))
        return to_posix(os.path.abspath(joined))

    def resolve(self, *parts: PathLike) -> str:
        """Root-relative path; "." for the root itself, "../..." when escaping it."""
        return self.relative(self.absolute(), self.absolute(*parts))

    def relative(self, start: PathLike, target: PathLike) -> str:
        return to_posix(os.path.relpath(str(target), str(start)))

    @staticmethod
    def extname(uri: str) -> str:
        return posixpath.splitext(to_posix(uri))[1].lower()

    @staticmethod
    def basename(uri: str) -> str:
        return posixpath.basename(to_posix(uri).rstrip("/"))
