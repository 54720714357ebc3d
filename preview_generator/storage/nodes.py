"""
Read-only views over a user's part of the data directory.

Virtual paths look like /<uid>/files/Photos/a.jpg and map onto
<data_dir>/<uid>/files/Photos/a.jpg.
"""
import os
import posixpath
import stat
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .. import config
from ..exceptions import NotFoundError, StorageNotAvailableError


class StorageSession:
    """Tracks whether a user's storage view is still mounted."""

    def __init__(self, uid: str):
        self.uid = uid
        self.active = True

    def close(self):
        self.active = False

    def ensure_active(self, path: str):
        if not self.active:
            raise StorageNotAvailableError(
                f"Storage session for {self.uid} is closed",
                hint=f"{path} was accessed after its storage session ended",
            )


class Node:
    def __init__(self, session: StorageSession, path: str, real_path: Path):
        self.session = session
        self.path = path
        self.real_path = real_path

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)

    def __repr__(self):
        return f"{type(self).__name__}({self.path!r})"


class File(Node):
    @property
    def mime_type(self) -> str:
        return config.EXT_TO_MIME.get(self.real_path.suffix.lower(), config.DEFAULT_MIME)

    def stat(self) -> Tuple[float, int]:
        """Returns (mtime, size); the file may have vanished since it was listed."""
        try:
            st = self.real_path.stat()
        except FileNotFoundError as e:
            raise NotFoundError(f"{self.path} no longer exists") from e
        return st.st_mtime, st.st_size


class Folder(Node):
    @property
    def id(self) -> Tuple[int, int]:
        try:
            st = os.stat(self.real_path, follow_symlinks=False)
        except OSError as e:
            raise StorageNotAvailableError(f"Cannot stat {self.path}", hint=e.strerror or str(e)) from e
        return st.st_dev, st.st_ino

    def node_exists(self, name: str) -> bool:
        self.session.ensure_active(self.path)
        if not name or '/' in name or name in ('.', '..'):
            return False
        try:
            os.lstat(self.real_path / name)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageNotAvailableError(f"Cannot access {self.path}", hint=e.strerror or str(e)) from e
        return True

    def get_directory_listing(self) -> List[Union['Folder', File]]:
        self.session.ensure_active(self.path)
        try:
            with os.scandir(self.real_path) as it:
                entries = list(it)
        except OSError as e:
            raise StorageNotAvailableError(f"Cannot list {self.path}", hint=e.strerror or str(e)) from e

        # Sort for stable traversal order
        entries.sort(key=lambda e: e.name.lower())

        nodes: List[Union[Folder, File]] = []
        for e in entries:
            child_path = posixpath.join(self.path, e.name)
            if e.is_dir(follow_symlinks=False):
                nodes.append(Folder(self.session, child_path, Path(e.path)))
            elif e.is_file(follow_symlinks=False):
                nodes.append(File(self.session, child_path, Path(e.path)))
        return nodes

    def get_relative_path(self, path: str) -> Optional[str]:
        """
        Returns path relative to this folder (always starting with '/'),
        or None when path lies outside it.
        """
        path = posixpath.normpath('/' + path.strip('/'))
        if path == self.path:
            return '/'
        if path.startswith(self.path.rstrip('/') + '/'):
            return path[len(self.path.rstrip('/')):]
        return None

    def get(self, relative_path: str) -> Optional[Union['Folder', File]]:
        """Resolves a relative path to a node, or None if nothing is there."""
        self.session.ensure_active(self.path)
        parts = [p for p in relative_path.split('/') if p and p != '.']
        if '..' in parts:
            return None
        if not parts:
            return self

        # no component may be a symlink
        real = self.real_path
        for part in parts:
            real = real / part
            try:
                mode = os.lstat(real).st_mode
            except OSError:
                return None
            if stat.S_ISLNK(mode):
                return None

        virtual = posixpath.join(self.path, *parts)
        if stat.S_ISDIR(mode):
            return Folder(self.session, virtual, real)
        if stat.S_ISREG(mode):
            return File(self.session, virtual, real)
        return None
