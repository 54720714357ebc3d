import logging
import os
import stat
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .. import config
from ..exceptions import StorageNotAvailableError
from ..models import User
from .nodes import Folder, StorageSession


class RootFolder:
    """Entry point into the data directory."""

    def __init__(self, data_dir: Path):
        self.data_dir = data_dir

    def user_files_dir(self, uid: str) -> Path:
        return self.data_dir / uid / config.USER_FILES_DIR

    def user_virtual_path(self, uid: str) -> str:
        return f"/{uid}/{config.USER_FILES_DIR}"

    @contextmanager
    def user_session(self, user: User) -> Iterator[Folder]:
        """
        Scoped storage view for one user. Yields the user's root folder;
        nodes obtained through it stop working once the block exits.

        The sweep never creates storage: a missing or unreadable user folder
        raises StorageNotAvailableError before the session opens.
        """
        files_dir = self.user_files_dir(user.uid)
        try:
            st = os.stat(files_dir)
        except OSError as e:
            raise StorageNotAvailableError(
                f"User folder {files_dir} is not available",
                hint=e.strerror or str(e),
            ) from e
        if not stat.S_ISDIR(st.st_mode):
            raise StorageNotAvailableError(f"User folder {files_dir} is not a directory",
                                           hint="Not a directory")

        session = StorageSession(user.uid)
        logging.debug(f"Storage session opened for {user.uid}")
        try:
            yield Folder(session, self.user_virtual_path(user.uid), files_dir)
        finally:
            session.close()
            logging.debug(f"Storage session closed for {user.uid}")
