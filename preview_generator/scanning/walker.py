import logging
from typing import Callable, Optional, Set

from .. import config
from ..exceptions import StorageNotAvailableError
from ..storage.nodes import File, Folder

FileCallback = Callable[[File], None]
PathCallback = Callable[[str], None]
StorageErrorCallback = Callable[[str, str], None]


class FolderWalker:
    def __init__(self, skip_marker: str = config.SKIP_MARKER):
        self.skip_marker = skip_marker

    def walk(self,
             start: Folder,
             on_file: FileCallback,
             on_skipped_folder: Optional[PathCallback] = None,
             on_storage_error: Optional[StorageErrorCallback] = None,
             on_folder: Optional[PathCallback] = None):
        """
        Depth-first walk of the subtree rooted at start.

        Nodes are visited in the same pre-order a recursive descent would
        produce, but with an explicit stack so deep trees cannot exhaust the
        interpreter's recursion limit.

        - A folder holding the skip marker is reported through
          on_skipped_folder and never listed.
        - A folder whose storage cannot be reached is reported through
          on_storage_error(path, hint); only that subtree is abandoned.
        """
        visited: Set = set()
        stack: list = [start]

        while stack:
            node = stack.pop()

            if isinstance(node, File):
                on_file(node)
                continue
            if not isinstance(node, Folder):
                continue

            try:
                folder_id = node.id
                if folder_id in visited:
                    logging.debug(f"Folder {node.path} already visited, not descending again")
                    continue
                visited.add(folder_id)

                # Respect the skip marker. If present don't traverse the folder
                if node.node_exists(self.skip_marker):
                    if on_skipped_folder:
                        on_skipped_folder(node.path)
                    continue

                if on_folder:
                    on_folder(node.path)

                children = node.get_directory_listing()
            except StorageNotAvailableError as e:
                if on_storage_error:
                    on_storage_error(node.path, e.hint)
                else:
                    logging.warning(f"Storage for folder {node.path} is not available: {e.hint}")
                continue

            # Push reversed so the first listed child is processed first
            for child in reversed(children):
                stack.append(child)
