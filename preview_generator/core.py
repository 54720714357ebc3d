import logging
from typing import List, Optional, Sequence

from tqdm import tqdm

from . import config
from .dispatch import FileDispatcher
from .exceptions import StorageNotAvailableError
from .models import PreviewSpecification, RunStats, Target
from .scanning.walker import FolderWalker
from .sizes import compute_specifications
from .storage.nodes import File, Folder
from .storage.root import RootFolder


class PreviewGeneratorApp:
    def __init__(self,
                 root_folder: RootFolder,
                 user_manager,
                 preview_manager,
                 app_config,
                 encryption_manager,
                 verbosity: int = config.VERBOSITY_NORMAL,
                 walker: Optional[FolderWalker] = None):
        self.root_folder = root_folder
        self.users = user_manager
        self.app_config = app_config
        self.encryption = encryption_manager
        self.dispatcher = FileDispatcher(preview_manager, verbosity)
        self.walker = walker or FolderWalker()
        self.stats = RunStats()

    @staticmethod
    def normalize_path(path: str) -> str:
        return '/' + path.strip('/')

    def resolve_targets(self,
                        paths: Optional[Sequence[str]] = None,
                        user_ids: Optional[Sequence[str]] = None) -> List[Target]:
        """
        Paths win over user ids; with neither, every user that has logged in
        at least once is targeted. Unknown users are dropped.
        """
        targets: List[Target] = []

        if paths:
            for raw in paths:
                path = self.normalize_path(raw)
                uid = path.split('/', 2)[1]
                user = self.users.get(uid)
                if user is None:
                    logging.debug(f"No user for path {path}, skipping")
                    continue
                targets.append(Target(user, path))
        elif user_ids:
            for uid in user_ids:
                user = self.users.get(uid)
                if user is None:
                    logging.debug(f"Unknown user {uid}, skipping")
                    continue
                targets.append(Target(user))
        else:
            self.users.call_for_seen_users(lambda user: targets.append(Target(user)))

        return targets

    def run(self,
            paths: Optional[Sequence[str]] = None,
            user_ids: Optional[Sequence[str]] = None) -> int:
        """
        Executes one sweep. Returns the process exit status.

        Only an enabled encryption aborts the run; per-target and per-file
        problems are reported and the sweep moves on.
        """
        if self.encryption.is_enabled():
            logging.error("Encryption is enabled. Aborted.")
            return 1

        self.stats = RunStats()
        specifications = compute_specifications(self.app_config)
        logging.debug(f"Generating {len(specifications)} preview size(s) per file")

        targets = self.resolve_targets(paths, user_ids)
        if not targets:
            logging.info("No users or paths to process.")

        for target in tqdm(targets, desc="Generating previews", unit="target", disable=len(targets) < 2):
            self.stats.targets += 1
            self.process_target(target, specifications)

        logging.info(f"Done. {self.stats.summary()}")
        return 0

    def process_target(self, target: Target, specifications: Sequence[PreviewSpecification]):
        try:
            self._process_target(target, specifications)
        except StorageNotAvailableError as e:
            self._on_storage_error(target.path or self.root_folder.user_virtual_path(target.user.uid), e.hint)

    def _process_target(self, target: Target, specifications: Sequence[PreviewSpecification]):
        with self.root_folder.user_session(target.user) as user_folder:
            if target.path is None:
                self.walk(user_folder, specifications)
                return

            relative = user_folder.get_relative_path(target.path)
            node = user_folder.get(relative) if relative is not None else None
            if node is None:
                logging.error(f"Path not found: {target.path}")
                self.stats.targets_not_found += 1
                return

            if isinstance(node, File):
                self.handle_file(node, specifications)
            else:
                self.walk(node, specifications)

    def walk(self, folder: Folder, specifications: Sequence[PreviewSpecification]):
        self.walker.walk(
            folder,
            on_file=lambda file: self.handle_file(file, specifications),
            on_skipped_folder=self._on_skipped_folder,
            on_storage_error=self._on_storage_error,
            on_folder=self._on_folder,
        )

    def handle_file(self, file: File, specifications: Sequence[PreviewSpecification]):
        self.stats.record(self.dispatcher.dispatch(file, specifications))

    def _on_folder(self, path: str):
        self.stats.folders_scanned += 1
        logging.info(f"Scanning folder {path}")

    def _on_skipped_folder(self, path: str):
        self.stats.folders_skipped += 1
        logging.info(f"Skipping folder {path}")

    def _on_storage_error(self, path: str, hint: str):
        self.stats.storage_errors += 1
        logging.error(f"Storage for folder {path} is not available: {hint}")
