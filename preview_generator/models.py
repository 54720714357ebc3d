from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class PreviewSpecification:
    """
    One target geometry handed to the preview capability.
    A dimension of -1 (UNBOUNDED) follows the other one, keeping aspect ratio.
    """
    width: int
    height: int
    crop: bool = False


@dataclass(frozen=True)
class User:
    uid: str
    display_name: Optional[str] = None
    last_login: int = 0

    @property
    def seen(self) -> bool:
        return self.last_login > 0


@dataclass(frozen=True)
class Target:
    """A top-level traversal root: a user's root folder, or a path inside it."""
    user: User
    path: Optional[str] = None


class DispatchOutcome(Enum):
    GENERATED = 'generated'
    UNSUPPORTED = 'unsupported'
    NOT_FOUND = 'not_found'
    INVALID = 'invalid'


@dataclass
class RunStats:
    targets: int = 0
    targets_not_found: int = 0
    folders_scanned: int = 0
    folders_skipped: int = 0
    storage_errors: int = 0
    outcomes: dict = field(default_factory=lambda: {o: 0 for o in DispatchOutcome})

    def record(self, outcome: DispatchOutcome):
        self.outcomes[outcome] += 1

    def summary(self) -> str:
        counts = ", ".join(f"{o.value}={n}" for o, n in self.outcomes.items())
        return (f"{self.targets} target(s), {self.folders_scanned} folder(s) scanned, "
                f"{self.folders_skipped} skipped, {self.storage_errors} unavailable, "
                f"{self.targets_not_found} path(s) not found; files: {counts}")
