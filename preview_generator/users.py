import logging
import time
from typing import Callable, Optional

from .database.ops import DBOperations
from .models import User


class UserManager:
    """Identity directory backed by the catalog's users table."""

    def __init__(self, db_ops: DBOperations):
        self.db = db_ops

    def get(self, uid: str) -> Optional[User]:
        if not uid:
            return None
        row = self.db.fetch_user(uid)
        if row is None:
            return None
        return User(uid=row[0], display_name=row[1], last_login=row[2])

    def call_for_seen_users(self, visitor: Callable[[User], None]):
        """Invokes visitor for every user that has authenticated at least once."""
        for uid, display_name, last_login in self.db.fetch_users(seen_only=True):
            visitor(User(uid=uid, display_name=display_name, last_login=last_login))

    def list_users(self) -> list[User]:
        return [User(uid, name, login) for uid, name, login in self.db.fetch_users()]

    def create_user(self, uid: str, display_name: Optional[str] = None) -> User:
        uid = uid.strip()
        if not uid or '/' in uid:
            raise ValueError(f"Invalid user id: {uid!r}")
        self.db.insert_user(uid, display_name)
        logging.debug(f"Created user {uid}")
        return User(uid=uid, display_name=display_name)

    def record_login(self, uid: str, timestamp: Optional[int] = None) -> bool:
        return self.db.update_last_login(uid, timestamp or int(time.time()))

    def delete_user(self, uid: str) -> bool:
        return self.db.delete_user(uid)
