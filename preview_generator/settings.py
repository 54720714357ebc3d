"""
Runtime configuration stored in the catalog.
"""
from typing import Optional

from . import config
from .database.ops import DBOperations


class AppConfig:
    """
    Reads and writes configuration values.

    System values are instance wide (e.g. preview_max_x); app values are
    namespaced by an application id (e.g. previewgenerator/squareSizes).
    """

    def __init__(self, db_ops: DBOperations):
        self.db = db_ops

    def get_system_value(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.db.get_config_value(config.SYSTEM_APP_ID, key)
        return default if value is None else value

    def set_system_value(self, key: str, value):
        self.db.set_config_value(config.SYSTEM_APP_ID, key, str(value))

    def get_app_value(self, app_id: str, key: str, default: str = '') -> str:
        value = self.db.get_config_value(app_id, key)
        return default if value is None else value

    def set_app_value(self, app_id: str, key: str, value):
        self.db.set_config_value(app_id, key, str(value))

    def delete_app_value(self, app_id: str, key: str):
        self.db.delete_config_value(app_id, key)


class EncryptionManager:
    def __init__(self, app_config: AppConfig):
        self.config = app_config

    def is_enabled(self) -> bool:
        value = self.config.get_app_value(config.CORE_APP_ID, config.KEY_ENCRYPTION_ENABLED, 'no')
        return value.strip().lower() == 'yes'

    def set_enabled(self, enabled: bool):
        self.config.set_app_value(config.CORE_APP_ID, config.KEY_ENCRYPTION_ENABLED, 'yes' if enabled else 'no')
