import sqlite3
from pathlib import Path

import pytest
from PIL import Image

from preview_generator import config
from preview_generator.database.ops import DBOperations
from preview_generator.database.schema import init_schema
from preview_generator.settings import AppConfig, EncryptionManager
from preview_generator.users import UserManager


@pytest.fixture
def conn():
    """Returns an in-memory SQLite connection with the schema initialized."""
    c = sqlite3.connect(":memory:")
    init_schema(c)
    try:
        yield c
    finally:
        c.close()


@pytest.fixture
def db_ops(conn):
    """Returns a DBOperations instance attached to the in-memory DB."""
    return DBOperations(conn)


@pytest.fixture
def app_config(db_ops):
    return AppConfig(db_ops)


@pytest.fixture
def small_sizes(app_config):
    """Keeps rendering cheap: one size per bucket."""
    app_config.set_app_value(config.APP_ID, 'squareSizes', '32')
    app_config.set_app_value(config.APP_ID, 'heightSizes', '16')
    app_config.set_app_value(config.APP_ID, 'widthSizes', '24')
    return app_config


@pytest.fixture
def encryption(app_config):
    return EncryptionManager(app_config)


@pytest.fixture
def user_manager(db_ops):
    users = UserManager(db_ops)
    users.create_user("alice", "Alice")
    users.record_login("alice", 1700000000)
    users.create_user("bob")
    users.record_login("bob", 1700000001)
    # carol never logged in
    users.create_user("carol")
    return users


@pytest.fixture
def data_dir(tmp_path):
    d = tmp_path / "data"
    d.mkdir()
    return d


def make_image(path: Path, size=(40, 30), mode="RGB", color=(200, 100, 50)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new(mode, size, color)
    fmt = "PNG" if path.suffix.lower() == ".png" else "JPEG"
    img.save(path, fmt)
    return path
