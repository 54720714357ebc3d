import logging
from datetime import datetime, timezone

import pytest

from preview_generator import admin, config
from preview_generator.database.db import DBManager
from preview_generator.database.ops import DBOperations
from preview_generator.main import TimestampFormatter, main, parse_args

from conftest import make_image


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def catalog(data_dir):
    (data_dir / "alice" / "files").mkdir(parents=True, exist_ok=True)
    db_path = data_dir / config.CATALOG_NAME
    assert admin.main(["--db", str(db_path), "user:add", "alice", "--seen"]) == 0
    assert admin.main(["--db", str(db_path), "config:app:set", config.APP_ID, "squareSizes", "32"]) == 0
    assert admin.main(["--db", str(db_path), "config:app:set", config.APP_ID, "heightSizes", "16"]) == 0
    assert admin.main(["--db", str(db_path), "config:app:set", config.APP_ID, "widthSizes", "24"]) == 0
    return db_path


def test_parse_args_collects_paths_and_users():
    args = parse_args(["bob", "carol", "-p", "/alice/files/A", "--path=/alice/files/B", "-vv"])
    assert args.user_id == ["bob", "carol"]
    assert args.path == ["/alice/files/A", "/alice/files/B"]
    assert args.verbose == 2


def test_run_generates_previews(data_dir, catalog, capsys):
    make_image(data_dir / "alice" / "files" / "a.jpg")
    assert main(["--data-dir", str(data_dir)]) == 0

    out = capsys.readouterr().out
    assert "Scanning folder /alice/files" in out
    with DBManager(catalog) as conn:
        assert len(DBOperations(conn).fetch_previews_for("/alice/files/a.jpg")) == 3


def test_encryption_enabled_exits_1(data_dir, catalog, capsys):
    make_image(data_dir / "alice" / "files" / "a.jpg")
    assert admin.main(["--db", str(catalog), "encryption:enable"]) == 0
    assert main(["--data-dir", str(data_dir)]) == 1

    out = capsys.readouterr().out
    assert "Encryption is enabled. Aborted." in out
    assert "Scanning folder" not in out


def test_encryption_checked_before_preview_settings(data_dir, catalog, capsys):
    assert admin.main(["--db", str(catalog), "config:system:set", config.KEY_PREVIEW_MAX_X, "big"]) == 0
    assert admin.main(["--db", str(catalog), "encryption:enable"]) == 0
    assert main(["--data-dir", str(data_dir)]) == 1

    out = capsys.readouterr().out
    assert "Encryption is enabled. Aborted." in out
    assert "Invalid configuration" not in out


def test_invalid_configuration_exits_1(data_dir, catalog, capsys):
    admin.main(["--db", str(catalog), "config:app:set", config.APP_ID, "squareSizes", "-4"])
    assert main(["--data-dir", str(data_dir)]) == 1
    assert "Invalid configuration" in capsys.readouterr().out


def test_missing_data_dir_exits_1(tmp_path, capsys):
    assert main(["--data-dir", str(tmp_path / "nope")]) == 1
    assert "Data directory not found" in capsys.readouterr().out


def test_unopenable_catalog_exits_1(data_dir, capsys):
    assert main(["--data-dir", str(data_dir), "--db", str(data_dir)]) == 1
    assert "Cannot open preview catalog" in capsys.readouterr().out


def test_path_not_found_keeps_exit_0(data_dir, catalog, capsys):
    assert main(["--data-dir", str(data_dir), "--path", "/alice/files/missing"]) == 0
    assert "Path not found: /alice/files/missing" in capsys.readouterr().out


def test_log_file(data_dir, catalog, tmp_path):
    log_file = tmp_path / "logs" / "previews.log"
    assert main(["--data-dir", str(data_dir), "--log-file", str(log_file)]) == 0
    assert "Done." in log_file.read_text(encoding="utf-8")


def test_admin_user_list(catalog, capsys):
    admin.main(["--db", str(catalog), "user:add", "bob"])
    capsys.readouterr()
    assert admin.main(["--db", str(catalog), "user:list"]) == 0
    out = capsys.readouterr().out
    assert "alice" in out and "bob" in out


def test_admin_duplicate_user_fails(catalog):
    assert admin.main(["--db", str(catalog), "user:add", "alice"]) == 1


def test_admin_config_get(catalog, capsys):
    capsys.readouterr()
    assert admin.main(["--db", str(catalog), "config:get", config.APP_ID, "squareSizes"]) == 0
    assert capsys.readouterr().out.strip() == "32"
    assert admin.main(["--db", str(catalog), "config:get", config.APP_ID, "unset"]) == 1


def test_timestamp_formatter():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)
    record.created = datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc).timestamp()

    assert TimestampFormatter().format(record) == "2024-05-06T07:08:09+00:00 [INFO] hello"
    assert TimestampFormatter(date_format="%Y/%m/%d").format(record) == "2024/05/06 [INFO] hello"
