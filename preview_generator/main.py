import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from . import config
from .core import PreviewGeneratorApp
from .database.db import DBManager
from .database.ops import DBOperations
from .exceptions import ConfigurationError, DatabaseError
from .previews.manager import PreviewManager
from .settings import AppConfig, EncryptionManager
from .storage.root import RootFolder
from .users import UserManager

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


class TimestampFormatter(logging.Formatter):
    """Prefixes records with a timestamp in the configured timezone."""

    def __init__(self, fmt: str = LOG_FORMAT, tz=timezone.utc, date_format: Optional[str] = None):
        super().__init__(fmt)
        self.tz = tz
        self.date_format = date_format

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=self.tz)
        fmt = datefmt or self.date_format
        if fmt:
            return dt.strftime(fmt)
        return dt.isoformat(timespec='seconds')


def setup_logging(verbosity: int, log_file: Optional[Path] = None):
    """Sets up logging to the console and, optionally, a file."""
    log_level = logging.DEBUG if verbosity >= config.VERBOSITY_VERBOSE else logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    formatter = TimestampFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    # Silence chatty libraries
    logging.getLogger("PIL").setLevel(logging.WARNING)


def configure_timestamps(app_config: AppConfig):
    """Applies logtimezone / logdateformat from the catalog to every handler."""
    tz_name = app_config.get_system_value(config.KEY_LOG_TIMEZONE, config.DEFAULT_LOG_TIMEZONE)
    date_format = app_config.get_system_value(config.KEY_LOG_DATE_FORMAT)
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logging.warning(f"Unknown {config.KEY_LOG_TIMEZONE} {tz_name!r}, using UTC")
        tz = timezone.utc

    formatter = TimestampFormatter(tz=tz, date_format=date_format)
    for handler in logging.getLogger().handlers:
        handler.setFormatter(formatter)


def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="preview-generate-all", description="Generate previews")

    p.add_argument("user_id", nargs="*", help="Generate previews for the given user(s)")
    p.add_argument("-p", "--path", action="append", default=[],
                   help='Limit scan to this path, eg. --path="/alice/files/Photos". '
                        'The user_id is determined by the path and all user_id arguments are ignored. '
                        'Multiple usages allowed')
    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="Increase verbosity (-v debug output, -vv also per-file progress)")

    p.add_argument("--data-dir", type=Path, default=os.environ.get(config.DATA_DIR_ENV),
                   help=f"Data directory holding <user>/files trees (default: ${config.DATA_DIR_ENV})")
    p.add_argument("--db", type=Path, default=None,
                   help=f"Custom path for the catalog (default: data-dir/{config.CATALOG_NAME})")
    p.add_argument("--log-file", type=Path, default=None, help="Also write output to this file")

    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    if args.data_dir is None:
        logging.error(f"No data directory given (use --data-dir or ${config.DATA_DIR_ENV}).")
        return 1
    data_dir = Path(args.data_dir).resolve()
    if not data_dir.is_dir():
        logging.error(f"Data directory not found: {data_dir}")
        return 1

    db_path = args.db if args.db else data_dir / config.CATALOG_NAME

    try:
        with DBManager(db_path) as conn:
            return generate(DBOperations(conn), data_dir, args)
    except DatabaseError as e:
        logging.error(str(e))
        return 1


def generate(db_ops: DBOperations, data_dir: Path, args) -> int:
    app_config = AppConfig(db_ops)
    configure_timestamps(app_config)

    try:
        app = PreviewGeneratorApp(
            root_folder=RootFolder(data_dir),
            user_manager=UserManager(db_ops),
            preview_manager=PreviewManager(data_dir, db_ops, app_config),
            app_config=app_config,
            encryption_manager=EncryptionManager(app_config),
            verbosity=args.verbose,
        )
        return app.run(paths=args.path, user_ids=args.user_id)
    except ConfigurationError as e:
        logging.error(f"Invalid configuration: {e}")
        return 1
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        return 1
    except Exception:
        logging.exception("Fatal error during preview generation.")
        return 1


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
