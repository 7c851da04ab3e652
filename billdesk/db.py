"""Engine construction and schema migration."""

import logging
from pathlib import Path

from alembic.config import Config
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from alembic import command
from billdesk.settings import settings

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"

_engine: Engine | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def get_engine() -> Engine:
    """Process-wide engine. The web layer takes one connection per request from it."""
    global _engine
    if _engine is None:
        _engine = create_engine(settings.db_url, pool_pre_ping=True, pool_recycle=1800)
        # Bill items cascade with their bill.
        if _engine.dialect.name == "sqlite":
            event.listen(_engine, "connect", _enable_sqlite_foreign_keys)
        logger.info("Database engine created (%s)", _engine.dialect.name)
    return _engine


def alembic_config() -> Config:
    ini_path = ALEMBIC_INI if ALEMBIC_INI.exists() else Path.cwd() / "alembic.ini"
    return Config(str(ini_path))


def initialize_db() -> None:
    """Bring the schema to the latest Alembic revision."""
    logger.info("Upgrading schema to head")
    command.upgrade(alembic_config(), "head")
    logger.info("Schema is up to date")
