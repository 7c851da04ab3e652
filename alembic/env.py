"""Migrations run online against ``BILLDESK_DB_URL``."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from billdesk.settings import settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

engine = create_engine(settings.db_url, poolclass=pool.NullPool)

with engine.connect() as connection:
    # Batch mode lets later revisions alter tables on SQLite.
    context.configure(connection=connection, target_metadata=None, render_as_batch=True)
    with context.begin_transaction():
        context.run_migrations()
