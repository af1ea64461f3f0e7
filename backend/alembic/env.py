import os
import sys
from logging.config import fileConfig
from alembic import context
from alembic.ddl.impl import DefaultImpl
from sqlalchemy import engine_from_config, pool
from sqlmodel import SQLModel

BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if BACKEND_DIR not in sys.path:
    sys.path.append(BACKEND_DIR)

from models import *  # noqa: F401,F403 registers the catalog tables
from infra.database import connection as db_connection


class DuckDBImpl(DefaultImpl):
    __dialect__ = "duckdb"


config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def run_migrations(connection) -> None:
    context.configure(connection=connection, target_metadata=SQLModel.metadata)
    with context.begin_transaction():
        context.run_migrations()


# init_db and the tests hand over their open connection; DuckDB allows one writer
shared = config.attributes.get("connection")
if shared is not None:
    run_migrations(shared)
else:
    config.set_main_option("sqlalchemy.url", db_connection.DATABASE_URL)
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        run_migrations(connection)
