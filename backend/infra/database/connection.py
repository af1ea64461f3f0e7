from sqlmodel import create_engine, Session
import os
import threading
from config import settings
from infra.database.schema import init_raw_db
from utils.logger import get_logger

logger = get_logger(__name__)

DB_PATH = settings.DB_PATH
os.makedirs(os.path.dirname(DB_PATH), exist_ok=True)

DATABASE_URL = f"duckdb:///{DB_PATH}"

connect_args = {'config': {'worker_threads': 4, 'access_mode': 'READ_WRITE'}}
engine = create_engine(
    DATABASE_URL,
    pool_size=5,
    max_overflow=10,
    connect_args=connect_args
)

# Serial context for every catalog mutation
db_lock = threading.RLock()

def get_alembic_config():
    from alembic.config import Config

    base_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    alembic_cfg = Config(os.path.join(base_dir, "alembic.ini"))
    alembic_cfg.set_main_option("script_location", os.path.join(base_dir, "alembic"))
    return alembic_cfg

def init_db():
    """
    Startup bootstrap: raw DDL, then Alembic on the same connection
    so DuckDB does not see a second writer.
    """
    from alembic import command

    is_new_db = not os.path.exists(DB_PATH) or os.path.getsize(DB_PATH) == 0

    with db_lock:
        try:
            init_raw_db(engine)

            alembic_cfg = get_alembic_config()
            with engine.begin() as connection:
                alembic_cfg.attributes["connection"] = connection

                if is_new_db:
                    logger.info("New database detected. Stamping version...")
                    command.stamp(alembic_cfg, "head")
                else:
                    logger.info("Existing database detected. Running migrations...")
                    command.upgrade(alembic_cfg, "head")
        except Exception as e:
            logger.error(f"Error during database initialization: {e}")
            raise e

def close_db():
    engine.dispose()

def get_session():
    with Session(engine) as session:
        yield session
