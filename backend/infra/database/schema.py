from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.engine import Engine
from utils.logger import get_logger

logger = get_logger(__name__)

CURRENT_SCHEMA_VERSION = 1

def get_db_schema_sql() -> str:
    """
    No physical FOREIGN KEY clauses: DuckDB rejects updates on rows that
    are referenced by one, so ownership and cascade are enforced by the
    repositories. Identifiers are UUID strings assigned by the models.
    """
    return """
    CREATE TABLE IF NOT EXISTS songs (
        id VARCHAR PRIMARY KEY,
        title VARCHAR NOT NULL,
        tempo INTEGER,
        key VARCHAR,
        time_signature VARCHAR,
        notes VARCHAR,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS song_sections (
        id VARCHAR PRIMARY KEY,
        song_id VARCHAR NOT NULL,
        section_type VARCHAR NOT NULL DEFAULT 'verse',
        "order" INTEGER NOT NULL DEFAULT 0,
        custom_label VARCHAR,
        custom_name VARCHAR
    );

    CREATE TABLE IF NOT EXISTS song_images (
        id VARCHAR PRIMARY KEY,
        song_id VARCHAR NOT NULL,
        "order" INTEGER NOT NULL DEFAULT 0,
        data BLOB NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS setlists (
        id VARCHAR PRIMARY KEY,
        title VARCHAR NOT NULL,
        performance_date DATE,
        notes VARCHAR,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS setlist_items (
        id VARCHAR PRIMARY KEY,
        setlist_id VARCHAR,
        song_id VARCHAR NOT NULL,
        "order" INTEGER NOT NULL DEFAULT 0,
        override_key VARCHAR,
        override_tempo INTEGER,
        override_time_signature VARCHAR,
        notes VARCHAR,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS setlist_item_sections (
        id VARCHAR PRIMARY KEY,
        setlist_item_id VARCHAR NOT NULL,
        section_type VARCHAR NOT NULL DEFAULT 'verse',
        "order" INTEGER NOT NULL DEFAULT 0,
        custom_label VARCHAR,
        custom_name VARCHAR
    );

    CREATE TABLE IF NOT EXISTS setlist_item_images (
        id VARCHAR PRIMARY KEY,
        setlist_item_id VARCHAR NOT NULL,
        "order" INTEGER NOT NULL DEFAULT 0,
        data BLOB NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS schema_info (
        key VARCHAR PRIMARY KEY,
        value VARCHAR NOT NULL
    );
    """

def get_current_schema_version(conn) -> int:
    try:
        result = conn.execute(text("SELECT value FROM schema_info WHERE key = 'version'"))
        row = result.fetchone()
        return int(row[0]) if row else 0
    except SQLAlchemyError:
        return 0

def set_schema_version(conn, version: int):
    conn.execute(text("""
        INSERT INTO schema_info (key, value) VALUES ('version', :version)
        ON CONFLICT (key) DO UPDATE SET value = :version
    """), {"version": str(version)})

def init_raw_db(conn_engine: Engine):
    logger.info("Initializing DuckDB schema...")
    try:
        with conn_engine.begin() as conn:
            statements = [s.strip() for s in get_db_schema_sql().split(';') if s.strip()]
            for stmt in statements:
                conn.execute(text(stmt))

            current_version = get_current_schema_version(conn)
            if current_version < CURRENT_SCHEMA_VERSION:
                set_schema_version(conn, CURRENT_SCHEMA_VERSION)
    except Exception as e:
        logger.error(f"Failed to initialize database schema: {e}")
        raise e
