# Database module
from .connection import engine, get_session, init_db, close_db, db_lock, DB_PATH, DATABASE_URL
from .persistence import SessionPersistence
