import functools
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from config import CONFIG_DIR, DEFAULT_BUSY_TIMEOUT_SECONDS, get_config_value
from utils.errors import TransientError
from .schema import SCHEMA_SQL, INDEXES_SQL, SCHEMA_VERSION

DB_PATH = CONFIG_DIR / "vocabdeck.db"

def init_db():
    """Initialize the database by creating tables and indexes if they don't exist."""
    Path(DB_PATH).parent.mkdir(parents=True, exist_ok=True)
    with get_conn() as conn:
        conn.executescript(SCHEMA_SQL)
        conn.executescript(INDEXES_SQL)
        ensure_card_version(conn)
        ensure_cards_fts(conn)
        ensure_schema_version(conn)

def ensure_card_version(conn: sqlite3.Connection) -> None:
    """Ensure cards table has the optimistic-locking version column for existing installs."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA table_info(cards)")
    columns = {row[1] for row in cursor.fetchall()}
    if "version" not in columns:
        cursor.execute("ALTER TABLE cards ADD COLUMN version INTEGER NOT NULL DEFAULT 0")

def ensure_cards_fts(conn: sqlite3.Connection) -> None:
    """Ensure FTS table is populated for existing cards."""
    cursor = conn.cursor()
    cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='cards_fts'")
    if not cursor.fetchone():
        return
    cursor.execute("SELECT COUNT(*) FROM cards_fts")
    fts_count = cursor.fetchone()[0] or 0
    cursor.execute("SELECT COUNT(*) FROM cards")
    cards_count = cursor.fetchone()[0] or 0
    if fts_count < cards_count:
        cursor.execute("INSERT INTO cards_fts(cards_fts) VALUES('rebuild')")

def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the SQLite schema version from PRAGMA user_version."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA user_version")
    row = cursor.fetchone()
    return int(row[0]) if row else 0

def set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Set the SQLite schema version via PRAGMA user_version."""
    conn.execute(f"PRAGMA user_version = {int(version)}")

def ensure_schema_version(conn: sqlite3.Connection) -> None:
    """Ensure the current schema version is written to the database."""
    current = get_schema_version(conn)
    if current != SCHEMA_VERSION:
        set_schema_version(conn, SCHEMA_VERSION)

@contextmanager
def get_conn():
    """Context manager for SQLite connection, using row_factory for dict-like rows.

    The connection runs in autocommit mode; writes go through transaction().
    """
    timeout = float(get_config_value("database", "busy_timeout_seconds", DEFAULT_BUSY_TIMEOUT_SECONDS))
    try:
        conn = sqlite3.connect(DB_PATH, timeout=timeout, isolation_level=None, check_same_thread=False)
    except sqlite3.Error as exc:
        raise TransientError(f"Could not open database: {exc}") from exc
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
    finally:
        conn.close()

def get_db():
    """FastAPI dependency that yields a DB connection and closes it afterwards."""
    with get_conn() as conn:
        yield conn

@contextmanager
def transaction(conn: sqlite3.Connection, immediate: bool = False):
    """Run a block inside BEGIN/COMMIT, rolling back on any exit by exception.

    With immediate=True the write lock is taken up front, so concurrent
    writers queue behind each other for up to the busy timeout.

    sqlite I/O and locking failures surface as TransientError; integrity
    errors propagate unchanged so callers can map them to domain errors.
    """
    try:
        conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
    except sqlite3.OperationalError as exc:
        raise TransientError(str(exc)) from exc
    try:
        yield conn
    except BaseException as exc:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        if isinstance(exc, sqlite3.IntegrityError) or not isinstance(exc, sqlite3.DatabaseError):
            raise
        raise TransientError(str(exc)) from exc
    try:
        conn.execute("COMMIT")
    except sqlite3.OperationalError as exc:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise TransientError(str(exc)) from exc

def storage_call(func):
    """Surface sqlite locking and I/O failures from a store function as TransientError."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except sqlite3.OperationalError as exc:
            raise TransientError(str(exc)) from exc
    return wrapper
