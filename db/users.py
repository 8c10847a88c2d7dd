import sqlite3
from typing import Optional

from utils.errors import UnknownOwnerError
from utils.timeutil import to_db, utc_now
from .database import storage_call

@storage_call
def resolve_owner(conn: sqlite3.Connection, username: str) -> int:
    """Map an authenticated principal name to its owner id."""
    cursor = conn.cursor()
    cursor.execute("SELECT id FROM users WHERE username = ?", (username,))
    row = cursor.fetchone()
    if not row:
        raise UnknownOwnerError()
    return int(row["id"])

@storage_call
def get_user_by_username(conn: sqlite3.Connection, username: str) -> Optional[dict]:
    cursor = conn.cursor()
    cursor.execute(
        "SELECT id, username, email, password_hash FROM users WHERE username = ?",
        (username,),
    )
    row = cursor.fetchone()
    return dict(row) if row else None

def username_exists(conn: sqlite3.Connection, username: str) -> bool:
    cursor = conn.cursor()
    cursor.execute("SELECT 1 FROM users WHERE username = ?", (username,))
    return cursor.fetchone() is not None

def email_exists(conn: sqlite3.Connection, email: str) -> bool:
    cursor = conn.cursor()
    cursor.execute("SELECT 1 FROM users WHERE email = ?", (email,))
    return cursor.fetchone() is not None

def insert_user(conn: sqlite3.Connection, username: str, email: str, password_hash: str) -> int:
    cursor = conn.cursor()
    cursor.execute(
        "INSERT INTO users (username, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
        (username, email, password_hash, to_db(utc_now())),
    )
    return int(cursor.lastrowid)
