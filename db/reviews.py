from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from utils.timeutil import from_db, to_db
from .database import storage_call


@dataclass(frozen=True)
class ReviewEventRecord:
    card_id: int
    reviewed_at: datetime
    quality: int
    ease_factor: float
    interval_days: int
    id: Optional[int] = None


def append_review_event(conn: sqlite3.Connection, event: ReviewEventRecord) -> int:
    """Append one review to the log and return its id. Events are never updated."""
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO review_history (card_id, reviewed_at, quality, ease_factor, interval_days)
        VALUES (?, ?, ?, ?, ?)
        """,
        (
            event.card_id,
            to_db(event.reviewed_at),
            event.quality,
            event.ease_factor,
            event.interval_days,
        ),
    )
    return int(cursor.lastrowid)


@storage_call
def list_review_events(conn: sqlite3.Connection, card_id: int) -> List[ReviewEventRecord]:
    """Review events for a card, oldest first; ties keep append order."""
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT id, card_id, reviewed_at, quality, ease_factor, interval_days
        FROM review_history
        WHERE card_id = ?
        ORDER BY reviewed_at ASC, id ASC
        """,
        (card_id,),
    )
    return [
        ReviewEventRecord(
            id=row["id"],
            card_id=row["card_id"],
            reviewed_at=from_db(row["reviewed_at"]),
            quality=int(row["quality"]),
            ease_factor=float(row["ease_factor"]),
            interval_days=int(row["interval_days"]),
        )
        for row in cursor.fetchall()
    ]


@storage_call
def count_review_events(conn: sqlite3.Connection, card_id: Optional[int] = None) -> int:
    cursor = conn.cursor()
    if card_id is None:
        cursor.execute("SELECT COUNT(*) FROM review_history")
    else:
        cursor.execute("SELECT COUNT(*) FROM review_history WHERE card_id = ?", (card_id,))
    return int(cursor.fetchone()[0] or 0)
