from __future__ import annotations

import sqlite3
from dataclasses import dataclass, replace
from datetime import datetime
from typing import List, Optional

from utils.errors import ConflictError
from utils.search import like_pattern, normalize_fts_query
from utils.sm2 import SchedulingState
from utils.timeutil import from_db, to_db
from .database import storage_call

CARD_COLUMNS = """
    c.id, c.owner_id, c.front, c.back, c.example_sentence, c.language_pair,
    c.audio_url, c.created_at, c.ease_factor, c.repetitions, c.interval_days,
    c.last_reviewed, c.next_review, c.version
"""

SORT_COLUMNS = {
    "created_at": "c.created_at",
    "front": "c.front COLLATE NOCASE",
    "back": "c.back COLLATE NOCASE",
    "next_review": "c.next_review",
}

CONTENT_FIELDS = ("front", "back", "example_sentence", "language_pair", "audio_url")


@dataclass(frozen=True)
class CardRecord:
    """A persisted card. Descriptive fields are carried through untouched."""

    id: int
    owner_id: int
    front: str
    back: str
    example_sentence: Optional[str]
    language_pair: Optional[str]
    audio_url: Optional[str]
    created_at: datetime
    ease_factor: float
    repetitions: int
    interval_days: int
    last_reviewed: Optional[datetime]
    next_review: datetime
    version: int = 0

    @property
    def schedule(self) -> SchedulingState:
        return SchedulingState(
            ease_factor=self.ease_factor,
            repetitions=self.repetitions,
            interval_days=self.interval_days,
            last_reviewed=self.last_reviewed,
            next_review=self.next_review,
        )

    def with_schedule(self, state: SchedulingState) -> "CardRecord":
        return replace(
            self,
            ease_factor=state.ease_factor,
            repetitions=state.repetitions,
            interval_days=state.interval_days,
            last_reviewed=state.last_reviewed,
            next_review=state.next_review,
        )


def row_to_card(row: sqlite3.Row) -> CardRecord:
    return CardRecord(
        id=row["id"],
        owner_id=row["owner_id"],
        front=row["front"],
        back=row["back"],
        example_sentence=row["example_sentence"],
        language_pair=row["language_pair"],
        audio_url=row["audio_url"],
        created_at=from_db(row["created_at"]),
        ease_factor=float(row["ease_factor"]),
        repetitions=int(row["repetitions"]),
        interval_days=int(row["interval_days"]),
        last_reviewed=from_db(row["last_reviewed"]),
        next_review=from_db(row["next_review"]),
        version=int(row["version"]),
    )


@storage_call
def get_card(conn: sqlite3.Connection, card_id: int) -> Optional[CardRecord]:
    cursor = conn.cursor()
    cursor.execute(f"SELECT {CARD_COLUMNS} FROM cards c WHERE c.id = ?", (card_id,))
    row = cursor.fetchone()
    return row_to_card(row) if row else None


@storage_call
def list_due_cards(conn: sqlite3.Connection, owner_id: int, now: datetime) -> List[CardRecord]:
    """Cards due at or before ``now``, oldest due first, ties by id."""
    cursor = conn.cursor()
    cursor.execute(
        f"""
        SELECT {CARD_COLUMNS}
        FROM cards c
        WHERE c.owner_id = ? AND c.next_review <= ?
        ORDER BY c.next_review ASC, c.id ASC
        """,
        (owner_id, to_db(now)),
    )
    return [row_to_card(row) for row in cursor.fetchall()]


@storage_call
def count_due_cards(conn: sqlite3.Connection, owner_id: int, now: datetime) -> int:
    cursor = conn.cursor()
    cursor.execute(
        "SELECT COUNT(*) FROM cards WHERE owner_id = ? AND next_review <= ?",
        (owner_id, to_db(now)),
    )
    return int(cursor.fetchone()[0] or 0)


@storage_call
def count_cards(conn: sqlite3.Connection, owner_id: int) -> int:
    cursor = conn.cursor()
    cursor.execute("SELECT COUNT(*) FROM cards WHERE owner_id = ?", (owner_id,))
    return int(cursor.fetchone()[0] or 0)


@storage_call
def list_cards(
    conn: sqlite3.Connection,
    owner_id: int,
    search: Optional[str] = None,
    tag_id: Optional[int] = None,
    term: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_direction: Optional[str] = None,
) -> List[CardRecord]:
    filters = ["c.owner_id = ?"]
    params: List[object] = [owner_id]

    fts_query = normalize_fts_query(search)
    if fts_query == "":
        return []
    if fts_query:
        filters.append("c.id IN (SELECT rowid FROM cards_fts WHERE cards_fts MATCH ?)")
        params.append(fts_query)

    pattern = like_pattern(term)
    if pattern:
        filters.append(
            "(lower(c.front) LIKE ? ESCAPE '\\'"
            " OR lower(c.back) LIKE ? ESCAPE '\\'"
            " OR lower(coalesce(c.example_sentence, '')) LIKE ? ESCAPE '\\')"
        )
        params.extend([pattern, pattern, pattern])

    if tag_id is not None:
        filters.append("c.id IN (SELECT card_id FROM card_tags WHERE tag_id = ?)")
        params.append(tag_id)

    order_column = SORT_COLUMNS.get(sort_by or "created_at", SORT_COLUMNS["created_at"])
    direction = "DESC" if (sort_direction or "").lower() == "desc" else "ASC"
    where_clause = " AND ".join(filters)
    cursor = conn.cursor()
    cursor.execute(
        f"""
        SELECT {CARD_COLUMNS}
        FROM cards c
        WHERE {where_clause}
        ORDER BY {order_column} {direction}, c.id {direction}
        """,
        params,
    )
    return [row_to_card(row) for row in cursor.fetchall()]


def insert_card(conn: sqlite3.Connection, owner_id: int, content: dict, now: datetime) -> int:
    """Insert a card with creation defaults; it is due immediately."""
    state = SchedulingState.initial(now)
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO cards (
            owner_id, front, back, example_sentence, language_pair, audio_url,
            created_at, ease_factor, repetitions, interval_days, last_reviewed, next_review
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            owner_id,
            content["front"],
            content["back"],
            content.get("example_sentence"),
            content.get("language_pair"),
            content.get("audio_url"),
            to_db(now),
            state.ease_factor,
            state.repetitions,
            state.interval_days,
            to_db(state.last_reviewed),
            to_db(state.next_review),
        ),
    )
    return int(cursor.lastrowid)


def update_card_content(conn: sqlite3.Connection, card_id: int, content: dict) -> None:
    """Update descriptive fields only; scheduling fields change through reviews."""
    assignments = ", ".join(f"{field} = ?" for field in CONTENT_FIELDS)
    params = [content.get(field) for field in CONTENT_FIELDS]
    cursor = conn.cursor()
    cursor.execute(
        f"UPDATE cards SET {assignments}, version = version + 1 WHERE id = ?",
        (*params, card_id),
    )


def save_schedule(conn: sqlite3.Connection, card: CardRecord) -> CardRecord:
    """Persist the card's scheduling fields if nobody changed it since it was read."""
    cursor = conn.cursor()
    cursor.execute(
        """
        UPDATE cards
        SET ease_factor = ?, repetitions = ?, interval_days = ?,
            last_reviewed = ?, next_review = ?, version = version + 1
        WHERE id = ? AND version = ?
        """,
        (
            card.ease_factor,
            card.repetitions,
            card.interval_days,
            to_db(card.last_reviewed),
            to_db(card.next_review),
            card.id,
            card.version,
        ),
    )
    if cursor.rowcount != 1:
        raise ConflictError(card.id)
    return replace(card, version=card.version + 1)


def delete_card(conn: sqlite3.Connection, card_id: int) -> None:
    """Delete a card; review history and tag links cascade."""
    conn.execute("DELETE FROM cards WHERE id = ?", (card_id,))
