from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from utils.errors import TagNotFoundError


def list_tags(conn, owner_id: int) -> List[dict]:
    cursor = conn.cursor()
    cursor.execute(
        "SELECT id, name, color FROM tags WHERE owner_id = ? ORDER BY name COLLATE NOCASE, id",
        (owner_id,),
    )
    return [dict(row) for row in cursor.fetchall()]


def get_tag(conn, tag_id: int) -> Optional[dict]:
    cursor = conn.cursor()
    cursor.execute("SELECT id, owner_id, name, color FROM tags WHERE id = ?", (tag_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def find_tag_by_name(conn, owner_id: int, name: str) -> Optional[dict]:
    cursor = conn.cursor()
    cursor.execute(
        "SELECT id, owner_id, name, color FROM tags WHERE owner_id = ? AND name = ?",
        (owner_id, name),
    )
    row = cursor.fetchone()
    return dict(row) if row else None


def insert_tag(conn, owner_id: int, name: str, color: Optional[str]) -> int:
    cursor = conn.cursor()
    cursor.execute(
        "INSERT INTO tags (owner_id, name, color) VALUES (?, ?, ?)",
        (owner_id, name, color),
    )
    return int(cursor.lastrowid)


def update_tag(conn, tag_id: int, name: str, color: Optional[str]) -> None:
    conn.execute("UPDATE tags SET name = ?, color = ? WHERE id = ?", (name, color, tag_id))


def delete_tag(conn, tag_id: int) -> None:
    conn.execute("DELETE FROM tags WHERE id = ?", (tag_id,))


def set_card_tags(conn, card_id: int, owner_id: int, tag_ids: Iterable[int]) -> None:
    """Replace a card's tags; every tag must belong to the card's owner."""
    ids = list(dict.fromkeys(tag_ids))
    cursor = conn.cursor()
    if ids:
        placeholders = ",".join("?" for _ in ids)
        cursor.execute(
            f"SELECT id FROM tags WHERE owner_id = ? AND id IN ({placeholders})",
            [owner_id, *ids],
        )
        owned = {row["id"] for row in cursor.fetchall()}
        for tag_id in ids:
            if tag_id not in owned:
                raise TagNotFoundError(tag_id)
    cursor.execute("DELETE FROM card_tags WHERE card_id = ?", (card_id,))
    if not ids:
        return
    cursor.executemany(
        "INSERT OR IGNORE INTO card_tags (card_id, tag_id) VALUES (?, ?)",
        [(card_id, tag_id) for tag_id in ids],
    )


def load_card_tags(conn, card_ids: Iterable[int]) -> Dict[int, List[dict]]:
    ids = list(card_ids)
    tags: Dict[int, List[dict]] = {card_id: [] for card_id in ids}
    if not ids:
        return tags
    placeholders = ",".join("?" for _ in ids)
    cursor = conn.cursor()
    cursor.execute(
        f"""
        SELECT ct.card_id, t.id, t.name, t.color
        FROM card_tags ct
        JOIN tags t ON t.id = ct.tag_id
        WHERE ct.card_id IN ({placeholders})
        ORDER BY t.name COLLATE NOCASE, t.id
        """,
        ids,
    )
    for row in cursor.fetchall():
        tags[row["card_id"]].append({"id": row["id"], "name": row["name"], "color": row["color"]})
    return tags
