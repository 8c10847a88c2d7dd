# SQL schema for VocabDeck database

SCHEMA_VERSION = 3

SCHEMA_SQL = """
-- Users (principals)
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT UNIQUE NOT NULL,
    email TEXT UNIQUE NOT NULL,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL
);

-- Vocabulary cards (with SM-2 fields)
CREATE TABLE IF NOT EXISTS cards (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id INTEGER NOT NULL,
    front TEXT NOT NULL,
    back TEXT NOT NULL,
    example_sentence TEXT,
    language_pair TEXT,
    audio_url TEXT,
    created_at TEXT NOT NULL,
    ease_factor REAL NOT NULL DEFAULT 2.5 CHECK(ease_factor >= 1.3),
    repetitions INTEGER NOT NULL DEFAULT 0 CHECK(repetitions >= 0),
    interval_days INTEGER NOT NULL DEFAULT 0 CHECK(interval_days >= 0),
    last_reviewed TEXT,
    next_review TEXT NOT NULL,
    version INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY (owner_id) REFERENCES users (id) ON DELETE CASCADE
);

-- Card search (FTS5)
CREATE VIRTUAL TABLE IF NOT EXISTS cards_fts USING fts5(
    front,
    back,
    example_sentence,
    content='cards',
    content_rowid='id'
);

CREATE TRIGGER IF NOT EXISTS cards_ai AFTER INSERT ON cards BEGIN
    INSERT INTO cards_fts(rowid, front, back, example_sentence)
    VALUES (new.id, new.front, new.back, new.example_sentence);
END;

CREATE TRIGGER IF NOT EXISTS cards_ad AFTER DELETE ON cards BEGIN
    INSERT INTO cards_fts(cards_fts, rowid, front, back, example_sentence)
    VALUES ('delete', old.id, old.front, old.back, old.example_sentence);
END;

CREATE TRIGGER IF NOT EXISTS cards_au AFTER UPDATE OF front, back, example_sentence ON cards BEGIN
    INSERT INTO cards_fts(cards_fts, rowid, front, back, example_sentence)
    VALUES ('delete', old.id, old.front, old.back, old.example_sentence);
    INSERT INTO cards_fts(rowid, front, back, example_sentence)
    VALUES (new.id, new.front, new.back, new.example_sentence);
END;

-- Owner-scoped tags
CREATE TABLE IF NOT EXISTS tags (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id INTEGER NOT NULL,
    name TEXT NOT NULL,
    color TEXT,
    UNIQUE (owner_id, name),
    FOREIGN KEY (owner_id) REFERENCES users (id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS card_tags (
    card_id INTEGER NOT NULL,
    tag_id INTEGER NOT NULL,
    PRIMARY KEY (card_id, tag_id),
    FOREIGN KEY (card_id) REFERENCES cards (id) ON DELETE CASCADE,
    FOREIGN KEY (tag_id) REFERENCES tags (id) ON DELETE CASCADE
);

-- Append-only review log
CREATE TABLE IF NOT EXISTS review_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    card_id INTEGER NOT NULL,
    reviewed_at TEXT NOT NULL,
    quality INTEGER NOT NULL CHECK(quality BETWEEN 0 AND 5),
    ease_factor REAL NOT NULL,
    interval_days INTEGER NOT NULL,
    FOREIGN KEY (card_id) REFERENCES cards (id) ON DELETE CASCADE
);

CREATE TRIGGER IF NOT EXISTS review_history_no_update BEFORE UPDATE ON review_history BEGIN
    SELECT RAISE(ABORT, 'review_history is append-only');
END;
"""

# Indexes for performance
INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_cards_owner_due ON cards (owner_id, next_review, id);
CREATE INDEX IF NOT EXISTS idx_cards_owner_created ON cards (owner_id, created_at);
CREATE INDEX IF NOT EXISTS idx_tags_owner ON tags (owner_id);
CREATE INDEX IF NOT EXISTS idx_card_tags_card ON card_tags (card_id);
CREATE INDEX IF NOT EXISTS idx_card_tags_tag ON card_tags (tag_id);
CREATE INDEX IF NOT EXISTS idx_review_history_card ON review_history (card_id, reviewed_at, id);
"""
