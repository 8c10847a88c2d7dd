from __future__ import annotations

import re
from typing import Optional, List

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


def normalize_fts_query(raw: Optional[str], prefix: bool = True) -> Optional[str]:
    """Normalize a vocabulary search box value into a safe FTS5 MATCH query.

    Each word becomes a quoted token; with ``prefix`` the token also matches
    longer words ("haus" finds "Hausaufgabe"). All tokens must match.

    Returns:
        None if raw is empty/None,
        "" if raw contains no searchable tokens,
        otherwise the MATCH expression.
    """
    if raw is None:
        return None
    cleaned = raw.strip()
    if not cleaned:
        return None
    tokens: List[str] = _TOKEN_RE.findall(cleaned)
    if not tokens:
        return ""
    suffix = "*" if prefix else ""
    return " ".join(f'"{token}"{suffix}' for token in tokens)


def like_pattern(raw: Optional[str]) -> Optional[str]:
    """Turn a search term into a lowercase ``LIKE`` pattern matching it anywhere.

    LIKE wildcards in the term are escaped with a backslash, so queries
    using the pattern need ``ESCAPE '\\'``. Returns None for an empty term.
    """
    if raw is None:
        return None
    cleaned = raw.strip().lower()
    if not cleaned:
        return None
    escaped = cleaned.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
