from datetime import datetime
from typing import Callable, List, Optional

import structlog

from config import DEFAULT_MAX_CONFLICT_RETRIES, DEFAULT_MAX_INTERVAL_DAYS, get_config_value
from db.cards import CardRecord, count_due_cards, get_card, list_due_cards, save_schedule
from db.database import transaction
from db.reviews import ReviewEventRecord, append_review_event, list_review_events
from db.users import resolve_owner
from utils.errors import AppError, CardNotFoundError, ConflictError, ForbiddenError
from utils.sm2 import MAX_INTERVAL_DAYS, update_sm2, validate_quality
from utils.timeutil import ensure_utc, utc_now

logger = structlog.get_logger()


def configured_max_interval() -> int:
    """Configured interval cap, kept within 1 day and the scheduler ceiling."""
    configured = int(get_config_value("review", "max_interval_days", DEFAULT_MAX_INTERVAL_DAYS))
    return max(1, min(configured, MAX_INTERVAL_DAYS))


def load_owned_card(conn, owner_id: int, card_id: int) -> CardRecord:
    """Fetch a card and check it belongs to owner_id by exact id equality."""
    card = get_card(conn, card_id)
    if card is None:
        raise CardNotFoundError(card_id)
    if card.owner_id != owner_id:
        raise ForbiddenError()
    return card


def _review_once(
    conn,
    principal: str,
    card_id: int,
    quality: int,
    clock: Callable[[], datetime],
    max_interval_days: int,
    log,
) -> CardRecord:
    owner_id = resolve_owner(conn, principal)
    with transaction(conn, immediate=True):
        # Read under the write lock so review times follow commit order
        now = ensure_utc(clock())
        card = load_owned_card(conn, owner_id, card_id)
        updated = card.with_schedule(update_sm2(card.schedule, quality, now, max_interval_days))
        event_id = append_review_event(
            conn,
            ReviewEventRecord(
                card_id=card.id,
                reviewed_at=now,
                quality=quality,
                ease_factor=updated.ease_factor,
                interval_days=updated.interval_days,
            ),
        )
        saved = save_schedule(conn, updated)
    log.info(
        "review_scheduled",
        owner_id=owner_id,
        event_id=event_id,
        repetitions=saved.repetitions,
        interval_days=saved.interval_days,
        ease_factor=saved.ease_factor,
        next_review=saved.next_review.isoformat(),
    )
    return saved


def submit_review(
    conn,
    principal: str,
    card_id: int,
    quality: int,
    clock: Callable[[], datetime] = utc_now,
    max_retries: Optional[int] = None,
) -> CardRecord:
    """Apply one review to a card and record it in the review history.

    The review event and the card's new schedule commit together or not at
    all. Every call records a new event; retries by the caller are not
    deduplicated. ``now`` is read from ``clock`` once the write lock is held.
    A lost optimistic-lock race is retried from owner lookup onward, with a
    fresh ``now``, up to ``max_retries`` times.
    """
    log = logger.bind(principal=principal, card_id=card_id, quality=quality)
    log.info("review_received")
    if max_retries is None:
        max_retries = int(get_config_value("review", "max_conflict_retries", DEFAULT_MAX_CONFLICT_RETRIES))
    max_interval_days = configured_max_interval()

    attempt = 0
    while True:
        try:
            validate_quality(quality)
            return _review_once(conn, principal, card_id, quality, clock, max_interval_days, log)
        except ConflictError:
            if attempt >= max_retries:
                log.warning("review_conflict_exhausted", attempts=attempt + 1)
                raise
            attempt += 1
            log.info("review_conflict_retry", attempt=attempt)
        except AppError as exc:
            log.info("review_rejected", kind=exc.kind.value, detail=exc.message)
            raise


def due_cards_for(conn, principal: str, now: Optional[datetime] = None) -> List[CardRecord]:
    owner_id = resolve_owner(conn, principal)
    return list_due_cards(conn, owner_id, ensure_utc(now or utc_now()))


def due_count_for(conn, principal: str, now: Optional[datetime] = None) -> int:
    owner_id = resolve_owner(conn, principal)
    return count_due_cards(conn, owner_id, ensure_utc(now or utc_now()))


def review_history_for(conn, principal: str, card_id: int) -> List[ReviewEventRecord]:
    owner_id = resolve_owner(conn, principal)
    load_owned_card(conn, owner_id, card_id)
    return list_review_events(conn, card_id)
