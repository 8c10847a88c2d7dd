from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Tuple

from utils.errors import InvalidQualityError

MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5
PASSING_QUALITY = 3
MIN_QUALITY = 0
MAX_QUALITY = 5
# 100 years; keeps now + interval well inside datetime's range
MAX_INTERVAL_DAYS = 36500

QUALITY_LABELS = {
    0: "complete blackout",
    1: "incorrect, but familiar",
    2: "incorrect, but seemed easy",
    3: "correct, with difficulty",
    4: "correct, after hesitation",
    5: "perfect recall",
}


@dataclass(frozen=True)
class SchedulingState:
    ease_factor: float = DEFAULT_EASE_FACTOR
    repetitions: int = 0
    interval_days: int = 0
    last_reviewed: Optional[datetime] = None
    next_review: Optional[datetime] = None

    @classmethod
    def initial(cls, now: datetime) -> "SchedulingState":
        """State of a freshly created card: due immediately."""
        return cls(next_review=now)


def validate_quality(quality: object) -> int:
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(quality)
    if quality < MIN_QUALITY or quality > MAX_QUALITY:
        raise InvalidQualityError(quality)
    return quality


def round_half_away_from_zero(value: float) -> int:
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def next_interval(
    interval_days: int,
    repetitions: int,
    ease_factor: float,
    max_interval_days: int = MAX_INTERVAL_DAYS,
) -> int:
    """Interval after a successful review, using the ease factor before this review."""
    if repetitions == 0:
        proposed = 1
    elif repetitions == 1:
        proposed = 6
    else:
        proposed = round_half_away_from_zero(interval_days * ease_factor)
    return min(proposed, max_interval_days)


def next_ease_factor(ease_factor: float, quality: int) -> float:
    miss = 5 - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def update_sm2(
    state: SchedulingState,
    quality: int,
    now: datetime,
    max_interval_days: int = MAX_INTERVAL_DAYS,
) -> SchedulingState:
    """Apply one SM-2 review to a card's scheduling state.

    quality: 0-5 rating
        0: complete blackout
        1: incorrect response, but familiar
        2: incorrect response, seems easy to recall
        3: correct response, but difficult
        4: correct response, some hesitation
        5: perfect response

    The interval is computed from the ease factor as it was before this
    review and capped at ``max_interval_days``; the ease factor is then
    updated and clamped at 1.3. ``now`` is the only time source consulted.
    Raises InvalidQualityError for anything outside 0..5.
    """
    quality = validate_quality(quality)
    if quality >= PASSING_QUALITY:
        interval = next_interval(state.interval_days, state.repetitions, state.ease_factor, max_interval_days)
        repetitions = state.repetitions + 1
    else:
        interval = 1
        repetitions = 0
    return replace(
        state,
        ease_factor=next_ease_factor(state.ease_factor, quality),
        repetitions=repetitions,
        interval_days=interval,
        last_reviewed=now,
        next_review=now + timedelta(days=interval),
    )


def replay(
    reviews: Iterable[Tuple[int, datetime]],
    start: Optional[SchedulingState] = None,
    max_interval_days: int = MAX_INTERVAL_DAYS,
) -> SchedulingState:
    """Fold (quality, reviewed_at) pairs through update_sm2, oldest first."""
    state = start or SchedulingState()
    for quality, reviewed_at in reviews:
        state = update_sm2(state, quality, reviewed_at, max_interval_days)
    return state
