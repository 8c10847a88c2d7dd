from fastapi import APIRouter, Depends, Path
from typing import List

from db.database import get_db
from models.card import Card
from models.ids import MAX_ROW_ID
from models.review import ReviewCreate, ReviewEvent
from routes.cards import card_response
from services.reviews import review_history_for, submit_review
from utils.auth import get_current_principal

router = APIRouter()

@router.post("", response_model=Card)
def review_card(
    request: ReviewCreate,
    principal: str = Depends(get_current_principal),
    conn = Depends(get_db),
):
    """Record a review and return the card with its new schedule."""
    card = submit_review(conn, principal, request.card_id, request.quality)
    return card_response(conn, card)

@router.get("/{card_id}/history", response_model=List[ReviewEvent])
async def card_review_history(
    card_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    principal: str = Depends(get_current_principal),
    conn = Depends(get_db),
):
    """Review events for one of the caller's cards, oldest first."""
    events = review_history_for(conn, principal, card_id)
    return [
        ReviewEvent(
            id=event.id,
            card_id=event.card_id,
            reviewed_at=event.reviewed_at,
            quality=event.quality,
            ease_factor=event.ease_factor,
            interval_days=event.interval_days,
        )
        for event in events
    ]
