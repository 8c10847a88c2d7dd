from fastapi import APIRouter, Depends, Path, Query, Response, status
from typing import Iterable, List, Optional

from db.cards import (
    CardRecord,
    count_cards,
    delete_card,
    insert_card,
    list_cards,
    update_card_content,
)
from db.database import get_db, transaction
from models.card import Card, CardCreate, CardLean, LanguagePair
from models.ids import MAX_ROW_ID
from services.reviews import due_cards_for, due_count_for, load_owned_card
from utils.auth import get_current_owner_id, get_current_principal
from utils.tags import load_card_tags, set_card_tags
from utils.timeutil import utc_now

router = APIRouter()

def card_responses(conn, cards: Iterable[CardRecord]) -> List[Card]:
    cards = list(cards)
    tags = load_card_tags(conn, [card.id for card in cards])
    return [
        Card(
            id=card.id,
            front=card.front,
            back=card.back,
            example_sentence=card.example_sentence,
            language_pair=card.language_pair,
            audio_url=card.audio_url,
            created_at=card.created_at,
            last_reviewed=card.last_reviewed,
            next_review=card.next_review,
            ease_factor=card.ease_factor,
            interval_days=card.interval_days,
            repetitions=card.repetitions,
            tags=tags.get(card.id, []),
        )
        for card in cards
    ]

def card_response(conn, card: CardRecord) -> Card:
    return card_responses(conn, [card])[0]

def card_content(request: CardCreate) -> dict:
    return {
        "front": request.front,
        "back": request.back,
        "example_sentence": request.example_sentence,
        "language_pair": request.language_pair.value if request.language_pair else None,
        "audio_url": request.audio_url,
    }

@router.get("/languages")
async def list_language_pairs():
    return [{"code": pair.value, "display_name": pair.display_name} for pair in LanguagePair]

@router.post("", response_model=Card)
async def create_card(
    request: CardCreate,
    owner_id: int = Depends(get_current_owner_id),
    conn = Depends(get_db),
):
    with transaction(conn):
        card_id = insert_card(conn, owner_id, card_content(request), utc_now())
        if request.tag_ids:
            set_card_tags(conn, card_id, owner_id, request.tag_ids)
    return card_response(conn, load_owned_card(conn, owner_id, card_id))

@router.get("", response_model=List[CardLean])
async def get_all_cards(
    search: Optional[str] = None,
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    tag_id: Optional[int] = Query(None, ge=1, le=MAX_ROW_ID),
    sort_by: Optional[str] = None,
    sort_direction: Optional[str] = None,
    owner_id: int = Depends(get_current_owner_id),
    conn = Depends(get_db),
):
    """List own cards, optionally filtered and sorted.

    ``search`` matches word prefixes through the full-text index; ``searchTerm``
    matches a case-insensitive substring of front, back or example sentence.
    """
    cards = list_cards(
        conn,
        owner_id,
        search=search,
        tag_id=tag_id,
        term=search_term,
        sort_by=sort_by,
        sort_direction=sort_direction,
    )
    return [
        CardLean(id=card.id, front=card.front, back=card.back, language_pair=card.language_pair)
        for card in cards
    ]

@router.get("/due", response_model=List[Card])
async def get_due_cards(principal: str = Depends(get_current_principal), conn = Depends(get_db)):
    """Cards due now, oldest due first."""
    return card_responses(conn, due_cards_for(conn, principal))

@router.get("/due/count")
async def get_due_cards_count(principal: str = Depends(get_current_principal), conn = Depends(get_db)):
    return due_count_for(conn, principal)

@router.get("/count")
async def get_total_cards_count(owner_id: int = Depends(get_current_owner_id), conn = Depends(get_db)):
    return count_cards(conn, owner_id)

@router.get("/{card_id}", response_model=Card)
async def get_card(
    card_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    owner_id: int = Depends(get_current_owner_id),
    conn = Depends(get_db),
):
    return card_response(conn, load_owned_card(conn, owner_id, card_id))

@router.put("/{card_id}", response_model=Card)
async def update_card(
    request: CardCreate,
    card_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    owner_id: int = Depends(get_current_owner_id),
    conn = Depends(get_db),
):
    """Edit descriptive fields and tags; the schedule is left untouched."""
    with transaction(conn):
        load_owned_card(conn, owner_id, card_id)
        update_card_content(conn, card_id, card_content(request))
        if request.tag_ids is not None:
            set_card_tags(conn, card_id, owner_id, request.tag_ids)
    return card_response(conn, load_owned_card(conn, owner_id, card_id))

@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_card(
    card_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    owner_id: int = Depends(get_current_owner_id),
    conn = Depends(get_db),
):
    with transaction(conn):
        load_owned_card(conn, owner_id, card_id)
        delete_card(conn, card_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
