from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import datetime
from enum import Enum

from .ids import RowId
from .tag import Tag

class LanguagePair(str, Enum):
    DE_FR = "DE_FR"
    DE_ES = "DE_ES"
    EN_ES = "EN_ES"
    EN_FR = "EN_FR"
    EN_DE = "EN_DE"
    FR_ES = "FR_ES"
    EN_IT = "EN_IT"
    DE_IT = "DE_IT"
    FR_IT = "FR_IT"
    ES_IT = "ES_IT"

    @property
    def display_name(self) -> str:
        return LANGUAGE_PAIR_NAMES[self]

LANGUAGE_PAIR_NAMES = {
    LanguagePair.DE_FR: "German ⇄ French",
    LanguagePair.DE_ES: "German ⇄ Spanish",
    LanguagePair.EN_ES: "English ⇄ Spanish",
    LanguagePair.EN_FR: "English ⇄ French",
    LanguagePair.EN_DE: "English ⇄ German",
    LanguagePair.FR_ES: "French ⇄ Spanish",
    LanguagePair.EN_IT: "English ⇄ Italian",
    LanguagePair.DE_IT: "German ⇄ Italian",
    LanguagePair.FR_IT: "French ⇄ Italian",
    LanguagePair.ES_IT: "Spanish ⇄ Italian",
}

class CardBase(BaseModel):
    front: str
    back: str
    example_sentence: Optional[str] = None
    language_pair: Optional[LanguagePair] = None
    audio_url: Optional[str] = None

class CardCreate(CardBase):
    tag_ids: Optional[List[RowId]] = None

    @field_validator('front', 'back')
    @classmethod
    def not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

class CardLean(BaseModel):
    id: int
    front: str
    back: str
    language_pair: Optional[LanguagePair] = None

class Card(CardBase):
    id: int
    created_at: datetime
    last_reviewed: Optional[datetime] = None
    next_review: datetime
    ease_factor: float = 2.5
    interval_days: int = 0
    repetitions: int = 0
    tags: List[Tag] = []

    class Config:
        from_attributes = True
