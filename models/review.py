from pydantic import BaseModel
from datetime import datetime

from .ids import RowId

class ReviewCreate(BaseModel):
    card_id: RowId
    # Range is enforced by the scheduler so it surfaces as InvalidQualityError
    quality: int

class ReviewEvent(BaseModel):
    id: int
    card_id: int
    reviewed_at: datetime
    quality: int
    ease_factor: float
    interval_days: int

    class Config:
        from_attributes = True
