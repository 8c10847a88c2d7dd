from pydantic import BaseModel, field_validator
from typing import Optional

class TagBase(BaseModel):
    name: str
    color: Optional[str] = None

class TagCreate(TagBase):
    @field_validator('name')
    @classmethod
    def normalize_name(cls, v):
        name = (v or "").strip()
        if not name:
            raise ValueError("Tag name is required")
        return name

class Tag(TagBase):
    id: int

    class Config:
        from_attributes = True
