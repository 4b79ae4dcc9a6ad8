from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=1, max_length=2000)


class ReviewRead(BaseModel):
    id: int
    user_name: str
    user_location: Optional[str] = None
    rating: int
    comment: str
    created_at: datetime
