from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tinda.schemas.user import UserSummary


class MessageCreate(BaseModel):
    to_user_id: int
    listing_id: int
    body: str = Field(min_length=1, max_length=5000)


class MessageRead(BaseModel):
    id: int
    from_user_id: int
    to_user_id: int
    listing_id: int
    body: str
    read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ListingPreview(BaseModel):
    id: int
    title: str
    price: Decimal
    image: Optional[str] = None


class ChatThreadRead(BaseModel):
    listing: ListingPreview
    other_user: UserSummary
    messages: List[MessageRead]
    last_message: MessageRead
    unread_count: int
