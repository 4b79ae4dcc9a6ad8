from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from tinda.core.locations import Condition
from tinda.schemas.location import Location


class ListingUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    category: Optional[str] = None
    condition: Optional[Condition] = None


class ListingStatusUpdate(BaseModel):
    status: Literal["active", "rejected", "sold"]


class ListingRead(BaseModel):
    id: int
    seller_id: int
    seller_name: str
    seller_verified: bool
    title: str
    description: Optional[str] = None
    price: Decimal
    category: str
    condition: str
    images: List[str] = []
    location: Location
    status: str
    views: int
    likes: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DescriptionRequest(BaseModel):
    title: str = Field(default="", max_length=255)
    category: str = "Other"
    condition: Condition = Condition.USED


class DescriptionResponse(BaseModel):
    description: str
