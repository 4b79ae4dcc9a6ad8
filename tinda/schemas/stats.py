from decimal import Decimal
from typing import List

from pydantic import BaseModel


class RegionCount(BaseModel):
    region: str
    count: int


class CategoryCount(BaseModel):
    category: str
    count: int


class AdminStats(BaseModel):
    total_users: int
    total_listings: int
    total_volume: Decimal
    pending_approvals: int
    listings_by_region: List[RegionCount]
    listings_by_category: List[CategoryCount]


class LandingStat(BaseModel):
    label: str
    value: int
