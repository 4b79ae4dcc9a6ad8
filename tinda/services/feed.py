"""
Marketplace feed: filtering and location-biased ranking.

Everything here is a pure function over listings already fetched from the
database, so it works on ORM rows and on any object exposing the same
attributes (region, province, city, category, title, created_at).
"""
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from tinda.core.locations import CATEGORY_ALL, ListingStatus
from tinda.schemas.location import Location

CITY_SCORE = 30
PROVINCE_SCORE = 20
REGION_SCORE = 10


def _same(a: Optional[str], b: Optional[str]) -> bool:
    # blank or missing fields never count as a match
    if not isinstance(a, str) or not isinstance(b, str):
        return False
    if not a or not b:
        return False
    return a == b


def proximity_score(listing, viewer: Location) -> int:
    """Score of the closest matching tier only (city > province > region)."""
    if _same(getattr(listing, "city", None), viewer.city):
        return CITY_SCORE
    if _same(getattr(listing, "province", None), viewer.province):
        return PROVINCE_SCORE
    if _same(getattr(listing, "region", None), viewer.region):
        return REGION_SCORE
    return 0


def _created_at(listing) -> datetime:
    return getattr(listing, "created_at", None) or datetime.min


def rank_listings(
    listings: Iterable,
    viewer: Optional[Location] = None,
    is_admin: bool = False,
) -> List:
    """
    Order listings for the feed.

    Anonymous viewers and admins get newest first. Everyone else gets nearest
    first (by proximity_score), newest first within the same score. Both sorts
    are stable, so ranking an already ranked list leaves it unchanged.
    """
    by_recency = sorted(listings, key=_created_at, reverse=True)
    if viewer is None or is_admin:
        return by_recency
    return sorted(by_recency, key=lambda l: proximity_score(l, viewer), reverse=True)


def filter_listings(
    listings: Iterable,
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> List:
    result = list(listings)

    if category and category != CATEGORY_ALL:
        result = [l for l in result if l.category == category]

    if search:
        q = search.lower()
        result = [l for l in result if q in (l.title or "").lower()]

    return result


def visible_statuses(is_admin: bool) -> Sequence[str]:
    if is_admin:
        return [s.value for s in ListingStatus]
    return [ListingStatus.ACTIVE.value]
