"""Database models."""

from tinda.models.user import User
from tinda.models.auth_session import AuthSession
from tinda.models.listing import Listing
from tinda.models.listing_image import ListingImage
from tinda.models.message import Message
from tinda.models.site_review import SiteReview

__all__ = [
    "User",
    "AuthSession",
    "Listing",
    "ListingImage",
    "Message",
    "SiteReview",
]
