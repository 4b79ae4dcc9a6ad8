import logging

from tinda.core.locations import ListingStatus
from tinda.models.listing import Listing

logger = logging.getLogger(__name__)

ALLOWED_TARGETS = (
    ListingStatus.ACTIVE.value,
    ListingStatus.REJECTED.value,
    ListingStatus.SOLD.value,
)


def apply_status(listing: Listing, status: str) -> Listing:
    """Set a moderation/lifecycle status. Anything outside ALLOWED_TARGETS is a caller bug."""
    status = ListingStatus(status).value
    if status not in ALLOWED_TARGETS:
        raise ValueError(f"Unsupported target status: {status}")

    logger.info("Listing %s: %s -> %s", listing.id, listing.status, status)
    listing.status = status
    return listing
