from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from tinda.core.locations import ListingStatus
from tinda.models.listing import Listing
from tinda.models.site_review import SiteReview
from tinda.models.user import User


def admin_stats(db: Session) -> dict:
    active = ListingStatus.ACTIVE.value

    by_region = (
        db.query(Listing.region, func.count(Listing.id))
        .filter(Listing.status == active)
        .group_by(Listing.region)
        .order_by(Listing.region)
        .all()
    )
    by_category = (
        db.query(Listing.category, func.count(Listing.id))
        .filter(Listing.status == active)
        .group_by(Listing.category)
        .order_by(Listing.category)
        .all()
    )
    volume = (
        db.query(func.coalesce(func.sum(Listing.price), 0))
        .filter(Listing.status == ListingStatus.SOLD.value)
        .scalar()
    )

    return {
        "total_users": db.query(func.count(User.id)).scalar(),
        "total_listings": db.query(func.count(Listing.id)).scalar(),
        "total_volume": Decimal(volume or 0),
        "pending_approvals": (
            db.query(func.count(Listing.id))
            .filter(Listing.status == ListingStatus.PENDING.value)
            .scalar()
        ),
        "listings_by_region": [
            {"region": region or "Unknown", "count": count} for region, count in by_region
        ],
        "listings_by_category": [
            {"category": category, "count": count} for category, count in by_category
        ],
    }


def landing_stats(db: Session) -> list[dict]:
    return [
        {"label": "Happy Users", "value": db.query(func.count(User.id)).scalar()},
        {
            "label": "Active Listings",
            "value": (
                db.query(func.count(Listing.id))
                .filter(Listing.status == ListingStatus.ACTIVE.value)
                .scalar()
            ),
        },
        {"label": "Reviews", "value": db.query(func.count(SiteReview.id)).scalar()},
    ]
