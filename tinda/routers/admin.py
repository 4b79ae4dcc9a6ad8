from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, selectinload

from tinda.core.database import get_db
from tinda.core.locations import ListingStatus
from tinda.core.security import require_admin
from tinda.models.listing import Listing
from tinda.models.user import User
from tinda.routers.listings import serialize_listing
from tinda.schemas.listing import ListingRead
from tinda.schemas.stats import AdminStats, LandingStat
from tinda.services.stats import admin_stats, landing_stats

router = APIRouter(tags=["admin"])


@router.get("/admin/stats", response_model=AdminStats)
def get_admin_stats(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    return admin_stats(db)


@router.get("/admin/moderation-queue", response_model=List[ListingRead])
def get_moderation_queue(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    pending = (
        db.query(Listing)
        .options(selectinload(Listing.images), selectinload(Listing.seller))
        .filter(Listing.status == ListingStatus.PENDING.value)
        .order_by(Listing.created_at.desc(), Listing.id.desc())
        .all()
    )
    return [serialize_listing(l) for l in pending]


@router.get("/stats/landing", response_model=List[LandingStat])
def get_landing_stats(db: Session = Depends(get_db)):
    return landing_stats(db)
