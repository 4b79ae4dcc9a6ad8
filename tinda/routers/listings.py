import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session, selectinload
from starlette.concurrency import run_in_threadpool

from tinda.core.config import get_settings
from tinda.core.database import get_db
from tinda.core.locations import CATEGORIES, Condition, ListingStatus
from tinda.core.security import get_current_user, get_optional_user
from tinda.models.listing import Listing
from tinda.models.message import Message
from tinda.models.user import User
from tinda.schemas.listing import (
    DescriptionRequest,
    DescriptionResponse,
    ListingRead,
    ListingStatusUpdate,
    ListingUpdate,
)
from tinda.schemas.location import Location
from tinda.schemas.message import MessageRead
from tinda.services.description_writer import DescriptionWriter, get_description_writer
from tinda.services.feed import filter_listings, rank_listings, visible_statuses
from tinda.services.image_codec import ImageDecodeError, compress_image
from tinda.services.media_store import (
    has_allowed_extension,
    image_url,
    remove_files,
    write_listing_images,
)
from tinda.services.moderation import apply_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/listings", tags=["listings"])

settings = get_settings()


def serialize_listing(listing: Listing) -> ListingRead:
    """Flatten a Listing row (plus seller and images) into the API shape."""
    return ListingRead(
        id=listing.id,
        seller_id=listing.seller_id,
        seller_name=listing.seller.name,
        seller_verified=listing.seller.is_verified,
        title=listing.title,
        description=listing.description,
        price=listing.price,
        category=listing.category,
        condition=listing.condition,
        images=[image_url(img) for img in listing.images],
        location=Location.model_validate(listing),
        status=listing.status,
        views=listing.views,
        likes=listing.likes,
        created_at=listing.created_at,
    )


def _listing_query(db: Session):
    return db.query(Listing).options(
        selectinload(Listing.images),
        selectinload(Listing.seller),
    )


def _can_see(listing: Listing, user: Optional[User]) -> bool:
    if listing.status in (ListingStatus.ACTIVE.value, ListingStatus.SOLD.value):
        return True
    return user is not None and (user.is_admin or user.id == listing.seller_id)


def _get_visible_listing_or_404(listing_id: int, user: Optional[User], db: Session) -> Listing:
    listing = _listing_query(db).filter(Listing.id == listing_id).first()
    if not listing or not _can_see(listing, user):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
    return listing


def _get_owned_listing_or_404(listing_id: int, user: User, db: Session) -> Listing:
    listing = _listing_query(db).filter(Listing.id == listing_id).first()
    if not listing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
    if listing.seller_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    return listing


def _check_category(category: str) -> None:
    if category not in CATEGORIES:
        raise HTTPException(status_code=400, detail=f"Unknown category: {category}")


@router.get("/", response_model=List[ListingRead])
def get_feed(
    category: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    is_admin = bool(current_user and current_user.is_admin)

    listings = (
        _listing_query(db)
        .filter(Listing.status.in_(visible_statuses(is_admin)))
        .all()
    )
    listings = filter_listings(listings, category=category, search=search)

    viewer = Location.model_validate(current_user) if current_user else None
    ranked = rank_listings(listings, viewer=viewer, is_admin=is_admin)
    return [serialize_listing(l) for l in ranked]


@router.post("/", response_model=ListingRead, status_code=status.HTTP_201_CREATED)
async def create_listing(
    title: str = Form(..., min_length=1, max_length=255),
    price: Decimal = Form(..., ge=0),
    category: str = Form(...),
    condition: Condition = Form(Condition.USED),
    description: str = Form(""),
    files: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # 1. Validate everything before any write
    _check_category(category)
    if not current_user.city:
        raise HTTPException(status_code=400, detail="Location is required")
    if not files:
        raise HTTPException(status_code=400, detail="Image is required")

    compressed: List[bytes] = []
    for upload in files:
        if not has_allowed_extension(upload.filename):
            raise HTTPException(400, f"Unsupported file type: {upload.filename}")
        try:
            data = await upload.read()
            compressed.append(
                await run_in_threadpool(
                    compress_image,
                    data,
                    max_width=settings.image_max_width,
                    quality=settings.image_quality,
                )
            )
        except ImageDecodeError as e:
            raise HTTPException(400, str(e))

    # 2. Listing + images in one transaction
    listing = Listing(
        seller_id=current_user.id,
        title=title,
        description=description,
        price=price,
        category=category,
        condition=condition.value,
        status=ListingStatus.PENDING.value,
        region=current_user.region,
        province=current_user.province,
        city=current_user.city,
    )
    db.add(listing)

    written = []
    try:
        db.flush()  # need listing.id for the media folder
        written = write_listing_images(db, listing, compressed)
        db.commit()
    except OSError as e:
        db.rollback()
        remove_files(written)
        logger.error("Storing images for new listing failed: %s", e)
        raise HTTPException(status_code=500, detail="Could not store listing images")
    except Exception:
        db.rollback()
        remove_files(written)
        raise

    logger.info("Listing %s created by user %s (pending review)", listing.id, current_user.id)
    db.refresh(listing)
    return serialize_listing(listing)


@router.post("/describe", response_model=DescriptionResponse)
async def describe_listing(
    body: DescriptionRequest,
    current_user: User = Depends(get_current_user),
    writer: DescriptionWriter = Depends(get_description_writer),
):
    if not body.title.strip():
        raise HTTPException(status_code=400, detail="Enter a title first!")
    text = await writer.generate_listing_description(
        body.title, body.category, body.condition.value
    )
    return DescriptionResponse(description=text)


@router.get("/{listing_id}", response_model=ListingRead)
def get_listing(
    listing_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    listing = _get_visible_listing_or_404(listing_id, current_user, db)
    listing.views = (listing.views or 0) + 1
    db.commit()
    db.refresh(listing)
    return serialize_listing(listing)


@router.put("/{listing_id}", response_model=ListingRead)
def update_listing(
    listing_id: int,
    listing_in: ListingUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    listing = _get_owned_listing_or_404(listing_id, current_user, db)

    # exclude_unset=True: fields that were not sent stay as they are
    data = listing_in.model_dump(exclude_unset=True)
    if "category" in data:
        _check_category(data["category"])
    if "condition" in data and data["condition"] is not None:
        data["condition"] = data["condition"].value

    for field, value in data.items():
        if value is not None:
            setattr(listing, field, value)

    db.commit()
    db.refresh(listing)
    return serialize_listing(listing)


@router.delete("/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_listing(
    listing_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    listing = _listing_query(db).filter(Listing.id == listing_id).first()
    if not listing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
    if listing.seller_id != current_user.id and not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")

    paths = [settings.media_root / img.file_path for img in listing.images]
    db.delete(listing)
    db.commit()
    remove_files(paths)
    return None


@router.patch("/{listing_id}/status", response_model=ListingRead)
def update_listing_status(
    listing_id: int,
    body: ListingStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    listing = _listing_query(db).filter(Listing.id == listing_id).first()
    if not listing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")

    # admins moderate; owners can only mark their own listing sold
    is_owner = listing.seller_id == current_user.id
    if not current_user.is_admin and not (is_owner and body.status == ListingStatus.SOLD.value):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")

    apply_status(listing, body.status)
    db.commit()
    db.refresh(listing)
    return serialize_listing(listing)


@router.post("/{listing_id}/like", response_model=ListingRead)
def like_listing(
    listing_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    listing = _get_visible_listing_or_404(listing_id, current_user, db)
    listing.likes = (listing.likes or 0) + 1
    db.commit()
    db.refresh(listing)
    return serialize_listing(listing)


@router.post("/{listing_id}/contact", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
def contact_seller(
    listing_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    listing = _get_visible_listing_or_404(listing_id, current_user, db)
    if listing.seller_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot message yourself")

    message = Message(
        from_user_id=current_user.id,
        to_user_id=listing.seller_id,
        listing_id=listing.id,
        body=f"Hi {listing.seller.name}, is this still available?",
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message
