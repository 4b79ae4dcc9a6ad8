from typing import List

from fastapi import APIRouter, Depends, UploadFile, File, HTTPException, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from tinda.core.config import get_settings
from tinda.core.database import get_db
from tinda.core.security import get_current_user
from tinda.models.listing import Listing
from tinda.models.listing_image import ListingImage
from tinda.models.user import User
from tinda.services.image_codec import ImageDecodeError, compress_image
from tinda.services.media_store import (
    has_allowed_extension,
    image_url,
    remove_files,
    write_listing_images,
)

router = APIRouter(
    prefix="/listings",
    tags=["listing-images"],
)

settings = get_settings()


# ---------------------------
# Listing + ownership check
# ---------------------------
def _get_owned_listing_or_404(listing_id: int, user: User, db: Session) -> Listing:
    listing = db.query(Listing).filter(Listing.id == listing_id).first()
    if not listing:
        raise HTTPException(404, "Listing not found")

    if listing.seller_id != user.id:
        raise HTTPException(403, "Not authorized")

    return listing


def _ordered_images(listing_id: int, db: Session) -> List[ListingImage]:
    return (
        db.query(ListingImage)
        .filter(ListingImage.listing_id == listing_id)
        .order_by(ListingImage.sort_order.asc())
        .all()
    )


# ---------------------------
# Upload (POST)
# ---------------------------
@router.post("/{listing_id}/images", status_code=status.HTTP_201_CREATED)
async def upload_listing_images(
    listing_id: int,
    files: List[UploadFile] = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    listing = _get_owned_listing_or_404(listing_id, current_user, db)

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

    # continue after the existing images
    existing_count = (
        db.query(ListingImage).filter(ListingImage.listing_id == listing_id).count()
    )

    written = []
    try:
        written = write_listing_images(db, listing, compressed, start_order=existing_count)
        db.commit()
    except Exception:
        db.rollback()
        remove_files(written)
        raise

    uploaded = [img for img in _ordered_images(listing_id, db) if img.sort_order >= existing_count]
    return {
        "listing_id": listing_id,
        "uploaded": [
            {"id": img.id, "file_path": img.file_path, "url": image_url(img)}
            for img in uploaded
        ],
    }


# ---------------------------
# List (GET)
#   -> ["/media/listings/6/000_ab12cd34.jpg", ...]
# ---------------------------
@router.get("/{listing_id}/images", response_model=List[str])
def list_listing_images(
    listing_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _ = _get_owned_listing_or_404(listing_id, current_user, db)
    return [image_url(img) for img in _ordered_images(listing_id, db)]


# ---------------------------
# Delete (DELETE) by filename
#   DELETE /listings/{id}/images/000_ab12cd34.jpg
# ---------------------------
@router.delete(
    "/{listing_id}/images/{filename}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_listing_image(
    listing_id: int,
    filename: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _get_owned_listing_or_404(listing_id, current_user, db)

    # DB file_path is "listings/<id>/<filename>"
    relative_path = f"listings/{listing_id}/{filename}"

    img = (
        db.query(ListingImage)
        .filter(
            ListingImage.listing_id == listing_id,
            ListingImage.file_path == relative_path,
        )
        .first()
    )

    if not img:
        raise HTTPException(404, "Image not found")

    file_path = settings.media_root / img.file_path
    db.delete(img)
    db.commit()
    remove_files([file_path])

    # close the gap in sort_order
    for idx, image in enumerate(_ordered_images(listing_id, db)):
        image.sort_order = idx
    db.commit()

    return None
