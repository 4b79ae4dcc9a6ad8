import logging
import os
import uuid
from pathlib import Path
from typing import Iterable, List

from sqlalchemy.orm import Session

from tinda.core.config import get_settings
from tinda.models.listing import Listing
from tinda.models.listing_image import ListingImage

logger = logging.getLogger(__name__)

settings = get_settings()

ALLOWED_EXTENSIONS = [".jpg", ".jpeg", ".png", ".webp"]


def has_allowed_extension(filename: str | None) -> bool:
    ext = os.path.splitext(filename or "")[1].lower()
    return ext in ALLOWED_EXTENSIONS


def image_url(img: ListingImage) -> str:
    return f"{settings.media_url}/{img.file_path}"


def write_listing_images(
    db: Session,
    listing: Listing,
    images: List[bytes],
    start_order: int = 0,
) -> List[Path]:
    """
    Write already-compressed JPEG bytes under media/listings/<id>/ and stage a
    ListingImage row for each. Nothing is committed here. If a file write
    fails, files written by this call are removed before the error propagates.
    """
    listing_dir: Path = settings.media_root / "listings" / str(listing.id)
    listing_dir.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    sort_order = start_order
    try:
        for data in images:
            # suffix keeps names unique after deletes renumber sort_order
            safe_name = f"{sort_order:03d}_{uuid.uuid4().hex[:8]}.jpg"
            file_path = listing_dir / safe_name
            file_path.write_bytes(data)
            written.append(file_path)

            # DB keeps the path relative to media root: "listings/<id>/000_<hex>.jpg"
            relative_path = Path("listings") / str(listing.id) / safe_name
            db.add(
                ListingImage(
                    listing_id=listing.id,
                    file_path=relative_path.as_posix(),
                    sort_order=sort_order,
                )
            )
            sort_order += 1
    except OSError:
        logger.error("Failed writing images for listing %s, cleaning up", listing.id)
        remove_files(written)
        raise

    return written


def remove_files(paths: Iterable[Path]) -> None:
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)
