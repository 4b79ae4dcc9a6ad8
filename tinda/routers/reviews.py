from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, selectinload

from tinda.core.database import get_db
from tinda.core.security import get_current_user
from tinda.models.site_review import SiteReview
from tinda.models.user import User
from tinda.schemas.review import ReviewCreate, ReviewRead

router = APIRouter(prefix="/reviews", tags=["reviews"])


def _to_read(review: SiteReview) -> ReviewRead:
    return ReviewRead(
        id=review.id,
        user_name=review.author.name,
        user_location=review.author.city,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
    )


@router.get("/", response_model=List[ReviewRead])
def list_reviews(limit: int = 20, db: Session = Depends(get_db)):
    reviews = (
        db.query(SiteReview)
        .options(selectinload(SiteReview.author))
        .order_by(SiteReview.created_at.desc(), SiteReview.id.desc())
        .limit(limit)
        .all()
    )
    return [_to_read(r) for r in reviews]


@router.post("/", response_model=ReviewRead, status_code=status.HTTP_201_CREATED)
def add_review(
    review_in: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    review = SiteReview(
        user_id=current_user.id,
        rating=review_in.rating,
        comment=review_in.comment.strip(),
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    return _to_read(review)
