from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from tinda.core.database import get_db
from tinda.core.security import get_current_user
from tinda.models.listing import Listing
from tinda.models.message import Message
from tinda.models.user import User
from tinda.schemas.message import (
    ChatThreadRead,
    ListingPreview,
    MessageCreate,
    MessageRead,
)
from tinda.schemas.user import UserSummary
from tinda.services.media_store import image_url
from tinda.services.threads import ChatThread, build_threads, sort_threads_by_recency

router = APIRouter(prefix="/messages", tags=["messages"])


def _thread_to_read(thread: ChatThread) -> ChatThreadRead:
    listing = thread.listing
    return ChatThreadRead(
        listing=ListingPreview(
            id=listing.id,
            title=listing.title,
            price=listing.price,
            image=image_url(listing.images[0]) if listing.images else None,
        ),
        other_user=UserSummary.model_validate(thread.other_user),
        messages=[MessageRead.model_validate(m) for m in thread.messages],
        last_message=MessageRead.model_validate(thread.last_message),
        unread_count=thread.unread_count,
    )


@router.post("/", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
def send_message(
    message_in: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    body = message_in.body.strip()
    if not body:
        raise HTTPException(status_code=400, detail="Message cannot be empty")
    if message_in.to_user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot message yourself")

    if not db.get(User, message_in.to_user_id):
        raise HTTPException(status_code=404, detail="Recipient not found")
    if not db.get(Listing, message_in.listing_id):
        raise HTTPException(status_code=404, detail="Listing not found")

    message = Message(
        from_user_id=current_user.id,
        to_user_id=message_in.to_user_id,
        listing_id=message_in.listing_id,
        body=body,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


@router.get("/threads", response_model=List[ChatThreadRead])
def get_threads(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    messages = (
        db.query(Message)
        .filter(
            or_(
                Message.from_user_id == current_user.id,
                Message.to_user_id == current_user.id,
            )
        )
        .all()
    )

    listing_ids = {m.listing_id for m in messages}
    user_ids = {m.from_user_id for m in messages} | {m.to_user_id for m in messages}

    listings = {
        l.id: l for l in db.query(Listing).filter(Listing.id.in_(listing_ids)).all()
    } if listing_ids else {}
    users = {
        u.id: u for u in db.query(User).filter(User.id.in_(user_ids)).all()
    } if user_ids else {}

    threads = build_threads(messages, current_user.id, listings, users)
    return [_thread_to_read(t) for t in sort_threads_by_recency(threads)]


@router.post("/threads/{listing_id}/{other_user_id}/read")
def mark_thread_read(
    listing_id: int,
    other_user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    updated = (
        db.query(Message)
        .filter(
            Message.listing_id == listing_id,
            Message.from_user_id == other_user_id,
            Message.to_user_id == current_user.id,
            Message.read.is_(False),
        )
        .update({Message.read: True}, synchronize_session=False)
    )
    db.commit()
    return {"listing_id": listing_id, "other_user_id": other_user_id, "marked_read": updated}
