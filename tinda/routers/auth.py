import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tinda.core.database import get_db
from tinda.core.locations import is_known_location
from tinda.core.security import (
    create_session,
    end_session,
    get_current_user,
    hash_password,
    oauth2_scheme,
    verify_password,
)
from tinda.models.user import User
from tinda.schemas.user import Token, UserCreate, UserLogin, UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(user_in: UserCreate, db: Session = Depends(get_db)):
    # location is required before anything touches the DB
    if not user_in.city:
        raise HTTPException(status_code=400, detail="Location is required")
    if not is_known_location(user_in.region, user_in.province, user_in.city):
        raise HTTPException(status_code=400, detail="Unknown location")

    email = user_in.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = User(
        email=email,
        hashed_password=hash_password(user_in.password),
        name=user_in.name,
        role=user_in.role,
        region=user_in.region,
        province=user_in.province,
        city=user_in.city,
        is_verified=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s (%s)", user.id, user.role)

    token = create_session(db, user)
    return Token(access_token=token, user=UserRead.from_user(user))


@router.post("/login", response_model=Token)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == credentials.email.lower()).first()
    if not user or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    token = create_session(db, user)
    return Token(access_token=token, user=UserRead.from_user(user))


@router.get("/session", response_model=UserRead)
def get_session(current_user: User = Depends(get_current_user)):
    return UserRead.from_user(current_user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
):
    if token:
        end_session(token, db)
    return None
