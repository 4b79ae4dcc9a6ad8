import uuid
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from tinda.core.config import get_settings
from tinda.core.database import get_db
from tinda.models.auth_session import AuthSession
from tinda.models.user import User

settings = get_settings()

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_session(db: Session, user: User) -> str:
    """Store a server-side session for ``user`` and return its signed token."""
    token_id = uuid.uuid4().hex
    expires_at = datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes)

    db.add(AuthSession(token_id=token_id, user_id=user.id, expires_at=expires_at))
    db.commit()

    payload = {"sub": str(user.id), "jti": token_id, "exp": expires_at}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def _decode(token: str) -> dict:
    return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])


def _resolve_session(token: str, db: Session) -> Optional[AuthSession]:
    try:
        payload = _decode(token)
    except JWTError:
        return None

    token_id = payload.get("jti")
    if not token_id:
        return None

    session = db.query(AuthSession).filter(AuthSession.token_id == token_id).first()
    if not session or session.expires_at < datetime.utcnow():
        return None
    if str(session.user_id) != payload.get("sub"):
        return None
    return session


def end_session(token: str, db: Session) -> None:
    session = _resolve_session(token, db)
    if session:
        db.delete(session)
        db.commit()


def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    if not token:
        return None
    session = _resolve_session(token, db)
    if not session:
        return None
    return session.user


def get_current_user(
    user: Optional[User] = Depends(get_optional_user),
) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user
