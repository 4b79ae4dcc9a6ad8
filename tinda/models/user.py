from datetime import datetime

from sqlalchemy import Boolean, Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from tinda.core.database import Base
from tinda.core.locations import UserRole


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String(255), nullable=False)

    # ADMIN / SELLER / USER, fixed after registration
    role = Column(String(20), nullable=False, default=UserRole.USER.value)

    # home location, drives feed proximity
    region = Column(String(100), nullable=True)
    province = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)

    is_verified = Column(Boolean, nullable=False, default=False)
    avatar = Column(String(512), nullable=True)
    joined_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    listings = relationship(
        "Listing",
        back_populates="seller",
        cascade="all, delete-orphan",
    )

    sessions = relationship(
        "AuthSession",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
