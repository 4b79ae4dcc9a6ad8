from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Numeric,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from tinda.core.database import Base
from tinda.core.locations import Condition, ListingStatus


class Listing(Base):
    __tablename__ = "listings"

    id = Column(Integer, primary_key=True, index=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    price = Column(Numeric(12, 2), nullable=False, default=0)
    category = Column(String(50), nullable=False, index=True)
    condition = Column(String(20), nullable=False, default=Condition.USED.value)

    # pending -> active -> sold, pending -> rejected
    status = Column(String(20), nullable=False, default=ListingStatus.PENDING.value, index=True)

    # copied from the seller's home location at creation
    region = Column(String(100), nullable=True)
    province = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)

    views = Column(Integer, nullable=False, default=0)
    likes = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    seller = relationship("User", back_populates="listings")

    images = relationship(
        "ListingImage",
        back_populates="listing",
        cascade="all, delete-orphan",
        order_by="ListingImage.sort_order",
    )

    messages = relationship(
        "Message",
        back_populates="listing",
        cascade="all, delete-orphan",
    )
