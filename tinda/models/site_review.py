from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Integer, Text, ForeignKey, DateTime
from sqlalchemy.orm import relationship

from tinda.core.database import Base


class SiteReview(Base):
    __tablename__ = "site_reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_site_reviews_rating"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    author = relationship("User")
