"""ORM model for comments on pings."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, LargeBinary, Text, func
from sqlalchemy.orm import relationship

from campus_pulse.models.base import Base, utcnow


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    ping_id = Column(
        Integer, ForeignKey("pings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content = Column(Text, nullable=False)
    image_data = Column(LargeBinary, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    author = relationship("User")
    ping = relationship("Ping", back_populates="comments")
