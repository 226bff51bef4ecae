# models/like.py
from sqlalchemy import Column, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base


class Like(Base):
    __tablename__ = "likes"

    source_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    liked_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    source_user = relationship("User", foreign_keys=[source_user_id], backref="liked_users")
    liked_user = relationship("User", foreign_keys=[liked_user_id], backref="liked_by_users")

    __table_args__ = (
        CheckConstraint("source_user_id <> liked_user_id", name="ck_likes_not_self"),
    )

    def __repr__(self):
        return f"<Like {self.source_user_id}→{self.liked_user_id}>"
