# models/photo.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base


class Photo(Base):
    __tablename__ = "photos"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    url = Column(String(length=512), nullable=False)
    # Ключ объекта в хранилище; у импортированных фото может отсутствовать
    public_id = Column(String(length=255), nullable=True)
    is_main = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="photos")

    def __repr__(self):
        return f"<Photo id={self.id} user={self.user_id} main={self.is_main}>"
