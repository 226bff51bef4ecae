# models/user.py
from sqlalchemy import Column, Integer, DateTime, String, Text, Date, LargeBinary, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(64), nullable=False)
    password_hash = Column(LargeBinary, nullable=True)
    password_salt = Column(LargeBinary, nullable=True)

    date_of_birth = Column(Date, nullable=False)
    known_as = Column(String(100), nullable=True)
    gender = Column(String(10), nullable=False)
    introduction = Column(Text, nullable=True)
    looking_for = Column(Text, nullable=True)
    interests = Column(Text, nullable=True)
    city = Column(String(64), nullable=True)
    country = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_active = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    photos = relationship(
        "Photo",
        back_populates="user",
        order_by="Photo.id",
        cascade="all, delete-orphan",
    )

    # Уникальность username без учёта регистра
    __table_args__ = (
        Index("uq_users_username_lower", func.lower(username), unique=True),
    )

    @property
    def main_photo(self):
        return next((p for p in self.photos if p.is_main), None)

    def __repr__(self):
        return f"<User id={self.id} username={self.username}>"
