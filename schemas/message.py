from typing import Optional
from datetime import datetime

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    recipient_username: str = Field(..., min_length=1, max_length=64)
    content: str = Field(..., min_length=1)


class MessageRead(BaseModel):
    id: int
    sender_id: int
    sender_username: str
    sender_photo_url: Optional[str] = None
    recipient_id: int
    recipient_username: str
    recipient_photo_url: Optional[str] = None
    content: str
    date_read: Optional[datetime] = None
    message_sent: datetime

    class Config:
        from_attributes = True
        validate_by_name = True
