from typing import Optional
from pydantic import BaseModel


class LikeRead(BaseModel):
    id: int
    username: str
    known_as: Optional[str] = None
    age: int
    photo_url: Optional[str] = None
    city: Optional[str] = None

    class Config:
        from_attributes = True
        validate_by_name = True
