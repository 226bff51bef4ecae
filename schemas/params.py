from typing import Optional

from pydantic import BaseModel, Field


class PaginationParams(BaseModel):
    page_number: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1)


class UserParams(PaginationParams):
    """Сырые параметры списка участников, как пришли в запросе."""

    min_age: int = Field(18, ge=0)
    max_age: int = Field(150, ge=0)
    gender: Optional[str] = None
    order_by: str = "lastActive"


class LikesParams(PaginationParams):
    predicate: str


class MessageParams(PaginationParams):
    container: str = "Unread"
