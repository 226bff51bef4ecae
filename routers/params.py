from typing import Optional

from fastapi import Query

from core.config import settings
from schemas.params import LikesParams, MessageParams, UserParams


def _page_size(page_size: int) -> int:
    return min(page_size, settings.MAX_PAGE_SIZE)


def user_params(
    min_age: int = Query(18, alias="minAge", ge=0),
    max_age: int = Query(150, alias="maxAge", ge=0),
    gender: Optional[str] = Query(None),
    order_by: str = Query("lastActive", alias="orderBy"),
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1),
) -> UserParams:
    return UserParams(
        min_age=min_age,
        max_age=max_age,
        gender=gender or None,
        order_by=order_by,
        page_number=page_number,
        page_size=_page_size(page_size),
    )


def likes_params(
    predicate: str = Query(..., pattern="^(liked|likedBy)$"),
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1),
) -> LikesParams:
    return LikesParams(predicate=predicate, page_number=page_number, page_size=_page_size(page_size))


def message_params(
    container: str = Query("Unread"),
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1),
) -> MessageParams:
    return MessageParams(container=container, page_number=page_number, page_size=_page_size(page_size))
