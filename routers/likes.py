from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import get_current_user
from models.user import User
from routers.params import likes_params
from schemas.like import LikeRead
from schemas.params import LikesParams
from services import likes_service
from services.query_params import build_likes_query
from utils.pagination import add_pagination_header

router = APIRouter(prefix="/likes", tags=["likes"])


@router.post(
    "/{username}",
    status_code=status.HTTP_200_OK,
    summary="Поставить лайк пользователю",
)
async def add_like(
    username: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await likes_service.add_like(db, current_user, username)


@router.get(
    "/",
    response_model=List[LikeRead],
    summary="Кого я лайкнул (liked) или кто лайкнул меня (likedBy)",
)
async def get_user_likes(
    response: Response,
    params: LikesParams = Depends(likes_params),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[LikeRead]:
    likes = await likes_service.get_user_likes(db, build_likes_query(params, current_user.id))
    add_pagination_header(response, likes)
    return likes.items
