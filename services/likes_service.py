import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.like import Like
from models.user import User
from schemas.like import LikeRead
from services.errors import BadRequestError, NotFoundError
from services.member_projection import main_photo_url
from services.query_params import LikesPredicate, LikesQuery
from utils.pagination import PagedList
from utils.user_helpers import to_like_read

logger = logging.getLogger(__name__)


async def get_user_like(db: AsyncSession, source_user_id: int, liked_user_id: int) -> Optional[Like]:
    return await db.get(Like, (source_user_id, liked_user_id))


async def add_like(db: AsyncSession, source_user: User, username: str) -> None:
    result = await db.execute(select(User).where(func.lower(User.username) == username.lower()))
    liked_user = result.scalar_one_or_none()
    if not liked_user:
        raise NotFoundError("User not found")

    # 1) Нельзя лайкать себя
    if liked_user.id == source_user.id:
        raise BadRequestError("You cannot like yourself")

    # 2) Пара (кто, кого) уникальна
    if await get_user_like(db, source_user.id, liked_user.id):
        raise BadRequestError("You already like this user")

    db.add(Like(source_user_id=source_user.id, liked_user_id=liked_user.id))
    await db.commit()
    logger.info("User %s liked %s", source_user.username, liked_user.username)


async def get_user_likes(db: AsyncSession, query: LikesQuery) -> PagedList[LikeRead]:
    """
    liked   - кого лайкнул пользователь,
    likedBy - кто лайкнул пользователя.
    """
    stmt = select(
        User.id,
        User.username,
        User.known_as,
        User.date_of_birth,
        User.city,
        main_photo_url().label("photo_url"),
    )

    if query.predicate is LikesPredicate.LIKED:
        stmt = stmt.join(Like, Like.liked_user_id == User.id).where(Like.source_user_id == query.user_id)
    else:
        stmt = stmt.join(Like, Like.source_user_id == User.id).where(Like.liked_user_id == query.user_id)

    stmt = stmt.order_by(User.username, User.id)
    return await PagedList.create_async(
        db,
        stmt,
        query.window.page_number,
        query.window.page_size,
        row_mapper=lambda row: to_like_read(row._mapping),
    )
