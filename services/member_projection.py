from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.photo import Photo
from models.user import User
from schemas.member import MemberRead
from schemas.photo import PhotoRead
from services.query_params import MemberOrder, MemberQuery
from utils.pagination import PagedList
from utils.user_helpers import to_member_read, to_photo_reads

ORDER_ATTRIBUTES = {
    MemberOrder.CREATED: User.created_at,
    MemberOrder.LAST_ACTIVE: User.last_active,
}


def main_photo_url():
    """Коррелированный подзапрос: URL главной фотографии пользователя."""
    return (
        select(Photo.url)
        .where(Photo.user_id == User.id, Photo.is_main.is_(True))
        .order_by(Photo.id)
        .limit(1)
        .correlate(User)
        .scalar_subquery()
    )


def member_columns():
    return (
        User.id,
        User.username,
        User.known_as,
        User.date_of_birth,
        User.gender,
        User.introduction,
        User.looking_for,
        User.interests,
        User.city,
        User.country,
        User.created_at,
        User.last_active,
        main_photo_url().label("photo_url"),
    )


class ProjectionMemberQuery:
    """Выборка участников через ORM с проекцией сразу в MemberRead, без сущностей User."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_members(self, query: MemberQuery) -> PagedList[MemberRead]:
        order_attr = ORDER_ATTRIBUTES[query.order]
        stmt = (
            select(*member_columns())
            .where(
                func.lower(User.username) != query.current_username.lower(),
                User.gender == query.gender,
                User.date_of_birth > query.min_dob,
                User.date_of_birth <= query.max_dob,
            )
            .order_by(order_attr.desc(), User.id.desc())
        )
        page = await PagedList.create_async(
            self.db, stmt, query.window.page_number, query.window.page_size
        )
        photos = await self._photos_by_user([row.id for row in page])
        return page.map(
            lambda row: to_member_read(row._mapping, row.photo_url, photos.get(row.id, []))
        )

    async def get_member(self, username: str) -> Optional[MemberRead]:
        stmt = select(*member_columns()).where(func.lower(User.username) == username.lower())
        row = (await self.db.execute(stmt)).one_or_none()
        if row is None:
            return None
        photos = await self._photos_by_user([row.id])
        return to_member_read(row._mapping, row.photo_url, photos.get(row.id, []))

    async def _photos_by_user(self, user_ids: List[int]) -> Dict[int, List[PhotoRead]]:
        if not user_ids:
            return {}
        result = await self.db.execute(
            select(Photo.id, Photo.user_id, Photo.url, Photo.is_main, Photo.public_id)
            .where(Photo.user_id.in_(user_ids))
            .order_by(Photo.user_id, Photo.id)
        )
        grouped: Dict[int, list] = {}
        for row in result.mappings():
            grouped.setdefault(row["user_id"], []).append(row)
        return {user_id: to_photo_reads(rows) for user_id, rows in grouped.items()}
