"""
Выборка участников написанным вручную SQL.

Один запрос отдаёт строку на каждую пару пользователь×фото, второй
считает только пользователей. Результат обязан совпадать с
ProjectionMemberQuery один в один, включая порядок.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Integer,
    String,
    Text,
    bindparam,
    column,
    text,
)
from sqlalchemy.ext.asyncio import AsyncSession

from schemas.member import MemberRead, MemberUpdate
from schemas.photo import PhotoRead
from services.errors import PersistenceError
from services.query_params import ORDER_COLUMNS, MemberQuery
from utils.pagination import PagedList
from utils.user_helpers import to_member_read

logger = logging.getLogger(__name__)

USER_COLUMNS = (
    "id, username, known_as, date_of_birth, gender, introduction, looking_for, "
    "interests, city, country, created_at, last_active"
)

RESULT_COLUMNS = (
    column("id", Integer),
    column("username", String),
    column("known_as", String),
    column("date_of_birth", Date),
    column("gender", String),
    column("introduction", Text),
    column("looking_for", Text),
    column("interests", Text),
    column("city", String),
    column("country", String),
    column("created_at", DateTime(timezone=True)),
    column("last_active", DateTime(timezone=True)),
    column("photo_id", Integer),
    column("photo_url", String),
    column("photo_is_main", Boolean),
    column("photo_public_id", String),
)

MEMBER_FILTER = """
    LOWER(username) <> LOWER(:current_username)
    AND gender = :gender
    AND date_of_birth > :min_dob
    AND date_of_birth <= :max_dob
"""

# Окно накладывается на пользователей во вложенном запросе, а не на строки
# join'а, иначе пользователь с тремя фото занимал бы три места на странице.
MEMBERS_SQL = """
SELECT u.id, u.username, u.known_as, u.date_of_birth, u.gender, u.introduction,
       u.looking_for, u.interests, u.city, u.country, u.created_at, u.last_active,
       p.id AS photo_id, p.url AS photo_url, p.is_main AS photo_is_main,
       p.public_id AS photo_public_id
FROM (
    SELECT {user_columns}
    FROM users
    WHERE {member_filter}
    ORDER BY {order_column} DESC, id DESC
    LIMIT :page_size OFFSET :offset
) AS u
LEFT JOIN photos AS p ON p.user_id = u.id
ORDER BY u.{order_column} DESC, u.id DESC, p.id
"""

MEMBERS_COUNT_SQL = """
SELECT COUNT(id) AS total_count
FROM users
WHERE {member_filter}
"""

MEMBER_SQL = """
SELECT u.id, u.username, u.known_as, u.date_of_birth, u.gender, u.introduction,
       u.looking_for, u.interests, u.city, u.country, u.created_at, u.last_active,
       p.id AS photo_id, p.url AS photo_url, p.is_main AS photo_is_main,
       p.public_id AS photo_public_id
FROM users AS u
LEFT JOIN photos AS p ON p.user_id = u.id
WHERE LOWER(u.username) = LOWER(:username)
ORDER BY p.id
"""

UPDATE_MEMBER_SQL = """
UPDATE users
SET introduction = :introduction,
    looking_for = :looking_for,
    interests = :interests,
    city = :city,
    country = :country
WHERE LOWER(username) = LOWER(:username)
"""

FILTER_PARAMS = (
    bindparam("current_username", type_=String),
    bindparam("gender", type_=String),
    bindparam("min_dob", type_=Date),
    bindparam("max_dob", type_=Date),
)


def members_statement(order_column: str):
    # В текст подставляется только имя колонки из фиксированного списка
    if order_column not in ORDER_COLUMNS.values():
        raise ValueError(f"Unsupported order column: {order_column!r}")
    sql = MEMBERS_SQL.format(
        user_columns=USER_COLUMNS,
        member_filter=MEMBER_FILTER,
        order_column=order_column,
    )
    return (
        text(sql)
        .bindparams(*FILTER_PARAMS, bindparam("page_size", type_=Integer), bindparam("offset", type_=Integer))
        .columns(*RESULT_COLUMNS)
    )


def count_statement():
    return text(MEMBERS_COUNT_SQL.format(member_filter=MEMBER_FILTER)).bindparams(*FILTER_PARAMS)


def hydrate_members(rows) -> List[MemberRead]:
    """
    Сворачивает строки join'а в участников.
    Первая строка пользователя даёт базовые поля, каждая строка добавляет фото,
    главное фото заполняет photo_url. Порядок первого появления сохраняется.
    """
    lookup: Dict[int, dict] = {}
    for row in rows:
        fields = row._mapping
        entry = lookup.get(fields["id"])
        if entry is None:
            entry = {"fields": fields, "photo_url": None, "photos": []}
            lookup[fields["id"]] = entry

        # LEFT JOIN: у пользователя без фото колонки фото пустые
        if fields["photo_id"] is None:
            continue
        entry["photos"].append(
            PhotoRead(
                id=fields["photo_id"],
                url=fields["photo_url"],
                is_main=bool(fields["photo_is_main"]),
                public_id=fields["photo_public_id"],
            )
        )
        if fields["photo_is_main"] and entry["photo_url"] is None:
            entry["photo_url"] = fields["photo_url"]

    return [
        to_member_read(entry["fields"], entry["photo_url"], entry["photos"])
        for entry in lookup.values()
    ]


class RawSqlMemberQuery:
    """Та же выборка участников, что и ProjectionMemberQuery, но сырым SQL."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_members(self, query: MemberQuery) -> PagedList[MemberRead]:
        params = {
            "current_username": query.current_username,
            "gender": query.gender,
            "min_dob": query.min_dob,
            "max_dob": query.max_dob,
        }
        # Два последовательных запроса: общее число по users, затем страница
        count = (await self.db.execute(count_statement(), params)).scalar_one()

        result = await self.db.execute(
            members_statement(query.order_column),
            {**params, "page_size": query.window.page_size, "offset": query.window.offset},
        )
        members = hydrate_members(result.all())
        return PagedList(members, count, query.window.page_number, query.window.page_size)

    async def get_member(self, username: str) -> Optional[MemberRead]:
        stmt = text(MEMBER_SQL).columns(*RESULT_COLUMNS)
        result = await self.db.execute(stmt, {"username": username})
        members = hydrate_members(result.all())
        return members[0] if members else None


async def update_member_raw(db: AsyncSession, username: str, payload: MemberUpdate) -> None:
    """UPDATE одним запросом; ни одной затронутой строки - ошибка сохранения."""
    result = await db.execute(
        text(UPDATE_MEMBER_SQL),
        {**payload.model_dump(), "username": username},
    )
    if result.rowcount == 0:
        await db.rollback()
        raise PersistenceError("Failed to update user")
    await db.commit()
    logger.info("Profile of %s updated via raw SQL", username)
