from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from schemas.member import MemberRead
from services.query_params import MemberQuery
from utils.pagination import PagedList


class MemberQueryExecutor(Protocol):
    """
    Выполняет нормализованный MemberQuery.
    Реализации обязаны отдавать одних и тех же участников в одинаковом порядке
    с одинаковыми total_count/total_pages.
    """

    db: AsyncSession

    async def get_members(self, query: MemberQuery) -> PagedList[MemberRead]:
        ...

    async def get_member(self, username: str) -> Optional[MemberRead]:
        ...
