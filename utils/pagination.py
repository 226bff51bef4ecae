import math
from typing import Callable, Generic, Iterable, Iterator, List, Optional, TypeVar

from fastapi import Response
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schemas.pagination import PaginationHeader

T = TypeVar("T")
U = TypeVar("U")


class PagedList(Generic[T]):
    """
    Окно результатов с метаданными страницы.
    total_pages не хранится отдельно, а всегда считается из total_count/page_size.
    """

    def __init__(self, items: Iterable[T], count: int, page_number: int, page_size: int):
        if page_number < 1 or page_size < 1:
            raise ValueError("page_number and page_size must be >= 1")
        if count < 0:
            raise ValueError("count must be >= 0")
        self.items: List[T] = list(items)
        self.total_count = count
        self.current_page = page_number
        self.page_size = page_size

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def map(self, fn: Callable[[T], U]) -> "PagedList[U]":
        return PagedList([fn(item) for item in self.items], self.total_count, self.current_page, self.page_size)

    @classmethod
    async def create_async(
        cls,
        db: AsyncSession,
        stmt: Select,
        page_number: int,
        page_size: int,
        row_mapper: Optional[Callable] = None,
    ) -> "PagedList":
        # 1) считаем всё отфильтрованное множество, без окна
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        count = (await db.execute(count_stmt)).scalar_one()

        # 2) только потом применяем skip/take и материализуем
        window = stmt.offset((page_number - 1) * page_size).limit(page_size)
        rows = (await db.execute(window)).all()
        items = [row_mapper(row) for row in rows] if row_mapper else rows
        return cls(items, count, page_number, page_size)


def pagination_header(paged: PagedList) -> PaginationHeader:
    return PaginationHeader(
        current_page=paged.current_page,
        items_per_page=paged.page_size,
        total_items=paged.total_count,
        total_pages=paged.total_pages,
    )


def add_pagination_header(response: Response, paged: PagedList) -> None:
    """Метаданные страницы уходят в заголовке, в теле только список."""
    response.headers["Pagination"] = pagination_header(paged).model_dump_json(by_alias=True)
    response.headers["Access-Control-Expose-Headers"] = "Pagination"
