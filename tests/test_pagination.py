import json
import math

import pytest
from fastapi import Response
from sqlalchemy import select

from models.user import User
from utils.pagination import PagedList, add_pagination_header


@pytest.mark.parametrize(
    "total_count, page_size, expected_pages",
    [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 5, 5), (26, 5, 6), (7, 1, 7)],
)
def test_total_pages_is_ceiling(total_count, page_size, expected_pages):
    paged = PagedList([], total_count, 1, page_size)
    assert paged.total_pages == expected_pages == math.ceil(total_count / page_size)


def test_total_pages_follows_count():
    paged = PagedList([1, 2], 2, 1, 2)
    paged.total_count = 9
    assert paged.total_pages == 5


@pytest.mark.parametrize("page_number, page_size", [(0, 10), (1, 0), (-1, 5)])
def test_invalid_window_rejected(page_number, page_size):
    with pytest.raises(ValueError):
        PagedList([], 0, page_number, page_size)


def test_map_keeps_metadata():
    paged = PagedList([1, 2, 3], 13, 2, 3).map(str)
    assert paged.items == ["1", "2", "3"]
    assert (paged.total_count, paged.current_page, paged.page_size, paged.total_pages) == (13, 2, 3, 5)


@pytest.mark.asyncio
@pytest.mark.parametrize("page_number, page_size", [(1, 3), (2, 3), (4, 3), (5, 3), (1, 20), (3, 4)])
async def test_create_async_counts_before_windowing(db, members, page_number, page_size):
    stmt = select(User.id).order_by(User.id)
    paged = await PagedList.create_async(db, stmt, page_number, page_size)

    total = len(members)
    expected_len = min(page_size, max(0, total - (page_number - 1) * page_size))
    assert paged.total_count == total
    assert len(paged) == expected_len
    assert paged.total_pages == math.ceil(total / page_size)


@pytest.mark.asyncio
async def test_create_async_page_beyond_range_is_empty(db, members):
    paged = await PagedList.create_async(db, select(User.id), 50, 10)
    assert paged.items == []
    assert paged.total_count == len(members)


@pytest.mark.asyncio
async def test_create_async_applies_row_mapper(db, members):
    stmt = select(User.username).order_by(User.username)
    paged = await PagedList.create_async(db, stmt, 1, 2, row_mapper=lambda row: row.username.upper())
    assert paged.items == ["ALICE", "BOB"]


def test_pagination_header_is_camel_case_json():
    response = Response()
    add_pagination_header(response, PagedList(["x"], 21, 3, 10))

    assert json.loads(response.headers["Pagination"]) == {
        "currentPage": 3,
        "itemsPerPage": 10,
        "totalItems": 21,
        "totalPages": 3,
    }
    assert response.headers["Access-Control-Expose-Headers"] == "Pagination"
