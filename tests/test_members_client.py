import asyncio
import json

import httpx
import pytest
import pytest_asyncio

from client.cache import ResponseCache, cache_key
from client.members import MemberParams, MembersClient


class FakeApi:
    """Отвечает на /users/ и считает обращения."""

    def __init__(self):
        self.calls = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        # даём одновременным запросам шанс пересечься
        await asyncio.sleep(0)

        if request.method == "PUT":
            return httpx.Response(204)
        if request.url.path == "/users/":
            page = int(request.url.params.get("pageNumber", 1))
            body = [{"username": f"user{page}", "photos": []}]
            header = {"currentPage": page, "itemsPerPage": 10, "totalItems": 25, "totalPages": 3}
            return httpx.Response(200, json=body, headers={"Pagination": json.dumps(header)})
        if request.url.path == "/users/zoe":
            return httpx.Response(200, json={"username": "zoe", "photos": []})
        return httpx.Response(404, json={"detail": "User not found"})


@pytest.fixture
def api():
    return FakeApi()


@pytest_asyncio.fixture
async def client(api):
    http = httpx.AsyncClient(base_url="http://api.test", transport=httpx.MockTransport(api))
    members = MembersClient("http://api.test", token="t0ken", http=http)
    yield members
    await members.aclose()


def test_cache_key_is_canonical():
    snake = cache_key({"page_number": 2, "page_size": 5, "order_by": "created"})
    camel = cache_key({"orderBy": "created", "pageSize": 5, "pageNumber": 2})
    assert snake == camel


def test_cache_key_drops_none_and_keeps_case():
    assert cache_key({"gender": None, "pageNumber": 1}) == cache_key({"pageNumber": 1})
    assert cache_key({"orderBy": "Created"}) != cache_key({"orderBy": "created"})


def test_cache_get_set_and_invalidate():
    cache = ResponseCache()
    cache.set({"pageNumber": 1}, "first")
    cache.set({"pageNumber": 2}, "second")

    assert cache.get({"page_number": 1}) == "first"
    assert cache.invalidate(lambda key: '"2"' in key) == 1
    assert cache.get({"pageNumber": 2}) is None
    assert cache.invalidate() == 1
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_repeated_params_served_from_cache(client, api):
    params = MemberParams(gender="male", page_number=1)

    first = await client.get_members(params)
    second = await client.get_members(MemberParams(gender="male", page_number=1))

    assert first is second
    assert len(api.calls) == 1
    assert first.pagination.total_pages == 3
    assert first.result == [{"username": "user1", "photos": []}]


@pytest.mark.asyncio
async def test_different_page_is_fetched(client, api):
    await client.get_members(MemberParams(gender="male", page_number=1))
    second = await client.get_members(MemberParams(gender="male", page_number=2))

    assert len(api.calls) == 2
    assert second.pagination.current_page == 2
    assert api.calls[1].url.params["pageNumber"] == "2"


@pytest.mark.asyncio
async def test_concurrent_misses_fetch_once(client, api):
    params = MemberParams(gender="female", page_number=3)

    results = await asyncio.gather(*(client.get_members(params) for _ in range(5)))

    assert len(api.calls) == 1
    assert all(result is results[0] for result in results)


@pytest.mark.asyncio
async def test_request_carries_token_and_camel_case_params(client, api):
    await client.get_members(MemberParams(gender="female", order_by="created"))

    request = api.calls[0]
    assert request.headers["Authorization"] == "Bearer t0ken"
    assert request.url.params["orderBy"] == "created"
    assert request.url.params["minAge"] == "18"


@pytest.mark.asyncio
async def test_get_member_prefers_cached_pages(client, api):
    await client.get_members(MemberParams(gender="male", page_number=2))

    member = await client.get_member("user2")

    assert member["username"] == "user2"
    assert len(api.calls) == 1


@pytest.mark.asyncio
async def test_get_member_falls_back_to_api(client, api):
    member = await client.get_member("zoe")
    assert member["username"] == "zoe"

    with pytest.raises(httpx.HTTPStatusError):
        await client.get_member("nobody")


@pytest.mark.asyncio
async def test_cached_page_survives_profile_update(client, api):
    params = MemberParams(gender="male")
    before = await client.get_members(params)

    await client.update_member({"city": "Oslo"})
    after = await client.get_members(params)

    # Кэш не сбрасывается изменениями профиля
    assert after is before
    assert [r.method for r in api.calls] == ["GET", "PUT"]


def test_default_params_for_user():
    assert MemberParams.for_user({"gender": "female"}).gender == "male"
    assert MemberParams.for_user({"gender": "male"}).gender == "female"


@pytest.mark.asyncio
async def test_locks_released_after_fetch():
    cache = ResponseCache()

    async def fetch():
        await asyncio.sleep(0)
        return "page"

    results = await asyncio.gather(*(cache.get_or_fetch({"pageNumber": n % 3}, fetch) for n in range(9)))

    assert results == ["page"] * 9
    assert len(cache) == 3
    assert cache._locks == {}


@pytest.mark.asyncio
async def test_failed_fetch_is_not_cached():
    cache = ResponseCache()

    async def broken():
        raise httpx.ConnectError("offline")

    async def fetch():
        return "page"

    with pytest.raises(httpx.ConnectError):
        await cache.get_or_fetch({"pageNumber": 1}, broken)
    assert await cache.get_or_fetch({"pageNumber": 1}, fetch) == "page"
