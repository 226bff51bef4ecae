import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx
from pydantic import BaseModel

from client.cache import ResponseCache
from schemas.pagination import PaginationHeader

logger = logging.getLogger(__name__)


class MemberParams(BaseModel):
    """Текущие параметры списка участников на клиенте."""

    min_age: int = 18
    max_age: int = 150
    gender: Optional[str] = None
    order_by: str = "lastActive"
    page_number: int = 1
    page_size: int = 10

    @classmethod
    def for_user(cls, user: Mapping[str, Any]) -> "MemberParams":
        gender = "male" if user.get("gender") == "female" else "female"
        return cls(gender=gender)

    def to_query(self) -> Dict[str, Any]:
        return {
            "minAge": self.min_age,
            "maxAge": self.max_age,
            "gender": self.gender,
            "orderBy": self.order_by,
            "pageNumber": self.page_number,
            "pageSize": self.page_size,
        }


class PaginatedResult(BaseModel):
    result: List[Dict[str, Any]]
    pagination: Optional[PaginationHeader] = None


class MembersClient:
    """HTTP-клиент для /users и /likes с кэшем страниц участников."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
        cache: Optional[ResponseCache] = None,
    ):
        self._http = http or httpx.AsyncClient(base_url=base_url)
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.cache = cache or ResponseCache()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get_members(self, params: MemberParams) -> PaginatedResult:
        query = params.to_query()
        return await self.cache.get_or_fetch(
            query,
            lambda: self._get_paginated("/users/", query),
        )

    async def get_member(self, username: str) -> Dict[str, Any]:
        # Сначала ищем среди уже загруженных страниц
        for page in self.cache.values():
            for member in page.result:
                if member.get("username") == username:
                    return member

        response = await self._http.get(f"/users/{username}", headers=self._headers)
        response.raise_for_status()
        return response.json()

    async def update_member(self, member: Mapping[str, Any]) -> None:
        response = await self._http.put("/users/", json=dict(member), headers=self._headers)
        response.raise_for_status()

    async def set_main_photo(self, photo_id: int) -> None:
        response = await self._http.put(f"/users/set-main-photo/{photo_id}", headers=self._headers)
        response.raise_for_status()

    async def delete_photo(self, photo_id: int) -> None:
        response = await self._http.delete(f"/users/delete-photo/{photo_id}", headers=self._headers)
        response.raise_for_status()

    async def add_like(self, username: str) -> None:
        response = await self._http.post(f"/likes/{username}", headers=self._headers)
        response.raise_for_status()

    async def get_likes(self, predicate: str, page_number: int, page_size: int) -> PaginatedResult:
        return await self._get_paginated(
            "/likes/",
            {"predicate": predicate, "pageNumber": page_number, "pageSize": page_size},
        )

    async def _get_paginated(self, url: str, params: Mapping[str, Any]) -> PaginatedResult:
        query = {k: v for k, v in params.items() if v is not None}
        response = await self._http.get(url, params=query, headers=self._headers)
        response.raise_for_status()

        pagination = None
        header = response.headers.get("Pagination")
        if header is not None:
            pagination = PaginationHeader.model_validate_json(header)
        logger.debug("Fetched %s %s", url, query)
        return PaginatedResult(result=response.json(), pagination=pagination)
