"""
Кэш страниц ответа на стороне клиента.

Ключ - каноничная сериализация набора параметров: имена приводятся к
camelCase, пары сортируются, None отбрасывается. Поэтому page_number=2 и
pageNumber=2 дают один ключ, а порядок полей не важен.

Ни TTL, ни вытеснения нет; изменения профиля не сбрасывают закэшированные
списки - страница может устареть. invalidate() оставлен для явного сброса.
"""
import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Iterator, Mapping, Optional

logger = logging.getLogger(__name__)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def cache_key(params: Mapping[str, Any]) -> str:
    canonical = {_camel(key): str(value) for key, value in params.items() if value is not None}
    return json.dumps(canonical, sort_keys=True, separators=(",", ":"))


class ResponseCache:
    def __init__(self):
        self._store: Dict[str, Any] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, params: Mapping[str, Any]) -> Optional[Any]:
        return self._store.get(cache_key(params))

    def set(self, params: Mapping[str, Any], value: Any) -> None:
        self._store[cache_key(params)] = value

    def values(self) -> Iterator[Any]:
        return iter(list(self._store.values()))

    def __len__(self) -> int:
        return len(self._store)

    async def get_or_fetch(
        self,
        params: Mapping[str, Any],
        fetch: Callable[[], Awaitable[Any]],
    ) -> Any:
        key = cache_key(params)
        if key in self._store:
            logger.debug("Cache hit %s", key)
            return self._store[key]

        # Одновременные промахи по одному ключу идут в сеть один раз
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            if key in self._store:
                return self._store[key]
            value = await fetch()
            self._store[key] = value
            # Ожидающие держат ссылку на lock, новые вызовы попадут в _store
            self._locks.pop(key, None)
            return value

    def invalidate(self, predicate: Optional[Callable[[str], bool]] = None) -> int:
        """Сбросить все ключи или только те, для которых predicate(key) истинно."""
        keys = [k for k in self._store if predicate is None or predicate(k)]
        for k in keys:
            self._store.pop(k, None)
            self._locks.pop(k, None)
        return len(keys)
