"""TTL cache for the room directory.

Rooms are only created by the seed process, so the listing can be served from
memory for ``room_cache_ttl`` seconds.
"""
from __future__ import annotations

from typing import Callable, Generic, List, TypeVar

from cachetools import TTLCache

T = TypeVar("T")

_DIRECTORY_KEY = "rooms"


class RoomDirectoryCache(Generic[T]):
    def __init__(self, ttl: int) -> None:
        self._entries: TTLCache[str, List[T]] = TTLCache(maxsize=1, ttl=ttl)

    def get_or_load(self, loader: Callable[[], List[T]]) -> List[T]:
        cached = self._entries.get(_DIRECTORY_KEY)
        if cached is not None:
            return cached
        rooms = loader()
        self._entries[_DIRECTORY_KEY] = rooms
        return rooms

    def invalidate(self) -> None:
        self._entries.clear()
