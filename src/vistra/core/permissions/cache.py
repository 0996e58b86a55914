"""Explicit, bounded cache for resolved permissions.

There is no module-level cache: a ``PermissionCache`` is created per
request (see ``get_permission_cache``) and handed to the resolver, so
one user's stale grants can never leak into another request. Entries
also expire after a short TTL and the cache holds at most
``max_entries`` users.
"""

import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request

from vistra.config import settings
from vistra.core.permissions.checker import EffectivePermission


class PermissionCache:
    """LRU cache of effective permissions keyed by user ID, with TTL."""

    def __init__(
        self,
        ttl_seconds: float = 5.0,
        max_entries: int = 128,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[UUID, tuple[float, tuple[EffectivePermission, ...]]] = (
            OrderedDict()
        )

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, user_id: UUID) -> tuple[EffectivePermission, ...] | None:
        """Return the cached permissions, or None if absent or expired."""
        entry = self._entries.get(user_id)
        if entry is None:
            return None

        expires_at, permissions = entry
        if self._clock() >= expires_at:
            del self._entries[user_id]
            return None

        self._entries.move_to_end(user_id)
        return permissions

    def set(self, user_id: UUID, permissions: tuple[EffectivePermission, ...]) -> None:
        """Store permissions for a user, evicting the least recently used."""
        self._entries[user_id] = (self._clock() + self.ttl_seconds, permissions)
        self._entries.move_to_end(user_id)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def invalidate(self, user_id: UUID) -> None:
        """Drop one user's entry, e.g. after their grants changed."""
        self._entries.pop(user_id, None)

    def clear(self) -> None:
        """Drop every entry, e.g. after a role's permissions changed."""
        self._entries.clear()


def get_permission_cache(request: Request) -> PermissionCache:
    """Dependency returning the cache bound to the current request."""
    cache = getattr(request.state, "permission_cache", None)
    if cache is None:
        cache = PermissionCache(
            ttl_seconds=settings.permission_cache_ttl_seconds,
            max_entries=settings.permission_cache_max_entries,
        )
        request.state.permission_cache = cache
    return cache


PermissionCacheDep = Annotated[PermissionCache, Depends(get_permission_cache)]
