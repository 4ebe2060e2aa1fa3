"""
Client Preferences - small scoped key-value store

Each client (browser) gets its own namespace. Redis backs it in production;
the in-memory store is used when Redis is unavailable and in tests.
"""
from abc import ABC, abstractmethod
from typing import Dict, Optional
import logging

import redis.asyncio as redis

from app.config import settings

logger = logging.getLogger(__name__)


class PreferenceStore(ABC):
    """get/set/remove of string values within one client's scope"""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        pass


class RedisPreferenceStore(PreferenceStore):

    def __init__(self, client: redis.Redis, scope: str, prefix: str = settings.PREFERENCE_KEY_PREFIX):
        self.client = client
        self.scope = scope
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{self.scope}:{key}"

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(self._key(key))

    async def set(self, key: str, value: str) -> None:
        await self.client.set(self._key(key), value)

    async def remove(self, key: str) -> None:
        await self.client.delete(self._key(key))


class InMemoryPreferenceStore(PreferenceStore):

    def __init__(self, scope: str, data: Optional[Dict[str, str]] = None):
        self.scope = scope
        # Shared dict so several scopes can live side by side
        self.data = data if data is not None else {}

    def _key(self, key: str) -> str:
        return f"{self.scope}:{key}"

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(self._key(key))

    async def set(self, key: str, value: str) -> None:
        self.data[self._key(key)] = value

    async def remove(self, key: str) -> None:
        self.data.pop(self._key(key), None)
