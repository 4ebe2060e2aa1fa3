"""Storage Layer - repositories for users, destinations, bookings, activity logs and reviews"""
from typing import AsyncIterator, Optional

from app.config import settings
from app.storage.base import DestinationWithStats, Storage
from app.storage.database import DatabaseStorage
from app.storage.exceptions import (
    ConflictError,
    DuplicateBookingError,
    ImageUrlConflictError,
    NotFoundError,
    StorageError,
    UsernameConflictError,
)
from app.storage.memory import MemoryStorage
from app.utils.database import AsyncSessionLocal

_memory_storage: Optional[MemoryStorage] = None


async def get_storage() -> AsyncIterator[Storage]:
    """
    Dependency that provides the storage for one request
    Usage: storage: Storage = Depends(get_storage)
    """
    global _memory_storage
    if settings.STORAGE_BACKEND == "memory":
        if _memory_storage is None:
            _memory_storage = MemoryStorage()
        yield _memory_storage
        return

    async with AsyncSessionLocal() as session:
        yield DatabaseStorage(session)


__all__ = [
    "Storage", "DatabaseStorage", "MemoryStorage", "DestinationWithStats", "get_storage",
    "StorageError", "ConflictError", "ImageUrlConflictError", "DuplicateBookingError", "NotFoundError",
    "UsernameConflictError",
]
