# Cart Engine and storage

from .engine import CartEngine
from .storage import (
    CartStorage,
    CartStorageError,
    MemoryCartStorage,
    FileCartStorage,
    create_cart_storage,
)

__all__ = [
    "CartEngine",
    "CartStorage",
    "CartStorageError",
    "MemoryCartStorage",
    "FileCartStorage",
    "create_cart_storage",
]
