"""Static data loading and persistent storage."""

from eonengine.resources.database import Database
from eonengine.resources.storage import Storage, FileStorage, MemoryStorage

__all__ = ["Database", "Storage", "FileStorage", "MemoryStorage"]
