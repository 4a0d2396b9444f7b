"""Fragment storage backends.

Includes:
- FragmentStore: protocol every backend implements
- InMemoryFragmentStore: process memory (tests, development)
- FileFragmentStore: single JSON file
- RedisFragmentStore: Redis lists (production)
"""

from .base import FragmentStore
from .file import FileFragmentStore
from .memory import InMemoryFragmentStore
from .redis import RedisFragmentStore, RedisStoreConfig

__all__ = [
    "FragmentStore",
    "FileFragmentStore",
    "InMemoryFragmentStore",
    "RedisFragmentStore",
    "RedisStoreConfig",
]
