"""JSON file fragment store."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles
import aiofiles.os

from loreweaver.context.fragment import Fragment
from loreweaver.errors import StorageFailedError
from loreweaver.observability.logging import get_logger

logger = get_logger(__name__)


class FileFragmentStore:
    """
    Fragment store backed by a single JSON file.

    Layout:
        base_path/
        └── fragments.json  # conversation key -> list of fragments

    Writes within one process are serialized by a lock. The file is read
    once and cached; call ``invalidate_cache`` to pick up outside edits.
    """

    FILENAME = "fragments.json"

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        self._file = self._base_path / self.FILENAME
        self._cache: Optional[Dict[str, List[Dict[str, Any]]]] = None
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._file

    async def _load_cache(self) -> Dict[str, List[Dict[str, Any]]]:
        if self._cache is not None:
            return self._cache

        if not self._file.exists():
            self._cache = {}
            return self._cache

        try:
            async with aiofiles.open(self._file, "r", encoding="utf-8") as f:
                content = await f.read()
            self._cache = json.loads(content) if content.strip() else {}
        except (json.JSONDecodeError, OSError) as e:
            raise StorageFailedError(f"Failed to read {self._file}: {e}") from e

        return self._cache

    async def _write_cache(self) -> None:
        try:
            await aiofiles.os.makedirs(str(self._base_path), exist_ok=True)
            async with aiofiles.open(self._file, "w", encoding="utf-8") as f:
                await f.write(json.dumps(self._cache, indent=2, ensure_ascii=False))
        except OSError as e:
            self._cache = None
            raise StorageFailedError(f"Failed to write {self._file}: {e}") from e

    async def fetch(self, key: str) -> Optional[Fragment]:
        cache = await self._load_cache()
        trail = cache.get(key)
        if not trail:
            return None
        return Fragment.from_dict(trail[-1])

    async def save(self, key: str, fragment: Fragment, new_fragment: bool) -> None:
        async with self._lock:
            cache = await self._load_cache()
            trail = cache.setdefault(key, [])
            if new_fragment or not trail:
                trail.append(fragment.to_dict())
            else:
                trail[-1] = fragment.to_dict()
            await self._write_cache()
        logger.debug("fragment_written", path=str(self._file), fragments=len(trail))

    async def history(self, key: str) -> List[Fragment]:
        cache = await self._load_cache()
        return [Fragment.from_dict(data) for data in cache.get(key, [])]

    def invalidate_cache(self) -> None:
        """Drop the cache so the next read goes to disk."""
        self._cache = None
