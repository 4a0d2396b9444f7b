"""In-memory fragment store."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loreweaver.context.fragment import Fragment


class InMemoryFragmentStore:
    """
    Fragment store kept in process memory.

    Suitable for tests and single-process deployments that do not need
    persistence. Fragments are stored serialized so callers never share
    mutable state with the store.
    """

    def __init__(self) -> None:
        self._trails: Dict[str, List[Dict[str, Any]]] = {}

    async def fetch(self, key: str) -> Optional[Fragment]:
        trail = self._trails.get(key)
        if not trail:
            return None
        return Fragment.from_dict(trail[-1])

    async def save(self, key: str, fragment: Fragment, new_fragment: bool) -> None:
        trail = self._trails.setdefault(key, [])
        if new_fragment or not trail:
            trail.append(fragment.to_dict())
        else:
            trail[-1] = fragment.to_dict()

    async def history(self, key: str) -> List[Fragment]:
        return [Fragment.from_dict(data) for data in self._trails.get(key, [])]

    async def delete(self, key: str) -> bool:
        """Remove every fragment stored for a key."""
        return self._trails.pop(key, None) is not None

    async def clear(self) -> None:
        """Remove all fragments (used for testing)."""
        self._trails.clear()
