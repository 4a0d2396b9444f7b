"""Fragment store protocol."""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from loreweaver.context.fragment import Fragment


@runtime_checkable
class FragmentStore(Protocol):
    """
    Storage for conversation fragments, keyed by conversation key.

    Each key holds an ordered trail of fragments. ``save`` with
    ``new_fragment=True`` starts a new entry in the trail; otherwise the
    latest entry is replaced. Implementations raise StorageFailedError on
    any backend failure and return None from ``fetch`` only when the key
    has no fragment yet.

    Fetch and save are not transactional: two concurrent turns on the
    same key can both read one fragment and the later save wins.
    """

    async def fetch(self, key: str) -> Optional[Fragment]:
        """
        Load the latest fragment for a key.

        Args:
            key: Conversation key

        Returns:
            The latest fragment, or None if the key is unknown
        """
        ...

    async def save(self, key: str, fragment: Fragment, new_fragment: bool) -> None:
        """
        Persist a fragment.

        Args:
            key: Conversation key
            fragment: Fragment to store
            new_fragment: Start a new entry instead of replacing the latest
        """
        ...

    async def history(self, key: str) -> List[Fragment]:
        """
        Load every fragment stored for a key, oldest first.
        """
        ...
