from collections import deque
from typing import List


class PhraseHistory:
    """Bounded record of clue texts already issued, oldest evicted first."""

    def __init__(self, capacity: int = 20):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._items = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._items.maxlen

    def add(self, phrase: str) -> None:
        phrase = (phrase or "").strip()
        if phrase:
            self._items.append(phrase)

    def most_recent(self, n: int) -> List[str]:
        """Return up to n entries, most recent first."""
        if n <= 0:
            return []
        return list(reversed(self._items))[:n]

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, phrase) -> bool:
        return phrase in self._items
