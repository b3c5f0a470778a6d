"""
In-memory state store for tests and embedded use.
"""

from typing import Dict, Optional


class InMemoryStore:
    """Dict-backed store. State lives only as long as the instance."""

    def __init__(self):
        self._data: Dict[str, bytes] = {}

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> Optional[bytes]:
        previous = self._data.get(key)
        self._data[key] = bytes(value)
        return previous

    def remove(self, key: str) -> Optional[bytes]:
        return self._data.pop(key, None)

    def contains(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)
