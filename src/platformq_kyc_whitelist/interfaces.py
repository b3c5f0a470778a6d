"""
Interfaces (protocols) for registry persistence.
Using Python's Protocol for structural subtyping.
"""

from typing import Protocol, Optional
from abc import abstractmethod


class IStateStore(Protocol):
    """Durable key-value substrate holding the registry state"""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Get the value stored under key"""
        ...

    @abstractmethod
    def set(self, key: str, value: bytes) -> Optional[bytes]:
        """Store value under key and return the previous value"""
        ...

    @abstractmethod
    def remove(self, key: str) -> Optional[bytes]:
        """Delete key and return the removed value"""
        ...

    @abstractmethod
    def contains(self, key: str) -> bool:
        """Check whether key is present"""
        ...
