"""
State store backends.
"""

import logging

from ..config import WhitelistSettings
from ..interfaces import IStateStore
from .memory import InMemoryStore
from .ignite import IgniteStore

logger = logging.getLogger(__name__)


def create_store(settings: WhitelistSettings) -> IStateStore:
    """
    Create the state store selected by the settings.

    Raises:
        ValueError: If the storage backend is not supported
    """
    backend = settings.storage_backend.lower()
    if backend == "memory":
        logger.warning("Using in-memory store; registry state is not persisted")
        return InMemoryStore()
    if backend == "ignite":
        host, port = settings.ignite_address()
        return IgniteStore(cache_name=settings.ignite_cache_name, host=host, port=port)
    raise ValueError(f"Unsupported storage backend: {settings.storage_backend}")


__all__ = ["create_store", "InMemoryStore", "IgniteStore"]
