"""
Apache Ignite state store.
Keeps the registry state in a single Ignite cache through the thin client.
"""

import logging
from typing import Optional

from pyignite import Client as IgniteClient
from pyignite.cache import Cache
from pyignite.datatypes import ByteArrayObject, String

from ..types import StorageError

logger = logging.getLogger(__name__)


class IgniteStore:
    """
    Ignite-backed store.

    Connects lazily on first use. Any backend failure is logged and raised
    as StorageError so callers never see pyignite exceptions.
    """

    def __init__(self,
                 cache_name: str,
                 host: str = "localhost",
                 port: int = 10800,
                 client: Optional[IgniteClient] = None):
        self.cache_name = cache_name
        self.host = host
        self.port = port
        self._owns_client = client is None
        self.client = client if client is not None else IgniteClient()
        self._cache: Optional[Cache] = None

    def connect(self) -> None:
        """Connect the client (when owned) and open the cache"""
        if self._cache is not None:
            return
        try:
            if self._owns_client:
                self.client.connect(self.host, self.port)
            self._cache = self.client.get_or_create_cache(self.cache_name)
        except Exception as e:
            logger.error(f"Failed to open Ignite cache {self.cache_name} at {self.host}:{self.port}: {e}")
            raise StorageError(f"Cannot open Ignite cache {self.cache_name}") from e
        logger.info(f"Opened Ignite cache: {self.cache_name}")

    def close(self) -> None:
        """Close the client if this store created it"""
        self._cache = None
        if self._owns_client:
            self.client.close()
            logger.info(f"Closed Ignite connection to {self.host}:{self.port}")

    def __enter__(self) -> "IgniteStore":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def cache(self) -> Cache:
        if self._cache is None:
            self.connect()
        return self._cache

    def get(self, key: str) -> Optional[bytes]:
        try:
            value = self.cache.get(key, key_hint=String)
        except Exception as e:
            logger.error(f"Error getting key {key} from cache: {e}")
            raise StorageError(f"Failed to read {key}") from e
        return _to_bytes(value)

    def set(self, key: str, value: bytes) -> Optional[bytes]:
        try:
            previous = self.cache.get_and_put(key, bytes(value), key_hint=String, value_hint=ByteArrayObject)
        except Exception as e:
            logger.error(f"Error putting key {key} in cache: {e}")
            raise StorageError(f"Failed to write {key}") from e
        return _to_bytes(previous)

    def remove(self, key: str) -> Optional[bytes]:
        try:
            previous = self.cache.get_and_remove(key, key_hint=String)
        except Exception as e:
            logger.error(f"Error deleting key {key} from cache: {e}")
            raise StorageError(f"Failed to delete {key}") from e
        return _to_bytes(previous)

    def contains(self, key: str) -> bool:
        try:
            return bool(self.cache.contains_key(key, key_hint=String))
        except Exception as e:
            logger.error(f"Error checking key {key} in cache: {e}")
            raise StorageError(f"Failed to look up {key}") from e


def _to_bytes(value) -> Optional[bytes]:
    # ByteArrayObject may come back as bytearray or a list of ints
    if value is None:
        return None
    return bytes(value)
