"""
Blob Store Port Interface

Key/value store for raw byte blobs: cached price documents and auth tokens.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator


class BlobStore(ABC):
    """
    Abstract interface for the blob cache.

    Keys are deterministic file-like names, e.g. `nord_pool_2023-08-01.json`.
    """

    @abstractmethod
    def get(self, key: str) -> bytes:
        """
        Read a blob.

        Raises:
            BlobNotFound: If the key does not exist
            BlobStoreError: On any other store fault
        """

    @abstractmethod
    def put(self, key: str, data: bytes) -> None:
        """
        Write a blob, replacing any previous value.

        Raises:
            BlobStoreError: If the write fails
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Best-effort removal. Returns True if the blob was removed."""

    @contextmanager
    def lease(self, key: str, ttl_seconds: int) -> Iterator[None]:
        """
        Hold an exclusive lease for the duration of the block.

        Stores without lease support hold nothing.

        Raises:
            LeaseUnavailable: If another holder owns an unexpired lease
        """
        yield
