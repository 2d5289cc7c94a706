from typing import Dict, Optional

from charging_errors import BlobNotFound
from .blob_store_interface import BlobStore


class MemoryBlobStore(BlobStore):
    """In-process blob store. Nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self.blobs: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes:
        try:
            return self.blobs[key]
        except KeyError:
            raise BlobNotFound(key) from None

    def put(self, key: str, data: bytes) -> None:
        self.blobs[key] = bytes(data)

    def delete(self, key: str) -> bool:
        return self.blobs.pop(key, None) is not None
