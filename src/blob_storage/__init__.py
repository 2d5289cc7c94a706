from .blob_store_interface import BlobStore
from .file_blob_store import FileBlobStore
from .memory_blob_store import MemoryBlobStore
from .storage_factory import StorageFactory

__all__ = [
    'BlobStore',
    'FileBlobStore',
    'MemoryBlobStore',
    'StorageFactory',
]
