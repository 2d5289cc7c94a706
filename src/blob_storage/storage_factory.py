from typing import Dict, Any

from charging_errors import ConfigurationError
from .blob_store_interface import BlobStore
from .file_blob_store import FileBlobStore
from .memory_blob_store import MemoryBlobStore

class StorageFactory:
    """
    Factory for creating blob store instances based on configuration.
    """

    @staticmethod
    def create_storage(config_dict: Dict[str, Any]) -> BlobStore:
        """
        Create a blob store based on the provided configuration dictionary.

        Expected config structure:
        storage:
          backend: file | memory
          base_dir: str
        """
        backend = config_dict.get('backend', 'file')

        if backend == 'memory':
            return MemoryBlobStore()

        if backend != 'file':
            raise ConfigurationError(f"Unsupported storage backend: {backend}. Supported: file, memory")

        return FileBlobStore(config_dict.get('base_dir', 'out/cache'))
