import os
import logging
import time
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from charging_errors import BlobNotFound, BlobStoreError, LeaseUnavailable
from .blob_store_interface import BlobStore


class FileBlobStore(BlobStore):
    """
    File-based blob store.
    One file per key under `base_dir`.
    """

    def __init__(self, base_dir: str = "out/cache"):
        self.base_dir = base_dir
        self.logger = logging.getLogger(__name__)

    def _path(self, key: str) -> str:
        if not key or os.sep in key or key in ('.', '..'):
            raise BlobStoreError(f"Invalid blob key: {key!r}")
        return os.path.join(self.base_dir, key)

    def get(self, key: str) -> bytes:
        path = self._path(key)
        try:
            with open(path, 'rb') as f:
                return f.read()
        except FileNotFoundError:
            raise BlobNotFound(key) from None
        except OSError as e:
            raise BlobStoreError(f"Failed to read {path}: {e}") from e

    def put(self, key: str, data: bytes) -> None:
        path = self._path(key)
        tmp_path = f"{path}.tmp"
        try:
            os.makedirs(self.base_dir, exist_ok=True)
            with open(tmp_path, 'wb') as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError as e:
            raise BlobStoreError(f"Failed to write {path}: {e}") from e
        self.logger.debug(f"Stored {len(data)} bytes in {path}")

    def delete(self, key: str) -> bool:
        path = self._path(key)
        try:
            os.remove(path)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            self.logger.warning(f"Failed to delete {path}: {e}")
            return False

    @contextmanager
    def lease(self, key: str, ttl_seconds: int) -> Iterator[None]:
        """
        Exclusive lock file holding the owner's token.

        A lease older than `ttl_seconds` is stale and may be taken over. On
        exit the lock file is removed only while it still holds our token.
        """
        path = self._path(key)
        token = f"{os.getpid()}-{uuid.uuid4().hex}"
        try:
            os.makedirs(self.base_dir, exist_ok=True)
        except OSError as e:
            raise BlobStoreError(f"Failed to create {self.base_dir}: {e}") from e
        self._acquire(path, token, ttl_seconds)
        try:
            yield
        finally:
            self._release(path, token)

    def _acquire(self, path: str, token: str, ttl_seconds: int) -> None:
        for _ in range(2):
            if self._create_lock(path, token):
                return
            holder, age = self._inspect(path)
            if holder is None:
                continue
            if age < ttl_seconds:
                raise LeaseUnavailable(f"Lease {path} held for {age:.0f}s")
            self.logger.warning(f"Removing stale lease {path} ({age:.0f}s old)")
            if not self._remove_if_held_by(path, holder):
                raise LeaseUnavailable(f"Lease {path} was taken over by another run")
        raise LeaseUnavailable(f"Lease {path} could not be acquired")

    def _release(self, path: str, token: str) -> None:
        try:
            if not self._remove_if_held_by(path, token):
                self.logger.warning(f"Lease {path} is no longer ours, leaving it in place")
        except BlobStoreError as e:
            self.logger.warning(f"Failed to release lease {path}: {e}")

    def _create_lock(self, path: str, token: str) -> bool:
        try:
            fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            return False
        except OSError as e:
            raise BlobStoreError(f"Failed to acquire lease {path}: {e}") from e

        try:
            os.write(fd, token.encode())
        except OSError as e:
            os.close(fd)
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
            raise BlobStoreError(f"Failed to write lease {path}: {e}") from e
        os.close(fd)
        return True

    def _inspect(self, path: str) -> Tuple[Optional[str], float]:
        """Holder token and age of a lock file, (None, 0.0) once it is gone."""
        try:
            with open(path, 'r') as f:
                holder = f.read()
                age = time.time() - os.fstat(f.fileno()).st_mtime
        except FileNotFoundError:
            return None, 0.0
        except OSError as e:
            raise BlobStoreError(f"Failed to read lease {path}: {e}") from e
        return holder, age

    def _remove_if_held_by(self, path: str, holder: str) -> bool:
        """
        Remove the lock file if it still holds `holder`.

        The file is renamed aside before it is checked, so a lock created by
        another run in the meantime is put back instead of deleted.
        """
        aside = f"{path}.{uuid.uuid4().hex}"
        try:
            os.rename(path, aside)
        except FileNotFoundError:
            return True
        except OSError as e:
            raise BlobStoreError(f"Failed to move lease {path}: {e}") from e

        try:
            with open(aside, 'r') as f:
                moved = f.read()
        except OSError as e:
            self._put_back(aside, path)
            raise BlobStoreError(f"Failed to read lease {aside}: {e}") from e

        if moved != holder:
            self._put_back(aside, path)
            return False

        try:
            os.remove(aside)
        except OSError as e:
            raise BlobStoreError(f"Failed to remove lease {aside}: {e}") from e
        return True

    def _put_back(self, aside: str, path: str) -> None:
        try:
            # link fails instead of replacing a lock created meanwhile
            os.link(aside, path)
        except FileExistsError:
            self.logger.warning(f"Lease {path} was recreated while being checked")
        except OSError:
            try:
                os.rename(aside, path)
            except OSError as e:
                raise BlobStoreError(f"Failed to restore lease {path}: {e}") from e
            return
        try:
            os.remove(aside)
        except OSError as e:
            self.logger.warning(f"Failed to remove {aside}: {e}")
