"""Local filesystem object store."""

import logging
import os
import tempfile
from pathlib import Path

from tsdbjson.services.decoder.exceptions import (
    ObjectAccessDeniedError,
    ObjectNotFoundError,
    StorageError,
)
from tsdbjson.storage.base import ObjectStore

logger = logging.getLogger(__name__)


class LocalObjectStore(ObjectStore):
    """Object store laid out as ``{base_path}/{bucket}/{key}`` on disk."""

    def __init__(self, base_path: str | Path = "data/buckets"):
        super().__init__(retry_attempts=1)
        self.base_path = Path(base_path)

    def _object_path(self, bucket: str, key: str) -> Path:
        """Resolve an object path, refusing keys that escape the bucket."""
        bucket_dir = (self.base_path / bucket).resolve()
        path = (bucket_dir / key).resolve()
        if bucket_dir not in path.parents:
            raise StorageError(f"Unsafe object key: {key}")
        return path

    def _get_object(self, bucket: str, key: str) -> bytes:
        path = self._object_path(bucket, key)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise ObjectNotFoundError(f"File not found: {self.uri(bucket, key)}") from e
        except PermissionError as e:
            raise ObjectAccessDeniedError(f"Access denied: {self.uri(bucket, key)}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {self.uri(bucket, key)}: {e}") from e

    def _put_object(self, bucket: str, key: str, body: bytes, content_type: str) -> None:
        path = self._object_path(bucket, key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file and rename so readers never see a partial object
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(body)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except PermissionError as e:
            raise ObjectAccessDeniedError(f"Access denied: {self.uri(bucket, key)}") from e
        except OSError as e:
            raise StorageError(f"Failed to write {self.uri(bucket, key)}: {e}") from e

        logger.debug(
            "Object written to local store",
            extra={"path": str(path), "size_bytes": len(body), "content_type": content_type},
        )

    def uri(self, bucket: str, key: str) -> str:
        return (self.base_path / bucket / key).as_posix()

    def get_backend_name(self) -> str:
        return "local"
