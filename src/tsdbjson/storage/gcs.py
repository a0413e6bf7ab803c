"""Google Cloud Storage object store."""

import logging
from typing import Optional

from google.api_core.exceptions import GoogleAPIError
from google.cloud import storage
from google.cloud.exceptions import Forbidden, NotFound

from tsdbjson.services.decoder.exceptions import (
    ObjectAccessDeniedError,
    ObjectNotFoundError,
    StorageError,
)
from tsdbjson.storage.base import ObjectStore

logger = logging.getLogger(__name__)


class GCSObjectStore(ObjectStore):
    """Google Cloud Storage object store."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        retry_attempts: int = 3,
        retry_max_wait: float = 10.0,
    ):
        super().__init__(retry_attempts=retry_attempts, retry_max_wait=retry_max_wait)
        self.project_id = project_id
        self._client: Optional[storage.Client] = None

    @property
    def client(self) -> storage.Client:
        """Lazy-load and cache the GCS client."""
        if self._client is None:
            self._client = storage.Client(project=self.project_id)
        return self._client

    def _get_object(self, bucket: str, key: str) -> bytes:
        uri = self.uri(bucket, key)
        try:
            logger.info("Downloading object from GCS", extra={"bucket": bucket, "key": key})
            blob = self.client.bucket(bucket).blob(key)
            data = blob.download_as_bytes()
        except NotFound as e:
            logger.error("Object not found in GCS", extra={"bucket": bucket, "key": key})
            raise ObjectNotFoundError(f"File not found: {uri}") from e
        except Forbidden as e:
            logger.error("Access forbidden to GCS object", extra={"bucket": bucket, "key": key})
            raise ObjectAccessDeniedError(f"Access denied: {uri}") from e
        except GoogleAPIError as e:
            logger.error(
                "Failed to download object from GCS",
                extra={"bucket": bucket, "key": key, "error": str(e)},
            )
            raise StorageError(f"Failed to download {uri}: {e}") from e

        logger.info(
            "Object downloaded from GCS",
            extra={"bucket": bucket, "key": key, "size_bytes": len(data)},
        )
        return data

    def _put_object(self, bucket: str, key: str, body: bytes, content_type: str) -> None:
        uri = self.uri(bucket, key)
        try:
            blob = self.client.bucket(bucket).blob(key)
            blob.upload_from_string(body, content_type=content_type)
        except Forbidden as e:
            logger.error("Access forbidden to GCS bucket", extra={"bucket": bucket, "key": key})
            raise ObjectAccessDeniedError(f"Access denied: {uri}") from e
        except NotFound as e:
            logger.error("GCS bucket not found", extra={"bucket": bucket, "key": key})
            raise ObjectNotFoundError(f"Bucket not found: {uri}") from e
        except GoogleAPIError as e:
            logger.error(
                "Failed to upload object to GCS",
                extra={"bucket": bucket, "key": key, "error": str(e)},
            )
            raise StorageError(f"Failed to upload {uri}: {e}") from e

        logger.info(
            "Object uploaded to GCS",
            extra={"bucket": bucket, "key": key, "size_bytes": len(body)},
        )

    def uri(self, bucket: str, key: str) -> str:
        return f"gs://{bucket}/{key}"

    def get_backend_name(self) -> str:
        return "gcs"
