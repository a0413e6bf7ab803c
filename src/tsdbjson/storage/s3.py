"""Amazon S3 object store."""

import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from tsdbjson.services.decoder.exceptions import (
    ObjectAccessDeniedError,
    ObjectNotFoundError,
    StorageError,
)
from tsdbjson.storage.base import ObjectStore

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "NoSuchBucket", "404", "NotFound"}
_ACCESS_DENIED_CODES = {"AccessDenied", "403", "Forbidden"}


class S3ObjectStore(ObjectStore):
    """S3 object store backed by a boto3 client."""

    def __init__(
        self,
        region_name: Optional[str] = None,
        profile_name: Optional[str] = None,
        retry_attempts: int = 3,
        retry_max_wait: float = 10.0,
    ):
        super().__init__(retry_attempts=retry_attempts, retry_max_wait=retry_max_wait)
        self.region_name = region_name
        self.profile_name = profile_name
        self._client: Optional[Any] = None

    @property
    def client(self) -> Any:
        """Lazy-load and cache the S3 client."""
        if self._client is None:
            session_kwargs: dict[str, str] = {}
            if self.profile_name:
                session_kwargs["profile_name"] = self.profile_name
            if self.region_name:
                session_kwargs["region_name"] = self.region_name
            session = boto3.session.Session(**session_kwargs)
            self._client = session.client("s3")
        return self._client

    def _get_object(self, bucket: str, key: str) -> bytes:
        uri = self.uri(bucket, key)
        try:
            logger.info("Fetching object from S3", extra={"bucket": bucket, "key": key})
            response = self.client.get_object(Bucket=bucket, Key=key)
            data = response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, f"Failed to fetch {uri}") from e

        logger.info(
            "Object fetched from S3",
            extra={"bucket": bucket, "key": key, "size_bytes": len(data)},
        )
        return data

    def _put_object(self, bucket: str, key: str, body: bytes, content_type: str) -> None:
        uri = self.uri(bucket, key)
        try:
            self.client.put_object(
                Bucket=bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, f"Failed to write {uri}") from e

        logger.info(
            "Object written to S3",
            extra={"bucket": bucket, "key": key, "size_bytes": len(body)},
        )

    @staticmethod
    def _translate_error(error: Exception, message: str) -> StorageError:
        code = ""
        if isinstance(error, ClientError):
            code = str(error.response.get("Error", {}).get("Code", ""))

        logger.error(message, extra={"error": str(error), "error_code": code})

        if code in _NOT_FOUND_CODES:
            return ObjectNotFoundError(f"{message}: object not found")
        if code in _ACCESS_DENIED_CODES:
            return ObjectAccessDeniedError(f"{message}: access denied")
        return StorageError(f"{message}: {error}")

    def uri(self, bucket: str, key: str) -> str:
        return f"s3://{bucket}/{key}"

    def get_backend_name(self) -> str:
        return "s3"
