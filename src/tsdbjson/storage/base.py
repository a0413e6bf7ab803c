"""Abstract object store interface."""

from abc import ABC, abstractmethod

from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from tsdbjson.services.decoder.exceptions import (
    ObjectAccessDeniedError,
    ObjectNotFoundError,
    StorageError,
)


def is_transient_storage_error(error: BaseException) -> bool:
    """Storage failures worth retrying: anything but not-found and access-denied."""
    return isinstance(error, StorageError) and not isinstance(
        error, (ObjectNotFoundError, ObjectAccessDeniedError)
    )


class ObjectStore(ABC):
    """Abstract base class for object stores.

    Subclasses implement the raw ``_get_object`` / ``_put_object`` calls and
    translate backend errors into StorageError subclasses; the public methods
    add retries with exponential backoff for transient failures.
    """

    def __init__(self, retry_attempts: int = 3, retry_max_wait: float = 10.0):
        self.retry_attempts = max(1, retry_attempts)
        self.retry_max_wait = retry_max_wait

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=self.retry_max_wait),
            retry=retry_if_exception(is_transient_storage_error),
            reraise=True,
        )

    def get_object(self, bucket: str, key: str) -> bytes:
        """Fetch the full content of an object.

        Args:
            bucket: Bucket (container) name
            key: Object key

        Returns:
            Object bytes

        Raises:
            StorageError: If the fetch fails after retries
        """
        return self._retrying()(self._get_object, bucket, key)

    def put_object(self, bucket: str, key: str, body: bytes, content_type: str) -> str:
        """Write an object, overwriting any existing one.

        Args:
            bucket: Bucket (container) name
            key: Object key
            body: Object bytes
            content_type: MIME type stored with the object

        Returns:
            URI of the written object

        Raises:
            StorageError: If the write fails after retries
        """
        self._retrying()(self._put_object, bucket, key, body, content_type)
        return self.uri(bucket, key)

    @abstractmethod
    def _get_object(self, bucket: str, key: str) -> bytes:
        pass

    @abstractmethod
    def _put_object(self, bucket: str, key: str, body: bytes, content_type: str) -> None:
        pass

    @abstractmethod
    def uri(self, bucket: str, key: str) -> str:
        """Return a URI identifying the object, for logging."""
        pass

    @abstractmethod
    def get_backend_name(self) -> str:
        """Return backend identifier."""
        pass
