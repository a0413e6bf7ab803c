"""Object store backends."""

from tsdbjson.storage.base import ObjectStore


def get_object_store(backend: str | None = None) -> ObjectStore:
    """Create the object store selected by configuration.

    Args:
        backend: "s3", "gcs" or "local"; defaults to settings.STORAGE_BACKEND

    Raises:
        ValueError: If the backend name is unknown
    """
    from tsdbjson.core.config import settings

    backend = (backend or settings.STORAGE_BACKEND).lower()

    if backend == "s3":
        from tsdbjson.storage.s3 import S3ObjectStore

        return S3ObjectStore(
            region_name=settings.AWS_REGION or None,
            profile_name=settings.AWS_PROFILE or None,
            retry_attempts=settings.STORAGE_RETRY_ATTEMPTS,
        )
    if backend == "gcs":
        from tsdbjson.storage.gcs import GCSObjectStore

        return GCSObjectStore(
            project_id=settings.GCP_PROJECT_ID or None,
            retry_attempts=settings.STORAGE_RETRY_ATTEMPTS,
        )
    if backend == "local":
        from tsdbjson.storage.local import LocalObjectStore

        return LocalObjectStore(base_path=settings.LOCAL_STORAGE_PATH)

    raise ValueError(f"Unknown storage backend: {backend}")


__all__ = ["ObjectStore", "get_object_store"]
