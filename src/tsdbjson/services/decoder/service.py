"""
Decoder service implementation.

Fetches each object named by a trigger event, decodes it, and writes the
JSON result to the destination bucket.
"""

import logging
import time
from functools import lru_cache
from typing import Any, Dict, Optional, Sequence

from tsdbjson.core.config import settings
from tsdbjson.core.logging import bind_object_uri
from tsdbjson.services.decoder.decompression import Codec, default_codecs
from tsdbjson.services.decoder.exceptions import StorageError
from tsdbjson.services.decoder.models import ObjectRef, object_refs_from_event
from tsdbjson.services.decoder.parsers import Interpreter, default_parser_chain
from tsdbjson.services.decoder.pipeline import RawObject, process
from tsdbjson.storage import ObjectStore, get_object_store

logger = logging.getLogger(__name__)


class DecoderService:
    """Fetch, decode and store TSDB objects.

    Codecs and the parser chain are resolved once, when the service is
    built, so capability detection never happens per object.
    """

    def __init__(
        self,
        source_store: ObjectStore,
        destination_store: Optional[ObjectStore] = None,
        destination_bucket: Optional[str] = None,
        source_bucket: Optional[str] = None,
        codecs: Optional[Sequence[Codec]] = None,
        chain: Optional[Sequence[Interpreter]] = None,
    ):
        self.source_store = source_store
        self.destination_store = destination_store or source_store
        self.destination_bucket = destination_bucket or settings.DESTINATION_BUCKET
        self.source_bucket = source_bucket or settings.SOURCE_BUCKET
        self.codecs = tuple(codecs) if codecs is not None else default_codecs()
        self.chain = tuple(chain) if chain is not None else default_parser_chain()

    def handle_object(self, ref: ObjectRef) -> Dict[str, Any]:
        """
        Decode one object and write the result.

        The destination is written once, after the whole result is built,
        with overwrite semantics, so redelivered events are harmless.

        Args:
            ref: Source bucket and key

        Returns:
            Summary dictionary for the object

        Raises:
            StorageError: If fetching or writing fails
        """
        start_time = time.time()
        source_uri = self.source_store.uri(ref.bucket, ref.key)

        with bind_object_uri(source_uri):
            logger.info(
                f"Processing file {ref.key} from bucket {ref.bucket}",
                extra={"bucket": ref.bucket, "source_key": ref.key},
            )

            if ref.bucket != self.source_bucket:
                logger.warning(
                    f"Event bucket {ref.bucket} is not the configured source bucket {self.source_bucket}",
                    extra={"bucket": ref.bucket, "source_bucket": self.source_bucket, "source_key": ref.key},
                )

            try:
                data = self.source_store.get_object(ref.bucket, ref.key)
                output = process(RawObject(source_id=ref.key, data=data), self.codecs, self.chain)

                if (
                    self.destination_store is self.source_store
                    and self.destination_bucket == ref.bucket
                    and output.destination_id == ref.key
                ):
                    logger.warning(
                        "Destination would overwrite the source object, skipping",
                        extra={"bucket": ref.bucket, "source_key": ref.key},
                    )
                    return {
                        "status": "skipped",
                        "source_key": ref.key,
                        "message": "Destination key equals source key in the same bucket",
                    }

                logger.info(
                    f"Uploading to destination bucket with key: {output.destination_id}",
                    extra={
                        "destination_bucket": self.destination_bucket,
                        "destination_key": output.destination_id,
                        "encoding": output.encoding.value,
                    },
                )
                destination_uri = self.destination_store.put_object(
                    self.destination_bucket,
                    output.destination_id,
                    output.body(),
                    output.content_type,
                )

            except StorageError as e:
                logger.error(
                    "Storage operation failed",
                    extra={
                        "bucket": ref.bucket,
                        "source_key": ref.key,
                        "error": str(e),
                        "error_type": type(e).__name__,
                        "outcome": "failed",
                    },
                    exc_info=True,
                )
                raise

            processing_time_ms = int((time.time() - start_time) * 1000)
            logger.info(
                f"Successfully processed {ref.key} to {output.destination_id}",
                extra={
                    "source_key": ref.key,
                    "destination_key": output.destination_id,
                    "destination_uri": destination_uri,
                    "encoding": output.encoding.value,
                    "processing_time_ms": processing_time_ms,
                    "outcome": "success",
                },
            )

        return {
            "status": "success",
            "source_key": ref.key,
            "destination_key": output.destination_id,
            "destination_uri": destination_uri,
            "encoding": output.encoding.value,
            "processing_time_ms": processing_time_ms,
        }


def process_event(event: Dict[str, Any], service: DecoderService) -> Dict[str, Any]:
    """
    Process every object referenced by a trigger event.

    Objects are handled in order; the first storage failure aborts the
    event so the caller can have it redelivered.

    Args:
        event: S3 event notification, CloudEvent or raw GCS notification
        service: Decoder service to use

    Returns:
        Response dictionary with per-object results

    Raises:
        InvalidEventError: If the event cannot be parsed
        StorageError: If an object cannot be fetched or written
    """
    refs = object_refs_from_event(event)

    if not refs:
        return {"status": "skipped", "processed": 0, "results": [], "message": "No objects to process"}

    results = [service.handle_object(ref) for ref in refs]
    return {"status": "success", "processed": len(results), "results": results}


@lru_cache(maxsize=1)
def get_decoder_service() -> DecoderService:
    """Service wired from application settings, built once per process."""
    store = get_object_store()
    logger.info(
        "Decoder service initialised",
        extra={
            "storage_backend": store.get_backend_name(),
            "source_bucket": settings.SOURCE_BUCKET,
            "destination_bucket": settings.DESTINATION_BUCKET,
        },
    )
    return DecoderService(
        source_store=store,
        destination_bucket=settings.DESTINATION_BUCKET,
        source_bucket=settings.SOURCE_BUCKET,
    )
