"""
Trigger event models for the decoder service.

Two notification shapes carry "an object was created in a bucket":
- S3 event notifications (``{"Records": [{"s3": {...}}]}``), delivered to
  Lambda or forwarded over HTTP
- Cloud Storage CloudEvents from Eventarc, or raw GCS notifications
  (``"kind": "storage#object"``)

Both are reduced to a list of ObjectRef values.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import unquote_plus

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tsdbjson.services.decoder.exceptions import InvalidEventError

logger = logging.getLogger(__name__)


class ObjectRef(BaseModel):
    """A (bucket, key) pair identifying one source object."""

    model_config = ConfigDict(frozen=True)

    bucket: str = Field(..., min_length=1, description="Bucket (container) name")
    key: str = Field(..., min_length=1, description="Object key")


# S3 event notifications
# See: https://docs.aws.amazon.com/AmazonS3/latest/userguide/notification-content-structure.html


class S3BucketEntity(BaseModel):
    name: str
    arn: Optional[str] = None


class S3ObjectEntity(BaseModel):
    key: str
    size: Optional[int] = None
    eTag: Optional[str] = None
    sequencer: Optional[str] = None


class S3Entity(BaseModel):
    bucket: S3BucketEntity
    object: S3ObjectEntity


class S3EventRecord(BaseModel):
    """One record of an S3 event notification."""

    eventSource: Optional[str] = None
    eventName: Optional[str] = None
    awsRegion: Optional[str] = None
    eventTime: Optional[datetime] = None
    s3: S3Entity

    @property
    def is_object_created(self) -> bool:
        # Records forwarded without eventName are assumed to be creations
        return self.eventName is None or self.eventName.startswith("ObjectCreated")

    def to_object_ref(self) -> ObjectRef:
        """Keys arrive URL-encoded ("+" for spaces), so decode them."""
        return ObjectRef(bucket=self.s3.bucket.name, key=unquote_plus(self.s3.object.key))


class S3Event(BaseModel):
    """S3 event notification envelope."""

    Records: List[S3EventRecord]


# Cloud Storage events
# See: https://cloud.google.com/eventarc/docs/cloudevents


class StorageObjectData(BaseModel):
    """
    Cloud Storage object metadata from an OBJECT_FINALIZE event.
    """

    model_config = ConfigDict(populate_by_name=True)

    bucket: str = Field(..., description="Cloud Storage bucket name")
    name: str = Field(..., description="Object path (file name)")
    contentType: str = Field(
        "application/octet-stream", description="MIME type of the file"
    )
    size: Optional[str] = Field(None, description="File size in bytes (as string)")
    timeCreated: Optional[datetime] = Field(None, description="Timestamp when file was created")
    updated: Optional[datetime] = Field(None, description="Timestamp when file was last updated")
    generation: Optional[str] = Field(None, description="Object generation number")
    metageneration: Optional[str] = Field(None, description="Object metadata generation number")


class CloudEvent(BaseModel):
    """
    CloudEvents 1.0 envelope for Cloud Storage events.
    """

    specversion: str = Field(..., description="CloudEvents specification version")
    type: str = Field(..., description="Event type (e.g. 'google.cloud.storage.object.v1.finalized')")
    source: str = Field(..., description="Event source (Cloud Storage bucket URI)")
    subject: Optional[str] = Field(None, description="Subject of the event (object path)")
    id: str = Field(..., description="Unique event identifier")
    time: Optional[datetime] = Field(None, description="Timestamp when event occurred")
    datacontenttype: Optional[str] = Field(None, description="Content type of the data payload")
    data: StorageObjectData = Field(..., description="Event payload with object metadata")

    def to_object_ref(self) -> ObjectRef:
        return ObjectRef(bucket=self.data.bucket, key=self.data.name)


def convert_gcs_notification_to_cloud_event(gcs_data: Dict[str, Any]) -> CloudEvent:
    """
    Convert a raw GCS notification to CloudEvent format.

    Args:
        gcs_data: Raw GCS notification data

    Returns:
        CloudEvent object

    Raises:
        InvalidEventError: If required fields are missing
    """
    bucket = gcs_data.get("bucket")
    name = gcs_data.get("name")
    if not bucket or not name:
        raise InvalidEventError("Missing required fields: bucket and name")

    time_created = gcs_data.get("timeCreated") or datetime.now(timezone.utc)
    event_id = gcs_data.get("id", gcs_data.get("generation", "unknown"))

    try:
        return CloudEvent(
            specversion="1.0",
            type="google.cloud.storage.object.v1.finalized",
            source=f"//storage.googleapis.com/buckets/{bucket}",
            subject=f"objects/{name}",
            id=event_id,
            time=time_created,
            datacontenttype="application/json",
            data=StorageObjectData(
                bucket=bucket,
                name=name,
                contentType=gcs_data.get("contentType", "application/octet-stream"),
                size=gcs_data.get("size"),
                timeCreated=time_created,
                updated=gcs_data.get("updated") or time_created,
                generation=gcs_data.get("generation"),
                metageneration=gcs_data.get("metageneration"),
            ),
        )
    except ValidationError as e:
        raise InvalidEventError(f"Invalid GCS notification format: {e}") from e


def object_refs_from_event(event: Dict[str, Any]) -> List[ObjectRef]:
    """
    Extract the objects to decode from a trigger event.

    Args:
        event: S3 event notification, CloudEvent or raw GCS notification

    Returns:
        Object references in event order (empty for S3 test events)

    Raises:
        InvalidEventError: If the event is not a recognised shape
    """
    if not isinstance(event, dict):
        raise InvalidEventError(f"Event must be a JSON object, got {type(event).__name__}")

    try:
        if "Records" in event:
            s3_event = S3Event(**event)
            refs = []
            for record in s3_event.Records:
                if not record.is_object_created:
                    logger.info(
                        "Skipping non-creation S3 record",
                        extra={"event_name": record.eventName, "key": record.s3.object.key},
                    )
                    continue
                refs.append(record.to_object_ref())
            return refs

        if event.get("Event") == "s3:TestEvent":
            logger.info("Ignoring S3 test event", extra={"bucket": event.get("Bucket")})
            return []

        if event.get("kind") == "storage#object":
            return [convert_gcs_notification_to_cloud_event(event).to_object_ref()]

        if "specversion" in event:
            return [CloudEvent(**event).to_object_ref()]

    except ValidationError as e:
        raise InvalidEventError(f"Invalid event payload: {e}") from e

    raise InvalidEventError("Unrecognised event format: expected S3 records or a Cloud Storage event")
