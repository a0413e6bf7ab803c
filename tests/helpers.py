"""Shared test data and builders."""

import gzip

SOURCE_BUCKET = "jsonchunksource"
DESTINATION_BUCKET = "jsonchunkdestination"

# Not gzip, not snappy, not protobuf, not UTF-8, no markers
OPAQUE_BINARY = b"\x00\xff\xfe\xfd" + bytes(range(0x80, 0x8C))


def s3_event(*keys, bucket=SOURCE_BUCKET, event_name="ObjectCreated:Put"):
    """Build an S3 event notification for the given keys."""
    return {
        "Records": [
            {
                "eventVersion": "2.1",
                "eventSource": "aws:s3",
                "awsRegion": "us-east-1",
                "eventTime": "2025-01-01T00:00:00.000Z",
                "eventName": event_name,
                "s3": {
                    "s3SchemaVersion": "1.0",
                    "bucket": {"name": bucket, "arn": f"arn:aws:s3:::{bucket}"},
                    "object": {"key": key, "size": 10, "eTag": "abc"},
                },
            }
            for key in keys
        ]
    }


def gzipped(data: bytes) -> bytes:
    # mtime=0 keeps the compressed bytes stable
    return gzip.compress(data, mtime=0)
