"""
Tests for the decoder service.
"""

import json
import logging
from unittest.mock import Mock

import pytest

from tsdbjson.services.decoder.exceptions import ObjectNotFoundError, StorageError
from tsdbjson.services.decoder.models import ObjectRef
from tsdbjson.services.decoder.service import DecoderService, process_event

from tests.helpers import DESTINATION_BUCKET, SOURCE_BUCKET, gzipped, s3_event


def put_source(store, key, data):
    store.put_object(SOURCE_BUCKET, key, data, "application/octet-stream")


def read_destination(store, key):
    return json.loads(store.get_object(DESTINATION_BUCKET, key))


def test_handle_object_writes_decoded_json(local_store, decoder_service):
    """The decoded value lands in the destination bucket under the derived key."""
    put_source(local_store, "fake/index.tsdb.gz", gzipped(b"index\nfoo\tbar\nbaz\tqux"))

    result = decoder_service.handle_object(ObjectRef(bucket=SOURCE_BUCKET, key="fake/index.tsdb.gz"))

    assert result["status"] == "success"
    assert result["destination_key"] == "fake/index"
    assert result["encoding"] == "index"
    assert read_destination(local_store, "fake/index") == {"foo": "bar", "baz": "qux"}


def test_handle_object_is_idempotent(local_store, decoder_service):
    """Redelivering the same event overwrites with identical content."""
    put_source(local_store, "series.tsdb", b"series\nline1\nline2")
    ref = ObjectRef(bucket=SOURCE_BUCKET, key="series.tsdb")

    decoder_service.handle_object(ref)
    first = local_store.get_object(DESTINATION_BUCKET, "series")
    decoder_service.handle_object(ref)
    second = local_store.get_object(DESTINATION_BUCKET, "series")

    assert first == second
    assert json.loads(second) == {"series": ["series", "line1", "line2"]}


def test_handle_object_missing_source(decoder_service):
    """A missing source object is an I/O failure and propagates."""
    with pytest.raises(ObjectNotFoundError):
        decoder_service.handle_object(ObjectRef(bucket=SOURCE_BUCKET, key="missing.tsdb"))


def test_handle_object_write_failure_propagates(codecs, chain):
    """A failed destination write is raised to the caller."""
    source = Mock()
    source.uri.return_value = "s3://jsonchunksource/chunk.tsdb"
    source.get_object.return_value = b'{"a": 1}'
    destination = Mock()
    destination.put_object.side_effect = StorageError("Failed to write")

    service = DecoderService(
        source_store=source,
        destination_store=destination,
        destination_bucket=DESTINATION_BUCKET,
        codecs=codecs,
        chain=chain,
    )

    with pytest.raises(StorageError, match="Failed to write"):
        service.handle_object(ObjectRef(bucket=SOURCE_BUCKET, key="chunk.tsdb"))


def test_handle_object_writes_once_with_json_content_type(codecs, chain):
    """The sink is called once with the full JSON body."""
    source = Mock()
    source.uri.return_value = "s3://jsonchunksource/log.txt.gz"
    source.get_object.return_value = gzipped(b"plain text")
    destination = Mock()
    destination.put_object.return_value = "s3://jsonchunkdestination/log.txt"

    service = DecoderService(
        source_store=source,
        destination_store=destination,
        destination_bucket=DESTINATION_BUCKET,
        codecs=codecs,
        chain=chain,
    )
    result = service.handle_object(ObjectRef(bucket=SOURCE_BUCKET, key="log.txt.gz"))

    source.get_object.assert_called_once_with(SOURCE_BUCKET, "log.txt.gz")
    destination.put_object.assert_called_once_with(
        DESTINATION_BUCKET,
        "log.txt",
        b'{"content": "plain text"}',
        "application/json",
    )
    assert result["destination_uri"] == "s3://jsonchunkdestination/log.txt"
    assert result["encoding"] == "text"


def test_handle_object_refuses_to_overwrite_source(local_store, codecs, chain):
    """A key that maps to itself in the same bucket is not rewritten."""
    service = DecoderService(
        source_store=local_store,
        destination_bucket=SOURCE_BUCKET,
        codecs=codecs,
        chain=chain,
    )
    put_source(local_store, "plain.json", b'{"a": 1}')

    result = service.handle_object(ObjectRef(bucket=SOURCE_BUCKET, key="plain.json"))

    assert result["status"] == "skipped"
    assert local_store.get_object(SOURCE_BUCKET, "plain.json") == b'{"a": 1}'


def test_process_event_handles_every_record(local_store, decoder_service):
    """All records of an S3 event are processed."""
    put_source(local_store, "a.tsdb", b"series\nx")
    put_source(local_store, "b.zip", b'["y"]')

    summary = process_event(s3_event("a.tsdb", "b.zip"), decoder_service)

    assert summary["status"] == "success"
    assert summary["processed"] == 2
    assert [r["destination_key"] for r in summary["results"]] == ["a", "b"]
    assert read_destination(local_store, "b") == ["y"]


def test_process_event_without_objects(decoder_service):
    """Events with nothing to decode are skipped."""
    summary = process_event(s3_event("x.tsdb", event_name="ObjectRemoved:Delete"), decoder_service)

    assert summary["status"] == "skipped"
    assert summary["processed"] == 0


def test_handle_object_warns_on_unexpected_bucket(local_store, decoder_service, caplog):
    """Objects outside the configured source bucket are processed with a warning."""
    local_store.put_object("otherbucket", "a.tsdb", b"series\nx", "application/octet-stream")

    with caplog.at_level(logging.WARNING, logger="tsdbjson.services.decoder.service"):
        result = decoder_service.handle_object(ObjectRef(bucket="otherbucket", key="a.tsdb"))

    assert result["status"] == "success"
    assert "not the configured source bucket" in caplog.text


def test_handle_object_no_warning_for_source_bucket(local_store, decoder_service, caplog):
    put_source(local_store, "a.tsdb", b"series\nx")

    with caplog.at_level(logging.WARNING, logger="tsdbjson.services.decoder.service"):
        decoder_service.handle_object(ObjectRef(bucket=SOURCE_BUCKET, key="a.tsdb"))

    assert "not the configured source bucket" not in caplog.text
