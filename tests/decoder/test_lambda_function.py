"""Tests for the Lambda entry point."""

import json
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from tsdbjson.services.decoder import lambda_function
from tsdbjson.services.decoder.exceptions import InvalidEventError, ObjectNotFoundError

from tests.helpers import DESTINATION_BUCKET, SOURCE_BUCKET, s3_event


@pytest.fixture
def patched_service(decoder_service):
    with patch.object(lambda_function, "get_decoder_service", return_value=decoder_service):
        yield decoder_service


def test_lambda_handler_success(local_store, patched_service):
    """A processed event returns 200 with a JSON summary body."""
    local_store.put_object(SOURCE_BUCKET, "chunk-001.tsdb.gz", b'{"ok": true}', "application/octet-stream")

    response = lambda_function.lambda_handler(
        s3_event("chunk-001.tsdb.gz"), SimpleNamespace(aws_request_id="req-1")
    )

    assert response["statusCode"] == 200
    body = json.loads(response["body"])
    assert body["processed"] == 1
    assert body["results"][0]["destination_key"] == "chunk-001"
    assert json.loads(local_store.get_object(DESTINATION_BUCKET, "chunk-001")) == {"ok": True}


def test_lambda_handler_reraises_storage_errors(patched_service):
    """Missing objects fail the invocation so Lambda can retry."""
    with pytest.raises(ObjectNotFoundError):
        lambda_function.lambda_handler(s3_event("missing.tsdb"), None)


def test_lambda_handler_reraises_invalid_events(patched_service):
    with pytest.raises(InvalidEventError):
        lambda_function.lambda_handler({"unexpected": "shape"}, None)
