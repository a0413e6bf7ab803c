"""Pytest configuration and shared fixtures."""

import pytest

from tsdbjson.services.decoder.capabilities import DecoderCapabilities
from tsdbjson.services.decoder.chunk_schema import chunk_message_class
from tsdbjson.services.decoder.decompression import build_codecs
from tsdbjson.services.decoder.parsers import build_parser_chain
from tsdbjson.services.decoder.service import DecoderService
from tsdbjson.storage.local import LocalObjectStore

from tests.helpers import DESTINATION_BUCKET, SOURCE_BUCKET


@pytest.fixture
def full_capabilities():
    """Every optional codec and schema enabled."""
    return DecoderCapabilities(snappy=True, protobuf=True)


@pytest.fixture
def codecs(full_capabilities):
    return build_codecs(full_capabilities)


@pytest.fixture
def chain(full_capabilities):
    return build_parser_chain(full_capabilities)


@pytest.fixture
def chunk_bytes():
    """A serialized cortexpb.Chunk."""
    chunk = chunk_message_class()(
        start_timestamp_ms=1700000000000,
        end_timestamp_ms=1700000060000,
        encoding=12,
        data=b"\x01\x02\x03",
    )
    return chunk.SerializeToString()


@pytest.fixture
def local_store(tmp_path):
    """Local object store rooted in a temporary directory."""
    return LocalObjectStore(base_path=tmp_path)


@pytest.fixture
def decoder_service(local_store, codecs, chain):
    """Decoder service reading and writing the local store."""
    return DecoderService(
        source_store=local_store,
        source_bucket=SOURCE_BUCKET,
        destination_bucket=DESTINATION_BUCKET,
        codecs=codecs,
        chain=chain,
    )

