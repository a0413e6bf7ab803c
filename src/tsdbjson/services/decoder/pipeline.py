"""
Decoding pipeline.

raw bytes -> decompression stage -> parser chain -> destination key -> output.

Everything here is pure and invocation-local: no I/O, no shared state, and
identical input always produces a byte-identical output body.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from tsdbjson.services.decoder.decompression import Codec, decompress
from tsdbjson.services.decoder.keys import derive_destination_key
from tsdbjson.services.decoder.parsers import EncodingTag, Interpreter, Payload, run_chain

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class RawObject:
    """An object as fetched from the source store."""

    source_id: str
    data: bytes


@dataclass(frozen=True)
class DecodedResult:
    """JSON-compatible value plus the tag of the interpreter that produced it."""

    value: Any
    encoding: EncodingTag


@dataclass(frozen=True)
class OutputObject:
    """Decoded object ready to be written to the destination store."""

    destination_id: str
    value: Any
    encoding: EncodingTag
    content_type: str = JSON_CONTENT_TYPE

    def body(self) -> bytes:
        """JSON-encoded value as written to the sink."""
        return json.dumps(self.value, allow_nan=False).encode("utf-8")


def decode(
    data: bytes,
    codecs: Optional[Sequence[Codec]] = None,
    chain: Optional[Sequence[Interpreter]] = None,
) -> DecodedResult:
    """Decode raw object bytes into a JSON-compatible value.

    Args:
        data: Raw object bytes, possibly compressed
        codecs: Decompression codecs (defaults to the configured list)
        chain: Parser chain (defaults to the configured chain)

    Returns:
        DecodedResult; never fails on content shape
    """
    logical = decompress(data, codecs)
    match = run_chain(Payload(original=data, logical=logical), chain)
    return DecodedResult(value=match.value, encoding=match.encoding)


def process(
    raw: RawObject,
    codecs: Optional[Sequence[Codec]] = None,
    chain: Optional[Sequence[Interpreter]] = None,
) -> OutputObject:
    """Turn a raw object into the output object for the destination store.

    Raises:
        Exception: Only unexpected internal faults (e.g. MemoryError), which
            are logged with the source key and re-raised
    """
    try:
        result = decode(raw.data, codecs, chain)
    except Exception as e:
        logger.error(
            "Unexpected failure while decoding object",
            extra={
                "source_key": raw.source_id,
                "size_bytes": len(raw.data),
                "error": str(e),
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )
        raise

    output = OutputObject(
        destination_id=derive_destination_key(raw.source_id),
        value=result.value,
        encoding=result.encoding,
    )

    logger.info(
        "Object decoded",
        extra={
            "source_key": raw.source_id,
            "destination_key": output.destination_id,
            "encoding": result.encoding.value,
            "size_bytes": len(raw.data),
        },
    )
    return output
