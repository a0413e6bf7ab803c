"""
TSDB Decoder Service

Converts time-series database storage objects (chunks, index files, series
files, or anything else) into JSON. Objects arrive through object-created
events; each one is decompressed, interpreted by the first matching parser,
and written to the destination bucket under a normalised key.
"""

from tsdbjson.services.decoder.keys import derive_destination_key
from tsdbjson.services.decoder.parsers import EncodingTag, build_parser_chain
from tsdbjson.services.decoder.pipeline import (
    DecodedResult,
    OutputObject,
    RawObject,
    decode,
    process,
)

__all__ = [
    "DecodedResult",
    "EncodingTag",
    "OutputObject",
    "RawObject",
    "build_parser_chain",
    "decode",
    "derive_destination_key",
    "process",
]
