"""
Content interpreters for decompressed TSDB objects.

Each interpreter answers one question: does this buffer look like my
format, and if so, what is its JSON-compatible value? The parser chain is
an ordered tuple of interpreters; the first one that matches wins.

Priority order (most specific signal first):
1. protobuf  - buffer is a well-formed cortexpb.Chunk
2. index     - "index" marker near the start, tab-separated rows
3. series    - "series" marker near the start, one series per line
4. json      - buffer is valid JSON text
5. text      - buffer is valid UTF-8
6. base64    - always matches; base64 of the original (pre-decompression) bytes
"""

import base64
import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence, Tuple, Union

from tsdbjson.services.decoder.capabilities import DecoderCapabilities, default_capabilities

logger = logging.getLogger(__name__)

# Markers are only searched for in the first bytes of the buffer
MARKER_WINDOW_BYTES = 20


class EncodingTag(str, Enum):
    """Label identifying which interpreter produced a decoded value."""

    PROTOBUF = "protobuf"
    INDEX = "index"
    SERIES = "series"
    JSON = "json"
    TEXT = "text"
    BASE64 = "base64"


@dataclass(frozen=True)
class Payload:
    """Bytes handed to interpreters.

    ``logical`` is the output of the decompression stage; ``original`` is the
    object exactly as it was fetched.
    """

    original: bytes
    logical: bytes


@dataclass(frozen=True)
class Match:
    """Successful interpretation of a payload."""

    value: Any
    encoding: EncodingTag


class NoMatch(Enum):
    """Sentinel type for an interpreter that does not recognise a payload."""

    NO_MATCH = "no_match"


NO_MATCH = NoMatch.NO_MATCH

AttemptResult = Union[Match, NoMatch]


class Interpreter(ABC):
    """Base class for content interpreters."""

    encoding: EncodingTag

    @property
    def name(self) -> str:
        return self.encoding.value

    @abstractmethod
    def attempt(self, payload: Payload) -> AttemptResult:
        """Interpret payload or report NO_MATCH.

        Format mismatches must be reported as NO_MATCH, never raised.
        """
        pass


class ProtobufChunkInterpreter(Interpreter):
    """Structured binary chunk record (cortexpb.Chunk)."""

    encoding = EncodingTag.PROTOBUF

    def __init__(self):
        from tsdbjson.services.decoder.chunk_schema import chunk_message_class

        self._message_class = chunk_message_class()

    def attempt(self, payload: Payload) -> AttemptResult:
        from google.protobuf.json_format import MessageToDict
        from google.protobuf.message import DecodeError

        data = payload.logical
        if not data:
            return NO_MATCH

        chunk = self._message_class()
        try:
            chunk.ParseFromString(data)
        except DecodeError:
            return NO_MATCH

        # Wire-valid garbage usually decodes to unknown fields only. Require at
        # least one known field and that the known fields account for every byte.
        if not chunk.ListFields():
            return NO_MATCH
        chunk.DiscardUnknownFields()
        if chunk.ByteSize() != len(data):
            return NO_MATCH

        return Match(MessageToDict(chunk), self.encoding)


class MarkerInterpreter(Interpreter):
    """Line-oriented format recognised by a literal marker near the start."""

    marker: bytes

    def matches_marker(self, data: bytes) -> bool:
        return self.marker in data[:MARKER_WINDOW_BYTES]

    @staticmethod
    def lines(data: bytes) -> list[bytes]:
        """Non-empty newline-delimited records."""
        return [line for line in data.split(b"\n") if line]


class IndexInterpreter(MarkerInterpreter):
    """Tab-separated index table: first column -> second column.

    The marker line is not special-cased; it is dropped only because it has
    no tab. Rows with fewer than two fields are ignored and later rows win
    on duplicate keys. A table with no usable rows is still a match.
    """

    encoding = EncodingTag.INDEX
    marker = b"index"

    def attempt(self, payload: Payload) -> AttemptResult:
        data = payload.logical
        if not self.matches_marker(data):
            return NO_MATCH

        index: dict[str, str] = {}
        try:
            for line in self.lines(data):
                fields = line.split(b"\t")
                if len(fields) >= 2:
                    index[fields[0].decode("utf-8")] = fields[1].decode("utf-8")
        except UnicodeDecodeError:
            return NO_MATCH

        return Match(index, self.encoding)


class SeriesInterpreter(MarkerInterpreter):
    """Series list: every non-empty line, marker line included."""

    encoding = EncodingTag.SERIES
    marker = b"series"

    def attempt(self, payload: Payload) -> AttemptResult:
        data = payload.logical
        if not self.matches_marker(data):
            return NO_MATCH

        try:
            series = [line.decode("utf-8") for line in self.lines(data)]
        except UnicodeDecodeError:
            return NO_MATCH

        return Match({"series": series}, self.encoding)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def _parse_finite_float(literal: str) -> float:
    # Literals such as 1e400 overflow to inf, which has no JSON encoding
    value = float(literal)
    if math.isinf(value):
        raise ValueError(f"Number out of range: {literal}")
    return value


class JsonInterpreter(Interpreter):
    """Any valid JSON document whose numbers fit a finite float.

    NaN, Infinity and overflowing literals would not survive re-encoding as
    strict JSON, so such documents are left to the text interpreter.
    """

    encoding = EncodingTag.JSON

    def attempt(self, payload: Payload) -> AttemptResult:
        data = payload.logical
        if not data:
            return NO_MATCH

        try:
            value = json.loads(
                data,
                parse_constant=_reject_constant,
                parse_float=_parse_finite_float,
            )
        except (ValueError, RecursionError):
            return NO_MATCH

        return Match(value, self.encoding)


class TextInterpreter(Interpreter):
    """Non-empty UTF-8 text."""

    encoding = EncodingTag.TEXT

    def attempt(self, payload: Payload) -> AttemptResult:
        data = payload.logical
        if not data:
            return NO_MATCH

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            return NO_MATCH

        return Match({"content": text}, self.encoding)


class OpaqueBinaryInterpreter(Interpreter):
    """Terminal fallback: base64 of the original bytes. Always matches."""

    encoding = EncodingTag.BASE64

    def attempt(self, payload: Payload) -> Match:
        return Match(
            {
                "content": base64.b64encode(payload.original).decode("ascii"),
                "encoding": "base64",
                "format": "binary",
            },
            self.encoding,
        )


TERMINAL_INTERPRETER = OpaqueBinaryInterpreter()

ParserChain = Tuple[Interpreter, ...]


def build_parser_chain(capabilities: DecoderCapabilities) -> ParserChain:
    """Ordered interpreters for the given capabilities.

    The protobuf interpreter is omitted when structured decoding is not
    available; the terminal fallback is always last.
    """
    chain: list[Interpreter] = []
    if capabilities.protobuf:
        chain.append(ProtobufChunkInterpreter())
    chain.extend(
        [
            IndexInterpreter(),
            SeriesInterpreter(),
            JsonInterpreter(),
            TextInterpreter(),
            TERMINAL_INTERPRETER,
        ]
    )
    return tuple(chain)


def default_parser_chain() -> ParserChain:
    return build_parser_chain(default_capabilities())


def run_chain(payload: Payload, chain: Optional[Sequence[Interpreter]] = None) -> Match:
    """Return the match of the first interpreter that recognises payload.

    A chain without a terminal interpreter still falls back to base64, so
    this never fails for any input.
    """
    for interpreter in default_parser_chain() if chain is None else chain:
        result = interpreter.attempt(payload)
        if result is NO_MATCH:
            continue

        logger.debug(
            "Payload matched interpreter",
            extra={"interpreter": interpreter.name, "logical_bytes": len(payload.logical)},
        )
        return result

    return TERMINAL_INTERPRETER.attempt(payload)
