"""Decompression stage.

Turns a raw object into its logical bytes by trying known codecs in order:
gzip first (it has a magic header, so false positives are rare), then raw
snappy, then identity. A codec that rejects the input is simply skipped.
"""

import gzip
import logging
import zlib
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple, Type

from tsdbjson.services.decoder.capabilities import DecoderCapabilities, default_capabilities

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Codec:
    """A decompression codec and the errors meaning "not this format"."""

    name: str
    decompress: Callable[[bytes], bytes]
    format_errors: Tuple[Type[Exception], ...]


GZIP_CODEC = Codec(
    name="gzip",
    decompress=gzip.decompress,
    format_errors=(OSError, EOFError, zlib.error),
)


def snappy_codec() -> Codec:
    """Build the raw snappy codec. Requires python-snappy."""
    import snappy

    return Codec(
        name="snappy",
        decompress=snappy.decompress,
        format_errors=(snappy.UncompressError, ValueError),
    )


def build_codecs(capabilities: DecoderCapabilities) -> Tuple[Codec, ...]:
    """Ordered codec list for the given capabilities."""
    codecs = [GZIP_CODEC]
    if capabilities.snappy:
        codecs.append(snappy_codec())
    return tuple(codecs)


def default_codecs() -> Tuple[Codec, ...]:
    return build_codecs(default_capabilities())


def decompress(data: bytes, codecs: Optional[Sequence[Codec]] = None) -> bytes:
    """Return the decompressed form of data, or data itself.

    Args:
        data: Raw object bytes
        codecs: Codecs to try in order (defaults to the configured list)

    Returns:
        Output of the first codec that accepts the input, otherwise the input
        unchanged
    """
    if not data:
        return data

    for codec in default_codecs() if codecs is None else codecs:
        try:
            decompressed = codec.decompress(data)
        except codec.format_errors as e:
            logger.debug(
                f"Input is not {codec.name}",
                extra={"codec": codec.name, "error": str(e)},
            )
            continue

        logger.debug(
            "Input decompressed",
            extra={
                "codec": codec.name,
                "compressed_bytes": len(data),
                "decompressed_bytes": len(decompressed),
            },
        )
        return decompressed

    return data
