"""Destination key derivation."""

from typing import Sequence

# Checked in this order on every pass
STRIPPED_SUFFIXES = (".tsdb", ".gz", ".zip")


def derive_destination_key(source_key: str, suffixes: Sequence[str] = STRIPPED_SUFFIXES) -> str:
    """
    Map a source object key to its destination key.

    Known storage suffixes are stripped repeatedly until none applies, so
    chained suffixes collapse. Directory segments are kept as they are. A key
    that is nothing but a suffix is returned unchanged rather than emptied.

    Examples:
        >>> derive_destination_key("chunk-001.tsdb.gz")
        'chunk-001'
        >>> derive_destination_key("fake/tenant/data.zip")
        'fake/tenant/data'
        >>> derive_destination_key("plain.json")
        'plain.json'
    """
    key = source_key
    stripped = True
    while stripped:
        stripped = False
        for suffix in suffixes:
            if key.endswith(suffix) and len(key) > len(suffix):
                key = key[: -len(suffix)]
                stripped = True
    return key
