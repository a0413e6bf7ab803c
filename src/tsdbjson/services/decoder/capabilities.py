"""Startup-time detection of optional decoding capabilities."""

import importlib.util
import logging
from dataclasses import dataclass
from functools import lru_cache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecoderCapabilities:
    """Which optional codecs and schemas the pipeline may use."""

    snappy: bool = True
    protobuf: bool = True


def _module_available(name: str) -> bool:
    try:
        return importlib.util.find_spec(name) is not None
    except ModuleNotFoundError:
        # find_spec imports parent packages ("google" for "google.protobuf")
        return False


def detect_capabilities(enable_snappy: bool = True, enable_protobuf: bool = True) -> DecoderCapabilities:
    """Combine configuration switches with what is importable.

    Args:
        enable_snappy: Configuration switch for the snappy codec
        enable_protobuf: Configuration switch for structured chunk decoding

    Returns:
        DecoderCapabilities with each flag set only if enabled and installed
    """
    snappy = enable_snappy and _module_available("snappy")
    protobuf = enable_protobuf and _module_available("google.protobuf")

    if enable_snappy and not snappy:
        logger.warning("snappy module not importable, snappy codec disabled")
    if enable_protobuf and not protobuf:
        logger.warning("protobuf module not importable, chunk decoding disabled")

    return DecoderCapabilities(snappy=snappy, protobuf=protobuf)


@lru_cache(maxsize=1)
def default_capabilities() -> DecoderCapabilities:
    """Capabilities derived once from application settings."""
    from tsdbjson.core.config import settings

    capabilities = detect_capabilities(
        enable_snappy=settings.ENABLE_SNAPPY,
        enable_protobuf=settings.ENABLE_PROTOBUF,
    )
    logger.info(
        "Decoder capabilities resolved",
        extra={"snappy": capabilities.snappy, "protobuf": capabilities.protobuf},
    )
    return capabilities
