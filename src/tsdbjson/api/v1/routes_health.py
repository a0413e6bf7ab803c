"""Health check endpoint for the TSDB JSON decoder."""

from fastapi import APIRouter

from tsdbjson.core.config import settings
from tsdbjson.services.decoder.capabilities import default_capabilities

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns service status, name and version, plus the optional decoding
    capabilities detected at startup.
    """
    capabilities = default_capabilities()
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "capabilities": {
            "snappy": capabilities.snappy,
            "protobuf": capabilities.protobuf,
        },
    }
