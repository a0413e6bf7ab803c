"""Object-created event endpoint."""

import asyncio
import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request, status

from tsdbjson.services.decoder.exceptions import InvalidEventError, StorageError
from tsdbjson.services.decoder.service import get_decoder_service, process_event

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/")
async def handle_event(request: Request) -> Dict[str, Any]:
    """
    Decode the objects referenced by an object-created event.

    Accepts S3 event notifications, Eventarc CloudEvents and raw GCS
    notifications. Processing runs synchronously (in a worker thread) so a
    non-2xx response tells the trigger to redeliver.

    Returns:
        200: Event processed (or nothing to process)
        400: Invalid JSON or unrecognised event
        500: Fetching or writing an object failed
    """
    try:
        event = await request.json()
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid request: {e}",
        )

    logger.info(
        "Event received",
        extra={
            "event_id": event.get("id", "unknown") if isinstance(event, dict) else "unknown",
            "event_type": event.get("type", "unknown") if isinstance(event, dict) else "unknown",
        },
    )

    try:
        return await asyncio.to_thread(process_event, event, get_decoder_service())
    except InvalidEventError as e:
        logger.warning("Invalid event", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Storage failure: {e}",
        )
