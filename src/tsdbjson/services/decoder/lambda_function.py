"""
AWS Lambda entry point.

Handler: ``tsdbjson.services.decoder.lambda_function.lambda_handler``
"""

import json
import logging
from typing import Any, Dict

from tsdbjson.core.logging import setup_logging
from tsdbjson.services.decoder.service import get_decoder_service, process_event

setup_logging()

logger = logging.getLogger(__name__)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Decode every object in an S3 event notification.

    Any failure is logged and re-raised so Lambda retries the event or
    sends it to the configured dead-letter target.
    """
    request_id = getattr(context, "aws_request_id", "unknown")

    try:
        summary = process_event(event, get_decoder_service())
    except Exception as e:
        logger.error(
            f"Error processing file: {e}",
            extra={
                "request_id": request_id,
                "error": str(e),
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )
        raise

    logger.info(
        "Event processed",
        extra={"request_id": request_id, "processed": summary["processed"]},
    )
    return {
        "statusCode": 200,
        "body": json.dumps(summary),
    }
