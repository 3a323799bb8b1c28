"""
Mapping of engine outcomes to client-facing response bodies.

Client errors (validation, past date, conflict, unknown tenant) are returned
with their own message. Everything else is logged with full context and
answered with a generic message so upstream bodies, tokens and internal ids
never reach the booker.
"""

import logging
from typing import Any, Dict, Tuple

from .booking.types import BookingRecord
from .exceptions import BookingEngineError, ClientError, PersistenceError

logger = logging.getLogger(__name__)

BOOKING_SUCCESS_MESSAGE = "Your booking is confirmed. Please check your email."


def error_response(error: Exception) -> Tuple[int, Dict[str, Any]]:
    """
    Build ``(status_code, body)`` for a failed request.

    The ``code`` field lets clients tell a slot conflict apart from a
    validation failure or an upstream outage.
    """
    if isinstance(error, ClientError):
        return error.status_code, {"success": False, "code": error.code, "message": error.message}

    if isinstance(error, BookingEngineError):
        if isinstance(error, PersistenceError):
            logger.error("Booking persistence failed; orphaned calendar event %s", error.event_id,
                         exc_info=error)
        else:
            logger.error("Request failed with %s: %s", type(error).__name__, error.message,
                         exc_info=error)
        return error.status_code, {"success": False, "code": error.code, "message": error.client_message}

    logger.error("Unexpected error handling request", exc_info=error)
    return BookingEngineError.status_code, {
        "success": False,
        "code": BookingEngineError.code,
        "message": BookingEngineError.client_message,
    }


def booking_success(record: BookingRecord) -> Tuple[int, Dict[str, Any]]:
    return 200, {
        "success": True,
        "message": BOOKING_SUCCESS_MESSAGE,
        "booking": {
            "date": record.date,
            "startTime": record.start_time,
            "endTime": record.end_time,
            "start": record.start_iso,
            "end": record.end_iso,
        },
    }
