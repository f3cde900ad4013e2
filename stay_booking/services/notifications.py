"""
Fire-and-forget notifications about reservation events.

Events are POSTed as JSON to NOTIFICATION_WEBHOOK_URL, where the mail or
messaging service picks them up. Without a configured URL the event is only
logged. A failed delivery is logged and never reaches the caller.
"""

from typing import Any

import requests
import structlog

from stay_booking.config import NOTIFICATION_TIMEOUT_SECONDS, NOTIFICATION_WEBHOOK_URL
from stay_booking.domain.records import Reservation

logger = structlog.get_logger(__name__)


def reservation_payload(reservation: Reservation) -> dict[str, Any]:
    """JSON-safe summary of a reservation for notification consumers."""
    return {
        "reservation_id": reservation.id,
        "property_id": reservation.property_id,
        "customer_id": reservation.customer_id,
        "status": reservation.status.value,
        "check_in": reservation.check_in.isoformat(),
        "check_out": reservation.check_out.isoformat(),
        "nights": reservation.nights,
        "guests": reservation.guests,
        "total": str(reservation.total),
        "coupon_code": reservation.price.coupon_code,
    }


def send_notification(event: str, payload: dict[str, Any]) -> bool:
    """
    Deliver one notification.

    Args:
        event: Event name (e.g. "reservation.confirmed")
        payload: JSON-serializable event data

    Returns:
        bool: True if delivered (or logged when no webhook is configured)
    """
    if not NOTIFICATION_WEBHOOK_URL:
        logger.info("notification_logged", notification_event=event, payload=payload)
        return True

    try:
        response = requests.post(
            NOTIFICATION_WEBHOOK_URL,
            json={"event": event, "data": payload},
            headers={"Content-Type": "application/json"},
            timeout=NOTIFICATION_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        logger.info("notification_sent", notification_event=event)
        return True

    except requests.HTTPError as e:
        logger.error(
            "notification_rejected",
            notification_event=event,
            status=e.response.status_code if e.response is not None else "N/A",
        )
        return False

    except Exception as e:
        logger.exception("notification_failed", notification_event=event, error=str(e))
        return False


def notify_reservation(event: str, reservation: Reservation) -> bool:
    return send_notification(event, reservation_payload(reservation))
