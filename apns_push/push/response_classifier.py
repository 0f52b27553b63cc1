"""
Maps APNS responses onto delivered notifications or DeliveryErrors.

Classification has no side effects: it never retries, logs or touches the
token cache. The client decides what to do with the result.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from apns_push.push.constants import UNKNOWN_ERROR_REASON
from apns_push.push.errors import DeliveryError, Reason
from apns_push.push.models import Notification


def parse_error_body(body: Union[bytes, str, None], now: datetime) -> Dict[str, Any]:
    """Decode an APNS error body, substituting a synthetic one if unreadable."""
    fallback = {
        "reason": UNKNOWN_ERROR_REASON,
        "timestamp": now.timestamp() * 1000,
    }
    if not body:
        return fallback
    try:
        parsed = json.loads(body)
    except (ValueError, TypeError):
        return fallback
    if not isinstance(parsed, dict) or not isinstance(parsed.get("reason"), str):
        return fallback
    return parsed


def _parse_timestamp(value: Any, now: datetime) -> datetime:
    # APNS timestamps are epoch milliseconds
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return now
    return now


def classify_response(
    status_code: int,
    body: Union[bytes, str, None],
    notification: Notification,
    now: Optional[datetime] = None,
) -> Union[Notification, DeliveryError]:
    """
    Classify an APNS response.

    Args:
        status_code: HTTP status of the response
        body: Raw response body (empty on success)
        notification: The notification that was sent
        now: Time of observation, defaults to the current UTC time

    Returns:
        The same notification instance on 200, otherwise a DeliveryError
        (returned, not raised)
    """
    if status_code == 200:
        return notification

    now = now or datetime.now(timezone.utc)
    error_body = parse_error_body(body, now)
    raw_reason = error_body["reason"]

    return DeliveryError(
        status_code=status_code,
        notification=notification,
        reason=Reason.parse(raw_reason),
        timestamp=_parse_timestamp(error_body.get("timestamp"), now),
        raw_reason=raw_reason,
    )
