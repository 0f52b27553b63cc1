"""
Builds the HTTP request APNS expects for one notification.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict
from urllib.parse import quote

from apns_push.push.constants import (
    APNS_API_VERSION,
    APNS_DEVICE_PATH,
    APNS_PORT,
    URL_SAFE_CHARACTERS,
)
from apns_push.push.models import ApnsConfig, Expiration, Notification, Priority


@dataclass(frozen=True)
class ApnsRequest:
    """Fully specified outbound request."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    content: bytes = b""
    keep_alive: bool = True


def normalize_expiration(expiration: Expiration) -> str:
    """Render an expiration as whole epoch seconds.

    Numbers are already epoch seconds. Naive datetimes are taken as UTC.
    Fractions round half away from zero.
    """
    if isinstance(expiration, datetime):
        if expiration.tzinfo is None:
            expiration = expiration.replace(tzinfo=timezone.utc)
        seconds = expiration.timestamp()
    else:
        seconds = expiration
    return str(Decimal(seconds).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def build_device_url(host: str, device_token: str) -> str:
    path = APNS_DEVICE_PATH.format(
        version=APNS_API_VERSION,
        device_token=quote(device_token, safe=URL_SAFE_CHARACTERS),
    )
    return f"https://{host}:{APNS_PORT}{path}"


def build_headers(notification: Notification, token: str, config: ApnsConfig) -> Dict[str, str]:
    """Build request headers for APNS."""
    options = notification.options
    headers = {
        "authorization": f"bearer {token}",
        "apns-push-type": notification.push_type.value,
    }

    topic = options.topic if options.topic is not None else config.default_topic
    if topic:
        headers["apns-topic"] = topic

    # APNS defaults to immediate delivery when the header is absent
    if notification.priority != Priority.IMMEDIATE:
        headers["apns-priority"] = str(int(notification.priority))

    if options.expiration is not None:
        headers["apns-expiration"] = normalize_expiration(options.expiration)

    if options.collapse_id:
        headers["apns-collapse-id"] = options.collapse_id

    return headers


def build_request(notification: Notification, token: str, config: ApnsConfig) -> ApnsRequest:
    """
    Assemble the request for one notification.

    Args:
        notification: Notification to deliver
        token: Provider token for the authorization header
        config: Client configuration (host, default topic, keep-alive)

    Returns:
        ApnsRequest ready to hand to the transport
    """
    body = json.dumps(
        notification.build_apns_payload(),
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return ApnsRequest(
        method="POST",
        url=build_device_url(config.host, notification.device_token),
        headers=build_headers(notification, token, config),
        content=body.encode("utf-8"),
        keep_alive=config.keep_alive,
    )
