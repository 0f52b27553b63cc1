"""
APNS client components.

- ApnsClient: sends notifications and publishes error events
- TokenCache: provider token signing and reuse
- build_request / classify_response: request construction and response mapping
- Notification / SilentNotification: payload model
"""

from apns_push.push.client import ApnsClient, SendFailure, SendResult
from apns_push.push.constants import Host
from apns_push.push.errors import (
    ApnsError,
    ConfigurationError,
    DeliveryError,
    Reason,
)
from apns_push.push.events import ErrorEvents
from apns_push.push.models import (
    Alert,
    ApnsConfig,
    Notification,
    NotificationOptions,
    Priority,
    PushType,
    SilentNotification,
)
from apns_push.push.request_builder import ApnsRequest, build_request, normalize_expiration
from apns_push.push.response_classifier import classify_response
from apns_push.push.token_cache import SigningToken, TokenCache, sign_token

__all__ = [
    # Client
    "ApnsClient",
    "SendFailure",
    "SendResult",
    "ErrorEvents",
    # Configuration
    "ApnsConfig",
    "Host",
    # Notifications
    "Alert",
    "Notification",
    "NotificationOptions",
    "Priority",
    "PushType",
    "SilentNotification",
    # Pipeline
    "ApnsRequest",
    "build_request",
    "normalize_expiration",
    "classify_response",
    "SigningToken",
    "TokenCache",
    "sign_token",
    # Errors
    "ApnsError",
    "ConfigurationError",
    "DeliveryError",
    "Reason",
]
