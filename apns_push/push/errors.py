"""
Error taxonomy for the APNS client.

ConfigurationError is raised before anything is sent (bad key material,
missing settings). DeliveryError is raised when APNS rejects a specific
notification; its reason is one of the documented APNS reason codes, or
Reason.UNKNOWN_ERROR when the response could not be understood.

Transport failures (httpx.HTTPError and subclasses) are not wrapped.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Optional

from apns_push.push.constants import (
    APNS_ERROR_CODES,
    GENERIC_ERROR_EVENT,
    UNKNOWN_ERROR_REASON,
)

if TYPE_CHECKING:
    from apns_push.push.models import Notification


class Reason(str, Enum):
    """Reason codes returned by APNS, plus the client's own catch-alls."""

    BAD_COLLAPSE_ID = "BadCollapseId"
    BAD_DEVICE_TOKEN = "BadDeviceToken"
    BAD_EXPIRATION_DATE = "BadExpirationDate"
    BAD_MESSAGE_ID = "BadMessageId"
    BAD_PRIORITY = "BadPriority"
    BAD_TOPIC = "BadTopic"
    DEVICE_TOKEN_NOT_FOR_TOPIC = "DeviceTokenNotForTopic"
    DUPLICATE_HEADERS = "DuplicateHeaders"
    IDLE_TIMEOUT = "IdleTimeout"
    INVALID_PUSH_TYPE = "InvalidPushType"
    MISSING_DEVICE_TOKEN = "MissingDeviceToken"
    MISSING_TOPIC = "MissingTopic"
    PAYLOAD_EMPTY = "PayloadEmpty"
    TOPIC_DISALLOWED = "TopicDisallowed"
    BAD_CERTIFICATE = "BadCertificate"
    BAD_CERTIFICATE_ENVIRONMENT = "BadCertificateEnvironment"
    EXPIRED_PROVIDER_TOKEN = "ExpiredProviderToken"
    FORBIDDEN = "Forbidden"
    INVALID_PROVIDER_TOKEN = "InvalidProviderToken"
    MISSING_PROVIDER_TOKEN = "MissingProviderToken"
    UNRELATED_KEY_ID_IN_TOKEN = "UnrelatedKeyIdInToken"
    BAD_PATH = "BadPath"
    METHOD_NOT_ALLOWED = "MethodNotAllowed"
    EXPIRED_TOKEN = "ExpiredToken"
    UNREGISTERED = "Unregistered"
    PAYLOAD_TOO_LARGE = "PayloadTooLarge"
    TOO_MANY_PROVIDER_TOKEN_UPDATES = "TooManyProviderTokenUpdates"
    TOO_MANY_REQUESTS = "TooManyRequests"
    INTERNAL_SERVER_ERROR = "InternalServerError"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    SHUTDOWN = "Shutdown"

    UNKNOWN_ERROR = UNKNOWN_ERROR_REASON
    # Generic event channel, emitted for every failure
    ERROR = GENERIC_ERROR_EVENT

    @classmethod
    def parse(cls, value: Optional[str]) -> "Reason":
        """Map a raw reason string onto the enum, defaulting to UNKNOWN_ERROR."""
        if value == cls.ERROR.value:
            return cls.UNKNOWN_ERROR
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN_ERROR


class ApnsError(Exception):
    """Base class for errors raised by this package."""
    pass


class ConfigurationError(ApnsError):
    """Signing key or client settings are unusable. Not retryable."""
    pass


class DeliveryError(ApnsError):
    """APNS rejected a notification.

    Attributes:
        status_code: HTTP status returned by APNS
        notification: The rejected notification
        reason: Parsed reason code
        raw_reason: Reason string exactly as APNS sent it
        timestamp: When APNS last saw the device token as valid (410), or
            when the error was observed
    """

    def __init__(
        self,
        status_code: int,
        notification: "Notification",
        reason: Reason,
        timestamp: Optional[datetime] = None,
        raw_reason: Optional[str] = None,
    ):
        self.status_code = status_code
        self.notification = notification
        self.reason = reason
        self.raw_reason = raw_reason if raw_reason is not None else reason.value
        self.timestamp = timestamp or datetime.now(timezone.utc)
        super().__init__(f"APNS error {status_code}: {self.raw_reason}")

    @property
    def description(self) -> str:
        """Apple's documented meaning of the reason code."""
        return APNS_ERROR_CODES.get(self.reason.value, "Unknown error")

    @property
    def is_unregistered(self) -> bool:
        """True if the device token should be dropped by the caller."""
        return self.reason in (Reason.UNREGISTERED, Reason.EXPIRED_TOKEN)

    def __repr__(self) -> str:
        return (
            f"DeliveryError(status_code={self.status_code}, "
            f"reason={self.reason.value!r}, "
            f"device_token={self.notification.device_token[:20]!r})"
        )
