"""
Constants for the APNS client.
"""

from enum import Enum

# APNS Hosts
APNS_PRODUCTION_HOST = "api.push.apple.com"
APNS_SANDBOX_HOST = "api.sandbox.push.apple.com"
APNS_PORT = 443

# APNS API path
APNS_API_VERSION = 3
APNS_DEVICE_PATH = "/{version}/device/{device_token}"

# JWT configuration
JWT_ALGORITHM = "ES256"
# Apple asks for a new provider token at most every 20 minutes and at least
# once an hour
JWT_RESET_INTERVAL_SECONDS = 55 * 60

# Characters left unescaped in device tokens (same set as encodeURIComponent)
URL_SAFE_CHARACTERS = "-_.!~*'()"

# HTTP defaults
DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0
MAX_CONNECTIONS = 100
MAX_KEEPALIVE_CONNECTIONS = 20


class Host(str, Enum):
    """Known APNS endpoints."""

    PRODUCTION = APNS_PRODUCTION_HOST
    DEVELOPMENT = APNS_SANDBOX_HOST


# APNS Error Codes (from the reason field of the response body)
APNS_ERROR_CODES = {
    # 400 Bad request
    "BadCollapseId": "The collapse identifier exceeds the maximum allowed size",
    "BadDeviceToken": "The specified device token is invalid",
    "BadExpirationDate": "The apns-expiration value is invalid",
    "BadMessageId": "The apns-id value is invalid",
    "BadPriority": "The apns-priority value is invalid",
    "BadTopic": "The apns-topic value is invalid",
    "DeviceTokenNotForTopic": "The device token doesn't match the specified topic",
    "DuplicateHeaders": "One or more headers are repeated",
    "IdleTimeout": "Idle timeout",
    "InvalidPushType": "The apns-push-type value is invalid",
    "MissingDeviceToken": "The device token is not specified in the request path",
    "MissingTopic": "The apns-topic header is missing from the request",
    "PayloadEmpty": "The message payload is empty",
    "TopicDisallowed": "Pushing to this topic is not allowed",

    # 403 Token errors
    "BadCertificate": "The certificate is invalid",
    "BadCertificateEnvironment": "The client certificate is for the wrong environment",
    "ExpiredProviderToken": "The provider token is stale and a new token should be generated",
    "Forbidden": "The specified action is not allowed",
    "InvalidProviderToken": "The provider token is not valid or the token signature cannot be verified",
    "MissingProviderToken": "No provider certificate was used to connect to APNs",
    "UnrelatedKeyIdInToken": "The key ID in the provider token isn't related to the key ID of the token used in the first push of this connection",

    # 404 / 405
    "BadPath": "The request contained an invalid :path value",
    "MethodNotAllowed": "The specified :method value isn't POST",

    # 410 Device token errors
    "ExpiredToken": "The device token has expired",
    "Unregistered": "The device token is inactive for the specified topic",

    # 413
    "PayloadTooLarge": "The message payload is too large",

    # 429
    "TooManyProviderTokenUpdates": "The provider's authentication token is being updated too often",
    "TooManyRequests": "Too many requests were made consecutively to the same device token",

    # 5xx Server errors
    "InternalServerError": "An internal server error occurred",
    "ServiceUnavailable": "The service is unavailable",
    "Shutdown": "The APNs server is shutting down",
}

UNKNOWN_ERROR_REASON = "Unknown error"
GENERIC_ERROR_EVENT = "error"
