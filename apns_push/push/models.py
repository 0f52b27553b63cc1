"""
Pydantic models for the APNS client.

ApnsConfig holds the client configuration. Notification and
SilentNotification describe a single push and know how to render the
APNS JSON payload; the client only reads them.
"""

from datetime import datetime
from enum import Enum, IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from cryptography.hazmat.primitives.asymmetric import ec
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from apns_push.push.constants import APNS_PRODUCTION_HOST, APNS_SANDBOX_HOST
from apns_push.push.errors import ConfigurationError

if TYPE_CHECKING:
    from apns_push.core.config import Settings

# Signing key material accepted by the token signer
SigningKey = Union[str, bytes, ec.EllipticCurvePrivateKey]

# Expiration is either epoch seconds or a calendar instant
Expiration = Union[int, float, datetime]


class PushType(str, Enum):
    """Values of the apns-push-type header."""

    ALERT = "alert"
    BACKGROUND = "background"
    VOIP = "voip"
    COMPLICATION = "complication"
    FILEPROVIDER = "fileprovider"
    MDM = "mdm"
    LIVEACTIVITY = "liveactivity"
    LOCATION = "location"
    PUSHTOTALK = "pushtotalk"
    CONTROLS = "controls"
    WIDGETS = "widgets"


class Priority(IntEnum):
    """Values of the apns-priority header.

    APNS treats a missing header as IMMEDIATE, so that value is never sent.
    """

    IMMEDIATE = 10
    THROTTLED = 5
    LOW = 1


class ApnsConfig(BaseModel):
    """Configuration for the APNS client.

    Attributes:
        team_id: Team identifier from the Apple Developer Portal (token issuer)
        key_id: Identifier of the signing key
        signing_key: PEM string/bytes or a loaded EC private key
        key_file: Path to a .p8 auth key, used when signing_key is not given
        default_topic: apns-topic used when a notification has none
        host: APNS host name
        request_timeout: Request timeout in seconds (30s when not set)
        keep_alive: Keep idle connections open between sends
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    team_id: str = Field(..., description="Team identifier")
    key_id: str = Field(..., description="Signing key identifier")
    signing_key: Optional[SigningKey] = Field(None, description="PEM key material or EC key")
    key_file: Optional[str] = Field(None, description="Path to .p8 auth key file")
    default_topic: Optional[str] = Field(None, description="Fallback apns-topic")
    host: str = Field(default=APNS_PRODUCTION_HOST, description="APNS host")
    request_timeout: Optional[float] = Field(None, gt=0, description="Request timeout in seconds")
    keep_alive: bool = Field(default=True, description="Reuse idle connections")

    @field_validator("key_id", "team_id")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """Validate that identifiers are non-empty alphanumerics."""
        v = v.strip()
        if not v or not v.isalnum():
            raise ValueError("Must be a non-empty alphanumeric string")
        return v.upper()

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Strip scheme and trailing slashes so the host can be used in URLs."""
        v = v.strip()
        for prefix in ("https://", "http://"):
            if v.startswith(prefix):
                v = v[len(prefix):]
        v = v.rstrip("/")
        if not v:
            raise ValueError("host cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_key_source(self) -> "ApnsConfig":
        """Exactly one of signing_key and key_file must be set."""
        if (self.signing_key is None) == (self.key_file is None):
            raise ValueError("Provide exactly one of signing_key or key_file")
        return self

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ApnsConfig":
        """Build a config from environment settings.

        Raises:
            ConfigurationError: If required APNS settings are missing or invalid
        """
        if not settings.apns_ready:
            raise ConfigurationError(
                "APNS_TEAM_ID, APNS_KEY_ID and one of APNS_SIGNING_KEY or "
                "APNS_KEY_FILE must be set"
            )
        try:
            return cls(
                team_id=settings.APNS_TEAM_ID,
                key_id=settings.APNS_KEY_ID,
                signing_key=settings.APNS_SIGNING_KEY or None,
                key_file=None if settings.APNS_SIGNING_KEY else settings.APNS_KEY_FILE,
                default_topic=settings.APNS_DEFAULT_TOPIC,
                host=settings.apns_host,
                request_timeout=settings.APNS_REQUEST_TIMEOUT,
                keep_alive=settings.APNS_KEEP_ALIVE,
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid APNS settings: {e}") from e

    @property
    def is_sandbox(self) -> bool:
        return self.host == APNS_SANDBOX_HOST

    def read_key_file(self) -> bytes:
        """Read the .p8 key file referenced by key_file."""
        key_path = Path(self.key_file)
        if not key_path.exists():
            raise ConfigurationError(f"APNS key file not found: {key_path}")
        return key_path.read_bytes()


class Alert(BaseModel):
    """Alert dictionary of the aps payload.

    A notification may also use a plain string alert instead.
    """

    title: Optional[str] = Field(None, description="Alert title")
    subtitle: Optional[str] = Field(None, description="Alert subtitle")
    body: Optional[str] = Field(None, description="Alert body text")
    launch_image: Optional[str] = Field(None, description="Launch image filename")
    title_loc_key: Optional[str] = Field(None, description="Localization key for title")
    title_loc_args: Optional[List[str]] = Field(None, description="Localization args for title")
    subtitle_loc_key: Optional[str] = Field(None, description="Localization key for subtitle")
    subtitle_loc_args: Optional[List[str]] = Field(None, description="Localization args for subtitle")
    loc_key: Optional[str] = Field(None, description="Localization key for body")
    loc_args: Optional[List[str]] = Field(None, description="Localization args for body")
    action_loc_key: Optional[str] = Field(None, description="Localization key for action button")

    def to_apns_dict(self) -> Dict[str, Any]:
        alert_dict: Dict[str, Any] = {}
        if self.title is not None:
            alert_dict["title"] = self.title
        if self.subtitle is not None:
            alert_dict["subtitle"] = self.subtitle
        if self.body is not None:
            alert_dict["body"] = self.body
        if self.launch_image:
            alert_dict["launch-image"] = self.launch_image
        if self.title_loc_key:
            alert_dict["title-loc-key"] = self.title_loc_key
        if self.title_loc_args:
            alert_dict["title-loc-args"] = self.title_loc_args
        if self.subtitle_loc_key:
            alert_dict["subtitle-loc-key"] = self.subtitle_loc_key
        if self.subtitle_loc_args:
            alert_dict["subtitle-loc-args"] = self.subtitle_loc_args
        if self.loc_key:
            alert_dict["loc-key"] = self.loc_key
        if self.loc_args:
            alert_dict["loc-args"] = self.loc_args
        if self.action_loc_key:
            alert_dict["action-loc-key"] = self.action_loc_key
        return alert_dict


class NotificationOptions(BaseModel):
    """Per-notification options.

    topic, expiration and collapse_id become request headers; the rest is
    rendered into the aps dictionary, and data is merged at the root of the
    payload.

    See: https://developer.apple.com/documentation/usernotifications/generating-a-remote-notification
    """

    topic: Optional[str] = Field(None, description="apns-topic (bundle id)")
    expiration: Optional[Expiration] = Field(
        None,
        description="Epoch seconds or datetime after which APNS stops retrying",
    )
    collapse_id: Optional[str] = Field(None, description="apns-collapse-id")

    alert: Optional[Union[str, Alert]] = Field(None, description="Alert text or dictionary")
    badge: Optional[int] = Field(None, ge=0, description="Badge number")
    sound: Optional[str] = Field(None, description="Sound name or 'default'")
    content_available: bool = Field(default=False, description="Background update")
    mutable_content: bool = Field(default=False, description="Enable Service Extension")
    category: Optional[str] = Field(None, description="Notification category")
    thread_id: Optional[str] = Field(None, description="Thread ID for grouping")
    target_content_id: Optional[str] = Field(None, description="Target content ID")
    interruption_level: Optional[str] = Field(
        None,
        description="Interruption level: passive, active, time-sensitive, critical"
    )
    relevance_score: Optional[float] = Field(
        None,
        ge=0.0,
        le=1.0,
        description="Relevance score for notification summary"
    )
    url_args: Optional[List[str]] = Field(None, description="Safari url-args")
    data: Dict[str, Any] = Field(default_factory=dict, description="Custom payload data")

    @field_validator("interruption_level")
    @classmethod
    def validate_interruption_level(cls, v: Optional[str]) -> Optional[str]:
        """Validate interruption level is one of the allowed values."""
        if v is not None:
            allowed = {"passive", "active", "time-sensitive", "critical"}
            if v not in allowed:
                raise ValueError(f"Must be one of: {allowed}")
        return v

    @field_validator("data")
    @classmethod
    def validate_data(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """The aps key is reserved for Apple."""
        if "aps" in v:
            raise ValueError("'aps' is reserved and cannot be used in data")
        return v


class Notification(BaseModel):
    """A push notification addressed to one device.

    Usage:
        notification = Notification(
            device_token="a1b2c3...",
            options=NotificationOptions(alert="Hello", badge=1),
        )
    """

    device_token: str = Field(..., min_length=1, description="APNS device token")
    push_type: PushType = Field(default=PushType.ALERT, description="apns-push-type")
    priority: Priority = Field(default=Priority.IMMEDIATE, description="apns-priority")
    options: NotificationOptions = Field(default_factory=NotificationOptions)

    def build_apns_payload(self) -> Dict[str, Any]:
        """Convert to APNS payload dictionary format.

        Returns:
            Dictionary ready for JSON serialization to APNS.
        """
        options = self.options
        aps: Dict[str, Any] = {}

        if isinstance(options.alert, Alert):
            aps["alert"] = options.alert.to_apns_dict()
        elif options.alert is not None:
            aps["alert"] = options.alert

        if options.badge is not None:
            aps["badge"] = options.badge
        if options.sound:
            aps["sound"] = options.sound
        if options.content_available:
            aps["content-available"] = 1
        if options.mutable_content:
            aps["mutable-content"] = 1
        if options.category:
            aps["category"] = options.category
        if options.thread_id:
            aps["thread-id"] = options.thread_id
        if options.target_content_id:
            aps["target-content-id"] = options.target_content_id
        if options.interruption_level:
            aps["interruption-level"] = options.interruption_level
        if options.relevance_score is not None:
            aps["relevance-score"] = options.relevance_score
        if options.url_args is not None:
            aps["url-args"] = options.url_args

        payload: Dict[str, Any] = {"aps": aps}

        # Add custom data at root level
        payload.update(options.data)

        return payload


class SilentNotification(Notification):
    """Background notification that wakes the app without alerting the user."""

    push_type: PushType = Field(default=PushType.BACKGROUND, description="apns-push-type")
    priority: Priority = Field(default=Priority.THROTTLED, description="apns-priority")

    def build_apns_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"aps": {"content-available": 1}}
        payload.update(self.options.data)
        return payload
