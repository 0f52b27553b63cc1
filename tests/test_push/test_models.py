"""
Tests for configuration and notification models.
"""

import pytest
from datetime import datetime, timezone

from apns_push.push.constants import APNS_PRODUCTION_HOST, APNS_SANDBOX_HOST, Host
from apns_push.push.models import (
    Alert,
    ApnsConfig,
    Notification,
    NotificationOptions,
    Priority,
    PushType,
    SilentNotification,
)


# =============================================================================
# ApnsConfig Tests
# =============================================================================

class TestApnsConfig:
    """Tests for ApnsConfig model."""

    def test_valid_config(self, pem_key):
        config = ApnsConfig(
            team_id="TEAM123456",
            key_id="ABCDE12345",
            signing_key=pem_key,
            default_topic="com.example.app",
        )
        assert config.team_id == "TEAM123456"
        assert config.key_id == "ABCDE12345"
        assert config.host == APNS_PRODUCTION_HOST
        assert config.keep_alive is True
        assert config.request_timeout is None
        assert config.is_sandbox is False

    def test_identifiers_converted_to_uppercase(self, pem_key):
        config = ApnsConfig(team_id=" team123456 ", key_id="abcde12345", signing_key=pem_key)
        assert config.team_id == "TEAM123456"
        assert config.key_id == "ABCDE12345"

    @pytest.mark.parametrize("team_id", ["", "   ", "TEAM-1234"])
    def test_invalid_identifier(self, pem_key, team_id):
        with pytest.raises(ValueError):
            ApnsConfig(team_id=team_id, key_id="KEYID12345", signing_key=pem_key)

    def test_requires_key_source(self):
        with pytest.raises(ValueError):
            ApnsConfig(team_id="TEAM123456", key_id="KEYID12345")

    def test_rejects_both_key_sources(self, pem_key, test_key_file):
        with pytest.raises(ValueError):
            ApnsConfig(
                team_id="TEAM123456",
                key_id="KEYID12345",
                signing_key=pem_key,
                key_file=test_key_file,
            )

    def test_accepts_key_object(self, ec_private_key):
        config = ApnsConfig(team_id="TEAM123456", key_id="KEYID12345", signing_key=ec_private_key)
        assert config.signing_key is ec_private_key

    def test_host_enum_and_scheme(self, pem_key):
        config = ApnsConfig(
            team_id="TEAM123456",
            key_id="KEYID12345",
            signing_key=pem_key,
            host=Host.DEVELOPMENT,
        )
        assert config.host == APNS_SANDBOX_HOST
        assert config.is_sandbox is True

        config = ApnsConfig(
            team_id="TEAM123456",
            key_id="KEYID12345",
            signing_key=pem_key,
            host="https://localhost:8443/",
        )
        assert config.host == "localhost:8443"

    def test_config_is_immutable(self, apns_config):
        with pytest.raises(ValueError):
            apns_config.default_topic = "com.other.app"


# =============================================================================
# Notification Tests
# =============================================================================

class TestNotification:
    """Tests for Notification payload rendering."""

    def test_defaults(self):
        notification = Notification(device_token="abc")
        assert notification.push_type == PushType.ALERT
        assert notification.priority == Priority.IMMEDIATE
        assert notification.build_apns_payload() == {"aps": {}}

    def test_empty_device_token_rejected(self):
        with pytest.raises(ValueError):
            Notification(device_token="")

    def test_string_alert(self):
        notification = Notification(
            device_token="abc",
            options=NotificationOptions(alert="Hello", badge=3, sound="ping.aiff"),
        )
        assert notification.build_apns_payload() == {
            "aps": {"alert": "Hello", "badge": 3, "sound": "ping.aiff"},
        }

    def test_full_payload(self):
        notification = Notification(
            device_token="abc",
            options=NotificationOptions(
                alert=Alert(
                    title="Front Door",
                    subtitle="Camera 1",
                    body="Person detected",
                    title_loc_key="TITLE_KEY",
                    loc_args=["a", "b"],
                ),
                badge=0,
                sound="default",
                mutable_content=True,
                content_available=True,
                category="SECURITY_ALERT",
                thread_id="camera-123",
                target_content_id="window-1",
                interruption_level="time-sensitive",
                relevance_score=0.5,
                data={"event_id": "evt-123"},
            ),
        )
        payload = notification.build_apns_payload()
        aps = payload["aps"]

        assert aps["alert"] == {
            "title": "Front Door",
            "subtitle": "Camera 1",
            "body": "Person detected",
            "title-loc-key": "TITLE_KEY",
            "loc-args": ["a", "b"],
        }
        assert aps["badge"] == 0
        assert aps["sound"] == "default"
        assert aps["mutable-content"] == 1
        assert aps["content-available"] == 1
        assert aps["category"] == "SECURITY_ALERT"
        assert aps["thread-id"] == "camera-123"
        assert aps["target-content-id"] == "window-1"
        assert aps["interruption-level"] == "time-sensitive"
        assert aps["relevance-score"] == 0.5

        # Custom data at root level
        assert payload["event_id"] == "evt-123"

    def test_alert_from_dict(self):
        options = NotificationOptions(alert={"title": "T", "body": "B"})
        assert isinstance(options.alert, Alert)

    def test_interruption_level_validation_invalid(self):
        with pytest.raises(ValueError):
            NotificationOptions(interruption_level="loud")

    def test_reserved_data_key(self):
        with pytest.raises(ValueError):
            NotificationOptions(data={"aps": {}})

    def test_expiration_types_preserved(self):
        moment = datetime(2030, 1, 1, tzinfo=timezone.utc)
        assert NotificationOptions(expiration=1893456000).expiration == 1893456000
        assert NotificationOptions(expiration=moment).expiration == moment

    def test_build_does_not_mutate(self):
        notification = Notification(
            device_token="abc",
            options=NotificationOptions(alert="Hi", data={"k": "v"}),
        )
        before = notification.model_dump()
        notification.build_apns_payload()["extra"] = 1
        assert notification.model_dump() == before


class TestSilentNotification:
    """Tests for background notifications."""

    def test_defaults(self):
        notification = SilentNotification(
            device_token="abc",
            options=NotificationOptions(data={"sync": True}),
        )
        assert notification.push_type == PushType.BACKGROUND
        assert notification.priority == Priority.THROTTLED
        assert notification.build_apns_payload() == {
            "aps": {"content-available": 1},
            "sync": True,
        }

    def test_ignores_alert_fields(self):
        notification = SilentNotification(
            device_token="abc",
            options=NotificationOptions(alert="Ignored", badge=2),
        )
        assert notification.build_apns_payload() == {"aps": {"content-available": 1}}
