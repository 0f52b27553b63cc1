"""Pytest fixtures and configuration for test suite

This module provides:
1. Real EC P-256 signing keys (PEM and .p8 file)
2. Client configuration fixtures
3. Factory function for notifications with sensible defaults

Factory Functions:
    - make_notification(**overrides) -> Notification
"""
import pytest
import httpx
from unittest.mock import AsyncMock

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from apns_push.push.models import (
    Alert,
    ApnsConfig,
    Notification,
    NotificationOptions,
    Priority,
    PushType,
)
from apns_push.push.constants import APNS_SANDBOX_HOST


# =============================================================================
# Factory Functions for Test Objects
# =============================================================================

def make_notification(
    device_token: str = "a1b2c3d4e5f6a1b2c3d4e5f6a1b2c3d4e5f6a1b2c3d4e5f6a1b2c3d4e5f6a1b2",
    push_type: PushType = PushType.ALERT,
    priority: Priority = Priority.IMMEDIATE,
    **option_overrides
) -> Notification:
    """
    Factory function to create Notification instances for testing.

    Args:
        device_token: Hex device token
        push_type: apns-push-type value
        priority: apns-priority value
        **option_overrides: Any NotificationOptions fields

    Returns:
        Notification instance
    """
    options = {
        "alert": Alert(title="Front Door", body="Someone is at the door"),
        "sound": "default",
    }
    options.update(option_overrides)
    return Notification(
        device_token=device_token,
        push_type=push_type,
        priority=priority,
        options=NotificationOptions(**options),
    )


# =============================================================================
# Key and Config Fixtures
# =============================================================================

@pytest.fixture
def ec_private_key():
    """Generate a test EC private key (same curve as Apple .p8 keys)."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def pem_key(ec_private_key):
    """PEM encoded PKCS8 private key, as found in a .p8 file."""
    return ec_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture
def test_key_file(tmp_path, pem_key):
    """Create a temporary .p8 key file for testing."""
    key_file = tmp_path / "AuthKey_TEST.p8"
    key_file.write_text(pem_key)
    return str(key_file)


@pytest.fixture
def apns_config(pem_key):
    """Create a test APNS configuration."""
    return ApnsConfig(
        team_id="TEAMID1234",
        key_id="KEYID12345",
        signing_key=pem_key,
        default_topic="com.example.app",
        host=APNS_SANDBOX_HOST,
    )


@pytest.fixture
def notification():
    """Create a sample alert notification."""
    return make_notification()


@pytest.fixture
def mock_httpx_client():
    """Create a mock httpx AsyncClient."""
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.is_closed = False
    return mock_client
