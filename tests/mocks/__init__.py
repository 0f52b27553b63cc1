"""
Mock Factories Package

Provides factory functions for creating realistic mock objects
that match httpx response structures.
"""
from tests.mocks.http_mocks import (
    create_http_response,
    create_apns_success_response,
    create_apns_error_response,
)

__all__ = [
    "create_http_response",
    "create_apns_success_response",
    "create_apns_error_response",
]
