"""
APNS (Apple Push Notification Service) client.

Sends notifications over HTTP/2 with token-based authentication.

Features:
- HTTP/2 connection via httpx, kept alive between sends unless disabled
- Provider token cached for 55 minutes, regenerated on ExpiredProviderToken
- Typed DeliveryError for every rejected notification
- Error events per reason code and on a generic "error" channel
- No retries: the caller owns retry policy
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

import httpx

from apns_push.core.logging_config import clear_send_id, set_send_id
from apns_push.push.constants import (
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    MAX_CONNECTIONS,
    MAX_KEEPALIVE_CONNECTIONS,
)
from apns_push.push.errors import DeliveryError, Reason
from apns_push.push.events import ErrorEvents, ErrorListener
from apns_push.push.models import ApnsConfig, Notification
from apns_push.push.request_builder import build_request
from apns_push.push.response_classifier import classify_response
from apns_push.push.token_cache import TokenCache

logger = logging.getLogger(__name__)


@dataclass
class SendFailure:
    """Result slot of send_many for a notification that was not delivered."""

    error: Exception

    @property
    def notification(self) -> Optional[Notification]:
        return getattr(self.error, "notification", None)


SendResult = Union[Notification, SendFailure]


class ApnsClient:
    """
    Client for sending push notifications to Apple devices.

    Usage:
        config = ApnsConfig(
            team_id="YYYYYYYYYY",
            key_id="XXXXXXXXXX",
            key_file="path/to/AuthKey.p8",
            default_topic="com.example.app",
        )
        async with ApnsClient(config) as client:
            client.on(Reason.UNREGISTERED, forget_device)
            await client.send(Notification(device_token=token, options=...))

    Attributes:
        config: Client configuration
        events: Error listeners
        _client: httpx AsyncClient with HTTP/2 enabled
        _tokens: Provider token cache
    """

    def __init__(
        self,
        config: ApnsConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        token_cache: Optional[TokenCache] = None,
    ):
        """
        Initialize the client.

        Args:
            config: APNS configuration with auth key details
            http_client: Optional preconfigured httpx client (not closed by close())
            token_cache: Optional token cache, mainly for tests
        """
        self.config = config
        self.events = ErrorEvents()

        self._client: Optional[httpx.AsyncClient] = http_client
        self._owns_client = http_client is None
        self._tokens = token_cache or TokenCache(config)

        logger.info(
            "APNS client initialized",
            extra={
                "host": config.host,
                "default_topic": config.default_topic,
                "keep_alive": config.keep_alive,
            }
        )

    @classmethod
    def from_settings(cls, settings=None) -> "ApnsClient":
        """Create a client from environment settings (APNS_* variables)."""
        if settings is None:
            from apns_push.core.config import settings
        return cls(ApnsConfig.from_settings(settings))

    @property
    def token_cache(self) -> TokenCache:
        return self._tokens

    def on(self, reason: Union[Reason, str], listener: ErrorListener) -> None:
        """Listen for errors with a given reason, or Reason.ERROR for all."""
        self.events.on(reason, listener)

    def off(self, reason: Union[Reason, str], listener: ErrorListener) -> None:
        self.events.off(reason, listener)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP/2 client."""
        if self._client is None or self._client.is_closed:
            timeout = self.config.request_timeout or DEFAULT_REQUEST_TIMEOUT_SECONDS
            self._client = httpx.AsyncClient(
                http2=True,
                timeout=httpx.Timeout(timeout, connect=min(timeout, DEFAULT_CONNECT_TIMEOUT_SECONDS)),
                limits=httpx.Limits(
                    max_connections=MAX_CONNECTIONS,
                    max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS if self.config.keep_alive else 0,
                ),
            )
            self._owns_client = True
        return self._client

    async def send(self, notification: Notification) -> Notification:
        """
        Send a push notification to a single device.

        Args:
            notification: Notification to deliver

        Returns:
            The same notification once APNS accepted it

        Raises:
            DeliveryError: APNS rejected the notification
            ConfigurationError: The provider token could not be signed
            httpx.HTTPError: Network failure or timeout
        """
        send_token = set_send_id(uuid.uuid4().hex[:12])
        try:
            token = self._tokens.get_token()
            request = build_request(notification, token, self.config)
            client = await self._get_client()

            start_time = time.time()
            try:
                response = await client.request(
                    request.method,
                    request.url,
                    content=request.content,
                    headers=request.headers,
                )
            except httpx.HTTPError as e:
                logger.warning(
                    f"APNS transport error: {e}",
                    extra={
                        "device_token": notification.device_token[:20] + "...",
                        "error_type": type(e).__name__,
                    }
                )
                raise

            duration_ms = int((time.time() - start_time) * 1000)
            result = classify_response(response.status_code, response.content, notification)

            if isinstance(result, DeliveryError):
                self._handle_error(result, duration_ms)
                raise result

            logger.info(
                "APNS notification sent successfully",
                extra={
                    "device_token": notification.device_token[:20] + "...",
                    "apns_id": response.headers.get("apns-id"),
                    "duration_ms": duration_ms,
                }
            )
            return result
        finally:
            clear_send_id(send_token)

    def _handle_error(self, error: DeliveryError, duration_ms: int) -> None:
        if error.reason == Reason.EXPIRED_PROVIDER_TOKEN:
            self._tokens.invalidate()

        logger.warning(
            f"APNS rejected notification: {error.raw_reason}",
            extra={
                "status_code": error.status_code,
                "reason": error.raw_reason,
                "device_token": error.notification.device_token[:20] + "...",
                "duration_ms": duration_ms,
            }
        )

        self.events.emit_error(error)

    async def send_many(
        self,
        notifications: Iterable[Notification],
        max_concurrency: Optional[int] = None,
    ) -> List[SendResult]:
        """
        Send several notifications concurrently.

        A failed send does not abort the others; it is returned in place as a
        SendFailure.

        Args:
            notifications: Notifications to deliver
            max_concurrency: Optional cap on in-flight requests (default unbounded)

        Returns:
            One result per notification, in input order
        """
        notifications = list(notifications)
        if not notifications:
            return []

        semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

        async def send_one(notification: Notification) -> SendResult:
            try:
                if semaphore is None:
                    return await self.send(notification)
                async with semaphore:
                    return await self.send(notification)
            except Exception as e:
                return SendFailure(error=e)

        results = await asyncio.gather(*[send_one(n) for n in notifications])

        failed = sum(1 for r in results if isinstance(r, SendFailure))
        logger.info(
            "APNS batch send complete",
            extra={
                "total": len(notifications),
                "success": len(notifications) - failed,
                "failed": failed,
            }
        )

        return list(results)

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            logger.debug("APNS client closed")

    async def __aenter__(self) -> "ApnsClient":
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
