"""
Provider token signing and caching.

APNS authenticates every request with a JWT signed by the team's .p8 key.
Apple rejects tokens older than an hour and throttles tokens refreshed more
often than every 20 minutes, so one token is cached and reused for
JWT_RESET_INTERVAL_SECONDS.

Concurrent sends share the cache without locking. Two callers that see an
expired token may both sign a new one and the last write wins; APNS accepts
either token, so the only cost is an extra signature.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from apns_push.push.constants import JWT_ALGORITHM, JWT_RESET_INTERVAL_SECONDS
from apns_push.push.errors import ConfigurationError
from apns_push.push.models import ApnsConfig, SigningKey

logger = logging.getLogger(__name__)

TokenSigner = Callable[[Dict[str, Any], SigningKey, str], str]


@dataclass(frozen=True)
class SigningToken:
    """A signed provider token and the epoch time it was minted."""

    value: str
    timestamp: float


def sign_token(
    claims: Dict[str, Any],
    signing_key: SigningKey,
    key_id: str,
    algorithm: str = JWT_ALGORITHM,
) -> str:
    """
    Sign provider token claims.

    Args:
        claims: JWT claims ({"iss": team_id, "iat": issued_at})
        signing_key: PEM key material or an EC private key
        key_id: Key identifier, sent as the "kid" header
        algorithm: JWT algorithm (APNS only accepts ES256)

    Returns:
        Encoded JWT string
    """
    return jwt.encode(
        claims,
        signing_key,
        algorithm=algorithm,
        headers={"kid": key_id},
    )


class TokenCache:
    """
    Owns the single provider token of a client.

    Usage:
        cache = TokenCache(config)
        headers["authorization"] = f"bearer {cache.get_token()}"
        ...
        cache.invalidate()  # after ExpiredProviderToken

    Attributes:
        config: Client configuration (team, key id, key material)
        _token: Current token, None until first use or after invalidate()
        _signing_key: Key material, loaded from key_file on first use
    """

    def __init__(
        self,
        config: ApnsConfig,
        signer: TokenSigner = sign_token,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self._signer = signer
        self._clock = clock
        self._token: Optional[SigningToken] = None
        self._signing_key: Optional[SigningKey] = config.signing_key

    @property
    def token(self) -> Optional[SigningToken]:
        return self._token

    def _load_signing_key(self) -> SigningKey:
        """Return key material, reading key_file the first time if needed."""
        if self._signing_key is None:
            key_data = self.config.read_key_file()
            try:
                private_key = serialization.load_pem_private_key(key_data, password=None)
            except (ValueError, TypeError) as e:
                raise ConfigurationError(f"Could not load APNS key file: {e}") from e

            if not isinstance(private_key, ec.EllipticCurvePrivateKey):
                raise ConfigurationError("APNS key must be an EC private key (ES256)")

            self._signing_key = private_key
            logger.debug(f"Loaded APNS private key from {self.config.key_file}")

        return self._signing_key

    def get_token(self) -> str:
        """
        Return the cached provider token, signing a new one when it is stale.

        Returns:
            JWT string for the authorization header

        Raises:
            ConfigurationError: If the key cannot be loaded or used for signing
        """
        now = self._clock()

        if self._token is not None and now - self._token.timestamp < JWT_RESET_INTERVAL_SECONDS:
            return self._token.value

        claims = {
            "iss": self.config.team_id,
            "iat": math.floor(now),
        }

        signing_key = self._load_signing_key()
        try:
            value = self._signer(claims, signing_key, self.config.key_id)
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise ConfigurationError(f"Failed to sign APNS provider token: {e}") from e

        self._token = SigningToken(value=value, timestamp=now)

        logger.debug(
            "Generated new APNS provider token",
            extra={
                "team_id": self.config.team_id,
                "key_id": self.config.key_id,
                "reset_in": JWT_RESET_INTERVAL_SECONDS,
            }
        )

        return value

    def invalidate(self) -> None:
        """Drop the cached token so the next get_token() signs a new one."""
        if self._token is not None:
            logger.info(
                "APNS provider token invalidated",
                extra={"key_id": self.config.key_id},
            )
        self._token = None
