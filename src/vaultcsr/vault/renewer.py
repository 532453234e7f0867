"""
Token Renewer - Vault Credential Lifecycle

Keeps the shared vault client authenticated for the lifetime of the process.
Every tick looks up the current token and:

- authenticates when there is no token
- authenticates when the token has expired
- renews when the token is halfway through its ttl
- does nothing otherwise

Any failed action ends the loop with that error. Transient network faults are
already retried by the client's HTTP session, so a failure reaching this layer
is treated as fatal.
"""

import re
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

import hvac
import requests

from ..utils.exceptions import (
    AuthenticationError,
    NoAuthProviderError,
    TokenLookupError,
    TokenRenewError,
    TokenStatusError,
    VaultCSRError,
)
from ..utils.logging import get_logger
from .auth import AuthProvider

logger = get_logger(__name__)

TICK_INTERVAL_SECONDS = 1.0

_FRACTION = re.compile(r"\.(\d+)")


def parse_rfc3339(value: Any) -> datetime:
    """
    Parse an RFC-3339 timestamp as returned by vault.

    Vault emits nanosecond precision; fractional seconds beyond microseconds
    are truncated.
    """
    if not isinstance(value, str) or not value:
        raise ValueError(f"expected RFC-3339 string, got {value!r}")
    text = value.strip()
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp {value!r} has no UTC offset")
    return parsed


def parse_ttl(value: Any) -> timedelta:
    """Parse an integer ttl in seconds."""
    if isinstance(value, bool):
        raise ValueError(f"expected integer ttl, got {value!r}")
    if isinstance(value, int):
        return timedelta(seconds=value)
    if isinstance(value, str):
        return timedelta(seconds=int(value.strip()))
    raise ValueError(f"expected integer ttl, got {value!r}")


@dataclass(frozen=True)
class TokenStatus:
    """Point-in-time view of the client's token. Never cached across ticks."""

    has_token: bool
    expired: bool = False
    ttl: timedelta = timedelta(0)
    expires_in: timedelta = timedelta(0)

    @property
    def needs_auth(self) -> bool:
        return not self.has_token or self.expired

    @property
    def needs_renewal(self) -> bool:
        """Halfway through the lease: remaining lifetime <= ttl / 2."""
        return self.has_token and not self.expired and self.expires_in <= self.ttl // 2


class Renewer:
    """
    Vault token lifecycle manager.

    The renewer is the only writer of the client's token; the signer reads it
    implicitly through the same client.
    """

    def __init__(
        self,
        client: hvac.Client,
        auth_provider: Optional[AuthProvider] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.client = client
        self.auth_provider = auth_provider
        self._clock = clock

    def current_token_status(self) -> TokenStatus:
        """Derive the token status from vault's self-lookup."""
        if not self.client.token:
            return TokenStatus(has_token=False)

        try:
            response = self.client.auth.token.lookup_self()
        except (hvac.exceptions.VaultError, requests.exceptions.RequestException) as e:
            raise TokenLookupError(str(e)) from e

        data = (response or {}).get("data") or {}

        try:
            expires = parse_rfc3339(data.get("expire_time"))
        except ValueError as e:
            raise TokenStatusError("expire time", str(e)) from e

        # "ttl" is what is left of the lease; "creation_ttl" is the whole lease
        lease = data.get("creation_ttl")
        if lease is None:
            lease = data.get("ttl")
        try:
            ttl = parse_ttl(lease)
        except ValueError as e:
            raise TokenStatusError("ttl", str(e)) from e

        now = self._clock()
        if now > expires:
            return TokenStatus(has_token=True, expired=True)

        return TokenStatus(has_token=True, ttl=ttl, expires_in=expires - now)

    def auth(self) -> None:
        if self.auth_provider is None:
            raise NoAuthProviderError()
        try:
            self.auth_provider.authenticate(self.client)
        except VaultCSRError:
            raise
        except Exception as e:
            raise AuthenticationError(str(e), method=str(self.auth_provider)) from e

    def renew(self) -> None:
        try:
            self.client.auth.token.renew_self()
        except (hvac.exceptions.VaultError, requests.exceptions.RequestException) as e:
            raise TokenRenewError(str(e)) from e

    def tick(self) -> None:
        status = self.current_token_status()

        if not status.has_token:
            logger.info("No token - attempting auth")
            self.auth()
        elif status.expired:
            logger.info("Token expired - attempting auth")
            self.auth()
        elif status.needs_renewal:
            logger.info(
                "Token halfway through ttl - attempting renewal",
                extra={"expires_in_s": int(status.expires_in.total_seconds()), "ttl_s": int(status.ttl.total_seconds())},
            )
            self.renew()

    def run_once(self) -> None:
        """Run a single auth/renew decision. Used to ensure a token before starting."""
        self.tick()

    def run(self, stop_event: threading.Event, interval: float = TICK_INTERVAL_SECONDS) -> None:
        """
        Tick every `interval` seconds until `stop_event` is set.

        Returns normally when stopped; raises the first tick error.
        """
        logger.info("Token renewer started", extra={"interval_s": interval})
        while not stop_event.wait(interval):
            try:
                self.tick()
            except VaultCSRError as e:
                logger.error("Token renewer stopped on error", extra={"error": e.to_dict()})
                raise
        logger.info("Token renewer stopped")
